class AppStatusCode:
    # Success
    OPERATION_SUCCESSFUL = "101"
    PARTIAL_SUCCESS = "102"

    # Validation
    INVALID_INPUT = "200"

    # Operations
    OPERATION_FAILED = "300"
    REMOTE_CATALOG_ERROR = "302"

    # Authentication
    AUTHENTICATION_TOKEN_INVALID = "400"
    AUTHENTICATION_TOKEN_EXPIRED = "401"
    AUTHENTICATION_USER_INVALID = "402"
    UNAUTHORIZED_ACTION = "403"
