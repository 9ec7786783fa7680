from fastapi import HTTPException
from typing import Any

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def success_response(data: Any, message: str = "Success", status_code: str = AppStatusCode.OPERATION_SUCCESSFUL):
    return JsonOutResult(
        data=data,
        status="Success",
        status_code=status_code,
        message=message
    )


def batch_response(data: Any, ok: bool, partial: bool, message: str):
    """Wrap a best-effort batch result. Per-entry failures live in ``data``, the HTTP call still succeeds."""
    if ok:
        status, status_code = "Success", AppStatusCode.OPERATION_SUCCESSFUL
    elif partial:
        status, status_code = "Partial", AppStatusCode.PARTIAL_SUCCESS
    else:
        status, status_code = "Failure", AppStatusCode.REMOTE_CATALOG_ERROR
    return JsonOutResult(data=data, status=status, status_code=status_code, message=message)


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400, data: Any = None):
    raise HTTPException(
        status_code=http_status,
        detail=JsonOutResult(
            data=data,
            status="Failure",
            status_code=status_code,
            message=message
        ).model_dump()
    )
