class CatalogError(Exception):
    """Base class for catalog domain errors surfaced to the caller."""


class ItemNotFoundError(CatalogError, LookupError):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found")


class InvalidRecipeLineError(CatalogError, ValueError):
    pass


class ReconciliationInputError(CatalogError, ValueError):
    pass
