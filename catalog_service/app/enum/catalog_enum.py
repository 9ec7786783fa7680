from enum import Enum


class ItemType(str, Enum):
    product = "product"
    variant = "variant"
    ingredient = "ingredient"


class RecipeUnit(str, Enum):
    weight_grams = "weight-grams"
    count = "count"


class PublishPriceKind(str, Enum):
    retail = "retail"
    wholesale = "wholesale"


class PushScope(str, Enum):
    single_item = "single-item"
    all = "all"


class SkipReason(str, Enum):
    missing_local_id = "missing local identification"
    no_parent = "no parent"
    no_unit_cost = "no unit cost"
    no_computed_price = "no computed price"
    missing_in_remote = "missing in remote catalog"
