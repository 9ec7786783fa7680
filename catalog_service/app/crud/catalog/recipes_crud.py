# app/crud/catalog/recipes_crud.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ...core.exceptions import InvalidRecipeLineError
from ...models.catalog.recipe_lines import RecipeLine
from ...schemas.catalog.recipe_schemas import RecipeLineCreate
from .items_crud import get_item_by_id

logger = logging.getLogger(__name__)

RECIPE_ROW_CAP = 20000


def get_recipe_lines(
    db: Session,
    owner_id: str,
    parent_item_id: Optional[int] = None,
    limit: int = RECIPE_ROW_CAP,
) -> List[RecipeLine]:
    query = db.query(RecipeLine).filter(RecipeLine.owner_id == owner_id)
    if parent_item_id is not None:
        query = query.filter(RecipeLine.parent_item_id == parent_item_id)

    # Stored order is insertion order
    rows = query.order_by(RecipeLine.id.asc()).limit(limit).all()
    if limit and len(rows) >= limit:
        logger.warning("Recipe line query for owner %s hit the %s row cap", owner_id, limit)
    return rows


def create_recipe_line(db: Session, line: RecipeLineCreate, owner_id: str) -> RecipeLine:
    if line.parent_item_id == line.component_item_id:
        raise InvalidRecipeLineError("An item cannot be a component of its own recipe")

    parent = get_item_by_id(db, line.parent_item_id, owner_id)
    if not parent:
        raise InvalidRecipeLineError(f"Recipe parent {line.parent_item_id} not found")
    if not get_item_by_id(db, line.component_item_id, owner_id):
        raise InvalidRecipeLineError(f"Component {line.component_item_id} not found")

    db_line = RecipeLine(
        owner_id=owner_id,
        parent_item_id=line.parent_item_id,
        component_item_id=line.component_item_id,
        unit=line.unit.value,
        quantity=line.quantity,
    )
    db.add(db_line)
    db.commit()
    db.refresh(db_line)
    return db_line


def delete_recipe_line(db: Session, line_id: int, owner_id: str) -> bool:
    db_line = db.query(RecipeLine).filter(
        RecipeLine.id == line_id,
        RecipeLine.owner_id == owner_id,  # ✅ Security check
    ).first()

    if not db_line:
        return False

    db.delete(db_line)
    db.commit()
    return True
