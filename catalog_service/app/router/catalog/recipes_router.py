# app/router/catalog/recipes_router.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from shared.core.database import get_catalog_db as get_db
from shared.helpers.json_response_helper import error_response, success_response
from shared.core.schemas import UserToken
from shared.core.auth import validate_current_token
from shared.utils.app_status_code import AppStatusCode
from ...core.exceptions import InvalidRecipeLineError, ItemNotFoundError
from ...crud.catalog import recipes_crud as crud
from ...schemas.catalog.recipe_schemas import CompositeBreakdown, RecipeLineCreate, RecipeLineOut
from ...services import composite_cost_service

router = APIRouter(prefix="/api/recipes",
                   tags=["recipes"], dependencies=[Depends(validate_current_token)])


@router.post("/", response_model=None)
def create_recipe_line(
    line: RecipeLineCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    try:
        result = crud.create_recipe_line(db, line, current_user.owner_id)
    except InvalidRecipeLineError as e:
        return error_response(message=str(e), status_code=AppStatusCode.INVALID_INPUT)
    return success_response(data=RecipeLineOut.model_validate(result), message="Recipe line added")


@router.delete("/{line_id}")
def delete_recipe_line(
    line_id: int,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    if not crud.delete_recipe_line(db, line_id, current_user.owner_id):
        raise HTTPException(status_code=404, detail="Recipe line not found")
    return success_response(data=None, message="Recipe line deleted")


@router.get("/{item_id}/breakdown", response_model=CompositeBreakdown)
def recipe_breakdown(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    try:
        return composite_cost_service.explain_composite(db, current_user.owner_id, item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")


# ---------------- Composite cost recalculation ----------------


@router.post("/recalculate", response_model=None)
async def recalculate_composites(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = await composite_cost_service.resolve_composites(db, current_user.owner_id)
    return success_response(
        data=result,
        message=f"Recalculation done. Updated: {result.updated_count}",
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
    )
