# app/router/catalog/items_router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from shared.core.database import get_catalog_db as get_db
from shared.helpers.json_response_helper import error_response, success_response
from shared.core.schemas import UserToken
from shared.core.auth import validate_current_token
from shared.utils.app_status_code import AppStatusCode
from ...core.exceptions import ItemNotFoundError
from ...crud.catalog import items_crud as crud
from ...enum.catalog_enum import ItemType
from ...schemas.catalog.items_schemas import (
    ItemCreate, ItemDetailOut, ItemLookup, ItemOut, ItemUpdate, ItemWithPrices, VariantCreate)
from ...services import catalog_view_service

router = APIRouter(prefix="/api/items",
                   tags=["items"], dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=List[ItemWithPrices])
def read_products(
    skip: int = 0,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return catalog_view_service.list_products(db, current_user.owner_id, skip=skip, limit=limit)


@router.get("/lookup", response_model=List[ItemLookup])
def item_lookup(db: Session = Depends(get_db), current_user: UserToken = Depends(validate_current_token)):
    return crud.get_catalog_lookup(db, current_user.owner_id)


@router.get("/{item_id}", response_model=ItemDetailOut)
def read_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    try:
        return catalog_view_service.get_product_detail(db, current_user.owner_id, item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")


@router.post("/", response_model=None)
def create_item(
    item: ItemCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    try:
        result = crud.create_item(db, item, current_user.owner_id)
    except ValueError as e:
        return error_response(message=str(e), status_code=AppStatusCode.INVALID_INPUT)
    return success_response(data=ItemOut.model_validate(result), message="Item created successfully")


@router.post("/{item_id}/variants", response_model=None)
def create_variant(
    item_id: int,
    variant: VariantCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    parent = crud.get_item_by_id(db, item_id, current_user.owner_id, ItemType.product)
    if not parent:
        raise HTTPException(status_code=404, detail="Product not found")

    result = crud.create_variant(db, parent, variant, current_user.owner_id)
    return success_response(data=ItemOut.model_validate(result), message="Variant created successfully")


@router.put("/{item_id}", response_model=None)
def update_item(
    item_id: int,
    item: ItemUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = crud.apply_item_update(db, item_id, current_user.owner_id, item)
    if not result:
        raise HTTPException(status_code=404, detail="Item not found")
    return success_response(data=ItemOut.model_validate(result), message="Item updated successfully")
