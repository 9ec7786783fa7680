# app/router/catalog/pricing_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core.database import get_catalog_db as get_db
from shared.core.auth import allow_admin, validate_current_token
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.catalog import parameters_crud
from ...schemas.catalog.parameter_schemas import ParameterOut, ParameterUpdate
from ...schemas.catalog.pricing_schemas import PriceBreakdown, PricingPreviewRequest
from ...services.pricing_service import compute_prices

router = APIRouter(prefix="/api",
                   tags=["pricing"], dependencies=[Depends(validate_current_token)])


@router.post("/pricing/preview", response_model=PriceBreakdown)
def preview_prices(request: PricingPreviewRequest, db: Session = Depends(get_db)):
    rounding_step = request.rounding_step
    if rounding_step is None:
        rounding_step = parameters_crud.get_rounding_step(db)
    return compute_prices(request.model_dump(exclude={"rounding_step"}), rounding_step)


@router.get("/parameters/{key}", response_model=ParameterOut)
def read_parameter(key: str, db: Session = Depends(get_db)):
    param = parameters_crud.get_parameter(db, key)
    if param is None:
        return ParameterOut(key=key, value=None)
    return param


@router.put("/parameters/{key}", response_model=ParameterOut)
def update_parameter(
    key: str,
    payload: ParameterUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(allow_admin),
):
    problem = parameters_crud.parameter_value_error(key, payload.value)
    if problem:
        return error_response(message=problem, status_code=AppStatusCode.INVALID_INPUT)
    return parameters_crud.set_parameter(db, key, payload.value)
