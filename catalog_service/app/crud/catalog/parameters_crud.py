# app/crud/catalog/parameters_crud.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models.catalog.parameters import Parameter
from ...services.pricing_service import to_number

logger = logging.getLogger(__name__)

ROUNDING_STEP_KEY = "rounding_step"

# Parameters are shared by every owner, so only known keys may be written
WRITABLE_PARAMETERS = {ROUNDING_STEP_KEY}


def get_parameter(db: Session, key: str) -> Optional[Parameter]:
    return db.query(Parameter).filter(Parameter.key == key).first()


def set_parameter(db: Session, key: str, value: Optional[str]) -> Parameter:
    param = get_parameter(db, key)
    if param is None:
        param = Parameter(key=key, value=value)
        db.add(param)
    else:
        param.value = value
    db.commit()
    db.refresh(param)
    return param


def parameter_value_error(key: str, value: Optional[str]) -> Optional[str]:
    if key not in WRITABLE_PARAMETERS:
        return f"Parameter {key} is not writable"
    if key == ROUNDING_STEP_KEY:
        step = to_number(value)
        if step is None or step <= 0:
            return f"{ROUNDING_STEP_KEY} must be a positive number"
    return None


def get_rounding_step(db: Session) -> float:
    param = get_parameter(db, ROUNDING_STEP_KEY)
    step = to_number(param.value) if param is not None else None
    if step is None or step <= 0:
        if param is not None:
            logger.warning("Ignoring invalid %s parameter %r, using 1", ROUNDING_STEP_KEY, param.value)
        return 1
    return step
