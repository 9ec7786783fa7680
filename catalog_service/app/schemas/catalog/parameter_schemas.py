from pydantic import BaseModel
from typing import Optional


class ParameterOut(BaseModel):
    key: str
    value: Optional[str] = None

    class Config:
        from_attributes = True


class ParameterUpdate(BaseModel):
    value: Optional[str] = None
