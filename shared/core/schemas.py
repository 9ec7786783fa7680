from pydantic import BaseModel, model_validator
from typing import Generic, Optional, TypeVar

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    exp: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def subject_as_user_id(cls, values):
        # Supabase style tokens carry the user id in "sub"
        if isinstance(values, dict) and not values.get("user_id") and values.get("sub"):
            values = {**values, "user_id": values["sub"]}
        return values

    @property
    def owner_id(self) -> str:
        return self.user_id


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
