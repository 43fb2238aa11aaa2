from pydantic import BaseModel
from typing import Generic, Optional, TypeVar
from uuid import UUID

T = TypeVar("T")


class UserToken(BaseModel):
    user_id: str
    org_id: Optional[UUID] = None   # home organization, members and staff only
    name: Optional[str] = None
    role: str
    exp: Optional[int] = None


class CommonQueryParams(BaseModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = 100


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
