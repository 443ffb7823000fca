# schemas/base.py
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar('T')


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int = Field(..., description="Number of items returned")
    data: List[T]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
