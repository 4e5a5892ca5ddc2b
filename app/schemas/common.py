# File: app/schemas/common.py
from typing import Generic, List, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class Page(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta
