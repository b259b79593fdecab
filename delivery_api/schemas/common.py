from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int = 0
    data: List[T] = Field(default_factory=list)  # type: ignore[assignment]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    warning: Optional[str] = None


def build_list(items: list) -> dict:
    return {"success": True, "count": len(items), "data": items}
