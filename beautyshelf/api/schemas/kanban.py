from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

UsageStatus = Literal["new", "in progress", "finished", "want to repurchase"]


class KanbanProductOut(BaseModel):
    id: str
    name: str
    usage_status: UsageStatus = "new"
    brand: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[int] = None
    price: Optional[float] = None
    photo_url: Optional[str] = None
    created_at: Optional[str] = None


class StatusUpdate(BaseModel):
    usage_status: str


class MoveRequest(BaseModel):
    product_id: str
    target_status: Optional[str] = None


class MoveResult(BaseModel):
    ok: bool
    changed: bool = False
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


class BoardOut(BaseModel):
    columns: Dict[str, List[KanbanProductOut]]
    total: int


class MoveOut(BaseModel):
    result: MoveResult
    board: BoardOut
