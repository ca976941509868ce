from pydantic import BaseModel, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from app.modules.assets.schemas import AssetResponse
from app.modules.requests.schemas import RequestHistoryItem


class ClientSummary(BaseModel):
    id: str
    name: str
    email: str
    company: Optional[str] = None
    active_requests: int = 0
    last_activity: Optional[datetime] = None
    status: Literal["admin", "active"]


class ClientDetail(BaseModel):
    id: str
    name: str
    email: str
    company: Optional[str] = None
    client_id: Optional[str] = None
    requests: List[RequestHistoryItem] = []
    assets: List[AssetResponse] = []


class NoteCreate(BaseModel):
    body: str

    @field_validator("body")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Note cannot be empty")
        return value


class NoteUpdate(NoteCreate):
    pass


class NoteResponse(BaseModel):
    id: str
    client_id: str
    author_id: str
    body: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
