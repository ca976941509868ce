from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    company: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    client_id: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
