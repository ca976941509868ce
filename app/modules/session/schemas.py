from pydantic import BaseModel
from typing import Any, Dict, Literal, Optional


class FocusEventRequest(BaseModel):
    type: Literal["focus", "visibilitychange"]
    visibility_state: Literal["visible", "hidden"] = "visible"
    online: bool = True


class AuthEventRequest(BaseModel):
    event: Literal["SIGNED_IN", "SIGNED_OUT"]


class SessionStateResponse(BaseModel):
    session_id: str
    is_checking_auth: bool
    is_authenticated: bool
    is_refreshing: bool
    refresh_token: int
    current_user: Optional[Dict[str, Any]] = None
    notice: Optional[str] = None


class FocusEventResponse(BaseModel):
    refreshed: bool
    state: SessionStateResponse
