import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pydantic import TypeAdapter
from supabase import Client

from app.core.errors import to_http_error
from app.modules.requests.schemas import RequestCreate

logger = logging.getLogger(__name__)

REQUESTS_TABLE = "requests"

STATUS_TO_DISPLAY = {
    "pending": "new",
    "in_progress": "in-progress",
    "completed": "completed",
    "delivered": "delivered",
}

BOARD_COLUMNS = [
    ("new", "New"),
    ("in-progress", "In Progress"),
    ("completed", "Completed"),
    ("delivered", "Delivered"),
]

OPEN_STATUSES = ("pending", "in_progress")


def to_display_status(status: Optional[str]) -> str:
    return STATUS_TO_DISPLAY.get(status or "", "new")


_DATE = TypeAdapter(date)
_DATETIME = TypeAdapter(datetime)


def to_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Postgres timestamps carry 0-6 fraction digits
    text = str(value)
    if len(text) <= 10:
        return _DATE.validate_python(text)
    return _DATETIME.validate_python(text).date()


def to_history_item(request: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a requests row the way the history and board views list it"""
    status = request.get("status")
    delivered_date = None
    if status == "delivered":
        delivered_date = to_date(request.get("updated_at") or request.get("created_at"))
    request_type = request.get("type") or ""
    return {
        "id": request["id"],
        "user_id": request.get("user_id"),
        "category": request_type.capitalize(),
        "title": request.get("title") or "",
        "submit_date": to_date(request.get("created_at")),
        "status": to_display_status(status),
        "brief": request.get("payload") or {},
        "delivered_date": delivered_date,
    }


class RequestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_request(self, user_id: str, request_data: RequestCreate) -> Dict[str, Any]:
        """Create a new request (brief submission), always starting as pending"""
        brief = request_data.brief
        title = (request_data.title or "").strip() or brief.default_title()
        try:
            result = self.supabase.table(REQUESTS_TABLE).insert({
                "user_id": user_id,
                "type": brief.category,
                "title": title,
                "payload": brief.model_dump(exclude_none=True),
                "status": "pending",
            }).execute()
        except Exception as e:
            logger.error(f"create_request error: {e}")
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to submit request")
        logger.info(f"Request created: {result.data[0]['id']}")
        return result.data[0]

    def list_user_requests(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table(REQUESTS_TABLE)\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"list_user_requests error: {e}")
            raise to_http_error(e)

    def list_all_requests(self) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table(REQUESTS_TABLE)\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"list_all_requests error: {e}")
            raise to_http_error(e)

    def update_request_status(self, request_id: str, status: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table(REQUESTS_TABLE)\
                .update({
                    "status": status,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })\
                .eq("id", request_id)\
                .execute()
        except Exception as e:
            logger.error(f"update_request_status error: {e}")
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Request not found")
        return result.data[0]

    def kanban_board(self) -> List[Dict[str, Any]]:
        """All requests grouped into board columns by display status"""
        items = [to_history_item(r) for r in self.list_all_requests()]
        return [
            {
                "id": column_id,
                "title": title,
                "requests": [item for item in items if item["status"] == column_id],
            }
            for column_id, title in BOARD_COLUMNS
        ]
