import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import HTTPException
from supabase import Client

from app.core.errors import to_http_error
from app.modules.assets.service import AssetService
from app.modules.profiles.service import ProfileService
from app.modules.requests.service import OPEN_STATUSES, RequestService, to_history_item

logger = logging.getLogger(__name__)

NOTES_TABLE = "client_notes"


class ClientService:
    """Admin views over client profiles, their requests, assets and private notes"""

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.requests = RequestService(supabase)
        self.assets = AssetService(supabase)

    def list_clients(self) -> List[Dict[str, Any]]:
        profiles = self.profiles.list_profiles()
        active_counts: Dict[str, int] = {}
        last_request_at: Dict[str, Any] = {}
        # newest first, so the first request seen per client is the latest
        for request in self.requests.list_all_requests():
            user_id = request.get("user_id")
            last_request_at.setdefault(user_id, request.get("created_at"))
            if request.get("status") in OPEN_STATUSES:
                active_counts[user_id] = active_counts.get(user_id, 0) + 1
        return [
            {
                "id": p["id"],
                "name": p.get("full_name") or "Unnamed",
                "email": p.get("email") or "No email",
                "company": p.get("company"),
                "active_requests": active_counts.get(p["id"], 0),
                "last_activity": last_request_at.get(p["id"]) or p.get("created_at"),
                "status": "admin" if p.get("is_admin") else "active",
            }
            for p in profiles
        ]

    def get_client_detail(self, client_id: str) -> Dict[str, Any]:
        profile = self.profiles.get_profile(client_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Client not found")
        requests = self.requests.list_user_requests(client_id)
        assets = self.assets.with_urls(self.assets.list_user_assets(client_id))
        logger.info(f"Client {client_id}: {len(requests)} requests, {len(assets)} assets")
        return {
            "id": client_id,
            "name": profile.get("full_name") or "Unnamed Client",
            "email": profile.get("email") or "",
            "company": profile.get("company"),
            "client_id": profile.get("client_id"),
            "requests": [to_history_item(r) for r in requests],
            "assets": assets,
        }

    def get_client_assets(self, client_id: str) -> Dict[str, Any]:
        return self.assets.get_library(client_id, admin=True)

    def list_notes(self, client_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table(NOTES_TABLE)\
                .select("*")\
                .eq("client_id", client_id)\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"list_notes error: {e}")
            raise to_http_error(e)

    def create_note(self, client_id: str, author_id: str, body: str) -> Dict[str, Any]:
        if self.profiles.get_profile(client_id) is None:
            raise HTTPException(status_code=404, detail="Client not found")
        try:
            result = self.supabase.table(NOTES_TABLE).insert({
                "client_id": client_id,
                "author_id": author_id,
                "body": body,
            }).execute()
        except Exception as e:
            logger.error(f"create_note error: {e}")
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to save note")
        return result.data[0]

    def update_note(self, client_id: str, note_id: str, body: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table(NOTES_TABLE)\
                .update({"body": body, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", note_id)\
                .eq("client_id", client_id)\
                .execute()
        except Exception as e:
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Note not found")
        return result.data[0]

    def delete_note(self, client_id: str, note_id: str) -> bool:
        try:
            result = self.supabase.table(NOTES_TABLE)\
                .delete()\
                .eq("id", note_id)\
                .eq("client_id", client_id)\
                .execute()
        except Exception as e:
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Note not found")
        return True
