import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.core.errors import is_missing_table_error, to_http_error
from app.modules.profiles.schemas import ProfileUpdate

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _select_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(PROFILES_TABLE)\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        return result.data if result else None

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a user's profile, None if there is no row yet"""
        try:
            return self._select_profile(user_id)
        except Exception as e:
            logger.error(f"get_profile error: {e}")
            raise to_http_error(e)

    def upsert_profile(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = self.supabase.table(PROFILES_TABLE)\
                .upsert({**profile, "updated_at": _now()})\
                .execute()
        except Exception as e:
            logger.error(f"upsert_profile error: {e}")
            if is_missing_table_error(e) or "policy" in str(e).lower():
                raise HTTPException(
                    status_code=500,
                    detail="Database error: profiles table not configured properly. Please run the setup SQL script."
                )
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to save profile")
        return result.data[0]

    def list_profiles(self) -> List[Dict[str, Any]]:
        """All profiles, newest first (admin only)"""
        try:
            result = self.supabase.table(PROFILES_TABLE)\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"list_profiles error: {e}")
            raise to_http_error(e)

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> Dict[str, Any]:
        update_data = {"updated_at": _now()}
        if profile_data.full_name is not None:
            update_data["full_name"] = profile_data.full_name
        if profile_data.company is not None:
            update_data["company"] = profile_data.company
        try:
            result = self.supabase.table(PROFILES_TABLE)\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return result.data[0]

    def init_user_profile(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create or refresh the profile row for an authenticated user.

        is_admin and client_id already stored in the database are preserved;
        is_admin is never taken from user metadata.
        """
        existing: Optional[Dict[str, Any]] = None
        try:
            existing = self._select_profile(user["id"])
        except Exception as e:
            if is_missing_table_error(e):
                raise HTTPException(
                    status_code=500,
                    detail='Database table "profiles" does not exist. Please run the setup SQL script in your Supabase Dashboard.'
                )
            logger.warning(f"Could not fetch existing profile, continuing without it: {e}")

        existing = existing or {}
        metadata = user.get("user_metadata") or {}
        email = user.get("email")
        profile_data = {
            "id": user["id"],
            "email": email,
            "full_name": metadata.get("name") or metadata.get("full_name")
            or (email.split("@")[0] if email else None) or "User",
            "company": metadata.get("company") or "Company",
            "client_id": metadata.get("clientId") or existing.get("client_id") or str(uuid.uuid4()),
            "is_admin": bool(existing.get("is_admin", False)),
        }
        saved = self.upsert_profile(profile_data)
        logger.info(f"User profile initialized: {saved.get('id')} (admin={saved.get('is_admin')})")
        return saved
