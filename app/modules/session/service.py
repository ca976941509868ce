import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.modules.auth.service import user_to_dict
from app.modules.profiles.service import ProfileService
from app.modules.session import registry
from app.modules.session.gate import AuthGate

logger = logging.getLogger(__name__)


class SupabaseSessionProvider:
    """Validates one browser session's access token against Supabase Auth, uncached."""

    def __init__(self, supabase: Client, access_token: str, data_client: Optional[Client] = None):
        self.supabase = supabase
        self.access_token = access_token
        self.profiles = ProfileService(data_client or supabase)

    async def get_current_user(self) -> Tuple[Optional[Dict[str, Any]], Optional[Exception]]:
        try:
            response = await asyncio.to_thread(self.supabase.auth.get_user, self.access_token)
        except Exception as e:
            return None, e
        if not response or not response.user:
            return None, None
        return user_to_dict(response.user), None

    async def init_user_profile(self) -> Dict[str, Any]:
        user, error = await self.get_current_user()
        if error or not user:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return await asyncio.to_thread(self.profiles.init_user_profile, user)


async def open_portal_session(supabase: Client, access_token: str, data_client: Optional[Client] = None) -> AuthGate:
    """Create and bootstrap a gate for a browser session; only authenticated gates are registered."""
    gate = AuthGate(
        SupabaseSessionProvider(supabase, access_token, data_client),
        min_interval=settings.refresh_min_interval_seconds,
        refresh_timeout=settings.refresh_timeout,
        notice_seconds=settings.session_expired_notice_seconds,
        view_max_age=settings.view_max_age,
    )
    if not await gate.check_auth():
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    registry.register(gate)
    logger.info("Opened portal session %s for user %s", gate.session_id, gate.user_id)
    return gate


def update_access_token(gate: AuthGate, access_token: Optional[str]) -> None:
    """The frontend rotates its JWT; keep the provider pointed at the newest one."""
    if access_token and hasattr(gate.provider, "access_token"):
        gate.provider.access_token = access_token


def holds_token(gate: AuthGate, access_token: Optional[str]) -> bool:
    """True if the session is currently validating with this access token."""
    return bool(access_token) and getattr(gate.provider, "access_token", None) == access_token
