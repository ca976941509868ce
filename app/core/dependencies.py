"""
Core dependencies for route protection and owner-or-admin access checks
"""

from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.errors import SessionExpiredError
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService
from app.modules.session import registry
from app.modules.session.gate import AuthGate
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

PORTAL_SESSION_HEADER = "X-Portal-Session"


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    data_client: Client = Depends(get_service_supabase)
) -> AuthService:
    return AuthService(supabase, data_client)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token. A rejected token is an authoritative session expiry."""
    try:
        return auth_service.get_current_user(token)
    except HTTPException as e:
        if e.status_code == status.HTTP_401_UNAUTHORIZED:
            raise SessionExpiredError()
        raise


def get_current_profile(
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase)
) -> Dict[str, Any]:
    """Profile row of the authenticated user, initialised if it does not exist yet"""
    service = ProfileService(supabase)
    profile = service.get_profile(user_data["id"])
    if profile is None:
        profile = service.init_user_profile(user_data)
    return profile


def is_admin(profile: Optional[Dict[str, Any]]) -> bool:
    return bool(profile and profile.get("is_admin"))


def require_admin(profile: Dict[str, Any] = Depends(get_current_profile)) -> Dict[str, Any]:
    """Dependency that only lets admins through"""
    if not is_admin(profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return profile


def check_owner_or_admin(owner_id: Optional[str], profile: Dict[str, Any]) -> Dict[str, Any]:
    """Allow if the record belongs to the user or the user is an admin"""
    if is_admin(profile) or (owner_id and owner_id == profile.get("id")):
        return profile
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only access your own records"
    )


def get_portal_session(
    x_portal_session: Optional[str] = Header(None, alias=PORTAL_SESSION_HEADER)
) -> Optional[AuthGate]:
    """Portal session named by the X-Portal-Session header, if it is still registered"""
    gate = registry.get_gate(x_portal_session)
    if gate is not None:
        gate.touch()
    return gate
