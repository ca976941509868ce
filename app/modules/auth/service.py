import hashlib
import logging
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.modules.profiles.service import ProfileService
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def user_to_dict(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "app_metadata": user.app_metadata or {},
        "created_at": user.created_at,
        "updated_at": user.updated_at
    }


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, data_client: Optional[Client] = None):
        self.supabase = supabase
        # profiles are written with the service client when one is configured
        self.profiles = ProfileService(data_client or supabase)

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new client using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name
            if register_data.company:
                user_metadata["company"] = register_data.company

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            access_token = None
            # Without email confirmation a session comes back right away
            if auth_response.session:
                access_token = auth_response.session.access_token
                self.profiles.init_user_profile(user_to_dict(auth_response.user))

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully",
                access_token=access_token
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate using Supabase Auth and sync the profile row"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            profile = self.profiles.init_user_profile(user_to_dict(auth_response.user))

            return TokenResponse(
                access_token=auth_response.session.access_token,
                refresh_token=getattr(auth_response.session, "refresh_token", None),
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email,
                is_admin=bool(profile.get("is_admin"))
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            lowered = error_message.lower()
            if "email not confirmed" in lowered:
                raise HTTPException(status_code=401, detail="Please confirm your email before signing in")
            if "invalid" in lowered or "credentials" in lowered:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user_data = user_to_dict(user_response.user)
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False
