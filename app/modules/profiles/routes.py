from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_profile
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_service_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(profile: Dict = Depends(get_current_profile)):
    """Profile of the authenticated user, created on first access"""
    return profile


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    profile: Dict = Depends(get_current_profile),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(profile["id"], profile_data)
