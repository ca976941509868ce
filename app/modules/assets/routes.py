from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from app.config import settings
from app.database.supabase_client import get_service_supabase
from app.modules.assets.schemas import (
    AssetLibraryResponse, AssetMetadataCreate, AssetResponse, AssetUpdate,
    AssetUploadResponse, SignedUrlResponse
)
from app.modules.assets.service import AssetService
from app.modules.profiles.service import ProfileService
from app.modules.session import registry
from app.modules.session.gate import AuthGate, read_through
from app.modules.session.views import ASSET_LIBRARY_VIEW
from app.core.dependencies import (
    check_owner_or_admin, get_current_profile, get_portal_session, require_admin
)
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/assets", tags=["assets"])


def get_asset_service(supabase: Client = Depends(get_service_supabase)) -> AssetService:
    return AssetService(supabase)


def _require_client(service: AssetService, user_id: str) -> None:
    if ProfileService(service.supabase).get_profile(user_id) is None:
        raise HTTPException(status_code=404, detail="Client not found")


@router.get("/library", response_model=AssetLibraryResponse)
async def get_my_library(
    profile: Dict = Depends(get_current_profile),
    service: AssetService = Depends(get_asset_service),
    gate: Optional[AuthGate] = Depends(get_portal_session)
):
    """Delivered assets of the current client, grouped by category"""
    return read_through(gate, profile["id"], ASSET_LIBRARY_VIEW, lambda: service.get_library(profile["id"]))


@router.post("", response_model=AssetUploadResponse, status_code=201)
async def upload_asset(
    file: UploadFile = File(...),
    user_id: str = Form(...),
    label: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    profile: Dict = Depends(require_admin),
    service: AssetService = Depends(get_asset_service)
):
    """Upload an asset for a client (admin)"""
    if not file.filename:
        raise HTTPException(status_code=400, detail="A file is required")
    _require_client(service, user_id)
    content = await file.read()
    result = service.upload_asset(
        user_id, file.filename, content,
        content_type=file.content_type, label=label, description=description,
    )
    registry.invalidate(ASSET_LIBRARY_VIEW, user_id=user_id)
    return result


@router.post("/metadata", response_model=AssetResponse, status_code=201)
async def create_metadata_asset(
    body: AssetMetadataCreate,
    profile: Dict = Depends(require_admin),
    service: AssetService = Depends(get_asset_service)
):
    """Record a file-less asset for a client (admin)"""
    _require_client(service, body.user_id)
    asset = service.create_metadata_asset(body.user_id, body.label, body.description)
    registry.invalidate(ASSET_LIBRARY_VIEW, user_id=body.user_id)
    return asset


@router.patch("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: str,
    body: AssetUpdate,
    profile: Dict = Depends(require_admin),
    service: AssetService = Depends(get_asset_service)
):
    """Edit an asset's label or description (admin)"""
    asset = service.update_asset(asset_id, body.model_dump(exclude_unset=True))
    registry.invalidate(ASSET_LIBRARY_VIEW, user_id=asset.get("user_id"))
    return asset


@router.delete("/{asset_id}", status_code=204)
async def delete_asset(
    asset_id: str,
    profile: Dict = Depends(require_admin),
    service: AssetService = Depends(get_asset_service)
):
    """Delete an asset and its stored file (admin)"""
    asset = service.delete_asset_with_file(asset_id)
    registry.invalidate(ASSET_LIBRARY_VIEW, user_id=asset.get("user_id"))
    return None


@router.get("/{asset_id}/url", response_model=SignedUrlResponse)
async def get_asset_url(
    asset_id: str,
    profile: Dict = Depends(get_current_profile),
    service: AssetService = Depends(get_asset_service)
):
    """Signed download URL for an asset the user owns (admins: any asset)"""
    asset = service.get_asset(asset_id)
    check_owner_or_admin(asset.get("user_id"), profile)
    if not asset.get("file_path"):
        raise HTTPException(status_code=404, detail="Asset has no file")
    return {
        "url": service.signed_url(asset["file_path"]),
        "expires_in": settings.signed_url_ttl_seconds,
    }
