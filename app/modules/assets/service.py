import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.core.errors import to_http_error
from app.modules.assets.categorize import build_library
from app.modules.assets.storage import AssetStorage

logger = logging.getLogger(__name__)

ASSETS_TABLE = "assets"


def asset_file_path(user_id: str, filename: str) -> str:
    return f"{user_id}/{int(time.time() * 1000)}-{filename}"


class AssetService:
    def __init__(self, supabase: Client, storage: Optional[AssetStorage] = None):
        self.supabase = supabase
        self.storage = storage or AssetStorage(supabase)

    def create_asset(self, asset: Dict[str, Any]) -> Dict[str, Any]:
        """Create asset record after file upload"""
        try:
            result = self.supabase.table(ASSETS_TABLE).insert(asset).execute()
        except Exception as e:
            logger.error(f"create_asset error: {e}")
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create asset")
        logger.info(f"Asset created: {result.data[0]['id']}")
        return result.data[0]

    def get_asset(self, asset_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table(ASSETS_TABLE)\
                .select("*")\
                .eq("id", asset_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise to_http_error(e)
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Asset not found")
        return result.data

    def list_user_assets(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table(ASSETS_TABLE)\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"list_user_assets error: {e}")
            raise to_http_error(e)

    def upload_asset(
        self,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload file to storage, then record it. Returns the asset and its public URL."""
        file_path = asset_file_path(user_id, filename)
        try:
            self.storage.upload_file(content, file_path, content_type or "application/octet-stream")
        except Exception as e:
            raise to_http_error(e)
        asset = self.create_asset({
            "user_id": user_id,
            "label": label or filename,
            "description": description,
            "file_path": file_path,
            "file_size": len(content),
            "mime_type": content_type,
        })
        return {"asset": asset, "public_url": self.storage.get_public_url(file_path)}

    def create_metadata_asset(self, user_id: str, label: str, description: Optional[str] = None) -> Dict[str, Any]:
        """Record an asset that carries no file (brand color, website entry, Figma link, changelog note)"""
        return self.create_asset({
            "user_id": user_id,
            "label": label,
            "description": description,
            "file_path": None,
            "file_size": None,
            "mime_type": None,
        })

    def update_asset(self, asset_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Edit an asset's label and/or description"""
        if not changes:
            return self.get_asset(asset_id)
        try:
            result = self.supabase.table(ASSETS_TABLE)\
                .update(changes)\
                .eq("id", asset_id)\
                .execute()
        except Exception as e:
            logger.error(f"update_asset error: {e}")
            raise to_http_error(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Asset not found")
        return result.data[0]

    def signed_url(self, file_path: str, expires_in: Optional[int] = None) -> str:
        try:
            return self.storage.create_signed_url(file_path, expires_in)
        except Exception as e:
            logger.error(f"signed_url error for {file_path}: {e}")
            raise to_http_error(e)

    def with_urls(self, assets: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Attach signed URLs; metadata-only assets and assets whose URL cannot be signed get an empty one"""
        signed = []
        for asset in assets:
            if not asset.get("file_path"):
                signed.append({**asset, "url": ""})
                continue
            try:
                url = self.storage.create_signed_url(asset["file_path"], settings.signed_url_ttl_seconds)
            except Exception as e:
                logger.error(f"Failed to get signed URL for asset {asset.get('id')}: {e}")
                url = ""
            signed.append({**asset, "url": url})
        return signed

    def delete_asset_with_file(self, asset_id: str) -> Dict[str, Any]:
        """Delete the stored file and the asset record; a storage failure does not keep the record"""
        asset = self.get_asset(asset_id)
        if asset.get("file_path"):
            if self.storage.delete_file(asset["file_path"]):
                logger.info(f"File deleted from storage: {asset['file_path']}")
        try:
            self.supabase.table(ASSETS_TABLE)\
                .delete()\
                .eq("id", asset_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting asset from database: {e}")
            raise to_http_error(e)
        logger.info(f"Asset deleted completely: {asset_id}")
        return asset

    def get_library(self, user_id: str, admin: bool = False) -> Dict[str, Any]:
        return build_library(self.with_urls(self.list_user_assets(user_id)), admin=admin)
