from supabase import Client
from app.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class AssetStorage:
    """Supabase Storage bucket holding delivered asset files"""

    def __init__(self, supabase: Client, bucket_name: Optional[str] = None):
        self.supabase = supabase
        self.bucket_name = bucket_name or settings.assets_bucket

    def _bucket(self):
        return self.supabase.storage.from_(self.bucket_name)

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to the bucket and return its key"""
        try:
            self._bucket().upload(
                key,
                file_content,
                {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
            return key
        except Exception as e:
            logger.error(f"Failed to upload file to storage: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        """Delete file from the bucket"""
        try:
            self._bucket().remove([key])
            return True
        except Exception as e:
            logger.error(f"Failed to delete file from storage: {str(e)}")
            return False

    def create_signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        data = self._bucket().create_signed_url(key, expires_in or settings.signed_url_ttl_seconds)
        url = (data or {}).get("signedURL") or (data or {}).get("signedUrl")
        if not url:
            raise ValueError(f"No signed URL returned for {key}")
        return url

    def get_public_url(self, key: str) -> str:
        return self._bucket().get_public_url(key)
