from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime
from datetime import date as Date


class AssetResponse(BaseModel):
    id: str
    user_id: str
    label: str
    description: Optional[str] = None
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    created_at: Optional[datetime] = None
    url: Optional[str] = None

    class Config:
        from_attributes = True


class AssetMetadataCreate(BaseModel):
    """An asset without a file: a brand color, a website entry, a Figma link or a changelog note"""
    user_id: str
    label: str
    description: Optional[str] = None

    @field_validator("label")
    @classmethod
    def label_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Label cannot be empty")
        return value


class AssetUpdate(BaseModel):
    label: Optional[str] = None
    description: Optional[str] = None

    @field_validator("label")
    @classmethod
    def label_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Label cannot be empty")
        return value


class AssetUploadResponse(BaseModel):
    asset: AssetResponse
    public_url: str


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int


class LogoItem(BaseModel):
    id: str
    name: Optional[str] = None
    url: str = ""
    thumbnail: str = ""
    formats: List[str] = []


class ColorItem(BaseModel):
    id: str
    name: Optional[str] = None
    hex: str
    rgb: str


class GuidelineItem(BaseModel):
    id: str
    name: Optional[str] = None
    type: str
    description: Optional[str] = None
    url: str = ""
    last_updated: Optional[Date] = None


class LinkedFileItem(BaseModel):
    id: str
    name: Optional[str] = None
    url: str = ""
    thumbnail: str = ""
    last_updated: Optional[Date] = None


class ChangelogItem(BaseModel):
    id: str
    version: Optional[str] = None
    title: Optional[str] = None
    changes: List[str] = []
    date: Optional[Date] = None


class BrandAssets(BaseModel):
    logos: List[LogoItem] = []
    colors: List[ColorItem] = []
    guidelines: List[GuidelineItem] = []


class ProductAssets(BaseModel):
    figma_links: List[LinkedFileItem] = []
    changelog: List[ChangelogItem] = []


class AssetLibraryResponse(BaseModel):
    brand_assets: BrandAssets
    website_assets: List[LinkedFileItem] = []
    product_assets: ProductAssets
