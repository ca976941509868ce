from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import date, datetime

RequestType = Literal["brand", "website", "product"]
RequestStatus = Literal["pending", "in_progress", "completed", "delivered"]
DisplayStatus = Literal["new", "in-progress", "completed", "delivered"]

# Board columns use display statuses; the frontend may send either form.
DISPLAY_TO_STATUS = {
    "new": "pending",
    "in-progress": "in_progress",
    "completed": "completed",
    "delivered": "delivered",
}


def _clean_references(value: Optional[List[str]]) -> List[str]:
    return [ref.strip() for ref in (value or []) if ref and ref.strip()]


class BriefBase(BaseModel):
    references: List[str] = []
    notes: Optional[str] = None

    @field_validator("references", mode="before")
    @classmethod
    def drop_blank_references(cls, value):
        return _clean_references(value)


class BrandBrief(BriefBase):
    category: Literal["brand"] = "brand"
    request_type: Literal["new-brand", "new-asset"] = "new-brand"
    brand_name: str
    tagline: Optional[str] = None
    audience: Optional[str] = None
    brand_style: Optional[str] = None
    asset_type: Optional[str] = None
    format: Optional[str] = None
    copywriting: Optional[str] = None

    @model_validator(mode="after")
    def require_brand_name(self):
        if not self.brand_name.strip():
            raise ValueError("Please enter a brand name")
        if self.request_type == "new-asset" and not self.asset_type:
            raise ValueError("asset_type is required for a new asset request")
        return self

    def default_title(self) -> str:
        if self.request_type == "new-brand":
            return f"New brand identity for {self.brand_name}"
        return f"{self.asset_type} for {self.brand_name}"


class WebsiteBrief(BriefBase):
    category: Literal["website"] = "website"
    request_type: Literal["new-website", "create-new-page", "update-page"] = "new-website"
    website_type: Literal["landing-page", "multi-page"] = "landing-page"
    pages: List[str] = []
    goal: Optional[str] = None
    copy_status: Optional[str] = None
    need_copywriting: bool = False
    website_link: Optional[str] = None
    page_name: Optional[str] = None
    purpose: Optional[str] = None
    page_url: Optional[str] = None
    updates: Optional[str] = None

    def default_title(self) -> str:
        if self.request_type == "new-website":
            return f"New {'landing page' if self.website_type == 'landing-page' else 'multi-page website'}"
        if self.request_type == "create-new-page":
            return f"New page: {self.page_name or 'Untitled'}"
        return f"Update page: {self.page_url or 'Untitled'}"


class ProductBrief(BriefBase):
    category: Literal["product"] = "product"
    request_type: Literal["new-feature", "update-screen"] = "new-feature"
    priority: Optional[str] = None
    feature_name: Optional[str] = None
    feature_purpose: Optional[str] = None
    target_users: Optional[str] = None
    metric_goal: Optional[str] = None
    screen_name: Optional[str] = None
    current_issue: Optional[str] = None
    figma_link: Optional[str] = None
    context: Optional[str] = None

    def default_title(self) -> str:
        if self.request_type == "new-feature":
            return f"New feature: {self.feature_name or 'Untitled'}"
        return f"Update screen: {self.screen_name or 'Untitled'}"


Brief = Annotated[Union[BrandBrief, WebsiteBrief, ProductBrief], Field(discriminator="category")]


class RequestCreate(BaseModel):
    title: Optional[str] = None
    brief: Brief


class RequestStatusUpdate(BaseModel):
    status: RequestStatus

    @field_validator("status", mode="before")
    @classmethod
    def accept_display_status(cls, value):
        return DISPLAY_TO_STATUS.get(value, value)


class RequestResponse(BaseModel):
    id: str
    user_id: str
    type: RequestType
    title: str
    payload: Dict[str, Any] = {}
    status: RequestStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RequestHistoryItem(BaseModel):
    id: str
    user_id: Optional[str] = None
    category: str
    title: str
    submit_date: Optional[date] = None
    status: DisplayStatus
    brief: Dict[str, Any] = {}
    delivered_date: Optional[date] = None


class BoardColumn(BaseModel):
    id: DisplayStatus
    title: str
    requests: List[RequestHistoryItem]
