from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.requests.schemas import (
    RequestCreate, RequestStatusUpdate, RequestResponse, RequestHistoryItem, BoardColumn
)
from app.modules.requests.service import RequestService, to_history_item
from app.modules.session import registry
from app.modules.session.gate import AuthGate, mark_stale, read_through
from app.modules.session.views import ADMIN_BOARD_VIEW, ADMIN_CLIENTS_VIEW, REQUEST_HISTORY_VIEW
from app.core.dependencies import get_current_profile, get_portal_session, require_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/requests", tags=["requests"])


def get_request_service(supabase: Client = Depends(get_service_supabase)) -> RequestService:
    return RequestService(supabase)


@router.post("", response_model=RequestResponse, status_code=201)
async def submit_request(
    request_data: RequestCreate,
    profile: Dict = Depends(get_current_profile),
    service: RequestService = Depends(get_request_service),
    gate: Optional[AuthGate] = Depends(get_portal_session)
):
    """Submit a brand, website or product brief"""
    created = service.create_request(profile["id"], request_data)
    mark_stale(gate, REQUEST_HISTORY_VIEW)
    registry.invalidate(ADMIN_BOARD_VIEW, ADMIN_CLIENTS_VIEW)
    return created


@router.get("/mine", response_model=List[RequestHistoryItem])
async def list_my_requests(
    profile: Dict = Depends(get_current_profile),
    service: RequestService = Depends(get_request_service),
    gate: Optional[AuthGate] = Depends(get_portal_session)
):
    """Request history of the current client, newest first"""
    return read_through(
        gate, profile["id"], REQUEST_HISTORY_VIEW,
        lambda: [to_history_item(r) for r in service.list_user_requests(profile["id"])],
    )


@router.get("", response_model=List[RequestResponse])
async def list_requests(
    profile: Dict = Depends(require_admin),
    service: RequestService = Depends(get_request_service)
):
    """All requests across clients (admin)"""
    return service.list_all_requests()


@router.get("/board", response_model=List[BoardColumn])
async def get_board(
    profile: Dict = Depends(require_admin),
    service: RequestService = Depends(get_request_service),
    gate: Optional[AuthGate] = Depends(get_portal_session)
):
    """Kanban board of all requests (admin)"""
    return read_through(gate, profile["id"], ADMIN_BOARD_VIEW, service.kanban_board)


@router.patch("/{request_id}/status", response_model=RequestResponse)
async def update_request_status(
    request_id: str,
    status_update: RequestStatusUpdate,
    profile: Dict = Depends(require_admin),
    service: RequestService = Depends(get_request_service)
):
    """Move a request to another status (admin)"""
    updated = service.update_request_status(request_id, status_update.status)
    registry.invalidate(ADMIN_BOARD_VIEW, ADMIN_CLIENTS_VIEW)
    registry.invalidate(REQUEST_HISTORY_VIEW, user_id=updated.get("user_id"))
    return updated
