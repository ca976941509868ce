from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.assets.schemas import AssetLibraryResponse
from app.modules.clients.schemas import (
    ClientSummary, ClientDetail, NoteCreate, NoteUpdate, NoteResponse
)
from app.modules.clients.service import ClientService
from app.modules.session.gate import AuthGate, read_through
from app.modules.session.views import ADMIN_CLIENTS_VIEW
from app.core.dependencies import get_portal_session, require_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/clients", tags=["clients"])


def get_client_service(supabase: Client = Depends(get_service_supabase)) -> ClientService:
    return ClientService(supabase)


@router.get("", response_model=List[ClientSummary])
async def list_clients(
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service),
    gate: Optional[AuthGate] = Depends(get_portal_session)
):
    """All clients with their open request counts (admin)"""
    return read_through(gate, profile["id"], ADMIN_CLIENTS_VIEW, service.list_clients)


@router.get("/{client_id}", response_model=ClientDetail)
async def get_client(
    client_id: str,
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service)
):
    """Profile, requests and assets of one client (admin)"""
    return service.get_client_detail(client_id)


@router.get("/{client_id}/assets", response_model=AssetLibraryResponse)
async def get_client_assets(
    client_id: str,
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service)
):
    return service.get_client_assets(client_id)


@router.get("/{client_id}/notes", response_model=List[NoteResponse])
async def list_notes(
    client_id: str,
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service)
):
    """Private admin notes about a client, newest first"""
    return service.list_notes(client_id)


@router.post("/{client_id}/notes", response_model=NoteResponse, status_code=201)
async def create_note(
    client_id: str,
    note: NoteCreate,
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service)
):
    return service.create_note(client_id, profile["id"], note.body)


@router.put("/{client_id}/notes/{note_id}", response_model=NoteResponse)
async def update_note(
    client_id: str,
    note_id: str,
    note: NoteUpdate,
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service)
):
    return service.update_note(client_id, note_id, note.body)


@router.delete("/{client_id}/notes/{note_id}", status_code=204)
async def delete_note(
    client_id: str,
    note_id: str,
    profile: Dict = Depends(require_admin),
    service: ClientService = Depends(get_client_service)
):
    service.delete_note(client_id, note_id)
    return None
