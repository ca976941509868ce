from fastapi import APIRouter, Depends, HTTPException
from app.core.dependencies import get_current_token, get_current_user_id
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.session import registry
from app.modules.session.gate import AuthGate, SIGNED_OUT
from app.modules.session.schemas import (
    AuthEventRequest, FocusEventRequest, FocusEventResponse, SessionStateResponse
)
from app.modules.session.service import open_portal_session, update_access_token
from supabase import Client

router = APIRouter(prefix="/session", tags=["session"])


def get_gate(session_id: str, user_data: dict = Depends(get_current_user_id)) -> AuthGate:
    """Portal session owned by the caller"""
    gate = registry.get_gate(session_id)
    if gate is None:
        raise HTTPException(status_code=404, detail="Portal session not found")
    if not gate.owns(user_data["id"]):
        raise HTTPException(status_code=403, detail="You can only access your own portal session")
    gate.touch()
    return gate


@router.post("", response_model=SessionStateResponse, status_code=201)
async def open_session(
    token: str = Depends(get_current_token),
    supabase: Client = Depends(get_supabase),
    data_client: Client = Depends(get_service_supabase)
):
    """Bootstrap a portal session: validate the token and initialise the profile."""
    gate = await open_portal_session(supabase, token, data_client)
    return gate.snapshot()


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session_state(gate: AuthGate = Depends(get_gate)):
    return gate.snapshot()


@router.post("/{session_id}/events", response_model=FocusEventResponse)
async def report_focus_event(
    event: FocusEventRequest,
    gate: AuthGate = Depends(get_gate),
    token: str = Depends(get_current_token)
):
    """Window focus / visibilitychange from the browser. Guard-skips are silent no-ops."""
    update_access_token(gate, token)
    if event.type == "focus":
        refreshed = await gate.on_focus(event.visibility_state, event.online)
    else:
        refreshed = await gate.on_visibility_change(event.visibility_state, event.online)
    return {"refreshed": refreshed, "state": gate.snapshot()}


@router.post("/{session_id}/auth-events", response_model=SessionStateResponse)
async def report_auth_event(
    event: AuthEventRequest,
    gate: AuthGate = Depends(get_gate),
    token: str = Depends(get_current_token)
):
    """SIGNED_IN re-initialises the session; SIGNED_OUT ends it."""
    update_access_token(gate, token)
    await gate.on_auth_state_change(event.event)
    if event.event == SIGNED_OUT:
        registry.unregister(gate.session_id)
    return gate.snapshot()


@router.delete("/{session_id}", status_code=204)
async def close_session(gate: AuthGate = Depends(get_gate)):
    await gate.on_auth_state_change(SIGNED_OUT)
    registry.unregister(gate.session_id)
    return None
