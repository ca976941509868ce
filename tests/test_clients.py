from app.core.dependencies import PORTAL_SESSION_HEADER
from tests.conftest import ADMIN_ID, CLIENT_ID


def add_request(fake_supabase, status, user_id=CLIENT_ID):
    return fake_supabase.add_row("requests", {
        "user_id": user_id, "type": "brand", "title": "Brief", "payload": {}, "status": status,
    })


def test_clients_are_admin_only(client, client_header):
    assert client.get("/api/v1/clients", headers=client_header).status_code == 403
    assert client.get(f"/api/v1/clients/{CLIENT_ID}/notes", headers=client_header).status_code == 403


def test_list_clients_counts_open_requests(client, admin_header, fake_supabase):
    add_request(fake_supabase, "pending")
    add_request(fake_supabase, "in_progress")
    latest = add_request(fake_supabase, "delivered")

    clients = {c["id"]: c for c in client.get("/api/v1/clients", headers=admin_header).json()}

    assert clients[CLIENT_ID]["active_requests"] == 2
    assert clients[CLIENT_ID]["status"] == "active"
    assert clients[CLIENT_ID]["last_activity"].startswith(latest["created_at"][:16])
    assert clients[ADMIN_ID]["status"] == "admin"
    assert clients[ADMIN_ID]["active_requests"] == 0


def test_client_without_requests_uses_signup_date(client, admin_header):
    clients = {c["id"]: c for c in client.get("/api/v1/clients", headers=admin_header).json()}

    assert clients[CLIENT_ID]["last_activity"].startswith("2024-01-01T00:00")


def test_client_list_is_cached_per_session(client, admin_header, fake_supabase):
    session_id = client.post("/api/v1/session", headers=admin_header).json()["session_id"]
    headers = {**admin_header, PORTAL_SESSION_HEADER: session_id}
    client.get("/api/v1/clients", headers=headers)
    add_request(fake_supabase, "pending")

    cached = {c["id"]: c for c in client.get("/api/v1/clients", headers=headers).json()}
    assert cached[CLIENT_ID]["active_requests"] == 0

    client.post(f"/api/v1/session/{session_id}/events", json={"type": "focus"}, headers=headers)
    fresh = {c["id"]: c for c in client.get("/api/v1/clients", headers=headers).json()}
    assert fresh[CLIENT_ID]["active_requests"] == 1


def test_client_detail(client, admin_header, fake_supabase):
    add_request(fake_supabase, "pending")
    add_request(fake_supabase, "pending", user_id=ADMIN_ID)

    response = client.get(f"/api/v1/clients/{CLIENT_ID}", headers=admin_header)

    assert response.status_code == 200
    detail = response.json()
    assert detail["company"] == "Acme"
    assert detail["client_id"] == "acme-client"
    assert len(detail["requests"]) == 1
    assert detail["assets"] == []


def test_unknown_client_detail(client, admin_header):
    assert client.get("/api/v1/clients/ghost", headers=admin_header).status_code == 404


def test_client_assets_use_explicit_keywords(client, admin_header, fake_supabase):
    fake_supabase.storage.objects["c/brand.png"] = {"content": b"", "options": {}}
    fake_supabase.add_row("assets", {"user_id": CLIENT_ID, "label": "Brand kit", "file_path": "c/brand.png"})

    library = client.get(f"/api/v1/clients/{CLIENT_ID}/assets", headers=admin_header).json()

    assert library["brand_assets"]["logos"] == []


def test_notes_crud(client, admin_header):
    base = f"/api/v1/clients/{CLIENT_ID}/notes"

    created = client.post(base, headers=admin_header, json={"body": "Prefers Slack"})
    assert created.status_code == 201
    note = created.json()
    assert note["author_id"] == ADMIN_ID

    updated = client.put(f"{base}/{note['id']}", headers=admin_header, json={"body": "Prefers email"})
    assert updated.json()["body"] == "Prefers email"

    assert [n["body"] for n in client.get(base, headers=admin_header).json()] == ["Prefers email"]
    assert client.delete(f"{base}/{note['id']}", headers=admin_header).status_code == 204
    assert client.get(base, headers=admin_header).json() == []


def test_blank_note_rejected(client, admin_header):
    response = client.post(f"/api/v1/clients/{CLIENT_ID}/notes", headers=admin_header, json={"body": "  "})

    assert response.status_code == 422


def test_note_for_unknown_client(client, admin_header):
    response = client.post("/api/v1/clients/ghost/notes", headers=admin_header, json={"body": "hi"})

    assert response.status_code == 404


def test_missing_note(client, admin_header):
    response = client.delete(f"/api/v1/clients/{CLIENT_ID}/notes/nope", headers=admin_header)

    assert response.status_code == 404


def test_status_change_refreshes_cached_client_list(client, admin_header, fake_supabase):
    request = add_request(fake_supabase, "pending")
    session_id = client.post("/api/v1/session", headers=admin_header).json()["session_id"]
    headers = {**admin_header, PORTAL_SESSION_HEADER: session_id}
    before = {c["id"]: c for c in client.get("/api/v1/clients", headers=headers).json()}
    assert before[CLIENT_ID]["active_requests"] == 1

    response = client.patch(
        f"/api/v1/requests/{request['id']}/status", headers=admin_header, json={"status": "delivered"}
    )
    assert response.status_code == 200

    after = {c["id"]: c for c in client.get("/api/v1/clients", headers=headers).json()}
    assert after[CLIENT_ID]["active_requests"] == 0
