"""
Integration tests for a guarded service: HTTP routes and socket messages
going through the same rules, hooks and metadata.
"""

import json

import pytest
from fastapi import Depends, WebSocket, WebSocketDisconnect
from fastapi.testclient import TestClient

from service_acl.app import (
    AclModuleOptions, GuardedMessageHandler, SubjectHook, ExecutionContext,
    OperationRegistry, acl, current_auth, current_subject, get_subject,
)
from service_acl.app.main import AclService
from shared.config import AclSettings


DOCUMENTS = {
    "d1": {"id": "d1", "ownerId": "u1", "title": "Quarterly report"},
    "d2": {"id": "d2", "ownerId": "u2", "title": "Board minutes"},
}


class DocumentHook(SubjectHook):
    """Loads the document named by the request arguments."""

    async def run(self, args, auth=None):
        return DOCUMENTS.get((args or {}).get("document_id"))


def define_rules(builder, auth):
    if auth is None:
        return
    builder.can("read", "Document", {"ownerId": auth["id"]})
    builder.can("create", "Document")
    if "admin" in auth.get("roles", []):
        builder.can("manage", "all")


def auth_header(principal):
    return {"x-auth": json.dumps(principal)}


class TestGuardedServiceFlow:
    """End-to-end flow through AclService."""

    @pytest.fixture
    def operations(self):
        """Per-test operation registry."""
        return OperationRegistry()

    @pytest.fixture
    def service(self, operations):
        """Service with document routes and a socket endpoint."""
        service = AclService(
            AclModuleOptions(define_rules=define_rules, hooks=[DocumentHook()], operations=operations),
            settings=AclSettings(),
        )
        app = service.app

        @app.get("/documents/{document_id}", dependencies=[service.protect])
        @acl("read", "Document", DocumentHook, registry=operations)
        async def get_document(document_id: str,
                               document=Depends(current_subject("Document")),
                               auth=Depends(current_auth)):
            return {"document": document, "viewer": auth["id"]}

        @app.post("/documents", dependencies=[service.protect])
        @acl("create", "Document", registry=operations)
        async def create_document():
            return {"created": True}

        @app.get("/archive/{document_id}", dependencies=[service.protect])
        @acl("read", "Document", "ArchiveHook", registry=operations)
        async def get_archived(document_id: str):
            return {"archived": document_id}

        @app.get("/documents", dependencies=[service.protect])
        async def list_all():
            return {"documents": sorted(DOCUMENTS)}

        @acl("read", "Document", DocumentHook, registry=operations)
        async def read_document(client, data):
            context = ExecutionContext.for_ws(read_document, client, data)
            return {"action": "document", "document": get_subject(context, "Document")}

        async def list_documents(client, data):
            return {"action": "documents", "documents": sorted(DOCUMENTS)}

        handler = GuardedMessageHandler(service.guard, {
            "read_document": read_document,
            "list_documents": list_documents,
        })

        @app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            try:
                while True:
                    message = await websocket.receive_text()
                    await websocket.send_json(await handler.handle_message(websocket, message))
            except WebSocketDisconnect:
                pass

        return service

    @pytest.fixture
    def client(self, service):
        """Test client with the service lifespan running."""
        with TestClient(service.app, raise_server_exceptions=False) as client:
            yield client

    def test_owner_reads_document(self, client):
        """Test the owner gets the document resolved by the guard."""
        response = client.get("/documents/d1", headers=auth_header({"id": "u1"}))

        assert response.status_code == 200
        assert response.json() == {"document": DOCUMENTS["d1"], "viewer": "u1"}

    def test_non_owner_is_forbidden(self, client):
        """Test a document owned by someone else is denied."""
        response = client.get("/documents/d2", headers=auth_header({"id": "u1"}))

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "AUTHORIZATION_ERROR"
        assert body["details"]["action"] == "read"
        assert body["details"]["subject"] == "Document"

    def test_missing_document_is_forbidden_for_admin(self, client):
        """Test an absent subject denies even with manage all."""
        response = client.get("/documents/nope", headers=auth_header({"id": "root", "roles": ["admin"]}))

        assert response.status_code == 403

    def test_anonymous_and_authenticated_create(self, client):
        """Test subject type checks without a hook."""
        assert client.post("/documents").status_code == 403
        assert client.post("/documents", headers=auth_header({"id": "u1"})).status_code == 200

    def test_unprotected_route_is_open(self, client):
        """Test routes without metadata pass the guard for anyone."""
        response = client.get("/documents")

        assert response.status_code == 200
        assert response.json() == {"documents": ["d1", "d2"]}

    def test_malformed_principal_is_unauthorized(self, client):
        """Test an unparsable principal header is rejected, not treated as anonymous."""
        response = client.get("/documents/d1", headers={"x-auth": "{oops"})

        assert response.status_code == 401
        assert response.json()["code"] == "MALFORMED_PRINCIPAL"

    def test_unregistered_hook_is_server_error(self, client):
        """Test a missing hook surfaces as a configuration error."""
        response = client.get("/archive/d1", headers=auth_header({"id": "u1"}))

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "HOOK_NOT_REGISTERED"
        assert body["details"]["hook_key"] == "ArchiveHook"

    def test_introspection_routes(self, client):
        """Test operations and hooks listings."""
        operations = client.get("/acl/operations").json()
        names = {entry["operation"].rsplit(".", 1)[-1] for entry in operations["operations"]}

        assert operations["frozen"] is True
        assert {"get_document", "create_document", "get_archived", "read_document"} <= names

        hooks = client.get("/acl/hooks").json()
        assert hooks["mode"] == "lenient"
        assert "DocumentHook" in json.dumps(hooks["hooks"])

    def test_health_and_metrics(self, client):
        """Test ambient service routes."""
        client.get("/documents/d1", headers=auth_header({"id": "u1"}))

        assert client.get("/health").status_code == 200
        metrics = client.get("/metrics")
        assert metrics.status_code == 200
        assert "acl_decisions_total" in metrics.text

    def test_websocket_messages(self, client):
        """Test per-message authorization over a socket."""
        with client.websocket_connect("/ws", headers=auth_header({"id": "u1"})) as websocket:
            websocket.send_text(json.dumps({"action": "read_document", "data": {"document_id": "d1"}}))
            assert websocket.receive_json() == {"action": "document", "document": DOCUMENTS["d1"]}

            websocket.send_text(json.dumps({"action": "read_document", "data": {"document_id": "d2"}}))
            assert websocket.receive_json()["error"] == "AUTHORIZATION_ERROR"

            websocket.send_text(json.dumps({"action": "list_documents"}))
            assert websocket.receive_json()["documents"] == ["d1", "d2"]

    def test_anonymous_websocket(self, client):
        """Test anonymous sockets reach open handlers only."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text(json.dumps({"action": "list_documents", "data": {}}))
            assert websocket.receive_json()["action"] == "documents"

            websocket.send_text(json.dumps({"action": "read_document", "data": {"document_id": "d1"}}))
            assert websocket.receive_json()["error"] == "AUTHORIZATION_ERROR"

    def test_websocket_protocol_errors(self, client):
        """Test malformed and unknown messages."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("not json")
            assert websocket.receive_json()["error"] == "INVALID_JSON"

            websocket.send_text(json.dumps({"data": {}}))
            assert websocket.receive_json()["error"] == "INVALID_FORMAT"

            websocket.send_text(json.dumps({"action": "delete_everything"}))
            response = websocket.receive_json()
            assert response["error"] == "UNKNOWN_ACTION"
            assert set(response["available_actions"]) == {"read_document", "list_documents"}
