"""
PackTrack Backend — Packaging API Tests
========================================

What:  End-to-end checks of /api/v1/packaging through the ASGI app:
       status codes, the response envelope, camelCase payloads, auth,
       multipart uploads and static serving of stored documents.
"""

import uuid
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from packtrack.config import settings
from packtrack.exceptions import StorageError
from packtrack.services.packaging_service import PackagingService

BASE = "/api/v1/packaging"


async def create_item(client, headers, payload):
    response = await client.post(BASE, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def upload_pdf(client, headers, item_id, content, filename="declaration.pdf", **form):
    data = {"type": "CONFORMITY_DECLARATION", **form}
    return await client.post(
        f"{BASE}/{item_id}/documents",
        data=data,
        files={"file": (filename, content, "application/pdf")},
        headers=headers,
    )


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_returns_envelope_with_components(
        self, test_client, auth_headers, sample_item_payload
    ):
        response = await test_client.post(BASE, json=sample_item_payload, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Packaging item created successfully"
        item = body["data"]
        assert item["name"] == "Cup A"
        assert item["internalCode"] == "FL0001"
        assert item["ppwrLevel"] == "A"
        assert item["documents"] == []
        lid = next(c for c in item["components"] if c["name"] == "Lid")
        assert lid["quantity"] == 2
        assert lid["packagingItemId"] == item["id"]
        assert len(item["components"]) == 2

    @pytest.mark.asyncio
    async def test_create_requires_authentication(self, test_client, sample_item_payload):
        response = await test_client.post(BASE, json=sample_item_payload)

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_token_cookie_is_accepted(self, test_client, registered_user, sample_item_payload):
        test_client.cookies.set("token", registered_user["token"])
        try:
            response = await test_client.post(BASE, json=sample_item_payload)
        finally:
            test_client.cookies.clear()
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_garbage_token_rejected(self, test_client, sample_item_payload):
        response = await test_client.post(
            BASE, json=sample_item_payload, headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_zero_quantity_rejected_with_field_message(
        self, test_client, auth_headers, sample_item_payload
    ):
        sample_item_payload["components"][0]["quantity"] = 0

        response = await test_client.post(BASE, json=sample_item_payload, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"].startswith("components.0.quantity")

    @pytest.mark.asyncio
    async def test_fractional_quantity_rejected(self, test_client, auth_headers, sample_item_payload):
        sample_item_payload["components"][0]["quantity"] = 1.5
        response = await test_client.post(BASE, json=sample_item_payload, headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, test_client, auth_headers, sample_item_payload):
        sample_item_payload["name"] = ""
        response = await test_client.post(BASE, json=sample_item_payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"].startswith("name")

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, test_client, auth_headers, sample_item_payload):
        sample_item_payload["status"] = "ARCHIVED"
        response = await test_client.post(BASE, json=sample_item_payload, headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_nothing_persisted_when_validation_fails(
        self, test_client, auth_headers, sample_item_payload
    ):
        sample_item_payload["components"][1]["color"] = ""
        await test_client.post(BASE, json=sample_item_payload, headers=auth_headers)

        listing = await test_client.get(BASE)
        assert listing.json()["data"] == []


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_list_and_get_are_public(self, test_client, auth_headers, sample_item_payload):
        created = await create_item(test_client, auth_headers, sample_item_payload)

        listing = await test_client.get(BASE)
        single = await test_client.get(f"{BASE}/{created['id']}")

        assert listing.status_code == 200
        assert [i["id"] for i in listing.json()["data"]] == [created["id"]]
        assert single.status_code == 200
        assert single.json()["data"]["internalCode"] == "FL0001"

    @pytest.mark.asyncio
    async def test_get_unknown_item_is_404(self, test_client):
        response = await test_client.get(f"{BASE}/{uuid.uuid4()}")

        assert response.status_code == 404
        body = response.json()
        assert body == {
            "success": False,
            "error": "not_found",
            "message": "Packaging item not found",
            "request_id": response.headers["X-Request-ID"],
        }

    @pytest.mark.asyncio
    async def test_put_replaces_components(self, test_client, auth_headers, sample_item_payload):
        created = await create_item(test_client, auth_headers, sample_item_payload)
        old_ids = {c["id"] for c in created["components"]}

        replacement = dict(sample_item_payload, name="Cup B", status="ACTIVE")
        replacement["components"] = [dict(sample_item_payload["components"][0], name="Tray", quantity=5)]
        response = await test_client.put(
            f"{BASE}/{created['id']}", json=replacement, headers=auth_headers
        )

        assert response.status_code == 200
        item = response.json()["data"]
        assert item["name"] == "Cup B"
        assert item["status"] == "ACTIVE"
        assert [(c["name"], c["quantity"]) for c in item["components"]] == [("Tray", 5)]
        assert not old_ids & {c["id"] for c in item["components"]}

        fetched = (await test_client.get(f"{BASE}/{created['id']}")).json()["data"]
        assert [c["name"] for c in fetched["components"]] == ["Tray"]

    @pytest.mark.asyncio
    async def test_put_unknown_item_is_404(self, test_client, auth_headers, sample_item_payload):
        response = await test_client.put(
            f"{BASE}/{uuid.uuid4()}", json=sample_item_payload, headers=auth_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(
        self, test_client, auth_headers, sample_item_payload, sample_pdf_bytes, file_store
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)
        uploaded = await upload_pdf(test_client, auth_headers, created["id"], sample_pdf_bytes)
        assert uploaded.status_code == 201

        response = await test_client.delete(f"{BASE}/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Packaging item deleted successfully"
        assert (await test_client.get(f"{BASE}/{created['id']}")).status_code == 404
        assert list(file_store.document_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_delete_unknown_item_is_404(self, test_client, auth_headers):
        response = await test_client.delete(f"{BASE}/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404


class TestDocuments:
    @pytest.mark.asyncio
    async def test_upload_pdf(self, test_client, auth_headers, sample_item_payload, sample_pdf_bytes):
        created = await create_item(test_client, auth_headers, sample_item_payload)

        response = await upload_pdf(
            test_client, auth_headers, created["id"], sample_pdf_bytes, name="EU DoC"
        )

        assert response.status_code == 201
        document = response.json()["data"]
        assert document["type"] == "CONFORMITY_DECLARATION"
        assert document["name"] == "EU DoC"
        assert document["fileSize"] == len(sample_pdf_bytes)
        assert document["fileUrl"].startswith("/uploads/packaging/")
        assert "filePath" not in document

        item = (await test_client.get(f"{BASE}/{created['id']}")).json()["data"]
        assert [d["id"] for d in item["documents"]] == [document["id"]]

    @pytest.mark.asyncio
    async def test_upload_non_pdf_rejected(
        self, test_client, auth_headers, sample_item_payload, file_store
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)

        response = await test_client.post(
            f"{BASE}/{created['id']}/documents",
            data={"type": "TECHNICAL_DOCUMENTATION"},
            files={"file": ("photo.png", b"\x89PNG\r\n\x1a\n", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File type image/png is not allowed"
        item = (await test_client.get(f"{BASE}/{created['id']}")).json()["data"]
        assert item["documents"] == []
        assert list(file_store.document_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_over_3mb_rejected(
        self, test_client, auth_headers, sample_item_payload, file_store
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)

        response = await upload_pdf(
            test_client, auth_headers, created["id"], b"%PDF" + b"0" * (3 * 1024 * 1024)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File size exceeds 3MB limit"
        assert list(file_store.document_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_without_file_rejected(self, test_client, auth_headers, sample_item_payload):
        created = await create_item(test_client, auth_headers, sample_item_payload)

        response = await test_client.post(
            f"{BASE}/{created['id']}/documents",
            data={"type": "CONFORMITY_DECLARATION"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"

    @pytest.mark.asyncio
    async def test_upload_with_unknown_type_rejected(
        self, test_client, auth_headers, sample_item_payload, sample_pdf_bytes
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)
        response = await upload_pdf(
            test_client, auth_headers, created["id"], sample_pdf_bytes, type="INVOICE"
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_to_unknown_item_is_404(self, test_client, auth_headers, sample_pdf_bytes):
        response = await upload_pdf(test_client, auth_headers, uuid.uuid4(), sample_pdf_bytes)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_document_twice(
        self, test_client, auth_headers, sample_item_payload, sample_pdf_bytes, file_store
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)
        document = (
            await upload_pdf(test_client, auth_headers, created["id"], sample_pdf_bytes)
        ).json()["data"]

        first = await test_client.delete(f"{BASE}/documents/{document['id']}", headers=auth_headers)
        second = await test_client.delete(f"{BASE}/documents/{document['id']}", headers=auth_headers)

        assert first.status_code == 200
        assert first.json()["message"] == "Document deleted successfully"
        assert second.status_code == 404
        assert list(file_store.document_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_uploads_are_served_statically(self, test_client):
        served_dir = Path(settings.upload_root) / "packaging"
        served_dir.mkdir(parents=True, exist_ok=True)
        (served_dir / "probe.pdf").write_bytes(b"%PDF-1.4 probe")

        found = await test_client.get("/uploads/packaging/probe.pdf")
        missing = await test_client.get("/uploads/packaging/absent.pdf")

        assert found.status_code == 200
        assert found.content == b"%PDF-1.4 probe"
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_oversized_upload_is_read_only_up_to_the_limit(
        self, test_client, auth_headers, sample_item_payload, document_constraints, monkeypatch
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)
        received = []
        original = PackagingService.upload_document

        async def recording_upload(self, *args, **kwargs):
            received.append(len(kwargs["content"]))
            return await original(self, *args, **kwargs)

        monkeypatch.setattr(PackagingService, "upload_document", recording_upload)

        response = await upload_pdf(
            test_client, auth_headers, created["id"], b"%PDF" + b"0" * (8 * 1024 * 1024)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File size exceeds 3MB limit"
        assert received == [document_constraints.max_size_bytes + 1]

    @pytest.mark.asyncio
    async def test_delete_document_storage_failure_is_500_and_keeps_row(
        self, test_client, auth_headers, sample_item_payload, sample_pdf_bytes, file_store, monkeypatch
    ):
        created = await create_item(test_client, auth_headers, sample_item_payload)
        document = (
            await upload_pdf(test_client, auth_headers, created["id"], sample_pdf_bytes)
        ).json()["data"]
        monkeypatch.setattr(
            file_store, "delete", AsyncMock(side_effect=StorageError("permission denied"))
        )

        response = await test_client.delete(
            f"{BASE}/documents/{document['id']}", headers=auth_headers
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "storage_error"
        assert body["success"] is False
        item = (await test_client.get(f"{BASE}/{created['id']}")).json()["data"]
        assert [d["id"] for d in item["documents"]] == [document["id"]]


class TestUnexpectedErrors:
    @pytest.mark.asyncio
    async def test_unhandled_exception_becomes_generic_500(self, test_app, monkeypatch):
        monkeypatch.setattr(
            PackagingService, "list_items", AsyncMock(side_effect=RuntimeError("boom"))
        )
        transport = ASGITransport(app=test_app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(BASE, headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "request_id": "req-500",
        }
        assert response.headers["X-Request-ID"] == "req-500"
        assert "boom" not in response.text
