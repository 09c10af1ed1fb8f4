"""HTTP tests for the gateway routes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statusgate.config import Settings
from statusgate.qr import QRRenderError
from statusgate.transport import MediaPayload
from statusgate.web.app import create_app

if TYPE_CHECKING:
    from conftest import FakeStatusClient

MANAGER_PASSWORD = "abc123"

PNG = ("photo.png", b"\x89PNG fake image", "image/png")
HTML = {"Accept": "text/html,application/xhtml+xml"}


def _upload_files(*specs: tuple[str, bytes, str]) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("mediaFile", spec) for spec in specs]


class TestLifespan:
    """Tests for client start/stop around the app lifetime."""

    def test_client_started_and_stopped(self, app: FastAPI, fake_client: FakeStatusClient) -> None:
        with TestClient(app):
            assert fake_client.started
            assert not fake_client.stopped

        assert fake_client.stopped

    def test_start_failure_keeps_serving(
        self, settings: Settings, fake_client: FakeStatusClient
    ) -> None:
        fake_client.start = AsyncMock(side_effect=ConnectionError("network down"))  # type: ignore[method-assign]
        app = create_app(settings=settings, client=fake_client)

        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["ready"] is False


class TestPairingEndpoint:
    """Tests for GET /api/qr."""

    def test_before_any_code(self, http_client: TestClient) -> None:
        response = http_client.get("/api/qr")

        assert response.status_code == 200
        assert response.json() == {"ready": False, "qrDataUrl": ""}

    def test_pending_code_is_rendered(
        self, http_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        fake_client.emit_pairing_code("tg://login?token=AQID")

        body = http_client.get("/api/qr").json()

        assert body["ready"] is False
        assert body["qrDataUrl"].startswith("data:image/png;base64,")

    def test_ready_has_no_code(
        self, http_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        fake_client.emit_pairing_code("tg://login?token=AQID")
        fake_client.emit_ready()

        assert http_client.get("/api/qr").json() == {"ready": True, "qrDataUrl": ""}

    def test_failed_pairing_drops_stale_code(
        self, http_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        fake_client.emit_pairing_code("tg://login?token=AQID")
        fake_client.emit_pairing_failed("Pairing failed.")

        assert http_client.get("/api/qr").json() == {
            "ready": False,
            "qrDataUrl": "",
            "error": "Pairing failed.",
        }

    def test_render_failure(
        self,
        http_client: TestClient,
        fake_client: FakeStatusClient,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fail(code: str) -> str:
            raise QRRenderError("too long")

        monkeypatch.setattr("statusgate.web.routers.pairing.render_qr_data_url", fail)
        fake_client.emit_pairing_code("tg://login?token=AQID")

        response = http_client.get("/api/qr")

        assert response.status_code == 500
        assert response.json() == {"ready": False, "error": "QR generation failed"}


class TestSetupEndpoint:
    """Tests for POST /api/setup and the setup page."""

    def test_not_ready(self, http_client: TestClient) -> None:
        response = http_client.post("/api/setup", json={"password": "longenough"})

        assert response.status_code == 409
        assert response.json() == {"ok": False, "message": "Scan the QR code first."}

    def test_short_password(self, http_client: TestClient, fake_client: FakeStatusClient) -> None:
        fake_client.emit_ready()

        response = http_client.post("/api/setup", json={"password": "short"})

        assert response.status_code == 400
        assert response.json()["ok"] is False

    def test_first_setup(
        self, http_client: TestClient, fake_client: FakeStatusClient, settings: Settings
    ) -> None:
        fake_client.emit_ready()

        response = http_client.post("/api/setup", json={"password": "longenough"})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert json.loads(settings.config_path.read_text()) == {"managerPassword": "longenough"}

    def test_change_requires_current_password(self, ready_client: TestClient) -> None:
        response = ready_client.post(
            "/api/setup", json={"password": "newpassword", "currentPassword": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Current password is incorrect."

    def test_change_with_current_password(self, ready_client: TestClient) -> None:
        response = ready_client.post(
            "/api/setup",
            json={"password": "newpassword", "currentPassword": MANAGER_PASSWORD},
        )

        assert response.status_code == 200
        assert ready_client.app.state.auth.authorize_upload("newpassword")

    @pytest.mark.parametrize("password", [None, 1234567, True])
    def test_not_ready_wins_over_odd_password_types(
        self, http_client: TestClient, password: object
    ) -> None:
        response = http_client.post("/api/setup", json={"password": password})

        assert response.status_code == 409

    def test_null_password_when_ready(
        self, http_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        fake_client.emit_ready()

        response = http_client.post("/api/setup", json={"password": None})

        assert response.status_code == 400

    def test_numeric_passwords_are_accepted(self, ready_client: TestClient) -> None:
        response = ready_client.post(
            "/api/setup", json={"password": 1234567, "currentPassword": MANAGER_PASSWORD}
        )

        assert response.status_code == 200
        assert ready_client.app.state.auth.authorize_upload("1234567")

    def test_invalid_body(self, ready_client: TestClient) -> None:
        response = ready_client.post("/api/setup", json={"password": ["not", "a", "string"]})

        assert response.status_code == 422
        assert response.json()["ok"] is False

    def test_storage_failure(self, tmp_path: Path, fake_client: FakeStatusClient) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        settings = Settings(data_dir=blocker, log_to_file=False, print_qr_to_terminal=False)
        app = create_app(settings=settings, client=fake_client)
        fake_client.emit_ready()

        with TestClient(app) as client:
            response = client.post("/api/setup", json={"password": "longenough"})

        assert response.status_code == 500
        assert response.json() == {"ok": False, "message": "Could not save settings."}
        assert not app.state.auth.is_configured

    def test_setup_page(self, http_client: TestClient) -> None:
        response = http_client.get("/setup")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]


class TestUploadEndpoint:
    """Tests for POST /upload."""

    def test_not_connected(self, http_client: TestClient, fake_client: FakeStatusClient) -> None:
        response = http_client.post("/upload", data={"password": "x", "textStatus": "hi"})

        assert response.status_code == 503
        assert "scan the QR code" in response.json()["message"]
        assert fake_client.sent == []

    def test_setup_required(self, http_client: TestClient, fake_client: FakeStatusClient) -> None:
        fake_client.emit_ready()

        response = http_client.post("/upload", data={"password": "x", "textStatus": "hi"})

        assert response.status_code == 403
        assert fake_client.sent == []

    def test_wrong_password(self, ready_client: TestClient, fake_client: FakeStatusClient) -> None:
        response = ready_client.post(
            "/upload", data={"password": "wrong", "textStatus": "hi"}, files=_upload_files(PNG)
        )

        assert response.status_code == 401
        assert response.json() == {"ok": False, "message": "Wrong password."}
        assert fake_client.sent == []

    def test_empty_request(self, ready_client: TestClient, fake_client: FakeStatusClient) -> None:
        response = ready_client.post(
            "/upload", data={"password": MANAGER_PASSWORD, "textStatus": "   "}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No text or media provided."

    def test_unsupported_type_sends_nothing(
        self, ready_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        response = ready_client.post(
            "/upload",
            data={"password": MANAGER_PASSWORD, "textStatus": "hi"},
            files=_upload_files(PNG, PNG, ("doc.pdf", b"%PDF-1.4", "application/pdf")),
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Unsupported file type. Please upload an image or video."
        )
        assert fake_client.sent == []

    def test_too_many_files(
        self, fake_client: FakeStatusClient, settings: Settings
    ) -> None:
        limited = settings.model_copy(update={"max_files": 2})
        limited.config_path.parent.mkdir(parents=True, exist_ok=True)
        limited.config_path.write_text(json.dumps({"managerPassword": MANAGER_PASSWORD}))
        app = create_app(settings=limited, client=fake_client)
        fake_client.emit_ready()

        with TestClient(app) as client:
            response = client.post(
                "/upload",
                data={"password": MANAGER_PASSWORD},
                files=_upload_files(PNG, PNG, PNG),
            )

        assert response.status_code == 413
        assert response.json()["message"] == "Too many files. Max is 2."
        assert fake_client.sent == []

    def test_file_too_large(self, fake_client: FakeStatusClient, settings: Settings) -> None:
        limited = settings.model_copy(update={"max_file_mb": 1})
        limited.config_path.parent.mkdir(parents=True, exist_ok=True)
        limited.config_path.write_text(json.dumps({"managerPassword": MANAGER_PASSWORD}))
        app = create_app(settings=limited, client=fake_client)
        fake_client.emit_ready()
        big = ("big.png", b"\x00" * (1024 * 1024 + 1), "image/png")

        with TestClient(app) as client:
            response = client.post(
                "/upload", data={"password": MANAGER_PASSWORD}, files=_upload_files(big)
            )

        assert response.status_code == 413
        assert response.json()["message"] == "File too large. Max size is 1MB."
        assert fake_client.sent == []

    def test_media_with_captions_then_text(
        self, ready_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        response = ready_client.post(
            "/upload",
            data={"password": MANAGER_PASSWORD, "captions": ["x"], "textStatus": "hello"},
            files=_upload_files(("A.png", b"A", "image/png"), ("B.mp4", b"B", "video/mp4")),
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "mediaSent": 2, "textSent": True}
        assert len(fake_client.sent) == 3
        (target_a, media_a, caption_a), (_, media_b, caption_b), last = fake_client.sent
        assert target_a == "me"
        assert isinstance(media_a, MediaPayload)
        assert (media_a.filename, media_a.to_bytes(), caption_a) == ("A.png", b"A", "x")
        assert isinstance(media_b, MediaPayload)
        assert (media_b.mime_type, caption_b) == ("video/mp4", None)
        assert last == ("me", "hello", None)

    def test_single_caption_field(
        self, ready_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        response = ready_client.post(
            "/upload",
            data={"password": MANAGER_PASSWORD, "caption": " sunset "},
            files=_upload_files(PNG),
        )

        assert response.status_code == 200
        assert fake_client.sent[0][2] == "sunset"

    def test_text_only(self, ready_client: TestClient, fake_client: FakeStatusClient) -> None:
        response = ready_client.post(
            "/upload", data={"password": MANAGER_PASSWORD, "textStatus": "  hi  "}
        )

        assert response.json() == {"ok": True, "mediaSent": 0, "textSent": True}
        assert fake_client.sent == [("me", "hi", None)]

    def test_html_success_page(self, ready_client: TestClient) -> None:
        response = ready_client.post(
            "/upload", data={"password": MANAGER_PASSWORD, "textStatus": "hi"}, headers=HTML
        )

        assert response.status_code == 200
        assert "Status Posted Successfully!" in response.text

    def test_html_error_page(self, ready_client: TestClient) -> None:
        response = ready_client.post(
            "/upload", data={"password": "wrong", "textStatus": "hi"}, headers=HTML
        )

        assert response.status_code == 401
        assert "text/html" in response.headers["content-type"]
        assert "Wrong password." in response.text

    def test_delivery_failure_keeps_earlier_sends(
        self, ready_client: TestClient, fake_client: FakeStatusClient
    ) -> None:
        fake_client.fail_on_call = 1

        response = ready_client.post(
            "/upload",
            data={"password": MANAGER_PASSWORD, "textStatus": "hi"},
            files=_upload_files(PNG, PNG, PNG),
        )

        assert response.status_code == 500
        assert response.json()["message"] == (
            "Error posting status: Evaluation failed: session closed "
            "(1 item(s) were already posted)"
        )
        assert len(fake_client.sent) == 1

    def test_index_page(self, ready_client: TestClient) -> None:
        response = ready_client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]


class TestHealthAndMiddleware:
    """Tests for /health and cross-cutting response headers."""

    def test_degraded_until_linked_and_configured(self, http_client: TestClient) -> None:
        body = http_client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["phase"] == "unpaired"
        assert body["password_configured"] is False

    def test_ok_when_ready(self, ready_client: TestClient) -> None:
        body = ready_client.get("/health").json()

        assert body["status"] == "ok"
        assert body["phase"] == "ready"
        assert body["ready"] is True

    def test_request_id_is_echoed(self, http_client: TestClient) -> None:
        response = http_client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_unknown_route(self, http_client: TestClient) -> None:
        response = http_client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}
