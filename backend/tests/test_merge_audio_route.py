import pytest
from fastapi.testclient import TestClient

from backend.app.config import Settings
from backend.app.core.exceptions import MediaUploadError
from backend.app.infra.cloudinary_client import CloudinaryClient
from backend.app.main import app
from backend.app.models.schemas import MediaAsset
from backend.app.routes import merge_audio

PAYLOAD = {
    "downloadURL": "https://x/greeting.mp3",
    "prospectName": "Jo Ann",
    "timestamp": "1700000000",
}


def make_settings(api_key=None, api_secret=None) -> Settings:
    return Settings(
        _env_file=None,
        cloudinary_cloud_name="democloud",
        base_script_public_id="base_script",
        cloudinary_api_key=api_key,
        cloudinary_api_secret=api_secret,
    )


class FakeMediaClient(CloudinaryClient):
    def __init__(self, settings, results):
        super().__init__(settings)
        self.results = list(results)
        self.uploads = []
        self.destroyed = []

    async def upload(self, source, public_id):
        self.uploads.append({"source": source, "public_id": public_id})
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def destroy(self, public_id):
        self.destroyed.append(public_id)


def install_fake(monkeypatch, results, **settings_kwargs):
    settings = make_settings(**settings_kwargs)
    fake = FakeMediaClient(settings, results)
    monkeypatch.setattr(merge_audio, "get_settings", lambda: settings)
    monkeypatch.setattr(merge_audio, "get_media_client", lambda _settings=None: fake)
    return fake


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
def test_non_post_is_rejected(method):
    client = TestClient(app)
    resp = client.request(method, "/api/merge-audio")
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed"}


@pytest.mark.parametrize("missing", ["downloadURL", "prospectName", "timestamp"])
def test_missing_field_is_bad_request(monkeypatch, missing):
    fake = install_fake(monkeypatch, [])
    payload = {k: v for k, v in PAYLOAD.items() if k != missing}

    resp = TestClient(app).post("/api/merge-audio", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}
    assert fake.uploads == []


def test_empty_field_is_bad_request(monkeypatch):
    install_fake(monkeypatch, [])
    resp = TestClient(app).post("/api/merge-audio", json={**PAYLOAD, "prospectName": ""})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}


def test_invalid_json_is_bad_request(monkeypatch):
    install_fake(monkeypatch, [])
    resp = TestClient(app).post(
        "/api/merge-audio", content=b"not json", headers={"content-type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}


def test_happy_path(monkeypatch):
    fake = install_fake(
        monkeypatch,
        [
            MediaAsset(public_id="greeting_Jo_Ann_1", duration=3.5, secure_url="https://cdn/g.mp3"),
            MediaAsset(
                public_id="Jo_Ann_full_voice_note_1700000000",
                duration=47.5,
                secure_url="https://cdn/final.mp3",
            ),
        ],
    )

    resp = TestClient(app).post("/api/merge-audio", json=PAYLOAD)

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "success",
        "mergedAudioUrl": "https://cdn/final.mp3",
        "publicId": "Jo_Ann_full_voice_note_1700000000",
        "fileName": "Jo_Ann_voice_note_1700000000.mp3",
        "duration": 47.5,
        "greetingDuration": 3.5,
        "message": "Successfully merged audio for Jo Ann. Final duration: 47.5s",
    }
    assert fake.uploads[0]["public_id"].startswith("greeting_Jo_Ann_")
    # no credentials configured
    assert fake.destroyed == []


def test_numeric_timestamp_is_accepted(monkeypatch):
    install_fake(
        monkeypatch,
        [
            MediaAsset(public_id="g", duration=1.0),
            MediaAsset(public_id="m", duration=30.0, secure_url="https://cdn/m.mp3"),
        ],
    )

    resp = TestClient(app).post("/api/merge-audio", json={**PAYLOAD, "timestamp": 1700000000})

    assert resp.status_code == 200
    assert resp.json()["fileName"] == "Jo_Ann_voice_note_1700000000.mp3"


def test_render_failure_returns_direct_url(monkeypatch):
    fake = install_fake(
        monkeypatch,
        [
            MediaAsset(public_id="greeting_Jo_Ann_1", duration=3.5),
            MediaUploadError(500, "render timeout"),
        ],
        api_key="key",
        api_secret="secret",
    )

    resp = TestClient(app).post("/api/merge-audio", json=PAYLOAD)

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "success"
    assert data["mergedAudioUrl"] == fake.uploads[1]["source"]
    assert data["publicId"].endswith("_direct_1700000000")
    assert data["duration"] is None
    assert data["greetingDuration"] == 3.5
    assert fake.destroyed == []


def test_greeting_upload_failure_surfaces_raw_error(monkeypatch):
    install_fake(monkeypatch, [MediaUploadError(400, '{"error":{"message":"Upload preset not found"}}')])

    resp = TestClient(app).post("/api/merge-audio", json=PAYLOAD)

    assert resp.status_code == 500
    data = resp.json()
    assert data["status"] == "error"
    assert "Upload preset not found" in data["error"]
    assert data["error"].startswith("Greeting upload failed: ")


def test_unexpected_error_is_reported(monkeypatch):
    install_fake(monkeypatch, [ConnectionError("network down")])

    resp = TestClient(app).post("/api/merge-audio", json=PAYLOAD)

    assert resp.status_code == 500
    assert resp.json() == {
        "status": "error",
        "error": "network down",
        "message": "Failed to merge audio files",
    }
