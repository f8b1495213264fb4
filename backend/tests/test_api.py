import pytest
from fastapi.testclient import TestClient

from app.api import analyze as analyze_api
from app.api.deps import get_settings, get_vision_client
from app.config import Settings
from app.main import app
from app.services.vision import InvalidUpstreamPayload, VisionNotConfigured, VisionProviderError


class FakeVision:
    def __init__(self, extracted=None, error=None):
        self.extracted = extracted or {}
        self.error = error
        self.calls = []

    async def extract_sheet(self, image_url):
        self.calls.append(image_url)
        if self.error:
            raise self.error
        return self.extracted


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _use_vision(fake):
    app.dependency_overrides[get_vision_client] = lambda: fake


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
    assert resp.headers["X-Request-ID"]


@pytest.mark.parametrize("payload", [{}, {"image_url": ""}, {"image_url": "   "}])
def test_analyze_requires_image_url(client, payload):
    fake = FakeVision()
    _use_vision(fake)
    resp = client.post("/v1/analyze", json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "image_url is required"
    assert fake.calls == []


def test_analyze_scores_vision_extraction(client):
    fake = FakeVision(
        {
            "make": "Toyota",
            "model": "Prius",
            "year": 2019,
            "auction_grade": "4.5",
            "mileage_km": 65000,
            "notes": "Clean interior.",
        }
    )
    _use_vision(fake)
    resp = client.post("/v1/analyze", json={"image_url": "https://example.com/sheet.jpg"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "Caution"
    assert body["score"] == 50
    assert body["policy"] == "with_notes"
    assert body["data"]["make"] == "Toyota"
    assert body["data"]["mileage_km"] == 65000
    assert body["breakdown"]["flags"] == 15
    assert fake.calls == ["https://example.com/sheet.jpg"]


def test_analyze_with_messy_extraction_still_scores(client):
    _use_vision(FakeVision({"year": "Heisei", "mileage_km": "unknown", "auction_grade": None}))
    resp = client.post("/v1/analyze", json={"image_url": "https://example.com/sheet.jpg"})
    assert resp.status_code == 200
    assert resp.json()["score"] == 36


def test_analyze_missing_api_key(client):
    app.dependency_overrides[get_settings] = lambda: Settings(OPENAI_API_KEY="")
    resp = client.post("/v1/analyze", json={"image_url": "https://example.com/sheet.jpg"})
    assert resp.status_code == 500
    assert resp.json()["detail"]["error"] == "Missing OPENAI_API_KEY"


@pytest.mark.parametrize(
    "error, expected",
    [
        (VisionNotConfigured("Missing OPENAI_API_KEY"), 500),
        (VisionProviderError("Vision provider error", detail="boom"), 502),
        (InvalidUpstreamPayload("no choices"), 502),
    ],
)
def test_analyze_maps_provider_failures(client, error, expected):
    _use_vision(FakeVision(error=error))
    resp = client.post("/v1/analyze", json={"image_url": "https://example.com/sheet.jpg"})
    assert resp.status_code == expected


def test_provider_error_detail_is_forwarded(client):
    _use_vision(FakeVision(error=VisionProviderError("Vision provider error", detail="quota exceeded")))
    resp = client.post("/v1/analyze", json={"image_url": "https://example.com/sheet.jpg"})
    assert resp.json()["detail"] == {"error": "Vision provider error", "detail": "quota exceeded"}


def test_analyze_text(client):
    resp = client.post("/v1/analyze/text", json={"text": "評価点 S 走行 30,000km 令和3年"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["auction_grade"] == "S"
    assert body["data"]["year"] == 2021
    # 0.5*100 + 0.3*40 + 0.2*20
    assert body["score"] == 66
    assert body["policy"] == "without_notes"


def test_upload_runs_ocr_text_through_engine(client, monkeypatch):
    seen = {}

    def fake_reader(data, lang):
        seen["data"] = data
        seen["lang"] = lang
        return "評価点 3.5\n走行 120,000km\n平成25年"

    monkeypatch.setattr(analyze_api, "read_sheet_text", fake_reader)
    resp = client.post("/v1/analyze/upload", files={"file": ("sheet.jpg", b"jpeg-bytes", "image/jpeg")})
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"] == {
        "make": None,
        "model": None,
        "year": 2013,
        "auction_grade": "3.5",
        "interior_grade": None,
        "exterior_grade": None,
        "mileage_km": 120000,
        "notes": "",
    }
    # 0.5*60 + 0.3*18 + 0.2*14 = 38.2
    assert body["score"] == 38
    assert seen == {"data": b"jpeg-bytes", "lang": "japan"}


def test_upload_rejects_undecodable_image(client):
    resp = client.post("/v1/analyze/upload", files={"file": ("sheet.jpg", b"not an image", "image/jpeg")})
    assert resp.status_code == 400


def test_upload_too_large(client):
    app.dependency_overrides[get_settings] = lambda: Settings(UPLOAD_MAX_SIZE_MB=0)
    resp = client.post("/v1/analyze/upload", files={"file": ("sheet.jpg", b"x", "image/jpeg")})
    assert resp.status_code == 413


def test_upload_without_ocr_engine(client, monkeypatch):
    from inspection.ocr import OCRUnavailableError

    def no_engine(data, lang):
        raise OCRUnavailableError("No OCR engine available")

    monkeypatch.setattr(analyze_api, "read_sheet_text", no_engine)
    resp = client.post("/v1/analyze/upload", files={"file": ("sheet.jpg", b"jpeg-bytes", "image/jpeg")})
    assert resp.status_code == 503
