# tests/test_form_api.py
import io

from conftest import RecordingSink
from product_form.config import settings


def test_root_and_security_headers(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "Product Form API"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "Cache-Control" not in resp.headers
    assert client.get("/api/form/").headers["Cache-Control"] == "no-store"


def test_field_definitions(client):
    resp = client.get("/api/form/fields")
    assert resp.status_code == 200, resp.text
    j = resp.json()
    assert j["categories"]["home"] == "Home & Garden"
    assert [f["id"] for f in j["fields"]] == ["name", "price", "category", "description", "image"]


def test_initial_state_is_empty(client):
    resp = client.get("/api/form/")
    assert resp.status_code == 200, resp.text
    j = resp.json()
    assert j["values"] == {"name": "", "price": 0, "category": "", "description": ""}
    assert j["image"] is None
    assert j["preview"] is None
    assert j["errors"] == {}
    assert j["is_submitting"] is False


def test_patch_sets_only_given_fields(client):
    resp = client.patch("/api/form/", json={"name": "Desk Lamp", "price": 25.5})
    assert resp.status_code == 200, resp.text
    values = resp.json()["values"]
    assert values["name"] == "Desk Lamp"
    assert values["price"] == 25.5
    assert values["category"] == ""


def test_patch_rejects_unknown_fields(client):
    resp = client.patch("/api/form/", json={"colour": "red"})
    assert resp.status_code == 422


def test_image_upload_preview_and_clear(client, make_sample_jpeg_bytes):
    jpg = make_sample_jpeg_bytes(size=(64, 48))
    files = {"file": ("lamp.jpg", io.BytesIO(jpg), "image/jpeg")}
    resp = client.post("/api/form/image", files=files)
    assert resp.status_code == 200, resp.text
    j = resp.json()
    assert j["ok"] is True
    assert j["image"]["size"] == len(jpg)
    assert j["preview"]["data_url"].startswith("data:image/jpeg;base64,")
    assert (j["preview"]["width"], j["preview"]["height"]) == (64, 48)

    for _ in range(2):
        resp = client.delete("/api/form/image")
        assert resp.status_code == 200, resp.text
        assert resp.json()["image"] is None
        assert resp.json()["preview"] is None


def test_invalid_submit_returns_field_errors(client, form):
    client.patch("/api/form/", json={"name": "Hi", "price": -5, "category": "", "description": "short"})
    resp = client.post("/api/form/submit")
    assert resp.status_code == 422, resp.text
    errors = resp.json()["detail"]["errors"]
    assert set(errors) == {"name", "price", "category", "description"}

    state = client.get("/api/form/").json()
    assert state["errors"] == errors
    assert state["values"]["name"] == "Hi"


def test_oversized_image_accepted_then_rejected_on_submit(client, form, valid_values, monkeypatch,
                                                          make_sample_jpeg_bytes):
    monkeypatch.setattr(settings, "MAX_IMAGE_BYTES", 100)
    client.patch("/api/form/", json=valid_values)
    jpg = make_sample_jpeg_bytes()
    resp = client.post("/api/form/image", files={"file": ("big.jpg", io.BytesIO(jpg), "image/jpeg")})
    assert resp.status_code == 200, resp.text

    resp = client.post("/api/form/submit")
    assert resp.status_code == 422
    assert set(resp.json()["detail"]["errors"]) == {"image"}


def test_sink_failure_is_502_and_keeps_values(client, form, valid_values):
    form.sink = RecordingSink(fail_with=RuntimeError("backend down"))
    client.patch("/api/form/", json=valid_values)

    resp = client.post("/api/form/submit")
    assert resp.status_code == 502, resp.text
    assert "backend down" in resp.json()["detail"]

    state = client.get("/api/form/").json()
    assert state["values"]["name"] == "Desk Lamp"
    assert [n["kind"] for n in state["notifications"]] == ["error"]


def test_reset(client):
    client.patch("/api/form/", json={"name": "Desk Lamp"})
    resp = client.post("/api/form/reset")
    assert resp.status_code == 200, resp.text
    assert resp.json()["values"]["name"] == ""


def test_reset_refused_while_in_flight(client, form):
    form.state.apply("in_flight")
    resp = client.post("/api/form/reset")
    assert resp.status_code == 409

    resp = client.post("/api/form/submit")
    assert resp.status_code == 409


def test_cors_origins_from_settings(monkeypatch):
    from product_form.middleware.cors_config import cors_origins

    monkeypatch.setattr(settings, "CORS_ORIGINS", "")
    assert cors_origins() == ["http://localhost:3000"]
    monkeypatch.setattr(settings, "CORS_ORIGINS", "https://a.example, https://b.example ,")
    assert cors_origins() == ["https://a.example", "https://b.example"]


def test_form_state_route_runs_on_the_event_loop():
    import asyncio
    from product_form.main import app

    route = next(r for r in app.routes if getattr(r, "path", None) == "/api/form/" and "GET" in r.methods)
    assert asyncio.iscoroutinefunction(route.endpoint)


def test_upload_with_huge_declared_dimensions_is_accepted(client):
    import struct
    import zlib

    ihdr = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    png = (b"\x89PNG\r\n\x1a\n" + struct.pack(">I", len(ihdr)) + b"IHDR" + ihdr
           + struct.pack(">I", zlib.crc32(b"IHDR" + ihdr) & 0xFFFFFFFF))
    resp = client.post("/api/form/image", files={"file": ("big.png", io.BytesIO(png), "image/png")})
    assert resp.status_code == 200, resp.text
    assert resp.json()["preview"]["width"] is None
