"""Tests for the Flask SVG endpoint."""
import pytest

from app import app
from tests.conftest import FixedEphemeris


@pytest.fixture
def client(data_dir, monkeypatch):
    monkeypatch.setitem(app.config, "DATA_DIR", data_dir)
    monkeypatch.setitem(app.config, "EPHEMERIS", FixedEphemeris())
    monkeypatch.setitem(app.config, "TESTING", True)
    return app.test_client()


def test_renders_svg(client):
    resp = client.get("/skymap.svg?lat=40&lon=-80&date=2024-01-15T00:00:00&size=300")
    assert resp.status_code == 200
    assert resp.mimetype == "image/svg+xml"
    body = resp.get_data(as_text=True)
    assert body.startswith("<svg")
    assert 'viewBox="0 0 300 300"' in body
    assert "Great Bear" in body


def test_language(client):
    resp = client.get("/skymap.svg?date=2024-01-15T00:00:00&lang=la")
    assert resp.status_code == 200
    assert "Ursa Major" in resp.get_data(as_text=True)


@pytest.mark.parametrize("query", [
    "lat=91",
    "lon=-181",
    "fov=400",
    "lat=abc",
    "date=yesterday",
    "size=2",
    "size=big",
    "lang=xx",
])
def test_bad_request(client, query):
    resp = client.get(f"/skymap.svg?{query}")
    assert resp.status_code == 400
    assert resp.mimetype == "text/plain"
    assert resp.get_data(as_text=True)


def test_missing_catalog_file(client, data_dir):
    (data_dir / "stars.json").unlink()
    resp = client.get("/skymap.svg")
    assert resp.status_code == 500
    assert resp.mimetype == "text/plain"
    body = resp.get_data(as_text=True)
    assert "stars.json" in body
    assert "prepare_stars.py" in body
