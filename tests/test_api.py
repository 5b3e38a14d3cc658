"""Tests for the JSON API."""

import pytest


@pytest.fixture
def client(seeded_store):
    from fastapi.testclient import TestClient

    from dictassist.macro_store import get_macro_store
    from dictassist.web.app import app

    app.dependency_overrides[get_macro_store] = lambda: seeded_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_detect_body_part_only_by_default(client):
    resp = client.post("/api/detect", json={
        "text": "CT scan of the chest demonstrates clear lung fields",
        "autoDetect": False,
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["bodyPart"]["label"] == "Chest"
    assert data["modality"] is None


def test_detect_with_auto_detect(client):
    resp = client.post("/api/detect", json={
        "text": "CT scan of the chest demonstrates clear lung fields",
        "autoDetect": True,
    })
    data = resp.json()
    assert data["modality"] == {"label": "CT", "confidence": 99, "matchedKeywords": ["ct", "ct scan"]}


def test_detect_short_text(client):
    resp = client.post("/api/detect", json={"text": "ct", "autoDetect": True})
    assert resp.json()["bodyPart"] is None
    assert resp.json()["modality"] is None


def test_expand_with_detected_context(client):
    resp = client.post("/api/expand", json={"text": "Chest radiograph. Lungs: nml"})
    data = resp.json()
    assert data["bodyPart"] == "Chest"
    assert "The lungs are clear bilaterally." in data["text"]
    assert data["applied"][0]["name"] == "nml"


def test_expand_with_explicit_context(client):
    resp = client.post("/api/expand", json={"text": "nml", "bodyPart": "Head"})
    assert resp.json()["text"] == "No acute intracranial abnormality."


def test_expand_without_detection(client):
    resp = client.post("/api/expand", json={"text": "Chest radiograph. nml", "detect": False})
    data = resp.json()
    assert data["bodyPart"] is None
    assert data["text"] == "Chest radiograph. Within normal limits."


def test_macro_crud(client):
    resp = client.post("/api/macros", json={
        "userId": "u1",
        "name": "Mets",
        "replacementText": "no evidence of metastatic disease",
    })
    assert resp.status_code == 201
    created = resp.json()
    assert created["name"] == "mets"
    assert created["replacementText"] == "no evidence of metastatic disease"

    listing = client.get("/api/macros", params={"userId": "u1"}).json()
    assert [m["name"] for m in listing["personal"]] == ["mets"]
    assert len(listing["global"]) > 0

    resp = client.put(f"/api/macros/{created['id']}", json={"userId": "u1", "isActive": False})
    assert resp.json()["isActive"] is False

    expanded = client.post("/api/expand", json={"text": "mets", "userId": "u1"}).json()
    assert expanded["text"] == "mets"

    resp = client.delete(f"/api/macros/{created['id']}", params={"userId": "u1"})
    assert resp.status_code == 200
    resp = client.delete(f"/api/macros/{created['id']}", params={"userId": "u1"})
    assert resp.status_code == 404


def test_create_macro_validation(client):
    resp = client.post("/api/macros", json={"userId": "u1", "name": "  ", "replacementText": "x"})
    assert resp.status_code == 400


def test_update_unknown_macro(client):
    resp = client.put("/api/macros/9999", json={"userId": "u1", "name": "x"})
    assert resp.status_code == 404


def test_patterns_endpoint(client):
    data = client.get("/api/patterns").json()
    assert data["modality"][0]["label"] == "CT"
    assert "bodyPart" in data
