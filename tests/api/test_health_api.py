"""Tests for health endpoints."""

from docflow import __version__


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["version"] == __version__


def test_ready(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"]["status"] == "healthy"


def test_root(client):
    assert client.get("/").json()["version"] == __version__
