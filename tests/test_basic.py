# Basic tests
import string

from src.notesync.security.ids import ALPHABET


def test_root_endpoint(client):
    """Root hands out a fresh note id."""
    response = client.get("/")
    assert response.status_code == 200
    note_url = response.json()["noteUrl"]
    assert len(note_url) == 8
    assert set(note_url) <= set(ALPHABET)


def test_root_endpoint_ids_differ(client):
    first = client.get("/").json()["noteUrl"]
    second = client.get("/").json()["noteUrl"]
    assert first != second


def test_health_endpoint(client):
    """Test health check."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_api_health_endpoints(client):
    data = client.get("/api/health/").json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"]["connected"] is True
    assert data["details"]["pending_notes"] == 0

    db = client.get("/api/health/database").json()
    assert db["connected"] is True


def test_models_import():
    """Test that models can be imported."""
    from src.notesync.core.models.note import Note

    assert Note.__tablename__ == "notes"
    assert set(ALPHABET) == set(string.ascii_letters + string.digits)
