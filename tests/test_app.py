import pytest
from fastapi.testclient import TestClient

from conftest import FakeCapability, RecordingBackend
from incident_manager.autopilot.actions import ActionDispatcher
from incident_manager.autopilot.ai import AIClassifier, KeywordClassifier, RawDataNormalizer
from incident_manager.autopilot.services import IncidentPipeline
from incident_manager.autopilot.store import InMemoryIncidentStore
from incident_manager.backend.app import create_app
from incident_manager.config import Settings
from incident_manager.errors import ConfigurationError


def _pipeline(*, classifier=None, store=None, auto_remediate=True):
    return IncidentPipeline(
        store=store or InMemoryIncidentStore(),
        normalizer=RawDataNormalizer(None),
        classifier=classifier or KeywordClassifier(),
        dispatcher=ActionDispatcher(RecordingBackend()),
        auto_remediate=auto_remediate,
    )


@pytest.fixture
def client():
    app = create_app(_pipeline(), settings=Settings())
    return TestClient(app)


def _create(client, description="redis cache memory leak"):
    response = client.post("/incidents", json={"description": description})
    assert response.status_code == 201
    return response.json()["data"]


def test_health_and_staff(client):
    assert client.get("/health").json() == {"status": "ok"}

    staff = client.get("/staff").json()["data"]
    assert [member["name"] for member in staff] == ["Anna", "Johan", "Lisa", "AI Assistant"]


def test_empty_store_returns_404(client):
    response = client.get("/incidents")

    assert response.status_code == 404
    assert response.json() == {"message": "no incidents"}


def test_create_and_list_incident(client):
    created = _create(client)

    assert created["id"].startswith("incident-")
    assert created["status"] == "open"
    assert created["analysis"]["action"] == "clear_cache"
    assert created["analysis"]["assignedTo"] == "Lisa"
    assert created["action"]["success"] is True
    assert created["degraded"] is True

    listed = client.get("/incidents").json()["data"]
    assert [incident["id"] for incident in listed] == [created["id"]]
    assert client.get(f"/incidents/{created['id']}").json()["data"]["title"] == created["title"]


def test_structured_payload_is_accepted(client):
    created = _create(client, {"service": "payment-api", "metric": "CPUUtilization", "value": 98.5})

    assert created["analysis"]["action"] == "scale_up"


def test_missing_description_is_rejected(client):
    assert client.post("/incidents", json={}).status_code == 422


def test_unknown_incident_returns_404(client):
    assert client.get("/incidents/incident-0-missing").status_code == 404
    response = client.patch("/incidents/incident-0-missing", json={"status": "closed"})
    assert response.status_code == 404
    assert response.json() == {"message": "Incident not found"}


def test_status_updates_follow_lifecycle(client):
    incident_id = _create(client)["id"]

    response = client.patch(f"/incidents/{incident_id}", json={"status": "investigating"})
    assert response.status_code == 200
    assert response.json()["incident"]["status"] == "investigating"

    assert client.patch(f"/incidents/{incident_id}", json={"status": "closed"}).status_code == 200
    response = client.patch(f"/incidents/{incident_id}", json={"status": "open"})
    assert response.status_code == 409
    assert "closed" in response.json()["message"]


def test_invalid_status_value_is_rejected(client):
    incident_id = _create(client)["id"]

    assert client.patch(f"/incidents/{incident_id}", json={"status": "done"}).status_code == 422


def test_manual_action_execution():
    client = TestClient(create_app(_pipeline(auto_remediate=False), settings=Settings()))
    created = _create(client)
    assert created["action"] is None

    response = client.post(f"/incidents/{created['id']}/actions")
    assert response.status_code == 200
    assert response.json()["result"]["message"] == "Cache cache cleared successfully"

    assert client.post("/incidents/incident-0-missing/actions").status_code == 404
    client.patch(f"/incidents/{created['id']}", json={"status": "resolved"})
    assert client.post(f"/incidents/{created['id']}/actions").status_code == 409


def test_schema_violation_returns_500_with_issues():
    bad = FakeCapability(
        {"type": "server_down", "priority": "urgent", "action": "restart_service", "target": "api", "recommendation": "x"}
    )
    client = TestClient(create_app(_pipeline(classifier=AIClassifier(bad)), settings=Settings()))

    response = client.post("/incidents", json={"description": "API down"})
    assert response.status_code == 500
    body = response.json()
    assert body["error"].startswith("Analysis result rejected")
    assert any("priority" in issue for issue in body["issues"])
    assert client.get("/incidents").status_code == 404


class _BrokenStore(InMemoryIncidentStore):
    def find_all(self):
        raise RuntimeError("disk gone")


def test_store_failure_returns_500():
    client = TestClient(create_app(_pipeline(store=_BrokenStore()), settings=Settings()))

    response = client.get("/incidents")
    assert response.status_code == 500
    assert response.json() == {"message": "Store error"}


def test_action_simulator_is_mounted(client, monkeypatch):
    monkeypatch.setenv("INCIDENT_EXECUTION_DELAY", "0")

    assert client.get("/action-simulator/health").json() == {"status": "ok"}
    response = client.post(
        "/action-simulator/invoke",
        json={"action": "restart_service", "target": "api", "incidentId": "incident-1", "priority": "critical"},
    )
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Service api restart initiated"
    assert body["executionId"].startswith("restart-")

    response = client.post(
        "/action-simulator/invoke",
        json={"action": "reboot", "target": "api", "incidentId": "incident-1", "priority": "low"},
    )
    assert response.json() == {
        "success": False,
        "message": "Unknown action: reboot",
        "executionId": None,
        "timestamp": response.json()["timestamp"],
    }


def test_action_simulator_rejects_bad_delay(client, monkeypatch):
    monkeypatch.setenv("INCIDENT_EXECUTION_DELAY", "soon")

    with pytest.raises(ConfigurationError):
        client.post(
            "/action-simulator/invoke",
            json={"action": "none", "target": None, "incidentId": "incident-1", "priority": "low"},
        )
