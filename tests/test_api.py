import pytest
from fastapi.testclient import TestClient

from main import app
from telecare.agents.prompts import (
    ADVICE_FAILURE_MESSAGE,
    CHAT_FAILURE_MESSAGE,
    PRESCRIPTION_FAILURE_MESSAGE,
)
from telecare.api.dependencies import get_consultations
from telecare.config.settings import settings

from conftest import FakeConsultationService


@pytest.fixture
def consultations():
    return FakeConsultationService()


@pytest.fixture
def client(pipeline, consultations, monkeypatch):
    monkeypatch.setattr(settings, "auth_enabled", False)
    app.state.pipeline = pipeline
    app.dependency_overrides[get_consultations] = lambda: consultations
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.pipeline = None


class TestChat:
    def test_basic_chat(self, client, consultations):
        resp = client.post(
            "/api/v1/chat", json={"message": "I have a fever and headache", "userId": "u1"}
        )

        assert resp.status_code == 200
        payload = resp.json()
        assert list(payload) == [
            "success",
            "message",
            "complexity",
            "shouldSeeDoctor",
            "doctors",
            "specialization",
            "timestamp",
            "medicines",
        ]
        assert payload["complexity"] == "basic"
        assert payload["shouldSeeDoctor"] is False
        assert payload["medicines"][0]["condition"] == "Fever"
        assert [c.user_id for c in consultations.records] == ["u1"]

    def test_complex_chat(self, client):
        resp = client.post(
            "/api/v1/chat", json={"message": "severe chest pain and shortness of breath"}
        )
        payload = resp.json()

        assert payload["complexity"] == "complex"
        assert payload["shouldSeeDoctor"] is True
        assert payload["specialization"] == "Cardiologist"
        assert payload["doctors"][0]["email"] == "asha.menon@example.com"

    def test_empty_message(self, client):
        resp = client.post("/api/v1/chat", json={"message": "   "})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Message is required"}

    def test_storage_failure_does_not_fail_chat(self, client, consultations):
        consultations.fail = True
        resp = client.post("/api/v1/chat", json={"message": "mild cough", "userId": "u1"})
        assert resp.status_code == 200

    def test_pipeline_failure(self, client, pipeline, monkeypatch):
        async def broken(query):
            raise RuntimeError("graph failure")

        monkeypatch.setattr(pipeline, "run_chat", broken)
        resp = client.post("/api/v1/chat", json={"message": "mild cough"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": CHAT_FAILURE_MESSAGE}

    def test_history(self, client):
        client.post("/api/v1/chat", json={"message": "mild cough", "userId": "u1"})
        client.post("/api/v1/chat", json={"message": "I have a fever", "userId": "u1"})
        client.post("/api/v1/chat", json={"message": "sore throat", "userId": "u2"})

        resp = client.get("/api/v1/chat/history/u1", params={"limit": 1})
        payload = resp.json()

        assert resp.status_code == 200
        assert payload["total"] == 2
        assert payload["limit"] == 1
        assert [c["query"] for c in payload["consultations"]] == ["I have a fever"]


class TestSymptoms:
    def test_advice_offline_with_dataset(self, client, dataset):
        resp = client.post("/api/v1/symptoms/advice", json={"symptomQuery": "I have a fever"})
        payload = resp.json()

        assert resp.status_code == 200
        assert payload["success"] is True
        assert payload["message"] == dataset.symptoms.find("Fever").advice
        assert payload["complexity"] == "basic"
        assert payload["specialization"] == "General Physician"

    def test_advice_unavailable(self, client):
        resp = client.post("/api/v1/symptoms/advice", json={"symptomQuery": "xyzzy"})
        assert resp.status_code == 502
        assert resp.json()["success"] is False

    def test_advice_requires_query(self, client):
        resp = client.post("/api/v1/symptoms/advice", json={})
        assert resp.status_code == 400
        assert resp.json()["message"] == "symptomQuery is required"

    def test_advice_failure(self, client, pipeline, monkeypatch):
        async def broken(query):
            raise RuntimeError("advice service crashed")

        monkeypatch.setattr(pipeline.advice_generator, "generate_advice", broken)
        resp = client.post("/api/v1/symptoms/advice", json={"symptomQuery": "I have a fever"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": ADVICE_FAILURE_MESSAGE}

    def test_catalog(self, client, dataset):
        payload = client.get("/api/v1/symptoms").json()
        assert payload["total"] == len(dataset.symptoms)
        assert payload["conditions"][0]["condition"] == "Fever"

    def test_search_with_suggestions(self, client):
        payload = client.get("/api/v1/symptoms/search", params={"query": "hedache"}).json()

        assert payload["matches"] == []
        assert payload["hasSpellingSuggestions"] is True
        assert "headache" in payload["spellSuggestions"]
        assert payload["originalQuery"] == "hedache"

    def test_search_requires_query(self, client):
        assert client.get("/api/v1/symptoms/search").status_code == 400

    def test_suggestions(self, client):
        payload = client.get("/api/v1/symptoms/suggestions", params={"query": "feverr"}).json()
        assert "fever" in payload["suggestions"]

    def test_advice_for_symptom(self, client):
        resp = client.get("/api/v1/symptoms/advice/sneez")
        assert resp.status_code == 200
        assert resp.json()["condition"] == "Common Cold"

    def test_advice_for_multi_word_symptom(self, client):
        resp = client.get("/api/v1/symptoms/advice/throbbing%20head")
        assert resp.status_code == 200
        assert resp.json()["condition"] == "Headache/Migraine"

    def test_advice_for_unknown_symptom(self, client):
        resp = client.get("/api/v1/symptoms/advice/xyzzy")
        assert resp.status_code == 404
        assert resp.json()["success"] is False


class TestPrescriptions:
    def test_prescription(self, client):
        resp = client.post(
            "/api/v1/prescriptions", json={"symptoms": "itchy rash", "age": 30, "weight": 72.5}
        )
        payload = resp.json()

        assert resp.status_code == 200
        assert "DISCLAIMER:" in payload["prescription"]
        assert payload["doctor"]["specialization"] == "Dermatologist"
        assert payload["complexity"] == "basic"

    def test_requires_symptoms(self, client):
        resp = client.post("/api/v1/prescriptions", json={"age": 30})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Symptoms are required"

    def test_pipeline_failure(self, client, pipeline, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("graph failure")

        monkeypatch.setattr(pipeline, "run_prescription", broken)
        resp = client.post("/api/v1/prescriptions", json={"symptoms": "cough"})

        assert resp.status_code == 500
        assert resp.json()["message"] == PRESCRIPTION_FAILURE_MESSAGE


class TestMedicines:
    def test_catalog(self, client, dataset):
        payload = client.get("/api/v1/medicines").json()
        assert len(payload["conditions"]) == len(dataset.medicines)

    def test_condition_lookup(self, client):
        payload = client.get("/api/v1/medicines/fever").json()
        assert payload["condition"] == "Fever"
        assert payload["medicines"][0]["name"] == "Paracetamol"

    def test_condition_name_with_slash(self, client):
        resp = client.get("/api/v1/medicines/Headache%2FMigraine")
        payload = resp.json()

        assert resp.status_code == 200
        assert payload["condition"] == "Headache/Migraine"
        assert payload["medicines"][0]["name"] == "Paracetamol"

    def test_unknown_condition(self, client):
        assert client.get("/api/v1/medicines/unknown").status_code == 404


def test_health_reports_dependencies(client):
    payload = client.get("/health").json()
    assert payload["status"] == "ok"
    assert payload["dependencies"]["mongodb"].startswith("error")
    assert "gemini" in payload["dependencies"]


def test_missing_pipeline(client):
    app.state.pipeline = None
    assert client.get("/api/v1/symptoms").status_code == 503
