"""Shared fixtures for the CareLens test suite."""
import json

import pytest
from fastapi.testclient import TestClient

from carelens.database import MemoryStorage, get_storage
from carelens.main import app
from carelens.services.analysis_service import AnalysisService, get_analysis_service


FLU_ANALYSIS = {
    "conditions": [{"name": "flu", "confidence": 0.8, "severity": "medium"}],
    "recommendations": ["rest"],
}

RISK_REPLY = {
    "riskFactors": [
        {
            "condition": "Type 2 diabetes",
            "risk": 35,
            "factors": ["family history"],
            "recommendations": ["annual HbA1c test"],
        }
    ],
    "overallHealth": {"score": 78, "summary": "Generally healthy."},
}


def valid_profile(**overrides):
    """A complete profile payload in wire (camelCase) form."""
    profile = {
        "fullName": "Alice Smith",
        "dateOfBirth": "1990-04-12",
        "gender": "female",
        "email": "alice@example.com",
        "phone": "555-0100",
        "address": "1 Main St",
        "bloodType": "O+",
        "medicalHistory": ["asthma", "migraine"],
        "familyHistory": ["diabetes"],
        "lifestyle": {
            "smoking": False,
            "alcohol": True,
            "diet": ["vegetarian"],
            "exercise": {"type": "running", "frequency": "3x/week", "duration": "30 min"},
        },
        "emergencyContacts": [
            {"name": "Bob Smith", "email": "bob@example.com", "phone": "555-0101"}
        ],
        "organDonor": True,
        "dataSharing": False,
    }
    profile.update(overrides)
    return profile


class StubLLM:
    """Records every request and replies with a canned string or error."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete_json(self, model, messages):
        self.calls.append({"model": model, "messages": messages})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def llm():
    return StubLLM(reply=json.dumps(FLU_ANALYSIS))


@pytest.fixture
def client(storage, llm):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(llm, "test-model")
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, username="alice", password="secret1"):
    resp = client.post("/api/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    token = client.post("/api/login", json={"username": username, "password": password}).json()["accessToken"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)
