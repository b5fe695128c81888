"""Request handler tests against an in-memory store and a stub AI service."""
import json

from carelens.database import MemoryStorage, get_storage
from carelens.main import app

from conftest import FLU_ANALYSIS, RISK_REPLY, register_and_login, valid_profile


class SpyStorage(MemoryStorage):
    """Counts profile writes."""

    def __init__(self):
        super().__init__()
        self.update_calls = 0

    async def update_user(self, user_id, profile):
        self.update_calls += 1
        return await super().update_user(user_id, profile)


class TestAuth:

    def test_register_hides_password(self, client):
        resp = client.post("/api/register", json={"username": "alice", "password": "secret1"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["username"] == "alice"
        assert body["fullName"] == ""
        assert body["medicalHistory"] == []
        assert "password" not in body
        assert "hashedPassword" not in body

    def test_register_validation_error(self, client):
        resp = client.post("/api/register", json={"username": "alice"})
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Validation failed",
            "fields": [{"field": "password", "reason": "required", "message": "Field required"}],
        }

    def test_duplicate_username(self, client):
        register_and_login(client)
        resp = client.post("/api/register", json={"username": "alice", "password": "other12"})
        assert resp.status_code == 409
        assert "error" in resp.json()

        # the first account still logs in with its own password
        resp = client.post("/api/login", json={"username": "alice", "password": "secret1"})
        assert resp.status_code == 200

    def test_login_bad_password(self, client):
        register_and_login(client)
        resp = client.post("/api/login", json={"username": "alice", "password": "wrong-pw"})
        assert resp.status_code == 401
        assert resp.content == b""

    def test_login_unknown_user(self, client):
        resp = client.post("/api/login", json={"username": "nobody", "password": "secret1"})
        assert resp.status_code == 401
        assert resp.content == b""

    def test_current_user(self, client, auth_headers):
        resp = client.get("/api/user", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"


class TestAuthRequired:
    """Protected routes answer 401 with an empty body."""

    def test_missing_token(self, client):
        for method, path in [
            ("GET", "/api/profile"),
            ("POST", "/api/symptoms/analyze"),
            ("GET", "/api/symptoms"),
            ("DELETE", "/api/symptoms"),
            ("POST", "/api/risks/assess"),
            ("GET", "/api/health-logs"),
        ]:
            resp = client.request(method, path)
            assert resp.status_code == 401, path
            assert resp.content == b"", path

    def test_invalid_token(self, client):
        resp = client.get("/api/profile", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.content == b""


class TestProfile:

    def test_get_own_profile(self, client, auth_headers):
        resp = client.get("/api/profile", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"
        assert resp.json()["dateOfBirth"] is None

    def test_update_round_trip(self, client, auth_headers):
        payload = valid_profile()
        resp = client.post("/api/profile", json=payload, headers=auth_headers)
        assert resp.status_code == 200

        body = client.get("/api/profile", headers=auth_headers).json()
        for key, value in payload.items():
            assert body[key] == value, key

    def test_identity_fields_ignored(self, client, auth_headers):
        payload = valid_profile(username="mallory", password="hijack1")
        resp = client.post("/api/profile", json=payload, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"

    def test_invalid_profile_never_reaches_storage(self, client):
        spy = SpyStorage()
        app.dependency_overrides[get_storage] = lambda: spy
        headers = register_and_login(client)

        payload = valid_profile()
        del payload["fullName"]
        resp = client.post("/api/profile", json=payload, headers=headers)

        assert resp.status_code == 400
        assert resp.json()["fields"] == [
            {"field": "fullName", "reason": "required", "message": "Field required"}
        ]
        assert spy.update_calls == 0

    def test_valid_profile_reaches_storage_once(self, client):
        spy = SpyStorage()
        app.dependency_overrides[get_storage] = lambda: spy
        headers = register_and_login(client)

        resp = client.post("/api/profile", json=valid_profile(), headers=headers)

        assert resp.status_code == 200
        assert spy.update_calls == 1


class TestSymptoms:

    def test_analyze_records_symptom_log(self, client, auth_headers, storage, llm):
        resp = client.post("/api/symptoms/analyze", json={"symptoms": ["headache", "fever"]}, headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert [c["name"] for c in body["conditions"]] == ["flu"]
        assert body["conditions"][0]["confidence"] == 0.8
        assert body["recommendations"] == ["rest"]

        history = client.get("/api/symptoms", headers=auth_headers).json()
        assert len(history) == 1
        assert history[0]["type"] == "symptom"
        assert history[0]["data"]["version"] == 1
        assert history[0]["data"]["symptoms"] == ["headache", "fever"]
        assert history[0]["data"]["analysis"]["conditions"][0]["name"] == "flu"

    def test_analyze_uses_profile_context(self, client, auth_headers, llm):
        client.post("/api/profile", json=valid_profile(), headers=auth_headers)
        client.post("/api/symptoms/analyze", json={"symptoms": ["headache"]}, headers=auth_headers)

        prompt = llm.calls[-1]["messages"][-1]["content"]
        assert "- Gender: female" in prompt
        assert "- Medical history: asthma, migraine" in prompt

    def test_analyze_without_profile_context(self, client, auth_headers, llm):
        client.post("/api/profile", json=valid_profile(), headers=auth_headers)
        client.post(
            "/api/symptoms/analyze",
            json={"symptoms": ["headache"], "includeProfile": False},
            headers=auth_headers,
        )
        assert llm.calls[-1]["messages"][-1]["content"] == "Analyze these symptoms: headache"

    def test_empty_ai_reply_records_nothing(self, client, auth_headers, llm):
        llm.reply = ""
        resp = client.post("/api/symptoms/analyze", json={"symptoms": ["headache"]}, headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to analyze symptoms"}
        assert client.get("/api/symptoms", headers=auth_headers).json() == []

    def test_ai_error_cause_not_exposed(self, client, auth_headers, llm):
        llm.error = RuntimeError("upstream key sk-123 rejected")
        resp = client.post("/api/symptoms/analyze", json={"symptoms": ["headache"]}, headers=auth_headers)

        assert resp.status_code == 500
        assert "sk-123" not in resp.text
        assert client.get("/api/symptoms", headers=auth_headers).json() == []

    def test_symptom_labels_kept_verbatim(self, client, auth_headers, llm):
        client.post(
            "/api/symptoms/analyze",
            json={"symptoms": [" headache ", "fever"], "includeProfile": False},
            headers=auth_headers,
        )
        assert llm.calls[-1]["messages"][-1]["content"] == "Analyze these symptoms:  headache , fever"

        history = client.get("/api/symptoms", headers=auth_headers).json()
        assert history[0]["data"]["symptoms"] == [" headache ", "fever"]

    def test_blank_symptom_rejected(self, client, auth_headers, llm):
        resp = client.post("/api/symptoms/analyze", json={"symptoms": ["cough", "  "]}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["fields"][0]["field"] == "symptoms"
        assert llm.calls == []

    def test_empty_symptom_list_rejected(self, client, auth_headers, llm):
        resp = client.post("/api/symptoms/analyze", json={"symptoms": []}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["fields"][0]["field"] == "symptoms"
        assert llm.calls == []

    def test_history_is_per_user(self, client, auth_headers):
        client.post("/api/symptoms/analyze", json={"symptoms": ["headache"]}, headers=auth_headers)
        bob = register_and_login(client, username="bob")
        client.post("/api/symptoms/analyze", json={"symptoms": ["cough"]}, headers=bob)

        alice_history = client.get("/api/symptoms", headers=auth_headers).json()
        assert [log["data"]["symptoms"] for log in alice_history] == [["headache"]]

    def test_clear_history(self, client, auth_headers):
        client.post("/api/symptoms/analyze", json={"symptoms": ["headache"]}, headers=auth_headers)
        client.post("/api/lifestyle", json={"date": "2026-10-01", "stress": 3}, headers=auth_headers)

        resp = client.delete("/api/symptoms", headers=auth_headers)

        assert resp.status_code == 204
        assert client.get("/api/symptoms", headers=auth_headers).json() == []
        remaining = client.get("/api/health-logs", headers=auth_headers).json()
        assert [log["type"] for log in remaining] == ["lifestyle"]


class TestRisks:

    def test_assess_records_assessment(self, client, auth_headers, llm):
        client.post("/api/profile", json=valid_profile(), headers=auth_headers)
        llm.reply = json.dumps(RISK_REPLY)

        resp = client.post("/api/risks/assess", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json() == RISK_REPLY
        prompt = llm.calls[-1]["messages"][-1]["content"]
        assert '"fullName":"Alice Smith"' in prompt

        logs = client.get("/api/health-logs", params={"type": "assessment"}, headers=auth_headers).json()
        assert len(logs) == 1
        assert logs[0]["data"]["assessment"]["overallHealth"]["score"] == 78

    def test_assess_failure(self, client, auth_headers, llm):
        llm.reply = "not json"
        resp = client.post("/api/risks/assess", headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to assess health risks"}
        assert client.get("/api/health-logs", headers=auth_headers).json() == []


class TestHealthLogs:

    def test_create_and_filter(self, client, auth_headers):
        resp = client.post(
            "/api/health-logs",
            json={"type": "symptom", "data": {"symptoms": ["headache"], "analysis": FLU_ANALYSIS}},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        created = resp.json()
        assert created["id"]
        assert created["createdAt"]
        assert created["data"]["version"] == 1

        client.post(
            "/api/health-logs",
            json={"type": "lifestyle", "data": {"date": "2026-10-01"}},
            headers=auth_headers,
        )

        symptom_logs = client.get("/api/health-logs", params={"type": "symptom"}, headers=auth_headers).json()
        assert [log["id"] for log in symptom_logs] == [created["id"]]
        assert len(client.get("/api/health-logs", headers=auth_headers).json()) == 2

    def test_owner_is_always_caller(self, client, auth_headers):
        resp = client.post(
            "/api/health-logs",
            json={"type": "lifestyle", "userId": "999", "data": {"date": "2026-10-01"}},
            headers=auth_headers,
        )
        me = client.get("/api/user", headers=auth_headers).json()
        assert resp.json()["userId"] == me["id"]

    def test_invalid_payload(self, client, auth_headers):
        resp = client.post(
            "/api/health-logs",
            json={"type": "symptom", "data": {"symptoms": ["cough"]}},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["fields"][0] == {
            "field": "data.analysis",
            "reason": "required",
            "message": "Field required",
        }

    def test_unknown_filter(self, client, auth_headers):
        resp = client.get("/api/health-logs", params={"type": "mood"}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["fields"][0]["reason"] == "enum_mismatch"


class TestLifestyle:

    def test_default_entry_for_empty_day(self, client, auth_headers):
        resp = client.get("/api/lifestyle", params={"date": "2026-10-01"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "version": 1,
            "date": "2026-10-01",
            "diet": {"meals": [], "calories": 0, "water": 0},
            "activity": {"steps": 0, "exercise": []},
            "sleep": {"hours": 0, "quality": 0},
            "stress": 0,
        }

    def test_latest_entry_for_day(self, client, auth_headers):
        client.post("/api/lifestyle", json={"date": "2026-10-01", "stress": 3}, headers=auth_headers)
        client.post("/api/lifestyle", json={"date": "2026-10-02", "stress": 5}, headers=auth_headers)
        resp = client.post(
            "/api/lifestyle",
            json={"date": "2026-10-01", "stress": 7, "diet": {"meals": ["oatmeal"]}},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["type"] == "lifestyle"

        entry = client.get("/api/lifestyle", params={"date": "2026-10-01"}, headers=auth_headers).json()
        assert entry["stress"] == 7
        assert entry["diet"]["meals"] == ["oatmeal"]

    def test_sections_posted_separately_are_merged(self, client, auth_headers):
        client.post(
            "/api/lifestyle",
            json={"date": "2026-10-01", "diet": {"meals": ["oatmeal"], "calories": 350, "water": 0.5}},
            headers=auth_headers,
        )
        client.post(
            "/api/lifestyle",
            json={"date": "2026-10-01", "sleep": {"hours": 7, "quality": 8}},
            headers=auth_headers,
        )

        entry = client.get("/api/lifestyle", params={"date": "2026-10-01"}, headers=auth_headers).json()
        assert entry["diet"]["meals"] == ["oatmeal"]
        assert entry["diet"]["calories"] == 350
        assert entry["sleep"] == {"hours": 7, "quality": 8}

        # each post is kept as its own log
        logs = client.get("/api/health-logs", params={"type": "lifestyle"}, headers=auth_headers).json()
        assert len(logs) == 2

    def test_other_days_not_merged(self, client, auth_headers):
        client.post("/api/lifestyle", json={"date": "2026-10-01", "stress": 4}, headers=auth_headers)
        resp = client.post(
            "/api/lifestyle",
            json={"date": "2026-10-02", "sleep": {"hours": 6, "quality": 5}},
            headers=auth_headers,
        )
        assert resp.json()["data"]["stress"] == 0

    def test_out_of_range_rejected(self, client, auth_headers):
        resp = client.post("/api/lifestyle", json={"date": "2026-10-01", "stress": 11}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["fields"][0]["field"] == "stress"


def test_health_endpoints(client):
    assert client.get("/").json()["status"] == "healthy"
    assert client.get("/health").json()["status"] == "healthy"
