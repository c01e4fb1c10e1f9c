from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from career_advisor.api.routes import auth as auth_routes
from career_advisor.api.routes import user as user_routes
from career_advisor.services import profiles
from career_advisor.services import ai_orchestrator
from career_advisor.services.ai import ProviderError
from career_advisor.services.identity import InvalidToken
from career_advisor.services.profiles import StoreError


def _fake_verify(token):
    if token != "good-token":
        raise InvalidToken("bad token")
    return {
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "picture": "https://example.com/ada.png",
        "locale": "",
    }


class TestLogin:
    def test_login_returns_fresh_profile(self, client, monkeypatch):
        monkeypatch.setattr(auth_routes, "verify_google_token", _fake_verify)

        response = client.post("/api/login", json={"token": "good-token"})

        assert response.status_code == 200
        assert response.json() == {
            "email": "ada@example.com",
            "name": "Ada Lovelace",
            "picture": "https://example.com/ada.png",
            "locale": "",
            "field": "",
            "points": 0,
            "badges": [],
            "skills": [],
        }

    def test_login_with_invalid_token(self, client, monkeypatch):
        monkeypatch.setattr(auth_routes, "verify_google_token", _fake_verify)

        response = client.post("/api/login", json={"token": "forged"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid Google Login"}

    def test_login_resets_progress(self, client, monkeypatch, make_profile):
        monkeypatch.setattr(auth_routes, "verify_google_token", _fake_verify)
        make_profile(email="ada@example.com", points=70, badges=["Bronze", "Silver"], skills=["Java"])

        client.post("/api/login", json={"token": "good-token"})
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()

        assert profile["points"] == 0
        assert profile["badges"] == []
        assert profile["skills"] == []

    def test_login_rejects_unknown_fields(self, client):
        response = client.post("/api/login", json={"token": "good-token", "admin": True})

        assert response.status_code == 400
        assert "error" in response.json()


class TestUser:
    def test_user_requires_email(self, client):
        response = client.get("/api/user")

        assert response.status_code == 400
        assert response.json() == {"error": "Email required"}

    def test_unknown_user(self, client):
        response = client.get("/api/user", params={"email": "nobody@example.com"})

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_existing_user(self, client, make_profile):
        make_profile(email="ada@example.com", points=55, badges=["Bronze", "Silver"], skills=["Python"])

        response = client.get("/api/user", params={"email": "ada@example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["points"] == 55
        assert data["badges"] == ["Bronze", "Silver"]
        assert data["skills"] == ["Python"]
        assert data["tier"] == "Silver"
        assert data["learningCoins"] == 0

    def test_onboarding_updates_name_and_field(self, client, make_profile):
        make_profile(email="ada@example.com", name="")

        response = client.post(
            "/api/onboarding",
            json={"email": "ada@example.com", "name": "Ada", "field": "Cloud Security"},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Profile updated"}
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()
        assert profile["name"] == "Ada"
        assert profile["field"] == "Cloud Security"

    def test_onboarding_requires_all_fields(self, client):
        response = client.post("/api/onboarding", json={"email": "ada@example.com", "name": "Ada"})

        assert response.status_code == 400
        assert response.json() == {"error": "Email, name, and field required"}


class TestCertificateUpload:
    def test_upload_awards_points_and_badge(self, client, make_profile, tmp_path):
        make_profile(email="ada@example.com")

        response = client.post(
            "/api/upload-certificate",
            data={"skill": "Python", "email": "ada@example.com"},
            files={"file": ("cert.pdf", b"%PDF-1.4 not inspected", "application/pdf")},
        )

        assert response.status_code == 200
        assert response.json() == {"message": 'Skill "Python" added. Points earned: 10'}
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()
        assert profile["points"] == 10
        assert profile["badges"] == ["Bronze"]
        assert profile["skills"] == ["Python"]
        stored = list((tmp_path / "certificates").rglob("*cert.pdf"))
        assert len(stored) == 1

    def test_upload_requires_skill_and_email(self, client):
        response = client.post("/api/upload-certificate", data={"email": "ada@example.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Email and skill required"}

    def test_upload_for_unknown_user(self, client):
        response = client.post(
            "/api/upload-certificate",
            data={"skill": "Excel", "email": "nobody@example.com"},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_duplicate_skill_still_earns_points(self, client, make_profile):
        make_profile(email="ada@example.com", points=10, badges=["Bronze"], skills=["Excel"])

        response = client.post(
            "/api/upload-certificate",
            data={"skill": "Excel", "email": "ada@example.com"},
        )

        assert response.status_code == 200
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()
        assert profile["points"] == 15
        assert profile["skills"] == ["Excel"]


class TestCareerAdvice:
    def test_empty_input_is_rejected_without_provider_call(self, client, make_profile, monkeypatch):
        make_profile(email="ada@example.com", learning_coins=20)
        calls = []
        monkeypatch.setattr(ai_orchestrator, "generate_text", lambda prompt: calls.append(prompt) or "x")

        response = client.post("/api/career-advice", json={"input": "", "email": "ada@example.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Input required"}
        assert calls == []
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()
        assert profile["learningCoins"] == 20

    def test_successful_advice_awards_coins(self, client, make_profile, monkeypatch):
        make_profile(email="ada@example.com", learning_coins=20, last_advice=1)
        prompts = []

        def fake_generate(prompt):
            prompts.append(prompt)
            return "**Personalized Career Roadmaps:**\n- Data engineer"

        monkeypatch.setattr(ai_orchestrator, "generate_text", fake_generate)

        response = client.post(
            "/api/career-advice",
            json={
                "input": "Skills: Python, Interests: data",
                "email": "ada@example.com",
                "language": "hi",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"adviceText": "**Personalized Career Roadmaps:**\n- Data engineer"}
        assert 'The student says: "Skills: Python, Interests: data".' in prompts[0]
        assert "They have earned 20 Skill Coins so far." in prompts[0]
        assert "Provide all responses in hi." in prompts[0]
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()
        assert profile["learningCoins"] == 30
        assert profile["lastAdvice"] > 1

    def test_skills_and_interests_are_joined(self, client, make_profile, monkeypatch):
        make_profile(email="ada@example.com")
        prompts = []
        monkeypatch.setattr(ai_orchestrator, "generate_text", lambda prompt: prompts.append(prompt) or "ok")

        response = client.post(
            "/api/career-advice",
            json={"skills": "SQL", "interests": "finance", "email": "ada@example.com"},
        )

        assert response.status_code == 200
        assert 'The student says: "Skills: SQL, Interests: finance".' in prompts[0]
        assert "Preferred language: en" in prompts[0]

    def test_provider_failure_leaves_coins_unchanged(self, client, make_profile, monkeypatch):
        make_profile(email="ada@example.com", learning_coins=20)

        def failing(_prompt):
            raise ProviderError("gemini API error (503): overloaded")

        monkeypatch.setattr(ai_orchestrator, "generate_text", failing)

        response = client.post(
            "/api/career-advice",
            json={"input": "Skills: Python, Interests: data", "email": "ada@example.com"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "gemini API error (503): overloaded"}
        profile = client.get("/api/user", params={"email": "ada@example.com"}).json()
        assert profile["learningCoins"] == 20
        assert profile["lastAdvice"] is None

    def test_unknown_email_is_not_found(self, client, monkeypatch):
        calls = []
        monkeypatch.setattr(ai_orchestrator, "generate_text", lambda prompt: calls.append(prompt) or "x")

        response = client.post(
            "/api/career-advice",
            json={"input": "Skills: Python, Interests: data", "email": "nobody@example.com"},
        )

        assert response.status_code == 404
        assert calls == []


class TestRoadmap:
    def test_roadmap_returns_provider_text(self, client, monkeypatch):
        prompts = []
        monkeypatch.setattr(
            ai_orchestrator,
            "generate_text",
            lambda prompt: prompts.append(prompt) or "**Milestone 1**",
        )

        response = client.post("/api/generate-roadmap", json={"field": "Cloud Security"})

        assert response.status_code == 200
        assert response.json() == {"roadmap": "**Milestone 1**"}
        assert "mastering skills in the field of Cloud Security." in prompts[0]

    def test_roadmap_requires_field(self, client):
        response = client.post("/api/generate-roadmap", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Field is required"}

    def test_roadmap_provider_failure(self, client, monkeypatch):
        def failing(_prompt):
            raise ProviderError("gemini request timed out")

        monkeypatch.setattr(ai_orchestrator, "generate_text", failing)

        response = client.post("/api/generate-roadmap", json={"field": "Data Science"})

        assert response.status_code == 500
        assert response.json() == {"error": "gemini request timed out"}


def test_career_fields(client):
    response = client.get("/api/meta/career-fields")

    assert response.status_code == 200
    assert "Software Development" in response.json()["fields"]


def test_meta_health_endpoint_shape(client):
    response = client.get("/meta/health")
    assert response.status_code == 200
    payload = response.json()
    assert "ok" in payload
    assert "database" in payload
    assert "ai" in payload
    assert "storage" in payload


def test_login_racing_a_concurrent_insert_succeeds(client, monkeypatch, make_profile):
    monkeypatch.setattr(auth_routes, "verify_google_token", _fake_verify)
    make_profile(email="ada@example.com", name="", points=25, skills=["Excel"])
    monkeypatch.setattr(profiles, "_load", lambda db, email: None)

    response = client.post("/api/login", json={"token": "good-token"})

    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"
    assert response.json()["name"] == "Ada Lovelace"


def test_failed_certificate_write_removes_stored_file(client, make_profile, monkeypatch, tmp_path):
    make_profile(email="ada@example.com")

    def failing(_db, _email, _skill):
        raise StoreError("Certificate update failed: disk I/O error")

    monkeypatch.setattr(user_routes, "record_certificate", failing)

    response = client.post(
        "/api/upload-certificate",
        data={"skill": "Python", "email": "ada@example.com"},
        files={"file": ("cert.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Upload failed"}
    assert list((tmp_path / "certificates").rglob("*cert.pdf")) == []


def test_store_failure_on_fetch_is_logged(client, monkeypatch, caplog):
    def failing(_db, _email):
        raise StoreError("Profile lookup failed: connection reset")

    monkeypatch.setattr(user_routes, "get_profile", failing)

    with caplog.at_level("ERROR", logger="career_advisor.api.routes.user"):
        response = client.get("/api/user", params={"email": "ada@example.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch user"}
    assert any("Fetching profile failed" in record.getMessage() for record in caplog.records)


def test_reward_store_failure_hides_database_details(client, make_profile, monkeypatch):
    make_profile(email="ada@example.com")
    monkeypatch.setattr(ai_orchestrator, "generate_text", lambda prompt: "advice")

    def failing(*_args, **_kwargs):
        raise StoreError("Learning coin update failed: (sqlite3.OperationalError) database is locked")

    monkeypatch.setattr(ai_orchestrator, "increment_learning_coins", failing)

    response = client.post(
        "/api/career-advice",
        json={"input": "Skills: Python, Interests: data", "email": "ada@example.com"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate advice"}


def test_blank_advice_input_is_rejected(client, make_profile, monkeypatch):
    make_profile(email="ada@example.com")
    calls = []
    monkeypatch.setattr(ai_orchestrator, "generate_text", lambda prompt: calls.append(prompt) or "x")

    response = client.post("/api/career-advice", json={"input": "   ", "email": "ada@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Input required"}
    assert calls == []
