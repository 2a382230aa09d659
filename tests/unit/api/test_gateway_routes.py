"""HTTP surface exercised through the FastAPI test client."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlmodel import Session, select

from src.authgate.api.http.app import create_app
from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.core.security import CredentialVerifier
from src.authgate.core.services import (
    AssertionGenerator,
    DbSessionService,
    ServiceTokenService,
    SessionService,
    build_provider_clients,
)
from src.authgate.core.storage import InMemorySessionStorage
from src.authgate.core.storage.service_token_cache import DatabaseServiceTokenCache
from src.authgate.entities.core.user import UserTable
from src.authgate.runtime.config.config_data import GOOGLE_TOKEN_ENDPOINT, ConfigData
from src.authgate.runtime.context import get_config
from tests.fixtures.dummies import DummyResponse

GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"


@pytest.fixture
def dependencies(engine: Engine, test_config: ConfigData) -> ApplicationDependencies:
    database_service = DbSessionService(engine=engine)
    storage = InMemorySessionStorage()
    return ApplicationDependencies(
        database_service=database_service,
        session_storage=storage,
        session_service=SessionService(storage, max_age_seconds=3600),
        credential_verifier=CredentialVerifier(rounds=4),
        provider_clients=build_provider_clients(test_config.oauth),
        service_token_service=ServiceTokenService(
            test_config.service_account,
            DatabaseServiceTokenCache(database_service.session_scope),
            generator=AssertionGenerator(test_config.service_account),
        ),
    )


@pytest.fixture
def client(dependencies) -> TestClient:
    with TestClient(create_app(dependencies)) as test_client:
        yield test_client


def _users(engine: Engine) -> list[UserTable]:
    with Session(engine) as session:
        return list(session.exec(select(UserTable)).all())


class TestLocalAccounts:
    def test_signup_creates_user_and_session(self, client, engine):
        response = client.post("/auth/signup", json={"username": "alice", "password": "p1"})

        assert response.status_code == 200
        body = response.json()
        assert body["userName"] == "alice"
        assert body["sid"]
        assert response.cookies.get("sid") == body["sid"]
        assert response.headers["X-Session-Id"] == body["sid"]

        users = _users(engine)
        assert [u.username for u in users] == ["alice"]
        assert users[0].credential != "p1"

    def test_duplicate_signup_is_a_bad_request(self, client, engine):
        client.post("/auth/signup", json={"username": "alice", "password": "p1"})

        response = client.post("/auth/signup", json={"username": "alice", "password": "p2"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Username already taken"
        assert len(_users(engine)) == 1

    def test_login_and_whoami(self, client):
        client.post("/auth/signup", json={"username": "alice", "password": "p1"})
        client.cookies.clear()

        login = client.post("/auth/login", json={"username": "alice", "password": "p1"})
        assert login.status_code == 200
        sid = login.json()["sid"]

        whoami = client.get("/auth/whoami", headers={"X-Session-Id": sid})
        assert whoami.status_code == 200
        assert whoami.json()["username"] == "alice"
        assert "credential" not in whoami.json()

    def test_login_failures_look_identical(self, client):
        client.post("/auth/signup", json={"username": "alice", "password": "p1"})

        wrong = client.post("/auth/login", json={"username": "alice", "password": "bad"})
        missing = client.post("/auth/login", json={"username": "ghost", "password": "bad"})

        assert wrong.status_code == missing.status_code == 401
        assert wrong.json()["detail"] == missing.json()["detail"]

    def test_whoami_without_sign_in(self, client):
        assert client.get("/auth/whoami").status_code == 404

    def test_logout_forgets_user(self, client):
        client.post("/auth/signup", json={"username": "alice", "password": "p1"})
        assert client.get("/auth/whoami").status_code == 200

        response = client.post("/auth/logout")

        assert response.json() == {"success": True}
        assert client.get("/auth/whoami").status_code == 404

    def test_long_password_round_trip(self, client):
        long_password = "p" * 80

        signup = client.post(
            "/auth/signup", json={"username": "alice", "password": long_password}
        )
        assert signup.status_code == 200
        client.cookies.clear()

        truncated = client.post(
            "/auth/login", json={"username": "alice", "password": "p" * 72 + "x" * 8}
        )
        login = client.post(
            "/auth/login", json={"username": "alice", "password": long_password}
        )

        assert truncated.status_code == 401
        assert login.status_code == 200

    def test_anonymous_requests_store_no_session(self, client, dependencies):
        for _ in range(5):
            assert client.get("/auth/whoami").status_code == 404

        assert dependencies.session_storage._entries == {}

    def test_empty_credentials_are_rejected(self, client):
        response = client.post("/auth/signup", json={"username": "", "password": "p1"})

        assert response.status_code == 422


class TestOAuthRoutes:
    def test_login_redirects_to_consent_page(self, client):
        response = client.get("/auth/github/login", follow_redirects=False)

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        assert location.netloc == "github.com"
        assert parse_qs(location.query)["state"][0]

    def test_unknown_provider(self, client):
        response = client.get("/auth/myspace/login", follow_redirects=False)

        assert response.status_code == 404

    def test_callback_creates_user_and_redirects(self, client, engine, fake_http):
        fake_http.routes[GITHUB_TOKEN_URL] = DummyResponse({"access_token": "gho_1"})
        fake_http.routes[GITHUB_USER_URL] = DummyResponse({"id": 42, "login": "bob"})

        response = client.get(
            "/auth/github/callback", params={"code": "abc"}, follow_redirects=False
        )

        assert response.status_code == 303
        sid = response.headers["X-Session-Id"]
        base = get_config().app.redirect_base_url.rstrip("/")
        assert response.headers["location"] == f"{base}/{sid}/bob"

        users = _users(engine)
        assert len(users) == 1
        assert users[0].github_id == "42"
        assert users[0].github_token == "gho_1"

        whoami = client.get("/auth/whoami", headers={"X-Session-Id": sid})
        assert whoami.json()["username"] == "bob"

    def test_callback_without_code(self, client, fake_http):
        response = client.get("/auth/github/callback", follow_redirects=False)

        assert response.status_code == 400
        assert fake_http.calls == []

    def test_linkedin_callback_requires_state(self, client, fake_http):
        response = client.get(
            "/auth/linkedin/callback", params={"code": "abc"}, follow_redirects=False
        )

        assert response.status_code == 400

    def test_provider_failure_is_bad_gateway(self, client, engine, fake_http):
        fake_http.routes[GITHUB_TOKEN_URL] = DummyResponse({}, status_code=500)

        response = client.get(
            "/auth/github/callback", params={"code": "abc"}, follow_redirects=False
        )

        assert response.status_code == 502
        assert _users(engine) == []


class TestAccessToken:
    def test_access_returns_minted_token(self, client, fake_http):
        fake_http.routes[GOOGLE_TOKEN_ENDPOINT] = DummyResponse(
            {"token_type": "Bearer", "access_token": "ya29.abc"}
        )

        first = client.get("/auth/access")
        second = client.get("/auth/access")

        assert first.status_code == 200
        assert first.text == "Bearer ya29.abc"
        assert second.text == "Bearer ya29.abc"
        assert len(fake_http.calls) == 1

    def test_mint_failure(self, client, fake_http):
        fake_http.routes[GOOGLE_TOKEN_ENDPOINT] = DummyResponse(
            {"error": "invalid_grant"}, status_code=400
        )

        response = client.get("/auth/access")

        assert response.status_code == 502
        assert response.json()["response"] == {"error": "invalid_grant"}


class TestHealth:
    def test_liveness(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_readiness(self, client):
        body = client.get("/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"]["oauth_providers"]["configured"] == [
            "facebook",
            "github",
            "google",
            "linkedin",
        ]
