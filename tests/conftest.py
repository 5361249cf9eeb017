"""Shared fixtures: SQLite-backed services, a capturing mailer and an API client."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import pytest
from fastapi.testclient import TestClient

from octonius import schemas
from octonius.api import create_app
from octonius.config import Settings
from octonius.db import Database, init_engine
from octonius.services import Mailer, RoleService, UserService, WorkplaceService


class CapturingMailer(Mailer):
    """Mailer that records every templated send instead of calling Resend."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent: list[dict[str, Any]] = []

    def send(self, template: str, to: str, data: Mapping[str, Any]) -> dict:
        self.sent.append({"template": template, "to": to, "data": dict(data)})
        return super().send(template, to, data)

    def last(self, template: str) -> dict[str, Any]:
        for message in reversed(self.sent):
            if message["template"] == template:
                return message
        raise AssertionError(f"no {template} email was sent")


# ========================================================================
# 서비스 테스트용 DB
# ========================================================================


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'octonius.db'}")


@pytest.fixture()
def session(settings: Settings):
    engine = init_engine(settings)
    database = Database(engine)
    database.create_all()
    session = database.session()
    RoleService(session, settings).initialize_system_permissions()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def mailer(settings: Settings) -> CapturingMailer:
    return CapturingMailer(settings)


def make_user(session, settings, email: str, first_name: str | None = None):
    return UserService(session, settings).create_user(
        schemas.UserCreateRequest(email=email, first_name=first_name)
    )


def make_workplace(session, settings, owner, name: str = "Acme", mailer=None):
    service = WorkplaceService(session, settings, mailer)
    return service.create_workplace(schemas.WorkplaceCreateRequest(name=name), owner)


@pytest.fixture()
def owner(session, settings):
    return make_user(session, settings, "owner@example.com", "Olive")


@pytest.fixture()
def workplace(session, settings, owner, mailer):
    return make_workplace(session, settings, owner, mailer=mailer)


# ========================================================================
# API 테스트
# ========================================================================


@pytest.fixture()
def api_settings() -> Settings:
    return Settings(database_url="sqlite+pysqlite:///:memory:", domain="app.test")


@pytest.fixture()
def api_mailer(api_settings: Settings) -> CapturingMailer:
    return CapturingMailer(api_settings)


@pytest.fixture()
def client(api_settings: Settings, api_mailer: CapturingMailer) -> TestClient:
    app = create_app(api_settings, mailer=api_mailer)
    with TestClient(app) as test_client:
        yield test_client


def login_otp(client: TestClient, mailer: CapturingMailer, email: str) -> dict:
    """Run login → verify_otp and return the verify payload's ``data``."""
    response = client.post("/v1/auths/login", json={"email": email})
    assert response.status_code == 200, response.text
    otp = mailer.last("send_otp_details")["data"]["otp"]
    verified = client.post("/v1/auths/verify_otp", json={"email": email, "otp": otp})
    assert verified.status_code == 200, verified.text
    return verified.json()["data"]


def onboard(
    client: TestClient,
    mailer: CapturingMailer,
    email: str = "owner@example.com",
    workplace_name: str = "Acme",
    first_name: str = "Olive",
) -> dict:
    """Create a user and workplace through the OTP flow; returns tokens and ids."""
    login_otp(client, mailer, email)
    response = client.post(
        "/v1/auths/setup-workplace",
        json={"email": email, "workplace_name": workplace_name, "first_name": first_name},
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
        "access_token": data["access_token"],
        "refresh_token": data["refresh_token"],
        "user_id": data["user"]["id"],
        "workplace_id": data["workplace_id"],
    }


@pytest.fixture()
def owner_auth(client, api_mailer) -> dict:
    return onboard(client, api_mailer)
