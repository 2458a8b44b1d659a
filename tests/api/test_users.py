import asyncio

import pytest

from application.services.user_service import UserApplicationService
from domain.common.exceptions import DomainValidationException
from domain.user.entity import UserRole
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


def test_upsert_updates_profile_and_role(client):
    service = UserApplicationService(uow_factory=SQLAlchemyUnitOfWork)
    asyncio.run(service.upsert_user("caster", email="caster@example.com"))
    user = asyncio.run(service.upsert_user("caster", first_name="Anders", role=UserRole.MODERATOR))

    assert user.email == "caster@example.com"
    assert user.first_name == "Anders"
    assert user.role is UserRole.MODERATOR


def test_email_belongs_to_one_user(client):
    service = UserApplicationService(uow_factory=SQLAlchemyUnitOfWork)
    asyncio.run(service.upsert_user("first", email="shared@example.com"))

    with pytest.raises(DomainValidationException):
        asyncio.run(service.upsert_user("second", email="shared@example.com"))
    # re-sending your own email is fine
    asyncio.run(service.upsert_user("first", email="shared@example.com"))


def test_invalid_or_missing_token_is_rejected(client):
    assert client.get("/api/auth/user").status_code == 401
    resp = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
