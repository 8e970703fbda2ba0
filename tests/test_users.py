import pytest

from app.core.config import get_settings
from app.core.exceptions import NotFoundError, TrainingError
from app.core.security import verify_password
from app.models.user import ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER, ROLE_LEARNER
from app.services.users import ensure_bootstrap_admin, get_user_by_email, list_users, role_for_new_user, set_role
from tests.utils import create_user


@pytest.fixture()
def admin_settings(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "admin_email", " Boss@Example.com ")
    monkeypatch.setattr(settings, "admin_password", None)
    return settings


def test_role_for_new_user(admin_settings):
    assert role_for_new_user("boss@example.com") == ROLE_ADMIN
    assert role_for_new_user("BOSS@example.com") == ROLE_ADMIN
    assert role_for_new_user("someone@example.com") == ROLE_LEARNER


def test_role_for_new_user_without_admin_email(monkeypatch):
    monkeypatch.setattr(get_settings(), "admin_email", None)
    assert role_for_new_user("boss@example.com") == ROLE_LEARNER


async def test_bootstrap_admin_not_configured(db_session, monkeypatch):
    monkeypatch.setattr(get_settings(), "admin_email", None)
    assert await ensure_bootstrap_admin(db_session) is None
    assert await list_users(db_session) == []


async def test_bootstrap_admin_waits_for_registration(db_session, admin_settings):
    assert await ensure_bootstrap_admin(db_session) is None
    assert await get_user_by_email(db_session, "boss@example.com") is None


async def test_bootstrap_admin_created_with_password(db_session, admin_settings, monkeypatch):
    monkeypatch.setattr(admin_settings, "admin_password", "bootstrap-secret")

    user = await ensure_bootstrap_admin(db_session)
    assert user.email == "boss@example.com"
    assert user.role == ROLE_ADMIN
    assert verify_password("bootstrap-secret", user.hashed_password)

    again = await ensure_bootstrap_admin(db_session)
    assert again.id == user.id
    assert len(await list_users(db_session)) == 1


async def test_bootstrap_admin_promotes_existing_user(db_session, admin_settings):
    user = await create_user(db_session, email="boss@example.com")
    assert user.role == ROLE_LEARNER

    promoted = await ensure_bootstrap_admin(db_session)
    assert promoted.id == user.id
    assert promoted.role == ROLE_ADMIN


async def test_set_role(db_session):
    admin = await create_user(db_session, email="admin@example.com", role=ROLE_ADMIN)
    learner = await create_user(db_session)

    updated = await set_role(db_session, learner.id, ROLE_COMPLIANCE_OFFICER, acting_user_id=admin.id)
    assert updated.role == ROLE_COMPLIANCE_OFFICER

    with pytest.raises(NotFoundError):
        await set_role(db_session, 999, ROLE_ADMIN, acting_user_id=admin.id)


async def test_admin_cannot_demote_self(db_session):
    admin = await create_user(db_session, email="admin@example.com", role=ROLE_ADMIN)
    admin_id = admin.id

    with pytest.raises(TrainingError) as exc:
        await set_role(db_session, admin_id, ROLE_LEARNER, acting_user_id=admin_id)
    assert exc.value.status_code == 400

    assert (await set_role(db_session, admin_id, ROLE_ADMIN, acting_user_id=admin_id)).role == ROLE_ADMIN
