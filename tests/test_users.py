from __future__ import annotations

import pytest
from sqlmodel import select

from taskdesk.core.errors import AuthorizationError, NotFoundError, ValidationError
from taskdesk.core.security import get_password_hash
from taskdesk.models.audit import Audit, AuditAction
from taskdesk.models.user import UserRole
from taskdesk.schemas.auth import UserRegister
from taskdesk.schemas.user import UserCreate, UserUpdate
from taskdesk.services import users as user_service


def test_admin_creates_user_with_roles(session, admin):
    user = user_service.create_user(
        session, admin,
        UserCreate(username="nina", email="nina@example.com", password="s3cret", roles=[UserRole.MANAGER]),
    )
    assert user.roles == [UserRole.MANAGER]
    assert user.password != "s3cret"
    assert user.is_active


def test_non_admin_cannot_create_users(session, manager):
    with pytest.raises(AuthorizationError):
        user_service.create_user(
            session, manager, UserCreate(username="x", email="x@example.com", password="pw")
        )


@pytest.mark.parametrize(
    "username,email",
    [("mike", "fresh@example.com"), ("fresh", "mike@example.com")],
)
def test_username_and_email_are_unique(session, admin, manager, username, email):
    with pytest.raises(ValidationError, match="already exists"):
        user_service.create_user(
            session, admin, UserCreate(username=username, email=email, password="pw")
        )


def test_register_only_grants_user_role(session):
    user = user_service.register_user(
        session, UserRegister(username="newbie", email="newbie@example.com", password="pw")
    )
    assert user.roles == [UserRole.USER]
    entry = session.exec(select(Audit).where(Audit.entity_id == user.id)).one()
    assert entry.actor_user_id == user.id


def test_self_update_of_profile_fields(session, member):
    updated = user_service.update_user(session, member, member.id, UserUpdate(display_name="Ursula K."))
    assert updated.display_name == "Ursula K."


def test_self_update_cannot_touch_roles(session, member):
    with pytest.raises(AuthorizationError):
        user_service.update_user(session, member, member.id, UserUpdate(roles=[UserRole.ADMIN]))


def test_cannot_update_someone_else(session, member, manager):
    with pytest.raises(AuthorizationError):
        user_service.update_user(session, member, manager.id, UserUpdate(display_name="Hacked"))


def test_admin_changes_roles(session, admin, member):
    updated = user_service.update_user(
        session, admin, member.id, UserUpdate(roles=[UserRole.USER, UserRole.MANAGER])
    )
    assert sorted(UserRole(r).value for r in updated.roles) == ["manager", "user"]


def test_roles_cannot_be_emptied(session, admin, member):
    with pytest.raises(ValidationError):
        user_service.update_user(session, admin, member.id, UserUpdate(roles=[]))


def test_deactivate_keeps_the_row(session, admin, member):
    user_service.deactivate_user(session, admin, member.id)
    assert user_service.get_user(session, member.id).is_active is False


def test_admin_cannot_deactivate_self(session, admin):
    with pytest.raises(ValidationError):
        user_service.deactivate_user(session, admin, admin.id)


def test_get_unknown_user(session):
    with pytest.raises(NotFoundError):
        user_service.get_user(session, "missing")


def test_authenticate_by_username_or_email(session, member):
    member.password = get_password_hash("correct horse")
    session.add(member)
    session.commit()

    assert user_service.authenticate(session, "ursula", "correct horse").id == member.id
    assert user_service.authenticate(session, "ursula@example.com", "correct horse").id == member.id
    assert user_service.authenticate(session, "ursula", "wrong") is None
    assert user_service.authenticate(session, "nobody", "correct horse") is None


def test_deactivated_user_cannot_authenticate(session, admin, member):
    member.password = get_password_hash("pw")
    session.add(member)
    session.commit()
    user_service.deactivate_user(session, admin, member.id)

    assert user_service.authenticate(session, "ursula", "pw") is None


def test_admin_cannot_deactivate_self_through_update(session, admin):
    with pytest.raises(ValidationError, match="deactivate themselves"):
        user_service.update_user(session, admin, admin.id, UserUpdate(is_active=False))
    assert user_service.get_user(session, admin.id).is_active is True


def test_deactivation_through_update_is_audited_as_delete(session, admin, member):
    user_service.update_user(session, admin, member.id, UserUpdate(is_active=False))

    entry = session.exec(
        select(Audit).where(Audit.entity_type == "user", Audit.entity_id == member.id)
    ).one()
    assert entry.action == AuditAction.delete


def test_username_cannot_reuse_another_users_email(session, admin, manager):
    with pytest.raises(ValidationError, match="username already exists"):
        user_service.create_user(
            session, admin, UserCreate(username="mike@example.com", email="fresh@example.com", password="pw")
        )


def test_email_cannot_reuse_another_users_username(session, admin, make_user):
    make_user("boss@corp.example.com", UserRole.MANAGER)
    with pytest.raises(ValidationError, match="email already exists"):
        user_service.create_user(
            session, admin, UserCreate(username="fresh", email="boss@corp.example.com", password="pw")
        )
