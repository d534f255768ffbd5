"""
User Service Module

Account management: creation with unique username and email, profile updates,
deactivation (accounts are never removed) and credential checks.
"""
import logging
from typing import List, Optional

from sqlmodel import Session, or_, select

from taskdesk.core.errors import NotFoundError, ValidationError
from taskdesk.core.security import get_password_hash, verify_password
from taskdesk.core.timeutil import utcnow
from taskdesk.models.audit import AuditAction
from taskdesk.models.user import User, UserRole
from taskdesk.schemas.auth import UserRegister
from taskdesk.schemas.user import UserCreate, UserUpdate
from taskdesk.services import audit
from taskdesk.services.policy import Operation, authorize

logger = logging.getLogger(__name__)

# Fields a user may change on their own profile
SELF_SERVICE_FIELDS = {"display_name", "email", "password"}


def _check_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None) -> None:
    # Logins match either column, so a value may appear in only one of them
    for label, value in (("username", username), ("email", email)):
        if value is None:
            continue
        statement = select(User).where(or_(User.username == value, User.email == value))
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        if db.exec(statement).first():
            raise ValidationError(f"The user with this {label} already exists in the system.")


def _snapshot(user: User) -> dict:
    return {
        "username": user.username,
        "email": user.email,
        "display_name": user.display_name,
        "roles": [UserRole(r).value for r in user.roles or []],
        "is_active": user.is_active,
    }


def register_user(db: Session, user_in: UserRegister) -> User:
    """
    Self-registration. New accounts only ever get the USER role and are
    recorded as their own actor in the audit trail.
    """
    if not user_in.username.strip():
        raise ValidationError("username required")
    _check_unique(db, user_in.username, user_in.email)

    db_user = User(
        username=user_in.username.strip(),
        email=user_in.email,
        password=get_password_hash(user_in.password),
        display_name=user_in.display_name,
        roles=[UserRole.USER],
    )
    db.add(db_user)
    db.flush()
    audit.record(db, db_user, "user", db_user.id, AuditAction.create, {"registered": True, **_snapshot(db_user)})
    db.commit()
    db.refresh(db_user)
    logger.info("Registered user %s (%s)", db_user.username, db_user.id)
    return db_user


def create_user(db: Session, actor: User, user_in: UserCreate) -> User:
    authorize(actor, Operation.USER_MANAGE)
    if not user_in.username.strip():
        raise ValidationError("username required")
    _check_unique(db, user_in.username, user_in.email)

    db_user = User(
        username=user_in.username.strip(),
        email=user_in.email,
        password=get_password_hash(user_in.password),  # Hash password using bcrypt
        display_name=user_in.display_name,
        roles=user_in.roles or [UserRole.USER],  # Default to USER role if not specified
    )
    db.add(db_user)
    db.flush()
    audit.record(db, actor, "user", db_user.id, AuditAction.create, _snapshot(db_user))
    db.commit()
    db.refresh(db_user)
    logger.info("User %s created user %s", actor.id, db_user.id)
    return db_user


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session, actor: User, skip: int = 0, limit: int = 100) -> List[User]:
    authorize(actor, Operation.USER_MANAGE)
    return list(db.exec(select(User).order_by(User.created_at).offset(skip).limit(limit)).all())


def update_user(db: Session, actor: User, user_id: str, user_in: UserUpdate) -> User:
    """
    Partial update. Admins may change any field, including roles; everybody
    else may only change their own display name, email and password.
    """
    db_user = get_user(db, user_id)
    update_data = user_in.model_dump(exclude_unset=True)

    if actor.id != db_user.id or not SELF_SERVICE_FIELDS.issuperset(update_data):
        authorize(actor, Operation.USER_MANAGE)

    if "is_active" in update_data and update_data["is_active"] is None:
        update_data.pop("is_active")
    if update_data.get("is_active") is False and db_user.id == actor.id:
        raise ValidationError("Users cannot deactivate themselves")

    for field in ("username", "email", "roles"):
        if field in update_data and not update_data[field]:
            raise ValidationError(f"{field} required")
    if "username" in update_data:
        update_data["username"] = update_data["username"].strip()
        if not update_data["username"]:
            raise ValidationError("username required")
    _check_unique(db, update_data.get("username"), update_data.get("email"), exclude_id=db_user.id)

    before = _snapshot(db_user)
    password_changed = False
    if update_data.get("password"):
        update_data["password"] = get_password_hash(update_data["password"])
        password_changed = True
    else:
        update_data.pop("password", None)

    for field, value in update_data.items():
        setattr(db_user, field, value)
    db_user.updated_at = utcnow()

    changes = audit.diff(before, _snapshot(db_user))
    if password_changed:
        changes["password"] = "changed"
    db.add(db_user)
    action = AuditAction.delete if before["is_active"] and not db_user.is_active else AuditAction.update
    audit.record(db, actor, "user", db_user.id, action, changes)
    db.commit()
    db.refresh(db_user)
    logger.info("User %s updated user %s: %s", actor.id, db_user.id, sorted(changes))
    return db_user


def deactivate_user(db: Session, actor: User, user_id: str) -> User:
    authorize(actor, Operation.USER_MANAGE)
    db_user = get_user(db, user_id)

    # Prevent self-deactivation
    if db_user.id == actor.id:
        raise ValidationError("Users cannot deactivate themselves")

    db_user.is_active = False
    db_user.updated_at = utcnow()
    db.add(db_user)
    audit.record(db, actor, "user", db_user.id, AuditAction.delete, "deactivated")
    db.commit()
    db.refresh(db_user)
    logger.info("User %s deactivated user %s", actor.id, db_user.id)
    return db_user


def authenticate(db: Session, login: str, password: str) -> Optional[User]:
    """Look a user up by username or email and check the password."""
    user = db.exec(select(User).where(or_(User.username == login, User.email == login))).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password):
        return None
    return user
