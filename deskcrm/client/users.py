# deskcrm/client/users.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from deskcrm.client.database import Database
from deskcrm.client.session import Session, SessionCache
from deskcrm.validators import ValidationFailed, username_taken, validate_user

EDITABLE_FIELDS = ("username", "fullName", "email", "role")


def get_all_users(db: Database) -> List[Dict[str, Any]]:
    return db.users.get_all()


def username_exists(db: Database, username: str, exclude_id: Optional[str] = None) -> bool:
    return username_taken(username, db.users.get_all(), exclude_id)


def login(db: Database, username: str, password: str, cache: Optional[SessionCache] = None) -> Optional[Session]:
    session = db.login(username, password)
    if session and cache is not None:
        cache.save(session)
    return session


def logout(cache: SessionCache) -> None:
    cache.clear()


def add_user(db: Database, session: Session, form: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    validation = validate_user(form, db.users.get_all())
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    record = {k: form[k] for k in EDITABLE_FIELDS if form.get(k) not in (None, "")}
    record["password"] = form["password"]
    record["isActive"] = True
    return db.users.add(record, session)


def update_user(
    db: Database,
    session: Session,
    user_id: str,
    form: Dict[str, Any],
    cache: Optional[SessionCache] = None,
) -> bool:
    """A blank password keeps the current one."""
    validation = validate_user(form, db.users.get_all(), is_edit=True, exclude_id=user_id)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    updates = {k: form.get(k) or "" for k in EDITABLE_FIELDS if k in form}
    if form.get("password"):
        updates["password"] = form["password"]

    ok = db.users.update(user_id, updates, session)
    if ok and cache is not None:
        cache.update_user({"id": user_id, **{k: v for k, v in updates.items() if k != "password"}})
    return ok


def delete_user(db: Database, session: Session, user_id: str) -> bool:
    # the host deactivates the account and refuses self-deletion
    return db.users.delete(user_id, session)


def get_user_statistics(db: Database) -> Dict[str, int]:
    active = [u for u in db.users.get_all() if u.get("isActive", True) is not False]
    return {
        "active": len(active),
        "admins": sum(1 for u in active if u.get("role") == "admin"),
        "users": sum(1 for u in active if u.get("role") == "user"),
    }
