# deskcrm/services/handlers.py
"""
Host-side operation handlers, one class per collection.

Every operation reads the whole document, computes the new state and writes
the whole document back. Handlers never raise for expected failures; they
return ``Ok`` / ``Err`` and the routers turn that into an envelope.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError

from deskcrm import config
from deskcrm.models import (
    AdvertisementEnquiry,
    AdvertisementFields,
    CamelModel,
    Enquiry,
    EnquiryFields,
    User,
    UserFields,
    generate_id,
    utcnow_iso,
)
from deskcrm.result import FORBIDDEN, INVALID, IO_ERROR, NOT_FOUND, Err, Ok, Result
from deskcrm.services.security import hash_password, needs_rehash, verify_password
from deskcrm.store import JsonStore

log = logging.getLogger(__name__)

DEFAULT_ADMIN_ID = "admin-001"


@dataclass(frozen=True)
class Caller:
    """Identity of whoever issued the request, resolved from the session token."""
    id: str
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def require_admin(
    caller: Optional[Caller],
    action: str,
    message: str = "Only administrators can delete records",
) -> Optional[Err]:
    """Single authorization gate for destructive and account-management operations."""
    if caller is None or not caller.is_admin:
        who = caller.username if caller else "anonymous"
        log.warning("Refused %s for %s (role=%s)", action, who, caller.role if caller else None)
        return Err(message, FORBIDDEN)
    return None


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password"}


# ---------- shared CRUD ----------

class CollectionHandler:
    collection: str = ""
    label: str = "Record"
    record_model: Type[CamelModel] = CamelModel
    fields_model: Type[CamelModel] = CamelModel
    touch_updated_at: bool = True

    def __init__(self, store: JsonStore):
        self.store = store

    # -- helpers --

    def _items(self, doc: dict) -> List[dict]:
        items = doc.get(self.collection)
        if not isinstance(items, list):
            items = []
            doc[self.collection] = items
        return items

    def _save(self, doc: dict) -> Optional[Err]:
        if not self.store.write(doc):
            return Err("Failed to write database", IO_ERROR)
        return None

    def _index_of(self, items: List[dict], record_id: str) -> int:
        for i, item in enumerate(items):
            if isinstance(item, dict) and item.get("id") == record_id:
                return i
        return -1

    def prepare(self, record: Dict[str, Any], caller: Optional[Caller] = None) -> Dict[str, Any]:
        """
        Validate a new record. Only the editable fields are taken from the
        caller; id and creation stamps are always assigned here.
        """
        fields = self.fields_model.model_validate(record).model_dump(by_alias=True, exclude_none=True)
        stamped = {**fields, **self.stamp(caller)}
        return self.record_model.model_validate(stamped).model_dump(by_alias=True, exclude_none=True)

    def stamp(self, caller: Optional[Caller]) -> Dict[str, Any]:
        now = utcnow_iso()
        return {"id": self.new_id(), "createdAt": now, "updatedAt": now}

    def new_id(self) -> str:
        raise NotImplementedError

    def authorize_update(
        self,
        current: Dict[str, Any],
        patch: Dict[str, Any],
        caller: Optional[Caller],
    ) -> Optional[Err]:
        return None

    def clean_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Known fields only, type-checked. id and creation stamps cannot be changed."""
        return self.fields_model.model_validate(changes).model_dump(by_alias=True, exclude_unset=True)

    def present(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return record

    # -- operations --

    def get_all(self) -> Result:
        doc = self.store.read()
        items = [r for r in self._items(doc) if isinstance(r, dict)]
        log.info("%s.getAll -> %d", self.collection, len(items))
        return Ok([self.present(r) for r in items])

    def add(self, record: Dict[str, Any], caller: Optional[Caller] = None) -> Result:
        try:
            new = self.prepare(record, caller)
        except ValidationError as e:
            return Err(f"Invalid {self.label.lower()}: {e.errors()[0].get('msg')}", INVALID)

        doc = self.store.read()
        self._items(doc).append(new)
        err = self._save(doc)
        if err:
            return err
        log.info("%s.add -> %s", self.collection, new["id"])
        return Ok(self.present(new))

    def update(self, record_id: str, changes: Dict[str, Any], caller: Optional[Caller] = None) -> Result:
        try:
            patch = self.clean_changes(changes)
        except ValidationError as e:
            return Err(f"Invalid {self.label.lower()}: {e.errors()[0].get('msg')}", INVALID)

        doc = self.store.read()
        items = self._items(doc)
        index = self._index_of(items, record_id)
        if index == -1:
            log.info("%s.update: %s not found", self.collection, record_id)
            return Err(f"{self.label} not found", NOT_FOUND)

        denied = self.authorize_update(items[index], patch, caller)
        if denied:
            return denied

        merged = {**items[index], **patch}
        if self.touch_updated_at:
            merged["updatedAt"] = utcnow_iso()
        items[index] = merged

        err = self._save(doc)
        if err:
            return err
        log.info("%s.update -> %s (%s)", self.collection, record_id, ", ".join(sorted(patch)) or "no fields")
        return Ok(self.present(merged))

    def delete(self, record_id: str, caller: Optional[Caller]) -> Result:
        denied = require_admin(caller, f"{self.collection}.delete")
        if denied:
            return denied

        doc = self.store.read()
        items = self._items(doc)
        remaining = [r for r in items if not (isinstance(r, dict) and r.get("id") == record_id)]
        if len(remaining) == len(items):
            log.info("%s.delete: %s not found, nothing to do", self.collection, record_id)
            return Ok({"id": record_id, "deleted": False})

        doc[self.collection] = remaining
        err = self._save(doc)
        if err:
            return err
        log.info("%s.delete -> %s", self.collection, record_id)
        return Ok({"id": record_id, "deleted": True})


# ---------- enquiries ----------

class EnquiryHandler(CollectionHandler):
    collection = "enquiries"
    label = "Enquiry"
    record_model = Enquiry
    fields_model = EnquiryFields

    def new_id(self) -> str:
        return generate_id("ENQ", upper=True)


# ---------- advertisements ----------

class AdvertisementHandler(CollectionHandler):
    collection = "advertisements"
    label = "Advertisement"
    record_model = AdvertisementEnquiry
    fields_model = AdvertisementFields
    touch_updated_at = False

    def new_id(self) -> str:
        return generate_id("ADV")

    def stamp(self, caller: Optional[Caller]) -> Dict[str, Any]:
        return {
            "id": self.new_id(),
            "importedAt": utcnow_iso(),
            "importedBy": caller.username if caller else None,
        }

    def bulk_add(self, records: List[Dict[str, Any]], caller: Optional[Caller] = None) -> Result:
        """Append the whole batch with a single read and a single write."""
        try:
            batch = [self.prepare(r, caller) for r in records]
        except ValidationError as e:
            return Err(f"Invalid advertisement: {e.errors()[0].get('msg')}", INVALID)

        doc = self.store.read()
        self._items(doc).extend(batch)
        err = self._save(doc)
        if err:
            return err
        log.info("advertisements.bulkAdd -> %d records", len(batch))
        return Ok(batch)


# ---------- users ----------

class UserHandler(CollectionHandler):
    collection = "users"
    label = "User"
    record_model = User
    fields_model = UserFields

    def new_id(self) -> str:
        return generate_id("user")

    def present(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return public_user(record)

    def default_admin(self) -> Dict[str, Any]:
        now = utcnow_iso()
        s = config.settings
        return {
            "id": DEFAULT_ADMIN_ID,
            "username": s.DEFAULT_ADMIN_USERNAME,
            "password": hash_password(s.DEFAULT_ADMIN_PASSWORD),
            "fullName": "System Administrator",
            "email": s.DEFAULT_ADMIN_EMAIL,
            "role": "admin",
            "createdAt": now,
            "updatedAt": now,
            "isActive": True,
        }

    def _load(self) -> tuple[dict, List[dict]]:
        """Read the document, seeding the default administrator when there are no users."""
        doc = self.store.read()
        items = self._items(doc)
        if not items:
            admin = self.default_admin()
            items.append(admin)
            if self.store.write(doc):
                log.info("Seeded default administrator '%s'", admin["username"])
            else:
                log.error("Could not persist default administrator")
        return doc, items

    def get_all(self) -> Result:
        _, items = self._load()
        return Ok([self.present(r) for r in items if isinstance(r, dict)])

    def find(self, user_id: str) -> Optional[Dict[str, Any]]:
        _, items = self._load()
        index = self._index_of(items, user_id)
        return items[index] if index != -1 else None

    def stamp(self, caller: Optional[Caller]) -> Dict[str, Any]:
        return {**super().stamp(caller), "createdBy": caller.id if caller else None}

    def prepare(self, record: Dict[str, Any], caller: Optional[Caller] = None) -> Dict[str, Any]:
        clean = super().prepare(record, caller)
        clean["password"] = hash_password(clean.get("password") or "")
        return clean

    def add(self, record: Dict[str, Any], caller: Optional[Caller] = None) -> Result:
        denied = require_admin(caller, "users.add", "Only administrators can add users")
        if denied:
            return denied
        return super().add(record, caller)

    def authorize_update(
        self,
        current: Dict[str, Any],
        patch: Dict[str, Any],
        caller: Optional[Caller],
    ) -> Optional[Err]:
        """Administrators edit anyone; other users edit their own profile and password only."""
        if caller and caller.is_admin:
            return None
        if caller is None or caller.id != current.get("id"):
            return require_admin(caller, "users.update", "Only administrators can edit other users")
        if patch.get("role", current.get("role", "user")) != current.get("role", "user"):
            return require_admin(caller, "users.update", "Only administrators can change roles")
        if patch.get("isActive", current.get("isActive", True)) != current.get("isActive", True):
            return require_admin(caller, "users.update", "Only administrators can change account status")
        return None

    def clean_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        patch = super().clean_changes(changes)
        if "password" in patch:
            if patch["password"]:
                patch["password"] = hash_password(patch["password"])
            else:
                # blank means keep the current password
                del patch["password"]
        return patch

    def delete(self, record_id: str, caller: Optional[Caller]) -> Result:
        """Soft delete: the account is deactivated and kept for the audit trail."""
        denied = require_admin(caller, "users.delete")
        if denied:
            return denied
        if caller and caller.id == record_id:
            return Err("You cannot delete your own account", FORBIDDEN)

        doc, items = self._load()
        index = self._index_of(items, record_id)
        if index == -1:
            log.info("users.delete: %s not found, nothing to do", record_id)
            return Ok({"id": record_id, "deleted": False})

        was_active = items[index].get("isActive", True) is not False
        items[index] = {**items[index], "isActive": False, "updatedAt": utcnow_iso()}
        err = self._save(doc)
        if err:
            return err
        log.info("users.delete -> %s deactivated", record_id)
        return Ok({"id": record_id, "deleted": was_active})

    def authenticate(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the active user matching the credentials, or None."""
        doc, items = self._load()
        for i, user in enumerate(items):
            if not isinstance(user, dict) or user.get("username") != username:
                continue
            if user.get("isActive", True) is False:
                continue
            if not verify_password(password, user.get("password")):
                continue
            if needs_rehash(user.get("password")):
                items[i] = {**user, "password": hash_password(password)}
                if self.store.write(doc):
                    log.info("Upgraded stored password for '%s'", username)
                user = items[i]
            return user
        return None
