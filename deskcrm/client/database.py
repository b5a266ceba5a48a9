# deskcrm/client/database.py
"""
Data-access client: the one module callers use for persistence.

Each namespace mirrors a collection on the host and turns the boundary's
envelopes into plain values: ``get_all`` returns a list, ``add`` the stored
record or None, ``update`` / ``delete`` a bool. Nothing is retried. If the
host cannot be reached, ``HostUnavailableError`` propagates; there is no
local fallback.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from deskcrm.bridge import HostBridge
from deskcrm.client.session import Session
from deskcrm.result import Ok

log = logging.getLogger(__name__)


class CollectionClient:
    def __init__(self, bridge: HostBridge, namespace: str):
        self.bridge = bridge
        self.namespace = namespace

    def _op(self, verb: str) -> str:
        return f"{self.namespace}.{verb}"

    def get_all(self) -> List[Dict[str, Any]]:
        result = self.bridge.invoke(self._op("getAll"))
        if isinstance(result, Ok) and isinstance(result.data, list):
            log.debug("Loaded %d %s", len(result.data), self.namespace)
            return result.data
        log.error("%s.getAll failed: %s", self.namespace, getattr(result, "reason", "unexpected payload"))
        return []

    def add(self, record: Dict[str, Any], session: Session) -> Optional[Dict[str, Any]]:
        if not session.can_edit():
            log.error("%s.add refused: not logged in", self.namespace)
            return None
        result = self.bridge.invoke(self._op("add"), body=record, token=session.token)
        if isinstance(result, Ok):
            return result.data
        log.error("%s.add failed: %s", self.namespace, result.reason)
        return None

    def update(self, record_id: str, changes: Dict[str, Any], session: Session) -> bool:
        if not session.can_edit():
            log.error("%s.update refused: not logged in", self.namespace)
            return False
        result = self.bridge.invoke(self._op("update"), record_id=record_id, body=changes, token=session.token)
        if not result.success:
            log.error("%s.update %s failed: %s", self.namespace, record_id, result.reason)
        return result.success

    def delete(self, record_id: str, session: Session) -> bool:
        # same rule as the host applies
        if not session.can_delete():
            log.warning("%s.delete refused for '%s' (role=%s)", self.namespace, session.username, session.role)
            return False
        result = self.bridge.invoke(self._op("delete"), record_id=record_id, token=session.token)
        if not result.success:
            log.error("%s.delete %s failed: %s", self.namespace, record_id, result.reason)
        return result.success


class AdvertisementClient(CollectionClient):
    def bulk_add(self, records: List[Dict[str, Any]], session: Session) -> Optional[List[Dict[str, Any]]]:
        if not session.can_edit():
            log.error("advertisements.bulkAdd refused: not logged in")
            return None
        result = self.bridge.invoke(self._op("bulkAdd"), body=records, token=session.token)
        if isinstance(result, Ok):
            return result.data
        log.error("advertisements.bulkAdd failed: %s", result.reason)
        return None


class Database:
    def __init__(self, bridge: Optional[HostBridge] = None):
        self.bridge = bridge or HostBridge()
        self.enquiries = CollectionClient(self.bridge, "enquiries")
        self.users = CollectionClient(self.bridge, "users")
        self.advertisements = AdvertisementClient(self.bridge, "advertisements")

    def login(self, username: str, password: str) -> Optional[Session]:
        result = self.bridge.invoke("auth.login", body={"username": username, "password": password})
        if isinstance(result, Ok) and isinstance(result.data, dict):
            return Session(token=result.data["token"], user=result.data.get("user") or {})
        return None

    def close(self) -> None:
        self.bridge.close()
