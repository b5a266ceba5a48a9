# deskcrm/bridge.py
"""
The boundary between callers and the host process.

``OPERATIONS`` is the complete allow-list: each named operation maps to one
fixed route on the host. ``HostBridge`` is the only client-side way to reach
the host; it refuses anything outside the list and never lets an exception
other than ``HostUnavailableError`` escape.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from deskcrm import config
from deskcrm.result import ERROR, Err, Result, from_envelope

log = logging.getLogger(__name__)

# name -> (HTTP method, path template)
OPERATIONS = {
    "enquiries.getAll": ("GET", "/enquiries"),
    "enquiries.add": ("POST", "/enquiries"),
    "enquiries.update": ("PATCH", "/enquiries/{id}"),
    "enquiries.delete": ("DELETE", "/enquiries/{id}"),

    "users.getAll": ("GET", "/users"),
    "users.add": ("POST", "/users"),
    "users.update": ("PATCH", "/users/{id}"),
    "users.delete": ("DELETE", "/users/{id}"),

    "advertisements.getAll": ("GET", "/advertisements"),
    "advertisements.add": ("POST", "/advertisements"),
    "advertisements.bulkAdd": ("POST", "/advertisements/bulk"),
    "advertisements.update": ("PATCH", "/advertisements/{id}"),
    "advertisements.delete": ("DELETE", "/advertisements/{id}"),

    "auth.login": ("POST", "/auth/login"),
}


class UnknownOperationError(ValueError):
    pass


class HostUnavailableError(RuntimeError):
    """The host process cannot be reached. Nothing can be saved until it is."""


def _host_down_message(base_url: str, operation: str) -> str:
    return (
        f"{operation} requires the DeskCRM host process, which is not reachable at {base_url}. "
        "Data will NOT be saved. Start it with: python -m deskcrm.main"
    )


class HostBridge:
    def __init__(self, client: Optional[httpx.Client] = None, base_url: Optional[str] = None):
        if client is None:
            client = httpx.Client(
                base_url=base_url or config.settings.HOST_URL,
                timeout=config.settings.HOST_TIMEOUT_SECONDS,
            )
        self.client = client

    def close(self) -> None:
        self.client.close()

    def invoke(
        self,
        operation: str,
        *,
        record_id: Optional[str] = None,
        body: Any = None,
        token: Optional[str] = None,
    ) -> Result:
        if operation not in OPERATIONS:
            raise UnknownOperationError(f"Operation not allowed across the boundary: {operation}")

        method, template = OPERATIONS[operation]
        if "{id}" in template:
            if not record_id:
                return Err(f"{operation} needs a record id", ERROR)
            path = template.replace("{id}", quote(str(record_id), safe=""))
        else:
            path = template

        headers = {"Authorization": f"Bearer {token}"} if token else {}
        log.debug("bridge -> %s %s", method, path)

        try:
            response = self.client.request(method, path, json=body, headers=headers)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            message = _host_down_message(str(self.client.base_url), operation)
            log.critical("%s (%s)", message, e)
            raise HostUnavailableError(message) from e
        except httpx.HTTPError as e:
            log.error("bridge %s failed: %s", operation, e)
            return Err(f"{operation} failed: {e}", ERROR)

        try:
            payload = response.json()
        except ValueError:
            log.error("bridge %s: non-JSON response (HTTP %s)", operation, response.status_code)
            return Err(f"Unexpected response from host (HTTP {response.status_code})", ERROR)

        result = from_envelope(payload)
        if not result.success:
            log.info("bridge %s -> %s: %s", operation, result.code, result.reason)
        return result
