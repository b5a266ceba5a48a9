# deskcrm/models.py
"""
Record shapes for the three collections.

Attributes are snake_case in Python and camelCase on disk / over the
boundary (``full_name`` <-> ``fullName``). Every field carries a default so
the same model can type-check a partial update: validate the partial dict and
dump it with ``exclude_unset=True`` to keep only the keys the caller sent.
"""
from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_ALPHABET = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_id(prefix: str, upper: bool = False) -> str:
    """``<prefix>-<epoch ms>-<9 random base36 chars>``, e.g. ``ENQ-1718000000000-K3J9X0A1B``."""
    token = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}-{int(time.time() * 1000)}-{token.upper() if upper else token}"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------- Enquiry ----------

class EnquiryFields(CamelModel):
    full_name: str = ""
    mobile: str = ""
    alternate_mobile: str = ""
    email: str = ""
    address: str = ""
    aadhar_number: str = ""
    pan_number: str = ""
    demate_account1: str = Field("", alias="demateAccount1")
    demate_account2: str = Field("", alias="demateAccount2")
    enquiry_state: str = ""
    source_of_enquiry: str = ""
    interested_status: str = ""
    how_did_you_know: str = ""
    custom_how_did_you_know: str = ""
    profession: str = ""
    custom_profession: str = ""
    knowledge_of_share_market: str = ""
    status: str = ""
    call_back_date: str = ""
    deposit_inward_date: str = ""
    deposit_outward_date: str = ""


class Enquiry(EnquiryFields):
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ---------- User ----------

Role = Literal["admin", "user"]


class UserFields(CamelModel):
    username: str = ""
    password: str = ""
    role: Role = "user"
    full_name: str = ""
    email: Optional[str] = None
    is_active: bool = True


class User(UserFields):
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None


# ---------- Advertisement enquiry ----------

class AdvertisementFields(CamelModel):
    name: str = ""
    phone_no: str = ""
    email: str = ""
    aadhar_no: str = ""
    pan_no: str = ""


class AdvertisementEnquiry(AdvertisementFields):
    id: Optional[str] = None
    imported_at: Optional[str] = None
    imported_by: Optional[str] = None
