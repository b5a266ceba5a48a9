# deskcrm/validators.py
"""
Field-level validation for enquiries, advertisement enquiries and users.

Validators are pure: they take a record (camelCase keys, as stored) and
return a ``ValidationResult``. Uniqueness against stored data is checked by the
data-access client, which passes the collection in where it is needed.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from deskcrm.utils.phone import digits_only, normalize_in_mobile

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_RE = re.compile(r"^\d{10}$")
IN_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
AADHAR_RE = re.compile(r"^\d{12}$")
PAN_RE = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False


class ValidationFailed(ValueError):
    """Raised by the data-access helpers before anything is sent to the host."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


def _text(value: Any) -> str:
    return str(value if value is not None else "").strip()


def is_valid_email(value: Any) -> bool:
    return bool(EMAIL_RE.match(_text(value)))


# ---------- enquiries ----------

def validate_enquiry(form: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()

    if not _text(form.get("fullName")):
        result.add("Full name is required")

    mobile = _text(form.get("mobile"))
    if not mobile:
        result.add("Mobile number is required")
    elif not MOBILE_RE.match(mobile):
        result.add("Mobile number must be 10 digits")

    alternate = _text(form.get("alternateMobile"))
    if alternate and not MOBILE_RE.match(alternate):
        result.add("Alternate mobile number must be 10 digits")

    email = _text(form.get("email"))
    if email and not is_valid_email(email):
        result.add("Invalid email address")

    if not _text(form.get("enquiryState")):
        result.add("Please select a state")

    if not _text(form.get("status")):
        result.add("Status is required")

    aadhar = _text(form.get("aadharNumber"))
    if aadhar and not AADHAR_RE.match(digits_only(aadhar)):
        result.add("Invalid Aadhar number (must be 12 digits)")

    pan = _text(form.get("panNumber")).upper()
    if pan and not PAN_RE.match(pan):
        result.add("Invalid PAN number (format: ABCDE1234F)")

    return result


# ---------- advertisement enquiries ----------

def normalize_advertisement_enquiry(row: Dict[str, Any]) -> Dict[str, str]:
    """Coerce a raw (spreadsheet) row to trimmed strings with canonical phone / ID formats."""
    aadhar = row.get("aadharNo")
    pan = row.get("panNo")
    return {
        "name": _text(row.get("name")),
        "phoneNo": normalize_in_mobile(row.get("phoneNo")),
        "email": _text(row.get("email")),
        "aadharNo": digits_only(aadhar) if aadhar else "",
        "panNo": _text(pan).upper() if pan else "",
    }


def validate_advertisement_enquiry(enquiry: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()

    name = _text(enquiry.get("name"))
    phone = _text(enquiry.get("phoneNo"))
    email = _text(enquiry.get("email"))
    aadhar = _text(enquiry.get("aadharNo"))
    pan = _text(enquiry.get("panNo"))

    if not name:
        result.add("Name is required")
    elif len(name) < 2:
        result.add("Name must be at least 2 characters")

    if not phone:
        result.add("Phone number is required")
    elif not IN_MOBILE_RE.match(digits_only(phone)):
        result.add("Invalid phone number (must be 10 digits starting with 6-9)")

    if not email:
        result.add("Email is required")
    elif not is_valid_email(email):
        result.add("Invalid email address")

    if aadhar and not AADHAR_RE.match(digits_only(aadhar)):
        result.add("Invalid Aadhar number (must be 12 digits)")

    if pan and not PAN_RE.match(pan.upper()):
        result.add("Invalid PAN number (format: ABCDE1234F)")

    return result


# ---------- users ----------

def username_taken(username: str, users: Iterable[Dict[str, Any]], exclude_id: Optional[str] = None) -> bool:
    # inactive accounts still own their username
    return any(u.get("username") == username and u.get("id") != exclude_id for u in users)


def validate_user(
    form: Dict[str, Any],
    users: Iterable[Dict[str, Any]] = (),
    is_edit: bool = False,
    exclude_id: Optional[str] = None,
) -> ValidationResult:
    result = ValidationResult()

    username = _text(form.get("username"))
    if not username:
        result.add("Username is required")
    elif len(username) < 3:
        result.add("Username must be at least 3 characters")
    elif not USERNAME_RE.match(username):
        result.add("Username can only contain letters, numbers, and underscores")
    elif username_taken(username, users, exclude_id if is_edit else None):
        result.add("Username already exists")

    password = str(form.get("password") or "")
    if not is_edit:
        if not password.strip():
            result.add("Password is required")
        elif len(password) < 6:
            result.add("Password must be at least 6 characters")
    elif password and len(password) < 6:
        result.add("Password must be at least 6 characters")

    if not _text(form.get("fullName")):
        result.add("Full name is required")

    email = _text(form.get("email"))
    if email and not is_valid_email(email):
        result.add("Invalid email address")

    if form.get("role", "user") not in ("admin", "user"):
        result.add("Role must be admin or user")

    return result
