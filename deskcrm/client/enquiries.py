# deskcrm/client/enquiries.py
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as dtparse

from deskcrm.client.database import Database
from deskcrm.client.session import Session
from deskcrm.utils.phone import digits_only, normalize_in_mobile
from deskcrm.validators import ValidationFailed, validate_enquiry

log = logging.getLogger(__name__)

STATUS_CONFIRMED = "Confirmed"
STATUS_PENDING = "Pending"
STATUS_IN_PROCESS = "In Process"

# field -> (label for messages, comparison key)
UNIQUE_FIELDS = {
    "mobile": ("Mobile number", lambda v: normalize_in_mobile(v)),
    "email": ("Email", lambda v: str(v or "").strip().lower()),
    "aadharNumber": ("Aadhar number", lambda v: digits_only(v)),
    "panNumber": ("PAN number", lambda v: str(v or "").strip().upper()),
}


# --------------------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------------------

def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return dtparse.isoparse(text).date()
    except (ValueError, OverflowError):
        return None


def normalize_enquiry_form(form: Dict[str, Any]) -> Dict[str, Any]:
    """Trim strings and put phone / ID numbers into their stored formats."""
    clean = {k: (v.strip() if isinstance(v, str) else v) for k, v in form.items()}
    for key in ("mobile", "alternateMobile"):
        if clean.get(key):
            clean[key] = normalize_in_mobile(clean[key])
    if clean.get("aadharNumber"):
        clean["aadharNumber"] = digits_only(clean["aadharNumber"])
    if clean.get("panNumber"):
        clean["panNumber"] = str(clean["panNumber"]).upper()
    return clean


def _load(db: Database, enquiries: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return enquiries if enquiries is not None else db.enquiries.get_all()


# --------------------------------------------------------------------------------------
# Lookups & uniqueness probes
# --------------------------------------------------------------------------------------

def get_all_enquiries(db: Database) -> List[Dict[str, Any]]:
    return db.enquiries.get_all()


def get_enquiry_by_id(db: Database, enquiry_id: str) -> Optional[Dict[str, Any]]:
    return next((e for e in db.enquiries.get_all() if e.get("id") == enquiry_id), None)


def _exists(enquiries: Iterable[Dict[str, Any]], field: str, value: Any, exclude_id: Optional[str]) -> bool:
    key = UNIQUE_FIELDS[field][1]
    needle = key(value)
    if not needle:
        return False
    return any(key(e.get(field)) == needle and e.get("id") != exclude_id for e in enquiries)


def is_mobile_exists(db: Database, mobile: str, exclude_id: Optional[str] = None) -> bool:
    return _exists(db.enquiries.get_all(), "mobile", mobile, exclude_id)


def is_email_exists(db: Database, email: str, exclude_id: Optional[str] = None) -> bool:
    return _exists(db.enquiries.get_all(), "email", email, exclude_id)


def is_aadhar_exists(db: Database, aadhar: str, exclude_id: Optional[str] = None) -> bool:
    return _exists(db.enquiries.get_all(), "aadharNumber", aadhar, exclude_id)


def is_pan_exists(db: Database, pan: str, exclude_id: Optional[str] = None) -> bool:
    return _exists(db.enquiries.get_all(), "panNumber", pan, exclude_id)


def check_duplicates(
    db: Database,
    form: Dict[str, Any],
    exclude_id: Optional[str] = None,
    enquiries: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, bool]:
    """Which of the unique fields in ``form`` already belong to another enquiry."""
    rows = _load(db, enquiries)
    return {field: _exists(rows, field, form.get(field), exclude_id) for field in UNIQUE_FIELDS}


def validate_unique_fields(
    db: Database,
    form: Dict[str, Any],
    exclude_id: Optional[str] = None,
    enquiries: Optional[List[Dict[str, Any]]] = None,
) -> List[str]:
    duplicates = check_duplicates(db, form, exclude_id, enquiries)
    return [f"{UNIQUE_FIELDS[field][0]} already exists" for field, dup in duplicates.items() if dup]


# --------------------------------------------------------------------------------------
# Mutations
# --------------------------------------------------------------------------------------

def save_enquiry(db: Database, session: Session, form: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Validate and store a new enquiry. Raises ``ValidationFailed`` before
    anything reaches the host; returns the stored record, or None if the
    host failed to save it.
    """
    clean = normalize_enquiry_form(form)
    validation = validate_enquiry(clean)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    duplicates = validate_unique_fields(db, clean)
    if duplicates:
        raise ValidationFailed(duplicates)

    saved = db.enquiries.add(clean, session)
    if saved:
        log.info("Enquiry saved: %s", saved.get("id"))
    return saved


def update_enquiry(db: Database, session: Session, enquiry_id: str, changes: Dict[str, Any]) -> bool:
    enquiries = db.enquiries.get_all()
    current = next((e for e in enquiries if e.get("id") == enquiry_id), None)
    if current is None:
        log.info("Enquiry not found: %s", enquiry_id)
        return False

    clean = normalize_enquiry_form(changes)
    validation = validate_enquiry({**current, **clean})
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    duplicates = validate_unique_fields(db, {**current, **clean}, exclude_id=enquiry_id, enquiries=enquiries)
    if duplicates:
        raise ValidationFailed(duplicates)

    return db.enquiries.update(enquiry_id, clean, session)


def delete_enquiry(db: Database, session: Session, enquiry_id: str) -> bool:
    # the host refuses non-admin callers
    return db.enquiries.delete(enquiry_id, session)


# --------------------------------------------------------------------------------------
# Search, filters, follow-ups, statistics
# --------------------------------------------------------------------------------------

def search_enquiries(
    db: Database,
    term: str,
    enquiries: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """Case-insensitive substring match over name, mobile, email and id."""
    rows = _load(db, enquiries)
    needle = (term or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        e for e in rows
        if any(needle in str(e.get(k) or "").lower() for k in ("fullName", "mobile", "email", "id"))
    ]


def filter_enquiries(
    db: Database,
    *,
    status: Optional[str] = None,
    state: Optional[str] = None,
    profession: Optional[str] = None,
    knowledge: Optional[str] = None,
    date_from: Any = None,
    date_to: Any = None,
    date_field: str = "createdAt",
    enquiries: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Keep enquiries matching every given criterion. Dates are inclusive and
    compared on ``date_field`` (``createdAt``, ``callBackDate``, ...); records
    without a usable date drop out once a range is given.
    """
    start, end = _as_date(date_from), _as_date(date_to)
    exact = {
        "status": status,
        "enquiryState": state,
        "profession": profession,
        "knowledgeOfShareMarket": knowledge,
    }

    out = []
    for e in _load(db, enquiries):
        if any(want and (e.get(k) or "") != want for k, want in exact.items()):
            continue
        if start or end:
            d = _as_date(e.get(date_field))
            if d is None or (start and d < start) or (end and d > end):
                continue
        out.append(e)
    return out


def todays_follow_ups(db: Database, today: Optional[date] = None, enquiries=None) -> List[Dict[str, Any]]:
    today = today or date.today()
    return [e for e in _load(db, enquiries) if _as_date(e.get("callBackDate")) == today]


def pending_follow_ups(db: Database, today: Optional[date] = None, enquiries=None) -> List[Dict[str, Any]]:
    """Call-backs whose date has passed on enquiries that are not confirmed yet."""
    today = today or date.today()
    out = []
    for e in _load(db, enquiries):
        d = _as_date(e.get("callBackDate"))
        if d and d < today and e.get("status") != STATUS_CONFIRMED:
            out.append(e)
    return out


def all_follow_ups(db: Database, enquiries=None) -> List[Dict[str, Any]]:
    rows = [e for e in _load(db, enquiries) if _as_date(e.get("callBackDate"))]
    return sorted(rows, key=lambda e: _as_date(e.get("callBackDate")))


def get_statistics(db: Database, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    rows = db.enquiries.get_all()
    by_status = Counter(e.get("status") or "" for e in rows)
    return {
        "total": len(rows),
        "confirmed": by_status.get(STATUS_CONFIRMED, 0),
        "pending": by_status.get(STATUS_PENDING, 0),
        "inProcess": by_status.get(STATUS_IN_PROCESS, 0),
        "createdToday": sum(1 for e in rows if _as_date(e.get("createdAt")) == today),
        "todaysFollowUps": len(todays_follow_ups(db, today, rows)),
        "pendingFollowUps": len(pending_follow_ups(db, today, rows)),
        "allFollowUps": len(all_follow_ups(db, rows)),
        "byStatus": dict(by_status),
        "byState": dict(Counter(e.get("enquiryState") or "" for e in rows)),
        "bySource": dict(Counter(e.get("sourceOfEnquiry") or "" for e in rows)),
        "byProfession": dict(Counter(e.get("profession") or "" for e in rows)),
    }
