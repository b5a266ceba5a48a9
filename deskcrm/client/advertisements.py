# deskcrm/client/advertisements.py
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as dtparse

from deskcrm.client.database import Database
from deskcrm.client.session import Session
from deskcrm.validators import (
    ValidationFailed,
    normalize_advertisement_enquiry,
    validate_advertisement_enquiry,
)

log = logging.getLogger(__name__)

# spreadsheet header -> record key, first match wins
HEADER_ALIASES = {
    "name": ("Name", "name"),
    "phoneNo": ("Phone No", "Phone Number", "phoneNo", "phone"),
    "email": ("Email", "email"),
    "aadharNo": ("Aadhar No", "aadharNo", "aadhar"),
    "panNo": ("PAN No", "panNo", "pan"),
}

DOC_FILTERS = ("all", "with-docs", "without-docs")


@dataclass
class ImportResult:
    success: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    records: List[Dict[str, Any]] = field(default_factory=list)


# --------------------------------------------------------------------------------------
# Spreadsheet rows
# --------------------------------------------------------------------------------------

def map_sheet_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for key, headers in HEADER_ALIASES.items():
        out[key] = next((row[h] for h in headers if row.get(h) not in (None, "")), "")
    return out


def read_import_file(path: str | Path) -> List[Dict[str, Any]]:
    """Read a CSV export of the lead sheet (first row is the header)."""
    with Path(path).open("r", newline="", encoding="utf-8-sig") as f:
        return [map_sheet_row(row) for row in csv.DictReader(f)]


# --------------------------------------------------------------------------------------
# Import pipeline
# --------------------------------------------------------------------------------------

def import_advertisement_enquiries(
    db: Database,
    session: Session,
    rows: Iterable[Dict[str, Any]],
) -> ImportResult:
    """
    Normalise and validate every row, reject phone numbers already stored or
    already queued earlier in the batch, then store the accepted rows with one
    bulk add. Row numbers in messages are spreadsheet rows (header is row 1).
    """
    result = ImportResult()
    existing_phones = {a.get("phoneNo") for a in db.advertisements.get_all()}
    queued: List[Dict[str, Any]] = []
    queued_phones = set()

    for index, raw in enumerate(rows):
        row_no = index + 2
        enquiry = normalize_advertisement_enquiry(raw)

        validation = validate_advertisement_enquiry(enquiry)
        if not validation.is_valid:
            result.failed += 1
            result.errors.append(f"Row {row_no}: {', '.join(validation.errors)}")
            continue

        phone = enquiry["phoneNo"]
        if phone in existing_phones or phone in queued_phones:
            result.failed += 1
            result.errors.append(f"Row {row_no}: Duplicate phone number {phone}")
            continue

        queued.append(enquiry)
        queued_phones.add(phone)

    if not queued:
        return result

    stored = db.advertisements.bulk_add(queued, session)
    if stored is None:
        result.failed += len(queued)
        result.errors.append("Failed to save to storage")
        return result

    result.success = len(stored)
    result.records = stored
    log.info("Imported %d advertisement enquiries (%d failed)", result.success, result.failed)
    return result


# --------------------------------------------------------------------------------------
# Single-record operations
# --------------------------------------------------------------------------------------

def get_all_advertisement_enquiries(db: Database) -> List[Dict[str, Any]]:
    return db.advertisements.get_all()


def is_phone_exists(db: Database, phone: str, exclude_id: Optional[str] = None) -> bool:
    phone = normalize_advertisement_enquiry({"phoneNo": phone})["phoneNo"]
    return bool(phone) and any(
        a.get("phoneNo") == phone and a.get("id") != exclude_id for a in db.advertisements.get_all()
    )


def add_advertisement_enquiry(db: Database, session: Session, form: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    enquiry = normalize_advertisement_enquiry(form)
    validation = validate_advertisement_enquiry(enquiry)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)
    if is_phone_exists(db, enquiry["phoneNo"]):
        raise ValidationFailed([f"Duplicate phone number {enquiry['phoneNo']}"])
    return db.advertisements.add(enquiry, session)


def update_advertisement_enquiry(
    db: Database,
    session: Session,
    enquiry_id: str,
    updates: Dict[str, Any],
) -> bool:
    """Blank fields in ``updates`` keep their stored values."""
    current = next((a for a in db.advertisements.get_all() if a.get("id") == enquiry_id), None)
    if current is None:
        return False

    provided = {k: v for k, v in updates.items() if k in HEADER_ALIASES and v}
    merged = normalize_advertisement_enquiry({**current, **provided})
    validation = validate_advertisement_enquiry(merged)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)
    if merged["phoneNo"] != current.get("phoneNo") and is_phone_exists(db, merged["phoneNo"], exclude_id=enquiry_id):
        raise ValidationFailed([f"Duplicate phone number {merged['phoneNo']}"])

    changes = {k: merged[k] for k in provided}
    if not changes:
        return True
    return db.advertisements.update(enquiry_id, changes, session)


def delete_advertisement_enquiry(db: Database, session: Session, enquiry_id: str) -> bool:
    return db.advertisements.delete(enquiry_id, session)


# --------------------------------------------------------------------------------------
# Search & statistics
# --------------------------------------------------------------------------------------

def _has_docs(a: Dict[str, Any]) -> bool:
    return bool(a.get("aadharNo") or a.get("panNo"))


def search_advertisement_enquiries(
    db: Database,
    term: str = "",
    doc_filter: str = "all",
    enquiries: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    if doc_filter not in DOC_FILTERS:
        raise ValueError(f"doc_filter must be one of {DOC_FILTERS}")

    rows = enquiries if enquiries is not None else db.advertisements.get_all()
    needle = (term or "").strip().lower()
    if needle:
        rows = [
            a for a in rows
            if any(needle in str(a.get(k) or "").lower() for k in ("name", "phoneNo", "email", "id", "aadharNo", "panNo"))
        ]

    if doc_filter == "with-docs":
        rows = [a for a in rows if _has_docs(a)]
    elif doc_filter == "without-docs":
        rows = [a for a in rows if not _has_docs(a)]
    return list(rows)


def _imported_on(a: Dict[str, Any]) -> Optional[date]:
    try:
        return dtparse.isoparse(str(a.get("importedAt") or "")).date()
    except (ValueError, OverflowError):
        return None


def get_statistics(db: Database, today: Optional[date] = None) -> Dict[str, int]:
    today = today or date.today()
    rows = db.advertisements.get_all()
    return {
        "total": len(rows),
        "todayImported": sum(1 for a in rows if _imported_on(a) == today),
        "withAadhar": sum(1 for a in rows if a.get("aadharNo")),
        "withPAN": sum(1 for a in rows if a.get("panNo")),
    }
