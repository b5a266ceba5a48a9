# deskcrm/client/export.py
from __future__ import annotations

import csv
import io
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from dateutil import parser as dtparse

# (header, record key)
ENQUIRY_COLUMNS: List[Tuple[str, str]] = [
    ("ID", "id"),
    ("Full Name", "fullName"),
    ("Mobile", "mobile"),
    ("Alternate Mobile", "alternateMobile"),
    ("Email", "email"),
    ("Address", "address"),
    ("Aadhar Number", "aadharNumber"),
    ("PAN Number", "panNumber"),
    ("Demat Account 1", "demateAccount1"),
    ("Demat Account 2", "demateAccount2"),
    ("Enquiry State", "enquiryState"),
    ("Source of Enquiry", "sourceOfEnquiry"),
    ("Interested Status", "interestedStatus"),
    ("How Did You Know", "howDidYouKnow"),
    ("Other (How Did You Know)", "customHowDidYouKnow"),
    ("Profession", "profession"),
    ("Other (Profession)", "customProfession"),
    ("Knowledge of Share Market", "knowledgeOfShareMarket"),
    ("Status", "status"),
    ("Call Back Date", "callBackDate"),
    ("Deposit Inward Date", "depositInwardDate"),
    ("Deposit Outward Date", "depositOutwardDate"),
    ("Created At", "createdAt"),
]

ADVERTISEMENT_COLUMNS: List[Tuple[str, str]] = [
    ("ID", "id"),
    ("Name", "name"),
    ("Phone No", "phoneNo"),
    ("Email", "email"),
    ("Aadhar No", "aadharNo"),
    ("PAN No", "panNo"),
    ("Imported At", "importedAt"),
]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("\r", " ").replace("\n", " ")


def _local_timestamp(value: Any) -> str:
    try:
        return dtparse.isoparse(str(value)).astimezone().strftime("%d/%m/%Y, %H:%M:%S")
    except (ValueError, OverflowError):
        return _cell(value)


def to_csv(rows: Iterable[Dict[str, Any]], columns: Sequence[Tuple[str, str]], formatters=None) -> str:
    """Header plus one line per row; every field quoted, one physical line per record."""
    formatters = formatters or {}
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    w.writerow([header for header, _ in columns])
    for row in rows:
        w.writerow([formatters.get(key, _cell)(row.get(key)) for _, key in columns])
    return buf.getvalue()


def enquiries_to_csv(enquiries: Iterable[Dict[str, Any]]) -> str:
    return to_csv(enquiries, ENQUIRY_COLUMNS)


def advertisements_to_csv(advertisements: Iterable[Dict[str, Any]]) -> str:
    return to_csv(advertisements, ADVERTISEMENT_COLUMNS, {"importedAt": _local_timestamp})


def export_filename(prefix: str, today: Optional[date] = None) -> str:
    return f"{prefix}{(today or date.today()).isoformat()}.csv"


def enquiries_filename(today: Optional[date] = None) -> str:
    return export_filename("enquiries_backup_", today)


def advertisements_filename(today: Optional[date] = None) -> str:
    return export_filename("advertisement-enquiries-", today)


def search_results_filename(today: Optional[date] = None) -> str:
    return export_filename("search-results-", today)


def write_csv(content: str, directory: str | Path, filename: str) -> Path:
    path = Path(directory) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    # utf-8-sig so spreadsheet apps pick the encoding up
    path.write_text(content, encoding="utf-8-sig")
    return path
