# deskcrm/store.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

# --------------------------------------------------------------------------------------
# Document layout
# --------------------------------------------------------------------------------------

COLLECTIONS = ("enquiries", "users", "advertisements")


def init_data() -> dict:
    return {name: [] for name in COLLECTIONS}


def _counts(doc: dict) -> dict:
    return {name: len(doc.get(name) or []) for name in COLLECTIONS}


# --------------------------------------------------------------------------------------
# Flat-file store
# --------------------------------------------------------------------------------------

class JsonStore:
    """
    One JSON document holding every collection. Each read parses the whole
    file and each write replaces it. There is no locking.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def ensure_initialized(self) -> None:
        if not self.path.exists():
            log.info("Creating new database at %s", self.path)
            self.write(init_data())

    def read(self) -> dict:
        """
        Return the parsed document. A missing file is created with empty
        collections; an unreadable or malformed file reads as empty.
        """
        if not self.path.exists():
            doc = init_data()
            log.info("Creating new database at %s", self.path)
            self.write(doc)
            return doc

        try:
            raw = self.path.read_text(encoding="utf-8")
            doc = json.loads(raw)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log.error("Error reading database %s: %s", self.path, e)
            return init_data()

        if not isinstance(doc, dict):
            log.error("Database %s is not a JSON object; treating as empty", self.path)
            return init_data()

        for name in COLLECTIONS:
            if not isinstance(doc.get(name), list):
                doc[name] = []

        log.debug("Loaded database: %s", _counts(doc))
        return doc

    def write(self, doc: dict) -> bool:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(doc, indent=2, ensure_ascii=False)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            log.error("Error writing database %s: %s", self.path, e)
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            return False

        log.info("Database saved: %s", _counts(doc))
        return True
