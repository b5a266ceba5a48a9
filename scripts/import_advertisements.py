# scripts/import_advertisements.py
"""
Import a lead sheet (saved as CSV) into the advertisement enquiries.

    python scripts/import_advertisements.py leads.csv <username> <password>

The host process must be running.
"""
import sys

from deskcrm.client.advertisements import import_advertisement_enquiries, read_import_file
from deskcrm.client.database import Database
from deskcrm.logging_config import setup_logging


def main(argv: list[str]) -> int:
    if len(argv) != 4:
        print(__doc__)
        return 2

    path, username, password = argv[1:]
    setup_logging(to_file=False)

    db = Database()
    try:
        session = db.login(username, password)
        if session is None:
            print("Login failed.")
            return 1

        rows = read_import_file(path)
        if not rows:
            print("Sheet is empty.")
            return 1

        result = import_advertisement_enquiries(db, session, rows)
    finally:
        db.close()

    print(f"Imported: {result.success}  Failed: {result.failed}")
    for err in result.errors:
        print(f"  {err}")
    return 0 if result.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
