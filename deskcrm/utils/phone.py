# deskcrm/utils/phone.py
import re

import phonenumbers

_NON_DIGITS = re.compile(r"\D")


def digits_only(raw) -> str:
    return _NON_DIGITS.sub("", str(raw or ""))


def normalize_in_mobile(raw) -> str:
    """
    Reduce an Indian mobile number to its 10-digit national form
    ("+91 98765-43210" -> "9876543210"). Input that phonenumbers cannot
    parse is returned as bare digits so the validators can report it.
    """
    text = str(raw or "").strip()
    if not text:
        return ""
    try:
        pn = phonenumbers.parse(text, "IN")
    except phonenumbers.NumberParseException:
        return digits_only(text)
    national = str(pn.national_number)
    # Only trust the parse for Indian numbers; anything else keeps its digits.
    if pn.country_code != 91:
        return digits_only(text)
    return national
