"""Identity field checks shared by account creation and the application form"""
import re

from email_validator import validate_email, EmailNotValidError

MATRIC_NO_PATTERN = re.compile(r"^A\d{7}[A-Z]$", re.IGNORECASE)
NUSNET_ID_PATTERN = re.compile(r"^E\d{7}$", re.IGNORECASE)


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value or "", check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_matric_no(value: str) -> bool:
    return bool(MATRIC_NO_PATTERN.match((value or "").strip()))


def is_valid_nusnet_id(value: str) -> bool:
    return bool(NUSNET_ID_PATTERN.match((value or "").strip()))
