import re

_HEADER_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def normalize_email(value):
    return (value or "").strip().lower()


def normalize_git_username(value):
    return (value or "").strip().lower()


def normalize_header(value):
    """Canonical form of an import column header.

    ``"Student Number"``, ``"student-number"`` and ``" STUDENT_NUMBER "`` all
    become ``"student_number"``.
    """
    collapsed = _HEADER_SEPARATOR_RE.sub("_", (value or "").strip().lower())
    return collapsed.strip("_")


def normalize_name(value):
    """Collapse whitespace and lowercase; used to compare human names."""
    return " ".join((value or "").split()).lower()


def is_valid_email(email):
    email = (email or "").strip()
    parts = email.split("@")
    if len(parts) != 2:
        return False

    local, domain = parts
    if not local or not domain or " " in local:
        return False

    dot = domain.rfind(".")
    return 0 < dot < len(domain) - 1
