"""Read roster data out of CSV files.

Parsers only shape rows into drafts; matching them against a roster is the
reconciler's job. Column headers are compared in normalized form, so
``Student Number``, ``student-number`` and ``STUDENT_NUMBER`` are the same
column.
"""
import csv
import logging

from repomanage.exceptions import ImportFormatError
from repomanage.roster.normalize import normalize_email, normalize_git_username, normalize_header
from repomanage.roster.types import EnrollmentType, GroupDraft, MemberDraft, MemberStatus

logger = logging.getLogger(__name__)

KNOWN_STUDENT_COLUMNS = {
    "name",
    "email",
    "student_number",
    "git_username",
    "enrollment_type",
    "role",
    "status",
}

COLUMN_ALIASES = {
    "e_mail": "email",
    "email_address": "email",
    "full_name": "name",
    "sis_user_id": "student_number",
    "github_username": "git_username",
    "gitlab_username": "git_username",
}

ROLE_ALIASES = {
    "student": EnrollmentType.student,
    "teacher": EnrollmentType.teacher,
    "instructor": EnrollmentType.teacher,
    "ta": EnrollmentType.ta,
    "teaching_assistant": EnrollmentType.ta,
    "designer": EnrollmentType.designer,
    "observer": EnrollmentType.observer,
}


def column_name(header):
    normalized = normalize_header(header)
    return COLUMN_ALIASES.get(normalized, normalized)


def _read_rows(fh, required):
    """Yield ``(row_number, {normalized header: value}, {original header: value})``."""
    reader = csv.reader(fh)
    try:
        header_row = next(reader)
    except StopIteration:
        raise ImportFormatError("The file is empty") from None
    except csv.Error as e:
        raise ImportFormatError("Failed to read CSV headers: {}".format(e)) from e

    headers = [(h.strip(), column_name(h)) for h in header_row]
    present = {normalized for _, normalized in headers}
    missing = [column for column in required if column not in present]
    if missing:
        raise ImportFormatError("Missing required headers: {}".format(", ".join(missing)))

    try:
        for row_number, row in enumerate(reader, start=2):
            if all(not cell.strip() for cell in row):
                continue

            known = {}
            original = {}
            for (header, normalized), cell in zip(headers, row):
                value = cell.strip()
                if not value:
                    continue
                known.setdefault(normalized, value)
                original[header] = value
            yield row_number, known, original
    except csv.Error as e:
        raise ImportFormatError("Failed to read CSV row: {}".format(e)) from e


def parse_role(value):
    if not value:
        return None
    return ROLE_ALIASES.get(normalize_header(value), EnrollmentType.other)


def parse_students_csv(fh, enrollment_type=None):
    """Member drafts from a CSV with at least ``name`` and ``email`` columns.

    Columns other than the known ones are kept as custom fields under their
    original header. Rows without a name or email are still returned so the
    reconciler can report them.
    """
    drafts = []
    for row_number, known, original in _read_rows(fh, ["name", "email"]):
        if "name" not in known or "email" not in known:
            logger.warning("Row %d is missing a name or email.", row_number)

        custom_fields = {
            header: value for header, value in original.items()
            if column_name(header) not in KNOWN_STUDENT_COLUMNS
        }
        status = None
        if known.get("status"):
            status = (MemberStatus.inactive if normalize_header(known["status"]) == "inactive"
                      else MemberStatus.active)

        drafts.append(MemberDraft(
            name=known.get("name", ""),
            email=normalize_email(known.get("email")),
            student_number=known.get("student_number"),
            git_username=normalize_git_username(known.get("git_username")) or None,
            status=status,
            enrollment_type=(enrollment_type or parse_role(known.get("enrollment_type"))
                             or parse_role(known.get("role"))),
            source="csv",
            custom_fields=custom_fields,
        ))

    logger.debug("Parsed %d member rows.", len(drafts))
    return drafts


def parse_git_usernames_csv(fh):
    """``(email, git username)`` pairs from a CSV with ``email`` and ``git_username`` columns."""
    entries = []
    for row_number, known, _ in _read_rows(fh, ["email", "git_username"]):
        if "email" not in known or "git_username" not in known:
            logger.warning("Row %d is missing an email or git username.", row_number)
            continue
        entries.append((normalize_email(known["email"]),
                        normalize_git_username(known["git_username"])))
    return entries


def parse_groups_csv(fh):
    """Group drafts from ``group`` and ``email`` columns, one row per membership.

    Groups keep the order in which they first appear.
    """
    groups = {}
    order = []
    for row_number, known, _ in _read_rows(fh, ["group", "email"]):
        name = known.get("group")
        if not name:
            logger.warning("Row %d has no group name.", row_number)
            continue

        if name not in groups:
            groups[name] = GroupDraft(name)
            order.append(name)

        email = normalize_email(known.get("email"))
        if email and email not in groups[name].member_emails:
            groups[name].member_emails.append(email)

    return [groups[name] for name in order]
