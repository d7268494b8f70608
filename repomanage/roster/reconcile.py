"""Merge imported member and group data into an existing roster.

Imports are additive: members and groups that are missing from an import
batch are left alone, so a partial or filtered export can never erase
roster history or break group references.
"""
import logging

from repomanage.roster.normalize import normalize_email, normalize_git_username, normalize_name
from repomanage.roster.types import (
    GitUsernameStatus,
    Group,
    GroupSet,
    GroupSetKind,
    Member,
    ORIGIN_LMS,
    ORIGIN_LOCAL,
)

logger = logging.getLogger(__name__)


class LmsIdConflict:
    """An incoming record's email belongs to a member with another LMS id."""

    def __init__(self, email, roster_lms_user_id, incoming_lms_user_id,
                 roster_member_name, incoming_name):
        self.email = email
        self.roster_lms_user_id = roster_lms_user_id
        self.incoming_lms_user_id = incoming_lms_user_id
        self.roster_member_name = roster_member_name
        self.incoming_name = incoming_name

    def __str__(self):
        return "{} (roster: {}, incoming: {})".format(
            self.email, self.roster_lms_user_id, self.incoming_lms_user_id
        )


class ImportSummary:
    def __init__(self):
        self.added = 0
        self.updated = 0
        self.unchanged = 0
        self.missing_email = 0
        self.missing_email_drafts = []
        self.conflicts = []

    def to_dict(self):
        return {
            "added": self.added,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "missing_email": self.missing_email,
            "conflicts": [str(c) for c in self.conflicts],
        }


class ImportResult:
    def __init__(self, summary, roster):
        self.summary = summary
        self.roster = roster


class _MemberIndex:
    """Lookup of one member list by LMS id and by normalized email.

    Kept current while a batch is applied, so later drafts see the members
    earlier drafts created or changed.
    """

    def __init__(self, members):
        self.by_lms_id = {}
        self.by_email = {}
        for member in members:
            self.add(member)

    def add(self, member):
        if member.lms_user_id:
            self.by_lms_id[member.lms_user_id] = member
        if member.email:
            self.by_email[normalize_email(member.email)] = member

    def update(self, member, previous_email):
        """Re-index a changed member, dropping its old email key."""
        previous_email = normalize_email(previous_email)
        if previous_email and self.by_email.get(previous_email) is member:
            del self.by_email[previous_email]
        self.add(member)


def _merge_draft(member, draft, email, matched_by_lms_id):
    """Apply a draft's values to a matched member. Returns whether anything changed."""
    changed = False

    name = (draft.name or "").strip()
    if name and member.name != name:
        member.name = name
        changed = True

    if matched_by_lms_id and member.email != email:
        member.email = email
        changed = True

    student_number = draft.student_number or None
    if student_number is not None and member.student_number != student_number:
        member.student_number = student_number
        changed = True

    if draft.lms_user_id and not member.lms_user_id:
        member.lms_user_id = draft.lms_user_id
        changed = True

    if draft.custom_fields:
        merged = dict(member.custom_fields)
        merged.update(draft.custom_fields)
        if merged != member.custom_fields:
            member.custom_fields = merged
            changed = True

    username = normalize_git_username(draft.git_username)
    if username and username != member.git_username:
        member.git_username = username
        # A verification of the old value says nothing about the new one.
        member.git_username_status = GitUsernameStatus.unset
        changed = True

    return changed


def import_members(roster, drafts, source=None):
    """Reconcile a batch of member drafts against ``roster`` (mutated in place).

    Each draft is matched against members of the same role, first by LMS
    user id, then by normalized email. Matched members keep their id;
    unmatched drafts become new members. Drafts without an email are
    counted and skipped.
    """
    summary = ImportSummary()
    indexes = {
        True: _MemberIndex(roster.students),
        False: _MemberIndex(roster.staff),
    }

    for draft in drafts:
        email = normalize_email(draft.email)
        if not email:
            logger.warning("Skipping %s: no email address.", draft.name or "unnamed record")
            summary.missing_email += 1
            summary.missing_email_drafts.append(draft)
            continue

        is_student = draft.is_student
        index = indexes[is_student]

        member = None
        matched_by_lms_id = False
        if draft.lms_user_id:
            member = index.by_lms_id.get(draft.lms_user_id)
            matched_by_lms_id = member is not None

        if member is None:
            member = index.by_email.get(email)
            if (member is not None and draft.lms_user_id and member.lms_user_id
                    and member.lms_user_id != draft.lms_user_id):
                conflict = LmsIdConflict(email, member.lms_user_id, draft.lms_user_id,
                                         member.name, draft.name)
                logger.warning("LMS id conflict for %s, skipping.", conflict)
                summary.conflicts.append(conflict)
                continue

        if member is None:
            if source is not None and draft.source is None:
                draft.source = source
            member = Member.new(draft)
            if is_student:
                roster.students.append(member)
            else:
                roster.staff.append(member)
            index.add(member)
            summary.added += 1
            logger.debug("Added %s <%s>.", member.name, member.email)
            continue

        previous_email = member.email
        if _merge_draft(member, draft, email, matched_by_lms_id):
            index.update(member, previous_email)
            summary.updated += 1
            logger.debug("Updated %s <%s>.", member.name, member.email)
        else:
            summary.unchanged += 1

    logger.info(
        "Import: %d added, %d updated, %d unchanged, %d missing email.",
        summary.added, summary.updated, summary.unchanged, summary.missing_email
    )
    return ImportResult(summary, roster)


class GroupImportSummary:
    def __init__(self):
        self.groups_added = 0
        self.groups_updated = 0
        self.groups_unchanged = 0
        self.unresolved_members = 0

    def to_dict(self):
        return {
            "groups_added": self.groups_added,
            "groups_updated": self.groups_updated,
            "groups_unchanged": self.groups_unchanged,
            "unresolved_members": self.unresolved_members,
        }


class GroupImportResult:
    def __init__(self, summary, group_set, roster):
        self.summary = summary
        self.group_set = group_set
        self.roster = roster


def _resolve_draft_members(roster, draft, summary):
    by_lms_id = {m.lms_user_id: m.id for m in roster.members() if m.lms_user_id}
    by_email = {}
    for member in roster.members():
        if member.email:
            by_email.setdefault(member.email, member.id)

    resolved = []

    def add(member_id):
        if member_id not in resolved:
            resolved.append(member_id)

    for member_id in draft.member_ids:
        if roster.find_member(member_id) is not None:
            add(member_id)
        else:
            summary.unresolved_members += 1
    for lms_id in draft.member_lms_ids:
        if lms_id in by_lms_id:
            add(by_lms_id[lms_id])
        else:
            summary.unresolved_members += 1
    for email in draft.member_emails:
        email = normalize_email(email)
        if email in by_email:
            add(by_email[email])
        else:
            summary.unresolved_members += 1

    return resolved


def import_group_set(roster, name, group_drafts, kind=GroupSetKind.lms, lms_group_set_id=None):
    """Create or refresh a group set from group drafts.

    An existing set is found by LMS group set id, or otherwise by name; its
    groups are matched by LMS group id or name and keep their ids. Groups
    that are no longer present in the source are kept.
    """
    summary = GroupImportSummary()

    group_set = None
    if lms_group_set_id is not None:
        for candidate in roster.group_sets:
            if candidate.lms_group_set_id == lms_group_set_id:
                group_set = candidate
                break
    if group_set is None:
        candidate = roster.find_group_set_by_name(name)
        if candidate is not None and candidate.kind == kind:
            group_set = candidate
    if group_set is None:
        group_set = GroupSet.new(name, kind, lms_group_set_id=lms_group_set_id)
        roster.group_sets.append(group_set)
        logger.debug("Created group set %s.", name)

    origin = ORIGIN_LMS if kind == GroupSetKind.lms else ORIGIN_LOCAL
    existing = [g for g in (roster.find_group(gid) for gid in group_set.group_ids) if g]

    for draft in group_drafts:
        member_ids = _resolve_draft_members(roster, draft, summary)

        group = None
        for candidate in existing:
            if draft.lms_group_id is not None and candidate.lms_group_id == draft.lms_group_id:
                group = candidate
                break
        if group is None and draft.lms_group_id is None:
            for candidate in existing:
                if normalize_name(candidate.name) == normalize_name(draft.name):
                    group = candidate
                    break

        if group is None:
            group = Group.new(draft.name, member_ids, origin=origin,
                              lms_group_id=draft.lms_group_id)
            roster.groups.append(group)
            group_set.group_ids.append(group.id)
            existing.append(group)
            summary.groups_added += 1
            continue

        if group.name != draft.name or group.member_ids != member_ids:
            group.name = draft.name
            group.member_ids = member_ids
            summary.groups_updated += 1
        else:
            summary.groups_unchanged += 1

    if summary.unresolved_members:
        logger.warning("%d group member references did not match any roster member.",
                       summary.unresolved_members)
    logger.info("Group set %s: %d added, %d updated, %d unchanged.", group_set.name,
                summary.groups_added, summary.groups_updated, summary.groups_unchanged)
    return GroupImportResult(summary, group_set, roster)


class GitUsernameImportSummary:
    def __init__(self):
        self.updated = 0
        self.unchanged = 0
        self.not_found = []


def import_git_usernames(roster, entries):
    """Set git usernames from ``(email, username)`` pairs."""
    summary = GitUsernameImportSummary()
    for email, username in entries:
        member = roster.find_member_by_email(email)
        if member is None:
            summary.not_found.append(normalize_email(email))
            continue

        username = normalize_git_username(username)
        if not username or member.git_username == username:
            summary.unchanged += 1
            continue

        member.git_username = username
        member.git_username_status = GitUsernameStatus.unset
        summary.updated += 1

    if summary.not_found:
        logger.warning("No member found for %d email addresses.", len(summary.not_found))
    return summary
