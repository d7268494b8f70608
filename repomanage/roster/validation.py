"""Structural checks over a roster and over the groups of an assignment.

Validation never raises: problems are returned as ``ValidationIssue``
records so callers can decide whether to proceed.
"""
import logging
from collections import OrderedDict
from enum import Enum

from repomanage.roster.normalize import is_valid_email, normalize_email, normalize_name
from repomanage.roster.resolution import resolve_assignment_groups
from repomanage.roster.slug import DEFAULT_REPO_TEMPLATE, compute_repo_name
from repomanage.roster.system import system_sets_missing
from repomanage.roster.types import EnrollmentType, GitIdentityMode, GitUsernameStatus

logger = logging.getLogger(__name__)


class ValidationKind(Enum):
    # Assignment checks, in reporting order.
    EMPTY_GROUP = "empty_group"
    DUPLICATE_GROUP_ID_IN_ASSIGNMENT = "duplicate_group_id_in_assignment"
    DUPLICATE_REPO_NAME_IN_ASSIGNMENT = "duplicate_repo_name_in_assignment"
    STUDENT_IN_MULTIPLE_GROUPS_IN_ASSIGNMENT = "student_in_multiple_groups_in_assignment"
    ORPHAN_GROUP_MEMBER = "orphan_group_member"
    MISSING_GIT_USERNAME = "missing_git_username"
    INVALID_GIT_USERNAME = "invalid_git_username"

    # Roster checks.
    SYSTEM_GROUP_SETS_MISSING = "system_group_sets_missing"
    DUPLICATE_MEMBER_ID = "duplicate_member_id"
    MISSING_EMAIL = "missing_email"
    INVALID_EMAIL = "invalid_email"
    DUPLICATE_EMAIL = "duplicate_email"
    DUPLICATE_ASSIGNMENT_NAME = "duplicate_assignment_name"
    DUPLICATE_GROUP_ID = "duplicate_group_id"
    ORPHAN_GROUP_REFERENCE = "orphan_group_reference"
    INVALID_ENROLLMENT_PARTITION = "invalid_enrollment_partition"

    @property
    def is_blocking(self):
        return self in BLOCKING_KINDS

    @property
    def affects_groups(self):
        return self in GROUP_KINDS


BLOCKING_KINDS = frozenset([
    ValidationKind.EMPTY_GROUP,
    ValidationKind.DUPLICATE_GROUP_ID_IN_ASSIGNMENT,
    ValidationKind.DUPLICATE_REPO_NAME_IN_ASSIGNMENT,
    ValidationKind.STUDENT_IN_MULTIPLE_GROUPS_IN_ASSIGNMENT,
    ValidationKind.ORPHAN_GROUP_MEMBER,
    ValidationKind.MISSING_GIT_USERNAME,
    ValidationKind.INVALID_GIT_USERNAME,
    ValidationKind.SYSTEM_GROUP_SETS_MISSING,
    ValidationKind.DUPLICATE_MEMBER_ID,
    ValidationKind.INVALID_EMAIL,
    ValidationKind.DUPLICATE_EMAIL,
    ValidationKind.DUPLICATE_ASSIGNMENT_NAME,
    ValidationKind.DUPLICATE_GROUP_ID,
    ValidationKind.ORPHAN_GROUP_REFERENCE,
    ValidationKind.INVALID_ENROLLMENT_PARTITION,
])

# Kinds whose affected ids are group ids rather than member ids.
GROUP_KINDS = frozenset([
    ValidationKind.EMPTY_GROUP,
    ValidationKind.DUPLICATE_GROUP_ID_IN_ASSIGNMENT,
    ValidationKind.DUPLICATE_REPO_NAME_IN_ASSIGNMENT,
    ValidationKind.DUPLICATE_GROUP_ID,
    ValidationKind.ORPHAN_GROUP_REFERENCE,
])


class ValidationIssue:
    def __init__(self, kind, affected_ids, context=None):
        self.kind = kind
        self.affected_ids = list(affected_ids)
        self.context = context

    @property
    def is_blocking(self):
        return self.kind.is_blocking

    def to_dict(self):
        data = {
            "kind": self.kind.value,
            "affected-ids": list(self.affected_ids),
            "blocking": self.is_blocking,
        }
        if self.context is not None:
            data["context"] = self.context
        return data

    def __eq__(self, other):
        if not isinstance(other, ValidationIssue):
            return NotImplemented
        return (self.kind, self.affected_ids, self.context) == \
            (other.kind, other.affected_ids, other.context)

    def __repr__(self):
        return "ValidationIssue({}, {!r}, {!r})".format(
            self.kind.value, self.affected_ids, self.context
        )


class ValidationResult:
    def __init__(self, issues=None):
        self.issues = list(issues or [])

    def has_blocking_issues(self):
        return any(issue.is_blocking for issue in self.issues)

    def blocking_issues(self):
        return [issue for issue in self.issues if issue.is_blocking]

    def warnings(self):
        return [issue for issue in self.issues if not issue.is_blocking]

    def of_kind(self, kind):
        return [issue for issue in self.issues if issue.kind == kind]

    def to_dict(self):
        return {"issues": [issue.to_dict() for issue in self.issues]}

    def __bool__(self):
        return bool(self.issues)

    def __len__(self):
        return len(self.issues)


_DESCRIPTIONS = {
    ValidationKind.EMPTY_GROUP: "Group has no members",
    ValidationKind.DUPLICATE_GROUP_ID_IN_ASSIGNMENT: "Group appears more than once in the assignment",
    ValidationKind.DUPLICATE_REPO_NAME_IN_ASSIGNMENT: "Groups would share the repository name {context}",
    ValidationKind.STUDENT_IN_MULTIPLE_GROUPS_IN_ASSIGNMENT: "Member is in several groups: {context}",
    ValidationKind.ORPHAN_GROUP_MEMBER: "Group {context} references an unknown member",
    ValidationKind.MISSING_GIT_USERNAME: "Member has no git username",
    ValidationKind.INVALID_GIT_USERNAME: "Git username {context} does not exist on the platform",
    ValidationKind.SYSTEM_GROUP_SETS_MISSING: "System group sets have not been created",
    ValidationKind.DUPLICATE_MEMBER_ID: "Member id is used more than once",
    ValidationKind.MISSING_EMAIL: "Student has no email address",
    ValidationKind.INVALID_EMAIL: "Email address {context} is not valid",
    ValidationKind.DUPLICATE_EMAIL: "Email address {context} is shared by several students",
    ValidationKind.DUPLICATE_ASSIGNMENT_NAME: "Assignment name {context} is used more than once",
    ValidationKind.DUPLICATE_GROUP_ID: "Group id is used more than once",
    ValidationKind.ORPHAN_GROUP_REFERENCE: "Group set {context} references an unknown group",
    ValidationKind.INVALID_ENROLLMENT_PARTITION: "Member is listed with the wrong role ({context})",
}


def describe_issue(issue):
    """Human readable one-line description of an issue."""
    return _DESCRIPTIONS[issue.kind].format(context=issue.context or "")


def identity_mode_for(platform_name, gitlab_mode=None):
    """The identity mode implied by a platform.

    GitHub and Gitea grant access by account name; GitLab can be configured
    either way and defaults to email; the local platform has no accounts.
    """
    if platform_name in ("github", "gitea"):
        return GitIdentityMode.username
    if platform_name == "gitlab":
        if gitlab_mode is None:
            return GitIdentityMode.email
        return GitIdentityMode(gitlab_mode)
    return GitIdentityMode.email


def _duplicates(values):
    """Values occurring more than once, in order of first occurrence."""
    seen = set()
    dupes = OrderedDict()
    for value in values:
        if value in seen:
            dupes[value] = True
        seen.add(value)
    return list(dupes)


def validate_assignment(roster, assignment_id, identity_mode, template=None):
    assignment = roster.find_assignment(assignment_id)
    if assignment is None:
        logger.debug("Assignment %s not found; nothing to validate.", assignment_id)
        return ValidationResult()

    template = assignment.repo_name_template or template or DEFAULT_REPO_TEMPLATE
    groups = resolve_assignment_groups(roster, assignment)
    members = {m.id: m for m in roster.members()}
    unique_groups = list(OrderedDict((g.id, g) for g in groups).values())
    issues = []

    for group in unique_groups:
        if not group.member_ids:
            issues.append(ValidationIssue(ValidationKind.EMPTY_GROUP, [group.id]))

    for group_id in _duplicates(g.id for g in groups):
        issues.append(ValidationIssue(ValidationKind.DUPLICATE_GROUP_ID_IN_ASSIGNMENT, [group_id]))

    by_repo_name = OrderedDict()
    for group in groups:
        ids = by_repo_name.setdefault(compute_repo_name(template, assignment, group), [])
        if group.id not in ids:
            ids.append(group.id)
    for repo_name, group_ids in by_repo_name.items():
        if len(group_ids) > 1:
            issues.append(ValidationIssue(
                ValidationKind.DUPLICATE_REPO_NAME_IN_ASSIGNMENT, group_ids, repo_name
            ))

    groups_of_member = OrderedDict()
    for group in unique_groups:
        for member_id in group.member_ids:
            member = members.get(member_id)
            if member is None or not member.is_active:
                continue
            groups_of_member.setdefault(member_id, OrderedDict())[group.id] = group
    for member_id, member_groups in groups_of_member.items():
        if len(member_groups) > 1:
            issues.append(ValidationIssue(
                ValidationKind.STUDENT_IN_MULTIPLE_GROUPS_IN_ASSIGNMENT,
                [member_id], ", ".join(g.name for g in member_groups.values())
            ))

    for group in unique_groups:
        for member_id in group.member_ids:
            if member_id not in members:
                issues.append(ValidationIssue(
                    ValidationKind.ORPHAN_GROUP_MEMBER, [member_id], group.name
                ))

    if identity_mode == GitIdentityMode.username:
        ready = OrderedDict()
        for group in groups:
            for member_id in group.member_ids:
                member = members.get(member_id)
                if member is not None and member.is_active:
                    ready.setdefault(member_id, member)

        for member in ready.values():
            if not member.git_username:
                issues.append(ValidationIssue(ValidationKind.MISSING_GIT_USERNAME, [member.id]))
        for member in ready.values():
            if member.git_username and member.git_username_status == GitUsernameStatus.invalid:
                issues.append(ValidationIssue(
                    ValidationKind.INVALID_GIT_USERNAME, [member.id], member.git_username
                ))

    result = ValidationResult(issues)
    logger.info("Assignment %s: %d issues (%d blocking).", assignment.name,
                len(result.issues), len(result.blocking_issues()))
    return result


def validate_roster(roster):
    """Roster-wide checks that do not depend on an assignment."""
    issues = []

    if system_sets_missing(roster):
        issues.append(ValidationIssue(ValidationKind.SYSTEM_GROUP_SETS_MISSING, []))

    for member_id in _duplicates(m.id for m in roster.members()):
        issues.append(ValidationIssue(ValidationKind.DUPLICATE_MEMBER_ID, [member_id]))

    for student in roster.students:
        if not student.email:
            issues.append(ValidationIssue(ValidationKind.MISSING_EMAIL, [student.id], student.name))

    for student in roster.students:
        if student.email and not is_valid_email(student.email):
            issues.append(ValidationIssue(
                ValidationKind.INVALID_EMAIL, [student.id], student.email
            ))

    by_email = OrderedDict()
    for student in roster.students:
        if student.email:
            by_email.setdefault(normalize_email(student.email), []).append(student.id)
    for email, member_ids in by_email.items():
        if len(member_ids) > 1:
            issues.append(ValidationIssue(ValidationKind.DUPLICATE_EMAIL, member_ids, email))

    by_assignment_name = OrderedDict()
    for assignment in roster.assignments:
        by_assignment_name.setdefault(normalize_name(assignment.name), []).append(assignment.id)
    for name, assignment_ids in by_assignment_name.items():
        if len(assignment_ids) > 1:
            issues.append(ValidationIssue(
                ValidationKind.DUPLICATE_ASSIGNMENT_NAME, assignment_ids, name
            ))

    for group_id in _duplicates(g.id for g in roster.groups):
        issues.append(ValidationIssue(ValidationKind.DUPLICATE_GROUP_ID, [group_id]))

    group_ids = {g.id for g in roster.groups}
    for group_set in roster.group_sets:
        for group_id in group_set.group_ids:
            if group_id not in group_ids:
                issues.append(ValidationIssue(
                    ValidationKind.ORPHAN_GROUP_REFERENCE, [group_id], group_set.name
                ))

    member_ids = {m.id for m in roster.members()}
    for group in roster.groups:
        for member_id in group.member_ids:
            if member_id not in member_ids:
                issues.append(ValidationIssue(
                    ValidationKind.ORPHAN_GROUP_MEMBER, [member_id], group.name
                ))

    for student in roster.students:
        if student.enrollment_type != EnrollmentType.student:
            issues.append(ValidationIssue(
                ValidationKind.INVALID_ENROLLMENT_PARTITION, [student.id],
                student.enrollment_type.value
            ))
    for member in roster.staff:
        if member.enrollment_type == EnrollmentType.student:
            issues.append(ValidationIssue(
                ValidationKind.INVALID_ENROLLMENT_PARTITION, [member.id],
                member.enrollment_type.value
            ))

    result = ValidationResult(issues)
    logger.info("Roster: %d issues (%d blocking).", len(result.issues),
                len(result.blocking_issues()))
    return result
