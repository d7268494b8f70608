from repomanage.roster.identity import verify_git_usernames
from repomanage.roster.ids import generate_id
from repomanage.roster.naming import generate_group_name, generate_unique_group_name
from repomanage.roster.normalize import (
    normalize_email,
    normalize_git_username,
    normalize_header,
    normalize_name,
)
from repomanage.roster.reconcile import import_git_usernames, import_group_set, import_members
from repomanage.roster.resolution import resolve_assignment_groups
from repomanage.roster.slug import compute_repo_name, expand_template, slugify
from repomanage.roster.system import ensure_system_group_sets
from repomanage.roster.types import (
    Assignment,
    AssignmentType,
    EnrollmentType,
    GitIdentityMode,
    GitUsernameStatus,
    Group,
    GroupDraft,
    GroupSet,
    GroupSetKind,
    Member,
    MemberDraft,
    MemberStatus,
    Roster,
    RosterConnection,
)
from repomanage.roster.validation import (
    ValidationIssue,
    ValidationKind,
    ValidationResult,
    describe_issue,
    identity_mode_for,
    validate_assignment,
    validate_roster,
)

pyflakes = [
    verify_git_usernames, generate_id, generate_group_name, generate_unique_group_name,
    normalize_email, normalize_git_username, normalize_header, normalize_name,
    import_git_usernames, import_group_set, import_members, resolve_assignment_groups,
    compute_repo_name, expand_template, slugify, ensure_system_group_sets,
    Assignment, AssignmentType, EnrollmentType, GitIdentityMode, GitUsernameStatus, Group,
    GroupDraft, GroupSet, GroupSetKind, Member, MemberDraft, MemberStatus, Roster,
    RosterConnection, ValidationIssue, ValidationKind, ValidationResult, describe_issue,
    identity_mode_for, validate_assignment, validate_roster,
]
