from enum import Enum
from typing import Dict, List, Optional

from repomanage.roster.ids import generate_id
from repomanage.roster.normalize import normalize_email, normalize_git_username, normalize_name


class MemberStatus(Enum):
    active = "active"
    inactive = "inactive"


class GitUsernameStatus(Enum):
    unset = "unset"
    verified = "verified"
    invalid = "invalid"


class EnrollmentType(Enum):
    student = "student"
    teacher = "teacher"
    ta = "ta"
    designer = "designer"
    observer = "observer"
    other = "other"


class GroupSetKind(Enum):
    system = "system"
    lms = "lms"
    imported = "import"
    local = "local"


class AssignmentType(Enum):
    class_wide = "class_wide"
    selective = "selective"


class GitIdentityMode(Enum):
    """Whether provisioning must resolve members to platform usernames."""
    username = "username"
    email = "email"


ORIGIN_SYSTEM = "system"
ORIGIN_LMS = "lms"
ORIGIN_LOCAL = "local"


def _enum_or_default(enum_cls, value, default):
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    return enum_cls(value)


class MemberDraft:
    """A member as read from an import source, before reconciliation."""

    def __init__(self, name: str, email: str, student_number: Optional[str] = None,
                 git_username: Optional[str] = None, lms_user_id: Optional[str] = None,
                 status: Optional[MemberStatus] = None,
                 enrollment_type: Optional[EnrollmentType] = None,
                 source: Optional[str] = None,
                 custom_fields: Optional[Dict[str, str]] = None):
        self.name = name
        self.email = email
        self.student_number = student_number
        self.git_username = git_username
        self.lms_user_id = lms_user_id
        self.status = status
        self.enrollment_type = enrollment_type
        self.source = source
        self.custom_fields = dict(custom_fields or {})

    @property
    def is_student(self):
        return self.enrollment_type in (None, EnrollmentType.student)

    def __repr__(self):
        return "MemberDraft(name={!r}, email={!r})".format(self.name, self.email)


class Member:
    """A student or staff member of a roster."""

    def __init__(self, id: str, name: str, email: str = "",
                 student_number: Optional[str] = None,
                 git_username: Optional[str] = None,
                 git_username_status: GitUsernameStatus = GitUsernameStatus.unset,
                 status: MemberStatus = MemberStatus.active,
                 lms_user_id: Optional[str] = None,
                 enrollment_type: EnrollmentType = EnrollmentType.student,
                 source: str = "local",
                 custom_fields: Optional[Dict[str, str]] = None):
        self.id = id
        self.name = name
        self.email = email
        self.student_number = student_number
        self.git_username = git_username
        self.git_username_status = git_username_status
        self.status = status
        self.lms_user_id = lms_user_id
        self.enrollment_type = enrollment_type
        self.source = source
        self.custom_fields = dict(custom_fields or {})

    @classmethod
    def new(cls, draft: MemberDraft) -> "Member":
        """Create a member with a freshly generated id."""
        username = normalize_git_username(draft.git_username) or None
        return cls(
            id=generate_id(),
            name=(draft.name or "").strip(),
            email=normalize_email(draft.email),
            student_number=draft.student_number or None,
            git_username=username,
            status=draft.status or MemberStatus.active,
            lms_user_id=draft.lms_user_id or None,
            enrollment_type=draft.enrollment_type or EnrollmentType.student,
            source=draft.source or "local",
            custom_fields=draft.custom_fields,
        )

    @property
    def is_student(self):
        return self.enrollment_type == EnrollmentType.student

    @property
    def is_active(self):
        return self.status == MemberStatus.active

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "git-username-status": self.git_username_status.value,
            "status": self.status.value,
            "enrollment-type": self.enrollment_type.value,
            "source": self.source,
        }
        if self.student_number is not None:
            data["student-number"] = self.student_number
        if self.git_username is not None:
            data["git-username"] = self.git_username
        if self.lms_user_id is not None:
            data["lms-user-id"] = self.lms_user_id
        if self.custom_fields:
            data["custom-fields"] = dict(self.custom_fields)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            email=data.get("email", ""),
            student_number=data.get("student-number"),
            git_username=data.get("git-username"),
            git_username_status=_enum_or_default(
                GitUsernameStatus, data.get("git-username-status"), GitUsernameStatus.unset),
            status=_enum_or_default(MemberStatus, data.get("status"), MemberStatus.active),
            lms_user_id=data.get("lms-user-id"),
            enrollment_type=_enum_or_default(
                EnrollmentType, data.get("enrollment-type"), EnrollmentType.student),
            source=data.get("source", "local"),
            custom_fields=data.get("custom-fields"),
        )

    def __repr__(self):
        return "Member(id={!r}, name={!r}, email={!r})".format(self.id, self.name, self.email)


class GroupDraft:
    """A group to create or refresh.

    Members are given as roster member ids, LMS user ids or emails; the
    reconciler resolves whichever are present.
    """

    def __init__(self, name: str, member_ids: Optional[List[str]] = None,
                 lms_group_id: Optional[str] = None,
                 member_lms_ids: Optional[List[str]] = None,
                 member_emails: Optional[List[str]] = None):
        self.name = name
        self.member_ids = list(member_ids or [])
        self.lms_group_id = lms_group_id
        self.member_lms_ids = list(member_lms_ids or [])
        self.member_emails = list(member_emails or [])

    def __repr__(self):
        return "GroupDraft(name={!r})".format(self.name)


class Group:
    def __init__(self, id: str, name: str, member_ids: Optional[List[str]] = None,
                 origin: str = ORIGIN_LOCAL, lms_group_id: Optional[str] = None):
        self.id = id
        self.name = name
        self.member_ids = list(member_ids or [])
        self.origin = origin
        self.lms_group_id = lms_group_id

    @classmethod
    def new(cls, name, member_ids=None, origin=ORIGIN_LOCAL, lms_group_id=None):
        return cls(generate_id(), name, member_ids, origin, lms_group_id)

    @property
    def is_editable(self):
        return self.origin == ORIGIN_LOCAL

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "member-ids": list(self.member_ids),
            "origin": self.origin,
        }
        if self.lms_group_id is not None:
            data["lms-group-id"] = self.lms_group_id
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            member_ids=data.get("member-ids"),
            origin=data.get("origin", ORIGIN_LOCAL),
            lms_group_id=data.get("lms-group-id"),
        )

    def __repr__(self):
        return "Group(id={!r}, name={!r})".format(self.id, self.name)


class GroupSet:
    def __init__(self, id: str, name: str, kind: GroupSetKind = GroupSetKind.local,
                 group_ids: Optional[List[str]] = None,
                 system_type: Optional[str] = None,
                 lms_group_set_id: Optional[str] = None):
        self.id = id
        self.name = name
        self.kind = kind
        self.group_ids = list(group_ids or [])
        self.system_type = system_type
        self.lms_group_set_id = lms_group_set_id

    @classmethod
    def new(cls, name, kind=GroupSetKind.local, system_type=None, lms_group_set_id=None):
        return cls(generate_id(), name, kind, [], system_type, lms_group_set_id)

    @property
    def is_system(self):
        return self.kind == GroupSetKind.system

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "group-ids": list(self.group_ids),
        }
        if self.system_type is not None:
            data["system-type"] = self.system_type
        if self.lms_group_set_id is not None:
            data["lms-group-set-id"] = self.lms_group_set_id
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            kind=_enum_or_default(GroupSetKind, data.get("kind"), GroupSetKind.local),
            group_ids=data.get("group-ids"),
            system_type=data.get("system-type"),
            lms_group_set_id=data.get("lms-group-set-id"),
        )

    def __repr__(self):
        return "GroupSet(id={!r}, name={!r}, kind={})".format(self.id, self.name, self.kind.value)


class Assignment:
    def __init__(self, id: str, name: str, group_set_id: str,
                 description: Optional[str] = None,
                 assignment_type: AssignmentType = AssignmentType.class_wide,
                 repo_name_template: Optional[str] = None):
        self.id = id
        self.name = name
        self.group_set_id = group_set_id
        self.description = description
        self.assignment_type = assignment_type
        self.repo_name_template = repo_name_template

    @classmethod
    def new(cls, name, group_set_id, **kwargs):
        return cls(generate_id(), name, group_set_id, **kwargs)

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "group-set-id": self.group_set_id,
            "assignment-type": self.assignment_type.value,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.repo_name_template is not None:
            data["repo-name-template"] = self.repo_name_template
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            group_set_id=data["group-set-id"],
            description=data.get("description"),
            assignment_type=_enum_or_default(
                AssignmentType, data.get("assignment-type"), AssignmentType.class_wide),
            repo_name_template=data.get("repo-name-template"),
        )

    def __repr__(self):
        return "Assignment(id={!r}, name={!r})".format(self.id, self.name)


class RosterConnection:
    """Where the roster data came from."""

    def __init__(self, kind: str, lms_type: Optional[str] = None,
                 base_url: Optional[str] = None, course_id: Optional[str] = None,
                 updated_at: Optional[str] = None):
        self.kind = kind
        self.lms_type = lms_type
        self.base_url = base_url
        self.course_id = course_id
        self.updated_at = updated_at

    def to_dict(self):
        data = {"kind": self.kind}
        for key, value in (("lms-type", self.lms_type), ("base-url", self.base_url),
                           ("course-id", self.course_id), ("updated-at", self.updated_at)):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            kind=data["kind"],
            lms_type=data.get("lms-type"),
            base_url=data.get("base-url"),
            course_id=data.get("course-id"),
            updated_at=data.get("updated-at"),
        )


class Roster:
    """Aggregate root for a course: members, groups, group sets, assignments.

    Everything outside the roster refers to members and groups by id and
    resolves them again through the ``find_*`` helpers.
    """

    def __init__(self, connection=None, students=None, staff=None, groups=None,
                 group_sets=None, assignments=None):
        self.connection = connection  # type: Optional[RosterConnection]
        self.students = list(students or [])  # type: List[Member]
        self.staff = list(staff or [])  # type: List[Member]
        self.groups = list(groups or [])  # type: List[Group]
        self.group_sets = list(group_sets or [])  # type: List[GroupSet]
        self.assignments = list(assignments or [])  # type: List[Assignment]

    @classmethod
    def empty(cls):
        return cls()

    def members(self):
        """Students followed by staff."""
        return self.students + self.staff

    def find_member(self, member_id):
        for member in self.members():
            if member.id == member_id:
                return member
        return None

    def find_member_by_email(self, email):
        email = normalize_email(email)
        for member in self.members():
            if member.email == email:
                return member
        return None

    def find_group(self, group_id):
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def find_group_set(self, group_set_id):
        for group_set in self.group_sets:
            if group_set.id == group_set_id:
                return group_set
        return None

    def find_group_set_by_name(self, name):
        name = normalize_name(name)
        for group_set in self.group_sets:
            if normalize_name(group_set.name) == name:
                return group_set
        return None

    def find_assignment(self, assignment_id):
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    def find_assignment_by_name(self, name):
        name = normalize_name(name)
        for assignment in self.assignments:
            if normalize_name(assignment.name) == name:
                return assignment
        return None

    def remove_group(self, group_id):
        """Drop a group and every group set reference to it."""
        self.groups = [g for g in self.groups if g.id != group_id]
        for group_set in self.group_sets:
            if group_id in group_set.group_ids:
                group_set.group_ids = [gid for gid in group_set.group_ids if gid != group_id]

    def to_dict(self):
        return {
            "connection": self.connection.to_dict() if self.connection else None,
            "students": [m.to_dict() for m in self.students],
            "staff": [m.to_dict() for m in self.staff],
            "groups": [g.to_dict() for g in self.groups],
            "group-sets": [gs.to_dict() for gs in self.group_sets],
            "assignments": [a.to_dict() for a in self.assignments],
        }

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        connection = data.get("connection")
        return cls(
            connection=RosterConnection.from_dict(connection) if connection else None,
            students=[Member.from_dict(m) for m in data.get("students") or []],
            staff=[Member.from_dict(m) for m in data.get("staff") or []],
            groups=[Group.from_dict(g) for g in data.get("groups") or []],
            group_sets=[GroupSet.from_dict(gs) for gs in data.get("group-sets") or []],
            assignments=[Assignment.from_dict(a) for a in data.get("assignments") or []],
        )
