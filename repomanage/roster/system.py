"""System group sets.

Two sets are maintained automatically from the member lists:

- "Individual Students": one group per active student
- "Staff": a single group containing every active staff member
"""
import logging

from repomanage.roster.naming import generate_unique_group_name
from repomanage.roster.types import Group, GroupSet, GroupSetKind, ORIGIN_SYSTEM

logger = logging.getLogger(__name__)

SYSTEM_TYPE_INDIVIDUAL_STUDENTS = "individual_students"
SYSTEM_TYPE_STAFF = "staff"

INDIVIDUAL_STUDENTS_SET_NAME = "Individual Students"
STAFF_SET_NAME = "Staff"
STAFF_GROUP_NAME = "Staff"


class SystemGroupSetsResult:
    def __init__(self):
        self.group_sets = []
        self.groups_upserted = []
        self.deleted_group_ids = []

    @property
    def changed(self):
        return bool(self.groups_upserted or self.deleted_group_ids)


def find_system_set(roster, system_type):
    for group_set in roster.group_sets:
        if group_set.is_system and group_set.system_type == system_type:
            return group_set
    return None


def system_sets_missing(roster):
    return (find_system_set(roster, SYSTEM_TYPE_INDIVIDUAL_STUDENTS) is None or
            find_system_set(roster, SYSTEM_TYPE_STAFF) is None)


def _find_or_create_set(roster, system_type, name):
    group_set = find_system_set(roster, system_type)
    if group_set is None:
        group_set = GroupSet.new(name, GroupSetKind.system, system_type=system_type)
        roster.group_sets.append(group_set)
        logger.debug("Created system group set %s.", name)
    return group_set


def _ensure_individual_students(roster, result):
    group_set = _find_or_create_set(
        roster, SYSTEM_TYPE_INDIVIDUAL_STUDENTS, INDIVIDUAL_STUDENTS_SET_NAME
    )
    set_group_ids = set(group_set.group_ids)

    existing_by_member = {}
    for group in roster.groups:
        if (group.id in set_group_ids and group.origin == ORIGIN_SYSTEM
                and len(group.member_ids) == 1):
            existing_by_member.setdefault(group.member_ids[0], group)

    existing_names = {g.name for g in roster.groups if g.id in set_group_ids}
    needed_ids = []

    for student in roster.students:
        if not student.is_active:
            continue

        group = existing_by_member.get(student.id)
        if group is not None:
            # A group must not collide with its own current name.
            existing_names.discard(group.name)
            expected = generate_unique_group_name([student], existing_names)
            if group.name != expected:
                group.name = expected
                result.groups_upserted.append(group)
        else:
            expected = generate_unique_group_name([student], existing_names)
            group = Group.new(expected, [student.id], origin=ORIGIN_SYSTEM)
            roster.groups.append(group)
            result.groups_upserted.append(group)

        existing_names.add(expected)
        needed_ids.append(group.id)

    needed = set(needed_ids)
    for group_id in group_set.group_ids:
        if group_id not in needed and roster.find_group(group_id) is not None:
            roster.remove_group(group_id)
            result.deleted_group_ids.append(group_id)

    group_set.group_ids = needed_ids
    result.group_sets.append(group_set)


def _ensure_staff(roster, result):
    group_set = _find_or_create_set(roster, SYSTEM_TYPE_STAFF, STAFF_SET_NAME)
    active_staff = [m.id for m in roster.staff if m.is_active]

    staff_group = None
    for group_id in group_set.group_ids:
        group = roster.find_group(group_id)
        if group is not None and group.origin == ORIGIN_SYSTEM and group.name == STAFF_GROUP_NAME:
            staff_group = group
            break

    if staff_group is None:
        staff_group = Group.new(STAFF_GROUP_NAME, active_staff, origin=ORIGIN_SYSTEM)
        roster.groups.append(staff_group)
        result.groups_upserted.append(staff_group)
    elif staff_group.member_ids != active_staff:
        staff_group.member_ids = active_staff
        result.groups_upserted.append(staff_group)

    for group_id in group_set.group_ids:
        if group_id != staff_group.id and roster.find_group(group_id) is not None:
            roster.remove_group(group_id)
            result.deleted_group_ids.append(group_id)

    group_set.group_ids = [staff_group.id]
    result.group_sets.append(group_set)


def ensure_system_group_sets(roster):
    """Create or repair the system group sets so they mirror the members.

    Converges: calling it again on an unchanged roster changes nothing.
    """
    result = SystemGroupSetsResult()
    _ensure_individual_students(roster, result)
    _ensure_staff(roster, result)

    if result.changed:
        logger.debug("System group sets: %d groups upserted, %d deleted.",
                     len(result.groups_upserted), len(result.deleted_group_ids))
    return result


def prune_stale_memberships(roster):
    """Drop inactive or unknown members from every non-system group."""
    valid = {m.id for m in roster.members() if m.is_active}
    modified = []
    for group in roster.groups:
        if group.origin == ORIGIN_SYSTEM:
            continue
        kept = [mid for mid in group.member_ids if mid in valid]
        if kept != group.member_ids:
            group.member_ids = kept
            modified.append(group)
    return modified
