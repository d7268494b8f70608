def resolve_assignment_groups(roster, assignment):
    """Groups of the assignment's group set, in set order.

    A missing group set is a normal state before any import, so it simply
    resolves to no groups.
    """
    group_set = roster.find_group_set(assignment.group_set_id)
    if group_set is None:
        return []

    return resolve_group_set_groups(roster, group_set)


def resolve_group_set_groups(roster, group_set):
    groups_by_id = {g.id: g for g in roster.groups}
    return [groups_by_id[gid] for gid in group_set.group_ids if gid in groups_by_id]


def active_member_ids(roster, group):
    active = {m.id for m in roster.members() if m.is_active}
    return [mid for mid in group.member_ids if mid in active]
