import logging

from prettytable import PrettyTable

from repomanage.exceptions import NotFound
from repomanage.roster.normalize import normalize_name
from repomanage.roster.resolution import resolve_group_set_groups
from repomanage.roster.validation import describe_issue

logger = logging.getLogger(__name__)


def get_assignment(roster, name):
    assignment = roster.find_assignment_by_name(name) or roster.find_assignment(name)
    if assignment is None:
        raise NotFound("No assignment named {}.".format(name))
    return assignment


def get_group_set(roster, name):
    group_set = roster.find_group_set_by_name(name) or roster.find_group_set(name)
    if group_set is None:
        raise NotFound("No group set named {}.".format(name))
    return group_set


def get_group(roster, group_set, name):
    for group in resolve_group_set_groups(roster, group_set):
        if normalize_name(group.name) == normalize_name(name) or group.id == name:
            return group
    raise NotFound("No group named {} in {}.".format(name, group_set.name))


def get_member(roster, email):
    member = roster.find_member_by_email(email) or roster.find_member(email)
    if member is None:
        raise NotFound("No member with email {}.".format(email))
    return member


def member_label(roster, member_id):
    member = roster.find_member(member_id)
    if member is None:
        return member_id
    return "{} <{}>".format(member.name, member.email) if member.email else member.name


def group_label(roster, group_id):
    group = roster.find_group(group_id)
    return group.name if group is not None else group_id


def print_issues(roster, result):
    """Print validation issues as a table; prints nothing for a clean result."""
    if not result.issues:
        return

    output = PrettyTable(["#", "Issue", "Affects", "Blocking"])
    output.align["Issue"] = "l"
    output.align["Affects"] = "l"
    for idx, issue in enumerate(result.issues):
        label = group_label if issue.kind.affects_groups else member_label
        affects = ", ".join(label(roster, i) for i in issue.affected_ids)
        output.add_row((idx + 1, describe_issue(issue), affects,
                        "yes" if issue.is_blocking else "no"))
    print(output)
