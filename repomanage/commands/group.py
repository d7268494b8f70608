import logging

from prettytable import PrettyTable

from repomanage import make_help_parser
from repomanage.config import requires_roster
from repomanage.exceptions import RepoManageException
from repomanage.roster.normalize import normalize_name
from repomanage.roster.resolution import resolve_group_set_groups
from repomanage.roster.types import Group, GroupSet, GroupSetKind
from repomanage.roster_util import get_group, get_group_set, get_member

help = "Manage group sets and groups"

logger = logging.getLogger(__name__)


class ReadOnlyGroup(RepoManageException):
    """ System and LMS groups are regenerated from their source and cannot be edited. """


def _editable_set(roster, name):
    group_set = get_group_set(roster, name)
    if group_set.kind not in (GroupSetKind.local, GroupSetKind.imported):
        raise ReadOnlyGroup("{} is a {} group set and cannot be edited."
                            .format(group_set.name, group_set.kind.value))
    return group_set


def _editable_group(roster, set_name, group_name):
    group_set = _editable_set(roster, set_name)
    return group_set, get_group(roster, group_set, group_name)


@requires_roster
def list_groups(conf, roster, args):
    """List group sets, or the groups of one set
    """
    if args.group_set is None:
        output = PrettyTable(["Name", "Kind", "Groups"])
        output.align["Name"] = "l"
        for group_set in roster.group_sets:
            output.add_row((group_set.name, group_set.kind.value, len(group_set.group_ids)))
        print(output)
        return

    group_set = get_group_set(roster, args.group_set)
    output = PrettyTable(["#", "Group", "Members"])
    output.align["Group"] = "l"
    output.align["Members"] = "l"
    for idx, group in enumerate(resolve_group_set_groups(roster, group_set)):
        names = []
        for member_id in group.member_ids:
            member = roster.find_member(member_id)
            names.append(member.name if member is not None else "? ({})".format(member_id))
        output.add_row((idx + 1, group.name, ", ".join(names)))
    print(output)


@requires_roster
def new_set(conf, roster, args):
    if roster.find_group_set_by_name(args.name) is not None:
        raise RepoManageException("A group set named {} already exists.".format(args.name))
    roster.group_sets.append(GroupSet.new(args.name, GroupSetKind.local))
    logger.info("Created group set %s.", args.name)


@requires_roster
def remove_set(conf, roster, args):
    group_set = _editable_set(roster, args.name)
    users = [a.name for a in roster.assignments if a.group_set_id == group_set.id]
    if users:
        raise RepoManageException("{} is used by: {}".format(group_set.name, ", ".join(users)))

    for group_id in list(group_set.group_ids):
        roster.remove_group(group_id)
    roster.group_sets = [gs for gs in roster.group_sets if gs.id != group_set.id]
    logger.info("Removed group set %s.", group_set.name)


@requires_roster
def add_group(conf, roster, args):
    group_set = _editable_set(roster, args.group_set)
    existing = {normalize_name(g.name) for g in resolve_group_set_groups(roster, group_set)}
    if normalize_name(args.name) in existing:
        raise RepoManageException("{} already has a group named {}."
                                  .format(group_set.name, args.name))

    member_ids = []
    for email in args.members:
        member_id = get_member(roster, email).id
        if member_id not in member_ids:
            member_ids.append(member_id)

    group = Group.new(args.name, member_ids)
    roster.groups.append(group)
    group_set.group_ids.append(group.id)
    logger.info("Added %s with %d members.", args.name, len(member_ids))


@requires_roster
def rename_group(conf, roster, args):
    _, group = _editable_group(roster, args.group_set, args.name)
    group.name = args.new_name
    logger.info("Renamed %s to %s.", args.name, args.new_name)


@requires_roster
def remove_group(conf, roster, args):
    _, group = _editable_group(roster, args.group_set, args.name)
    roster.remove_group(group.id)
    logger.info("Removed %s.", group.name)


@requires_roster
def add_member(conf, roster, args):
    _, group = _editable_group(roster, args.group_set, args.group)
    member = get_member(roster, args.email)
    if member.id in group.member_ids:
        logger.info("%s is already in %s.", member.name, group.name)
        return
    group.member_ids.append(member.id)
    logger.info("Added %s to %s.", member.name, group.name)


@requires_roster
def remove_member(conf, roster, args):
    _, group = _editable_group(roster, args.group_set, args.group)
    member = get_member(roster, args.email)
    if member.id not in group.member_ids:
        logger.info("%s is not in %s.", member.name, group.name)
        return
    group.member_ids.remove(member.id)
    logger.info("Removed %s from %s.", member.name, group.name)


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='Group commands')

    list_parser = subparsers.add_parser('list', help='List group sets, or the groups in one')
    list_parser.add_argument("group_set", nargs="?", help="Group set to list")
    list_parser.set_defaults(run=list_groups)

    new_set_parser = subparsers.add_parser('new-set', help='Create an empty group set')
    new_set_parser.add_argument("name", help="Name of the group set")
    new_set_parser.set_defaults(run=new_set)

    remove_set_parser = subparsers.add_parser('remove-set', help='Delete a group set')
    remove_set_parser.add_argument("name", help="Name of the group set")
    remove_set_parser.set_defaults(run=remove_set)

    add_parser = subparsers.add_parser('add', help='Add a group to a group set')
    add_parser.add_argument("group_set", help="Group set to add to")
    add_parser.add_argument("name", help="Name of the group")
    add_parser.add_argument("members", nargs="*", help="Emails of the members")
    add_parser.set_defaults(run=add_group)

    rename_parser = subparsers.add_parser('rename', help='Rename a group')
    rename_parser.add_argument("group_set", help="Group set of the group")
    rename_parser.add_argument("name", help="Current name")
    rename_parser.add_argument("new_name", help="New name")
    rename_parser.set_defaults(run=rename_group)

    remove_parser = subparsers.add_parser('remove', help='Remove a group')
    remove_parser.add_argument("group_set", help="Group set of the group")
    remove_parser.add_argument("name", help="Name of the group")
    remove_parser.set_defaults(run=remove_group)

    add_member_parser = subparsers.add_parser('add-member', help='Add a member to a group')
    add_member_parser.add_argument("group_set", help="Group set of the group")
    add_member_parser.add_argument("group", help="Name of the group")
    add_member_parser.add_argument("email", help="Email of the member")
    add_member_parser.set_defaults(run=add_member)

    remove_member_parser = subparsers.add_parser('remove-member',
                                                 help='Remove a member from a group')
    remove_member_parser.add_argument("group_set", help="Group set of the group")
    remove_member_parser.add_argument("group", help="Name of the group")
    remove_member_parser.add_argument("email", help="Email of the member")
    remove_member_parser.set_defaults(run=remove_member)

    make_help_parser(parser, subparsers, "Show help for group or one of its commands")
