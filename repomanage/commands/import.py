import logging

from repomanage import make_help_parser
from repomanage.config import requires_roster
from repomanage.importers import parse_groups_csv, parse_role, parse_students_csv
from repomanage.roster.reconcile import import_group_set, import_members
from repomanage.roster.system import ensure_system_group_sets
from repomanage.roster.types import GroupSetKind, RosterConnection

help = "Import members or groups from a csv"

logger = logging.getLogger(__name__)


@requires_roster
def import_students(conf, roster, args):
    """Imports students (or staff) from a CSV file to the roster.
    """
    with open(args.file, newline="") as fh:
        drafts = parse_students_csv(fh, parse_role(args.role))

    summary = import_members(roster, drafts, source="csv").summary
    for draft in summary.missing_email_drafts:
        logger.warning("%s has no email address and was not imported.",
                       draft.name or "A row")

    if roster.connection is None:
        roster.connection = RosterConnection("csv")
    ensure_system_group_sets(roster)

    print("Imported {} new, {} updated, {} unchanged ({} without email).".format(
        summary.added, summary.updated, summary.unchanged, summary.missing_email))


@requires_roster
def import_groups(conf, roster, args):
    """Imports a group set from a CSV file with group and email columns.
    """
    with open(args.file, newline="") as fh:
        drafts = parse_groups_csv(fh)

    result = import_group_set(roster, args.name, drafts, kind=GroupSetKind.imported)
    summary = result.summary
    print("{}: {} groups added, {} updated, {} unchanged.".format(
        result.group_set.name, summary.groups_added, summary.groups_updated,
        summary.groups_unchanged))
    if summary.unresolved_members:
        print("{} emails are not in the roster.".format(summary.unresolved_members))


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='Import commands')

    students_parser = subparsers.add_parser('students', help='Import members from a CSV')
    students_parser.add_argument("file", help="CSV file with at least name and email columns")
    students_parser.add_argument("--role", help="Role for every row (default: role column, "
                                                "else student)")
    students_parser.set_defaults(run=import_students)

    groups_parser = subparsers.add_parser('groups', help='Import a group set from a CSV')
    groups_parser.add_argument("file", help="CSV file with group and email columns")
    groups_parser.add_argument("name", help="Name of the group set")
    groups_parser.set_defaults(run=import_groups)

    make_help_parser(parser, subparsers, "Show help for import or one of its commands")
