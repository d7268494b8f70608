import logging

from prettytable import PrettyTable

from repomanage import make_help_parser, progress
from repomanage.backends.decorators import requires_config_and_platform
from repomanage.config import requires_roster
from repomanage.importers import parse_git_usernames_csv, parse_role
from repomanage.roster.identity import verify_git_usernames
from repomanage.roster.reconcile import import_git_usernames, import_members
from repomanage.roster.system import ensure_system_group_sets, prune_stale_memberships
from repomanage.roster.types import MemberDraft, MemberStatus
from repomanage.roster.validation import validate_roster
from repomanage.roster_util import get_member, print_issues


help = "Manage class roster"

logger = logging.getLogger(__name__)


@requires_roster
def list_members(conf, roster, args):
    """List students (or staff) in the roster
    """
    members = roster.staff if args.staff else roster.students
    output = PrettyTable(["#", "Name", "Email", "Git username", "Status"])
    output.align["Name"] = "l"
    output.align["Email"] = "l"
    for idx, member in enumerate(members):
        if member.status != MemberStatus.active and not args.all:
            continue
        username = member.git_username or ""
        if username:
            username = "{} ({})".format(username, member.git_username_status.value)
        output.add_row((idx+1, member.name, member.email, username, member.status.value))

    print(output)


@requires_roster
def add_member(conf, roster, args):
    """Add a student or staff member to the roster
    """
    draft = MemberDraft(
        name=args.name,
        email=args.email,
        student_number=args.student_number,
        git_username=args.git_username,
        enrollment_type=parse_role(args.role),
        source="local",
    )
    summary = import_members(roster, [draft]).summary
    if summary.added:
        logger.info("Added %s.", args.name)
    elif summary.updated:
        logger.info("%s was already in the roster; updated.", args.email)
    elif summary.missing_email:
        logger.error("An email address is required.")
    else:
        logger.info("%s is already in the roster.", args.email)
    ensure_system_group_sets(roster)


@requires_roster
def remove_member(conf, roster, args):
    """Remove a member from the roster, or mark them inactive
    """
    member = get_member(roster, args.email)
    if args.deactivate:
        member.status = MemberStatus.inactive
        logger.info("Marked %s inactive.", member.name)
    else:
        roster.students = [m for m in roster.students if m.id != member.id]
        roster.staff = [m for m in roster.staff if m.id != member.id]
        logger.info("Removed %s from the roster.", member.name)

    modified = prune_stale_memberships(roster)
    if modified:
        logger.info("Removed %s from %d groups.", member.name, len(modified))
    ensure_system_group_sets(roster)


@requires_roster
def roster_status(conf, roster, args):
    """Summarize the roster and run the roster-wide checks
    """
    output = PrettyTable(["", "Count"])
    output.align[""] = "l"
    output.add_row(("Students", len(roster.students)))
    output.add_row(("Staff", len(roster.staff)))
    output.add_row(("Groups", len(roster.groups)))
    output.add_row(("Group sets", len(roster.group_sets)))
    output.add_row(("Assignments", len(roster.assignments)))
    output.add_row(("Missing git username",
                    sum(1 for s in roster.students if s.is_active and not s.git_username)))
    print(output)

    if roster.connection is not None:
        print("Source: {} {} (course {}), updated {}".format(
            roster.connection.kind, roster.connection.lms_type or "",
            roster.connection.course_id or "-", roster.connection.updated_at or "never"))

    print_issues(roster, validate_roster(roster))


@requires_roster
def import_usernames(conf, roster, args):
    """Set git usernames from a CSV of email and git_username columns
    """
    with open(args.file, newline="") as fh:
        entries = parse_git_usernames_csv(fh)

    summary = import_git_usernames(roster, entries)
    for email in summary.not_found:
        logger.warning("%s is not in the roster.", email)
    print("Updated {} git usernames ({} unchanged).".format(summary.updated, summary.unchanged))


@requires_config_and_platform
def verify_usernames(conf, platform, args):
    """Check every git username against the platform
    """
    manager = conf.manager
    roster = manager.load_roster(conf.profile)
    if roster is None:
        logger.warning("The roster is empty.")
        return

    members = [m for m in roster.members() if m.is_active]
    summary = verify_git_usernames(roster, platform, progress.iterate(members))
    manager.save_roster(conf.profile, roster)

    for member in summary.invalid:
        logger.warning("%s <%s>: %s was not found.", member.name, member.email,
                       member.git_username)
    print("{} verified, {} invalid, {} without a username.".format(
        summary.verified, len(summary.invalid), summary.unset))


@requires_roster
def sync(conf, roster, args):
    """Bring the system group sets in line with the member lists
    """
    result = ensure_system_group_sets(roster)
    print("{} groups updated, {} removed.".format(
        len(result.groups_upserted), len(result.deleted_group_ids)))


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='Roster commands')

    list_parser = subparsers.add_parser('list', help='Print the roster')
    list_parser.add_argument("--staff", action="store_true", help="List staff instead of students")
    list_parser.add_argument("--all", action="store_true", help="Include inactive members")
    list_parser.set_defaults(run=list_members)

    add_parser = subparsers.add_parser('add', help='Add a member to the roster')
    add_parser.add_argument("name", help="Full name")
    add_parser.add_argument("email", help="Email address")
    add_parser.add_argument("--student-number", help="Student number")
    add_parser.add_argument("--git-username", help="Username on the git platform")
    add_parser.add_argument("--role", default="student",
                            help="student (default), teacher, ta, designer or observer")
    add_parser.set_defaults(run=add_member)

    remove_parser = subparsers.add_parser('remove', help='Remove a member from the roster')
    remove_parser.add_argument("email", help="Email of member to remove")
    remove_parser.add_argument("--deactivate", action="store_true",
                               help="Mark the member inactive instead of removing them")
    remove_parser.set_defaults(run=remove_member)

    status_parser = subparsers.add_parser('status', help='Summarize and check the roster')
    status_parser.set_defaults(run=roster_status)

    usernames_parser = subparsers.add_parser('usernames', help='Import git usernames from a CSV')
    usernames_parser.add_argument("file", help="CSV file with email and git_username columns")
    usernames_parser.set_defaults(run=import_usernames)

    verify_parser = subparsers.add_parser('verify-usernames',
                                          help='Check git usernames against the platform')
    verify_parser.set_defaults(run=verify_usernames)

    sync_parser = subparsers.add_parser('sync', help='Rebuild the system group sets')
    sync_parser.set_defaults(run=sync)

    make_help_parser(parser, subparsers, "Show help for roster or one of its commands")
