import datetime
import logging

from prettytable import PrettyTable

from repomanage import make_help_parser
from repomanage.config import requires_config, requires_roster
from repomanage.lms import fetch_course_groups, fetch_course_users, fetch_group_sets, from_config
from repomanage.lms.exceptions import LmsError
from repomanage.roster.reconcile import import_group_set, import_members
from repomanage.roster.system import ensure_system_group_sets
from repomanage.roster.types import GroupSetKind, RosterConnection

help = "Get course information from Canvas"

logger = logging.getLogger(__name__)


def course_id_for(conf, args):
    course_id = args.course_id or (conf.get("lms") or {}).get("course-id")
    if not course_id:
        raise LmsError("No course id; pass --course-id or set lms.course-id")
    return str(course_id)


@requires_config
def print_courses(conf, _):
    """Show a list of current teacher's courses from Canvas via the API.
    """
    courses = from_config(conf).get_instructor_courses()
    if not courses:
        print("No courses found where current user is a teacher.")
        return

    output = PrettyTable(["#", "ID", "Name"])
    output.align["Name"] = "l"

    for ix, c in enumerate(sorted(courses, key=lambda c: c['id'], reverse=True)):
        output.add_row((ix+1, c['id'], c['name']))

    print(output)


@requires_roster
def import_students(conf, roster, args):
    """Imports every student and staff member of a course into the roster.
    """
    course_id = course_id_for(conf, args)
    drafts = fetch_course_users(from_config(conf), course_id)

    summary = import_members(roster, drafts, source="lms").summary
    for conflict in summary.conflicts:
        logger.warning("%s is in the roster with LMS id %s, but the course has %s.",
                       conflict.email, conflict.roster_lms_user_id,
                       conflict.incoming_lms_user_id)

    roster.connection = RosterConnection(
        "lms", lms_type="canvas", base_url=conf["lms"].get("host"), course_id=course_id,
        updated_at=datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
    )
    ensure_system_group_sets(roster)

    print("Imported {} new, {} updated, {} unchanged ({} without email).".format(
        summary.added, summary.updated, summary.unchanged, summary.missing_email))


@requires_config
def print_group_sets(conf, args):
    """List the course's group sets
    """
    group_sets = fetch_group_sets(from_config(conf), course_id_for(conf, args))

    output = PrettyTable(["ID", "Name"])
    output.align["Name"] = "l"
    for group_set_id, name in group_sets:
        output.add_row((group_set_id, name))
    print(output)


@requires_roster
def import_groups(conf, roster, args):
    """Create or refresh a group set from a course group set
    """
    api = from_config(conf)
    course_id = course_id_for(conf, args)

    names = dict(fetch_group_sets(api, course_id))
    group_set_id = str(args.group_set_id)
    drafts = fetch_course_groups(api, course_id, group_set_id)

    result = import_group_set(roster, args.name or names[group_set_id], drafts,
                              kind=GroupSetKind.lms, lms_group_set_id=group_set_id)
    summary = result.summary
    print("{}: {} groups added, {} updated, {} unchanged.".format(
        result.group_set.name, summary.groups_added, summary.groups_updated,
        summary.groups_unchanged))
    if summary.unresolved_members:
        print("{} members are not in the roster; run 'lms import-students' first."
              .format(summary.unresolved_members))


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='LMS commands')

    list_parser = subparsers.add_parser(
        "courses", help="List available Canvas courses where you are a teacher or TA"
    )
    list_parser.set_defaults(run=print_courses)

    students_parser = subparsers.add_parser(
        "import-students", help="Import students and staff from the course"
    )
    students_parser.add_argument("--course-id", help="Canvas course id (default: lms.course-id)")
    students_parser.set_defaults(run=import_students)

    sets_parser = subparsers.add_parser("group-sets", help="List the course's group sets")
    sets_parser.add_argument("--course-id", help="Canvas course id (default: lms.course-id)")
    sets_parser.set_defaults(run=print_group_sets)

    groups_parser = subparsers.add_parser(
        "import-groups", help="Import (or refresh) one of the course's group sets"
    )
    groups_parser.add_argument("group_set_id", help="Canvas id of the group set")
    groups_parser.add_argument("--name", help="Name for the group set (default: Canvas name)")
    groups_parser.add_argument("--course-id", help="Canvas course id (default: lms.course-id)")
    groups_parser.set_defaults(run=import_groups)

    make_help_parser(
        parser, subparsers, "Show help for lms or one of its commands"
    )
