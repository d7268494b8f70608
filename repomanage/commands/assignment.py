import logging

from prettytable import PrettyTable

from repomanage import make_help_parser
from repomanage.config import requires_roster
from repomanage.exceptions import RepoManageException
from repomanage.roster.system import INDIVIDUAL_STUDENTS_SET_NAME
from repomanage.roster.types import Assignment, AssignmentType
from repomanage.roster_util import get_assignment, get_group_set

help = "Manage assignments"

logger = logging.getLogger(__name__)


@requires_roster
def list_assignments(conf, roster, args):
    output = PrettyTable(["Name", "Group set", "Type", "Repository names"])
    output.align["Name"] = "l"
    default_template = conf.get("repo-name-template", "{assignment}-{group}")
    for assignment in roster.assignments:
        group_set = roster.find_group_set(assignment.group_set_id)
        output.add_row((
            assignment.name,
            group_set.name if group_set is not None else "(missing)",
            assignment.assignment_type.value,
            assignment.repo_name_template or default_template,
        ))
    print(output)


@requires_roster
def add_assignment(conf, roster, args):
    if roster.find_assignment_by_name(args.name) is not None:
        raise RepoManageException("An assignment named {} already exists.".format(args.name))

    group_set = get_group_set(roster, args.group_set)
    assignment = Assignment.new(
        args.name,
        group_set.id,
        description=args.description,
        assignment_type=AssignmentType.selective if args.selective else AssignmentType.class_wide,
        repo_name_template=args.template,
    )
    roster.assignments.append(assignment)
    logger.info("Added %s using %s.", assignment.name, group_set.name)


@requires_roster
def remove_assignment(conf, roster, args):
    assignment = get_assignment(roster, args.name)
    roster.assignments = [a for a in roster.assignments if a.id != assignment.id]
    logger.info("Removed %s.", assignment.name)


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='Assignment commands')

    list_parser = subparsers.add_parser('list', help='List assignments')
    list_parser.set_defaults(run=list_assignments)

    add_parser = subparsers.add_parser('add', help='Add an assignment')
    add_parser.add_argument("name", help="Name of the assignment")
    add_parser.add_argument("--group-set", default=INDIVIDUAL_STUDENTS_SET_NAME,
                            help="Group set supplying the groups (default: individual students)")
    add_parser.add_argument("--template",
                            help="Repository name template, e.g. {assignment}-{group}")
    add_parser.add_argument("--description", help="Description")
    add_parser.add_argument("--selective", action="store_true",
                            help="Only some groups take part")
    add_parser.set_defaults(run=add_assignment)

    remove_parser = subparsers.add_parser('remove', help='Remove an assignment')
    remove_parser.add_argument("name", help="Name of the assignment")
    remove_parser.set_defaults(run=remove_assignment)

    make_help_parser(parser, subparsers, "Show help for assignment or one of its commands")
