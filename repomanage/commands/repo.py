import logging
import os

from prettytable import PrettyTable

from repomanage import make_help_parser, progress
from repomanage.backends.decorators import requires_config_and_platform
from repomanage.commands.validate import validate_for_assignment
from repomanage.exceptions import OperationFailed, ValidationFailed
from repomanage.operations import CloneLayout, RepoOperation, preflight, run_operation
from repomanage.roster.resolution import resolve_assignment_groups
from repomanage.roster.slug import DEFAULT_REPO_TEMPLATE, compute_repo_name
from repomanage.roster.types import Roster
from repomanage.roster_util import get_assignment, print_issues

help = "Create, clone or delete an assignment's repositories"

logger = logging.getLogger(__name__)


def print_result(result):
    output = PrettyTable(["Group", "Repository", "Outcome"])
    output.align["Group"] = "l"
    output.align["Repository"] = "l"
    for skipped in result.skipped_groups:
        reason = skipped.reason.value
        if skipped.context:
            reason = "{} ({})".format(reason, skipped.context)
        output.add_row((skipped.group_name, "", "skipped: " + reason))
    for error in result.errors:
        output.add_row(("", error.repo_name, "failed: " + error.message))
    if result.skipped_groups or result.errors:
        print(output)

    print("{} succeeded, {} failed, {} skipped.".format(
        result.succeeded, result.failed, len(result.skipped_groups)))


def dry_run(conf, platform, roster, assignment, operation, layout, args):
    template = assignment.repo_name_template or conf.get("repo-name-template") \
        or DEFAULT_REPO_TEMPLATE
    output = PrettyTable(["Group", "Repository"])
    output.align["Group"] = "l"
    output.align["Repository"] = "l"
    for group in resolve_assignment_groups(roster, assignment):
        output.add_row((group.name, compute_repo_name(template, assignment, group)))
    print(output)

    collisions = preflight(platform, roster, assignment.id, operation,
                           conf.get("repo-name-template"), args.target_dir, layout)
    for collision in collisions:
        print("{} would be skipped: {}".format(collision.repo_name, collision.reason.value))


@requires_config_and_platform
def manage_repos(conf, platform, args):
    """Performs a repository operation on every group of an assignment
    """
    operation = RepoOperation(args.operation)
    roster = conf.manager.load_roster(conf.profile) or Roster.empty()
    assignment = get_assignment(roster, args.assignment)

    validation = validate_for_assignment(conf, roster, assignment)
    print_issues(roster, validation)
    if validation.has_blocking_issues() and not args.force:
        raise ValidationFailed(
            "{} has {} blocking issues; fix them or pass --force to skip the affected groups."
            .format(assignment.name, len(validation.blocking_issues()))
        )

    layout = CloneLayout(args.layout or conf.get("clone-layout", CloneLayout.flat.value))

    if args.dry_run:
        dry_run(conf, platform, roster, assignment, operation, layout, args)
        return

    if operation == RepoOperation.delete and not args.yes:
        answer = input("Delete the repositories of {}? [y/N]: ".format(assignment.name))
        if answer.lower() != "y":
            return

    with progress.Counter(operation.value) as counter:
        result = run_operation(
            platform, roster, assignment.id, operation,
            validation=validation,
            template=conf.get("repo-name-template"),
            target_dir=args.target_dir,
            layout=layout,
            overwrite=args.overwrite,
            private=not args.public,
            max_workers=args.jobs or conf.get("concurrency", 1),
            on_progress=counter,
        )

    print_result(result)
    if not result.is_success:
        raise OperationFailed("{} did not complete for every group.".format(operation.value))


# Options a subcommand does not offer still need a value.
OTHER_DEFAULTS = {
    "create": {"target_dir": None, "layout": None, "yes": False},
    "clone": {"overwrite": False, "public": False, "yes": False},
    "delete": {"overwrite": False, "public": False, "target_dir": None, "layout": None},
}


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='Repository commands')

    for name, help_text in (("create", "Create a repository per group"),
                            ("clone", "Clone each group's repository"),
                            ("delete", "Delete each group's repository")):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument("assignment", help="Name of the assignment")
        subparser.add_argument("--dry-run", action="store_true",
                               help="Show what would happen without changing anything")
        subparser.add_argument("--force", action="store_true",
                               help="Go ahead despite blocking issues; affected groups are skipped")
        subparser.add_argument("--jobs", type=int, default=None,
                               help="Repositories to work on at once (default: concurrency)")
        if name == "create":
            subparser.add_argument("--overwrite", action="store_true",
                                   help="Delete and recreate repositories that already exist")
            subparser.add_argument("--public", action="store_true",
                                   help="Create public repositories")
        if name == "clone":
            subparser.add_argument("--target-dir", default=os.getcwd(),
                                   help="Directory to clone into (default: current directory)")
            subparser.add_argument("--layout", default=None,
                                   choices=[layout.value for layout in CloneLayout],
                                   help="Directory layout (default: clone-layout setting, else flat)")
        if name == "delete":
            subparser.add_argument("--yes", action="store_true",
                                   help="Do not ask for confirmation")
        subparser.set_defaults(run=manage_repos, operation=name, **OTHER_DEFAULTS[name])

    make_help_parser(parser, subparsers, "Show help for repo or one of its commands")
