import logging

from repomanage.backends import platform_name
from repomanage.config import requires_roster
from repomanage.exceptions import ValidationFailed
from repomanage.roster.validation import identity_mode_for, validate_assignment, validate_roster
from repomanage.roster_util import get_assignment, print_issues

help = "Check the roster, or an assignment's groups, for problems"

logger = logging.getLogger(__name__)


def identity_mode_from_config(conf):
    platform = conf.get("platform") or {}
    # No platform section means nothing is provisioned from this profile.
    name = platform_name(platform) if platform else None
    return identity_mode_for(name, platform.get("identity-mode"))


def validate_for_assignment(conf, roster, assignment):
    return validate_assignment(roster, assignment.id, identity_mode_from_config(conf),
                               conf.get("repo-name-template"))


@requires_roster
def validate(conf, roster, args):
    if args.assignment:
        result = validate_for_assignment(conf, roster, get_assignment(roster, args.assignment))
    else:
        result = validate_roster(roster)

    print_issues(roster, result)
    if result.has_blocking_issues():
        raise ValidationFailed("{} blocking issues found.".format(len(result.blocking_issues())))
    print("No blocking issues found.")


def setup_parser(parser):
    parser.add_argument("assignment", nargs="?",
                        help="Assignment to validate (default: the whole roster)")
    parser.set_defaults(run=validate)
