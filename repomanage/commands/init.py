import logging

from repomanage.backends import detect_platform, NoSuchBackend
from repomanage.config import requires_roster
from repomanage.roster.system import ensure_system_group_sets
from repomanage.roster.types import RosterConnection

help = "Interactively initialize a new profile"

logger = logging.getLogger(__name__)

DEFAULT_HOSTS = {
    "github": "https://github.com",
    "gitlab": "https://gitlab.com",
    "gitea": None,
}


def prompt(explanation, default=None):
    prompt_string = ''
    if default is not None:
        prompt_string = "{} (default: {}): ".format(explanation, default)
    else:
        prompt_string = "{}: ".format(explanation)
    value = input(prompt_string)

    if value == '':
        if default is not None:
            return default

        return prompt(explanation, default)

    return value


def prompt_platform():
    host = prompt("Git platform url, or a directory for local repositories", "https://github.com")
    try:
        guess = detect_platform(host)
    except NoSuchBackend:
        guess = None

    name = prompt("Platform type (github, gitlab, gitea, local)", guess)
    while name not in ("github", "gitlab", "gitea", "local"):
        name = prompt("Platform type (github, gitlab, gitea, local)", guess)

    platform = {"name": name}
    if name == "local":
        platform["base-dir"] = host
        platform["organization"] = prompt("Subdirectory to create repositories in", "repos")
        return platform

    platform["host"] = host
    platform["token"] = prompt("Access token")
    platform["organization"] = prompt("Organization (or group) to create repositories in")
    if name == "gitlab":
        platform["identity-mode"] = prompt("Grant access by username or email", "email")
    return platform


@requires_roster
def init(conf, roster, _):
    conf['version'] = 1
    conf['platform'] = prompt_platform()
    conf['repo-name-template'] = prompt("Repository name template", "{assignment}-{group}")

    do_canvas = input("Do you want to configure Canvas integration? [y/N]: ")
    if do_canvas.lower() == 'y':
        conf['lms'] = {'name': 'canvas'}
        conf['lms']['host'] = prompt("Canvas server to use (???.instructure.com)")
        conf['lms']['token'] = prompt("Canvas access token (from {}/profile/settings)"
                                      .format(conf['lms']['host']))
        conf['lms']['course-id'] = prompt("Canvas course id")
        roster.connection = RosterConnection("lms", lms_type="canvas",
                                             base_url=conf['lms']['host'],
                                             course_id=str(conf['lms']['course-id']))

    ensure_system_group_sets(roster)
    print("Congratulations, profile {} is ready to go!".format(conf.profile))


def setup_parser(parser):
    parser.set_defaults(run=init)
