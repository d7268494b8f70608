#!/usr/bin/env python3

# GitPython throws an ImportError now if git is not installed
# unless the environment variable GIT_PYTHON_REFRESH is set.
# We'll opt to keep going and handle the GitCommandNotFound
# exception if it comes up.
import os
os.environ["GIT_PYTHON_REFRESH"] = "silence"

# We *have* to set GIT_PYTHON_REFRESH before importing
# anything that imports GitPython.
# pylint: disable=wrong-import-position
import argparse
import importlib
import logging
import sys

from importlib.metadata import version, PackageNotFoundError

from colorlog import ColoredFormatter
from git.cmd import GitCommandNotFound


try:
    __version__ = version(__name__)
except PackageNotFoundError:
    # package is not installed
    __version__ = "Not installed"

logger = logging.getLogger(__name__)

description = "Course rosters, groups and the git repositories made from them."

subcommands = [
    "init",
    "profile",
    "roster",
    "import",
    "lms",
    "group",
    "assignment",
    "validate",
    "repo",
    "verify",
]


def configure_logging():
    root_logger = logging.getLogger()
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG)

    # Create a colorized formatter
    formatter = ColoredFormatter(
        "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(message)s",
        datefmt=None,
        reset=True,
        log_colors={
            "DEBUG":    "cyan",
            "INFO":     "green",
            "WARNING":  "yellow",
            "ERROR":    "red",
            "CRITICAL": "red,bg_white",
        },
        secondary_log_colors={},
        style="%"
    )

    # Add the formatter to the console handler, and the console
    # handler to the root logger.
    console.setFormatter(formatter)
    root_logger.addHandler(console)


def make_help_parser(parser, subparsers, help_text):
    def show_help(args):
        new_args = list(args.command)
        new_args.append("--help")
        parser.parse_args(new_args)

    help_parser = subparsers.add_parser("help", help=help_text)
    help_parser.add_argument("command", nargs="*",
                             help="Command to get help with")
    help_parser.set_defaults(run=show_help)


def make_parser():
    """Construct and return a CLI argument parser.
    """

    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config-dir", default=None,
                        help="Directory holding profiles "
                             "(default: $REPOMANAGE_CONFIG_DIR or ~/.config/repomanage)")
    parser.add_argument("--profile", default=None,
                        help="Profile to use (default: the active profile)")
    parser.add_argument("--tracebacks", action="store_true",
                        help="Show full tracebacks")
    parser.add_argument("--verbosity", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Desired log level")
    parser.add_argument("--version", action="store_true",
                        help="Show version and exit")

    def default_run(args):
        if args.version:
            print("repomanage version {}".format(__version__))
        else:
            parser.print_usage()

    # If no arguments are provided, show the usage screen
    parser.set_defaults(run=default_run)

    # Set up subcommands for each package
    subparsers = parser.add_subparsers(title="commands")

    for name in subcommands:
        module = importlib.import_module("repomanage.commands." + name)
        subparser = subparsers.add_parser(name, help=module.help)
        module.setup_parser(subparser)

    make_help_parser(parser, subparsers, "Show help for repomanage or one of its commands")

    return parser


#pylint: disable=dangerous-default-value
def main(args=sys.argv[1:]):
    """Entry point
    """
    # Configure logging
    configure_logging()

    # Parse CLI args
    parser = make_parser()
    args = parser.parse_args(args)

    # Set logging verbosity
    logging.getLogger().setLevel(args.verbosity)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.debug("This is repomanage version %s", __version__)

    # Do it
    try:
        args.run(args)
    except Exception as e:
        if args.tracebacks:
            raise e
        if isinstance(e, KeyError):
            logger.error("%s is missing", e)
        elif isinstance(e, GitCommandNotFound):
            logger.error("git is not installed!")
        else:
            logger.error(str(e))
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
