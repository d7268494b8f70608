import logging

from prettytable import PrettyTable

from repomanage import make_help_parser
from repomanage.config import SettingsManager

help = "Manage profiles"

logger = logging.getLogger(__name__)

SECRET_KEYS = ("token",)


def list_profiles(args):
    """List profiles; the active one is starred
    """
    manager = SettingsManager(args.config_dir)
    active = manager.resolve_profile()

    output = PrettyTable(["Active", "Profile", "Platform", "Organization"])
    for name in manager.profile_names():
        with manager.open_profile(name) as conf:
            platform = conf.get("platform") or {}
        output.add_row(("*" if name == active else "", name, platform.get("name", ""),
                        platform.get("organization", "")))
    print(output)


def use_profile(args):
    manager = SettingsManager(args.config_dir)
    manager.set_active_profile(args.name)
    logger.info("Now using profile %s.", args.name)


def show_profile(args):
    """Print a profile's settings with secrets hidden
    """
    manager = SettingsManager(args.config_dir)
    name = manager.resolve_profile(args.name or args.profile)
    with manager.open_profile(name) as conf:
        for section, values in sorted(conf.items()):
            if isinstance(values, dict):
                print("{}:".format(section))
                for key, value in sorted(values.items()):
                    if key in SECRET_KEYS:
                        value = "********"
                    print("  {}: {}".format(key, value))
            else:
                print("{}: {}".format(section, values))


def delete_profile(args):
    manager = SettingsManager(args.config_dir)
    if not args.yes:
        answer = input("Delete profile {} and its roster? [y/N]: ".format(args.name))
        if answer.lower() != "y":
            return
    manager.delete_profile(args.name)


def setup_parser(parser):
    subparsers = parser.add_subparsers(title='Profile commands')

    list_parser = subparsers.add_parser('list', help='List profiles')
    list_parser.set_defaults(run=list_profiles)

    use_parser = subparsers.add_parser('use', help='Make a profile the active one')
    use_parser.add_argument("name", help="Name of profile")
    use_parser.set_defaults(run=use_profile)

    show_parser = subparsers.add_parser('show', help='Show a profile\'s settings')
    show_parser.add_argument("name", nargs="?", help="Name of profile (default: active)")
    show_parser.set_defaults(run=show_profile)

    delete_parser = subparsers.add_parser('delete', help='Delete a profile and its roster')
    delete_parser.add_argument("name", help="Name of profile")
    delete_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    delete_parser.set_defaults(run=delete_profile)

    make_help_parser(parser, subparsers, "Show help for profile or one of its commands")
