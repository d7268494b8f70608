import logging
import os
import shutil
import tempfile
import yaml

from collections import UserDict

from repomanage.config.schemas import LATEST_VERSION
from repomanage.config.versions import validate, validate_roster, ValidationError, VersionError
from repomanage.exceptions import RepoManageException, StorageError
from repomanage.roster.types import Roster

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.join("~", ".config", "repomanage")
DEFAULT_PROFILE = "default"

SETTINGS_FILENAME = "settings.yml"
ROSTER_FILENAME = "roster.yml"


class ProfileNotFound(RepoManageException):
    pass


def atomic_write(path, text):
    """Replace ``path`` with ``text`` so readers see either the old or the new file.

    The data goes to a temporary file in the same directory, is flushed and
    synced, then renamed over the target.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", dir=directory, prefix=".tmp-",
                                         delete=False, encoding="utf-8") as f:
            tmp_path = f.name
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise StorageError("Could not write {}: {}".format(path, e)) from e


def dump_yaml(data):
    return yaml.safe_dump(data, indent=2, default_flow_style=False, sort_keys=False,
                          allow_unicode=True)


def requires_config(func):
    def wrapper(cmdargs, *args):
        manager = SettingsManager(cmdargs.config_dir)
        with manager.open_profile(manager.resolve_profile(cmdargs.profile)) as conf:
            return func(conf, cmdargs, *args)
    return wrapper


def requires_roster(func):
    """Provides the profile's roster and saves it if the command changed it."""
    @requires_config
    def wrapper(conf, cmdargs, *args):
        roster = conf.manager.load_roster(conf.profile) or Roster.empty()
        before = roster.to_dict()
        result = func(conf, roster, cmdargs, *args)
        if roster.to_dict() != before:
            conf.manager.save_roster(conf.profile, roster)
        return result
    return wrapper


class Config(UserDict):
    """Context manager for config; automatically saves changes"""

    def __init__(self, filename, manager=None, profile=None):
        super().__init__()
        self._filename = filename
        self.manager = manager
        self.profile = profile

        try:
            with open(filename) as f:
                self.data = yaml.safe_load(f) or {}

            validate(self.data)

        except FileNotFoundError:
            self.data = {"version": LATEST_VERSION}  # create on __exit__()
        except yaml.YAMLError as e:
            raise StorageError("{} is not valid YAML: {}".format(filename, e)) from e
        except ValidationError as e:
            logger.warning("Your configuration is not valid: %s", e.message)
        except VersionError as e:
            logger.warning(e)
            logger.warning("Is your installation of repomanage up to date?")
            logger.warning("Attempting to continue anyway...")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, *args):
        if exc_type is None:
            self.save()

        return False  # propagate exceptions from the calling context

    def save(self):
        atomic_write(self._filename, dump_yaml(self.data))

    def __getattr__(self, key):
        if key.startswith("_") or key in ("data", "manager", "profile"):
            raise AttributeError(key)
        # Keys contained dashes can be called using an underscore
        key = key.replace("_", "-")

        try:
            return self.data[key]
        except KeyError:
            raise AttributeError(key) from None


class SettingsManager:
    """
    Profiles on disk. Each profile is a directory under ``<config dir>/profiles``
    holding its settings and its roster.
    """

    def __init__(self, config_dir=None):
        if config_dir is None:
            config_dir = os.environ.get("REPOMANAGE_CONFIG_DIR", DEFAULT_CONFIG_DIR)
        self.config_dir = os.path.expanduser(config_dir)

    @property
    def profiles_dir(self):
        return os.path.join(self.config_dir, "profiles")

    @property
    def state_file(self):
        return os.path.join(self.config_dir, "state.yml")

    def profile_dir(self, name):
        if not name or os.sep in name or name.startswith("."):
            raise ProfileNotFound("Invalid profile name {!r}".format(name))
        return os.path.join(self.profiles_dir, name)

    def settings_path(self, name):
        return os.path.join(self.profile_dir(name), SETTINGS_FILENAME)

    def roster_path(self, name):
        return os.path.join(self.profile_dir(name), ROSTER_FILENAME)

    def profile_names(self):
        try:
            entries = os.listdir(self.profiles_dir)
        except FileNotFoundError:
            return []
        return sorted(e for e in entries if os.path.isdir(os.path.join(self.profiles_dir, e)))

    def profile_exists(self, name):
        return os.path.isfile(self.settings_path(name))

    def active_profile(self):
        try:
            with open(self.state_file) as f:
                state = yaml.safe_load(f) or {}
        except FileNotFoundError:
            return None
        except (OSError, yaml.YAMLError) as e:
            raise StorageError("Could not read {}: {}".format(self.state_file, e)) from e
        return state.get("active-profile")

    def set_active_profile(self, name):
        if not self.profile_exists(name):
            raise ProfileNotFound("No profile named {}".format(name))
        atomic_write(self.state_file, dump_yaml({"active-profile": name}))

    def resolve_profile(self, name=None):
        """An explicit name, else the active profile, else ``default``."""
        return name or self.active_profile() or DEFAULT_PROFILE

    def open_profile(self, name):
        return Config(self.settings_path(name), manager=self, profile=name)

    def load_roster(self, name):
        """The profile's roster, or ``None`` when it has none yet."""
        path = self.roster_path(name)
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            return None
        except (OSError, yaml.YAMLError) as e:
            raise StorageError("Could not read {}: {}".format(path, e)) from e

        try:
            validate_roster(data or {})
            return Roster.from_dict(data)
        except (ValidationError, KeyError, ValueError) as e:
            raise StorageError("{} is not a valid roster: {}".format(path, e)) from e

    def save_roster(self, name, roster):
        atomic_write(self.roster_path(name), dump_yaml(roster.to_dict()))
        logger.debug("Saved roster for profile %s.", name)

    def delete_profile(self, name):
        path = self.profile_dir(name)
        if not os.path.isdir(path):
            raise ProfileNotFound("No profile named {}".format(name))
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise StorageError("Could not delete {}: {}".format(path, e)) from e

        if self.active_profile() == name:
            os.remove(self.state_file)
        logger.info("Deleted profile %s.", name)
