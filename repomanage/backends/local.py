import getpass
import git
import logging
import os
import shutil

from repomanage.backends.base import PlatformBase, RepoError
from repomanage.backends.exceptions import RepositoryAlreadyExists, RepositoryNotFound

logger = logging.getLogger(__name__)


class LocalPlatform(PlatformBase):
    """
    Bare repositories on the filesystem, under ``<base-dir>/<organization>``.

    Useful for dry runs and tests; there are no accounts, so every username
    is accepted.
    """

    name = "local"

    def __init__(self, host, token=None, organization="repos", user=None):
        if host and host.startswith("file://"):
            host = host[len("file://"):]
        super().__init__(os.path.expanduser(host), token, organization, user)

    @property
    def org_dir(self):
        return os.path.join(self.host, self.organization)

    def repo_path(self, name):
        return os.path.join(self.org_dir, name + ".git")

    def repo_exists(self, name):
        return os.path.isdir(self.repo_path(name))

    def create_repo(self, name, private=True, owning_group=None):
        path = self.repo_path(name)
        if os.path.exists(path):
            raise RepositoryAlreadyExists("{} already exists".format(path))

        try:
            os.makedirs(self.org_dir, exist_ok=True)
            git.Repo.init(path, bare=True)
        except (OSError, git.exc.GitCommandError) as e:
            raise RepoError(e)

        logger.debug("Created %s.", path)
        return path

    def delete_repo(self, name):
        path = self.repo_path(name)
        if not os.path.isdir(path):
            raise RepositoryNotFound("{} does not exist".format(path))

        shutil.rmtree(path)
        logger.debug("Deleted %s.", path)

    def clone_url(self, name):
        return self.repo_path(name)

    def verify_credentials(self):
        try:
            os.makedirs(self.org_dir, exist_ok=True)
        except OSError as e:
            raise RepoError(e)
        return self.user or getpass.getuser()

    def user_exists(self, username):
        return True
