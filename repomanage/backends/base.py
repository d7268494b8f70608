import git
import logging
import os
from time import sleep
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

from repomanage.exceptions import RepoManageException

logger = logging.getLogger(__name__)


class RepoError(RepoManageException):
    """ A platform refused or failed a repository request. """


class PlatformBase:
    """
    Capability surface shared by every git platform. The operation gate and
    the identity checks only ever talk to a platform through these methods.
    """
    name = None  # type: Optional[str]

    def __init__(self, host: str, token: str, organization: str, user: Optional[str] = None):
        self.host = host.rstrip("/") if host else host
        self.token = token
        self.organization = organization
        self.user = user

    def repo_exists(self, name: str) -> bool:
        raise NotImplementedError

    def create_repo(self, name: str, private: bool = True, owning_group: Optional[str] = None) -> str:
        """ Create a repository in the organization and return its clone url. """
        raise NotImplementedError

    def delete_repo(self, name: str) -> None:
        raise NotImplementedError

    def clone_url(self, name: str) -> str:
        raise NotImplementedError

    def verify_credentials(self) -> str:
        """ Check the token and organization; returns the authenticated username. """
        raise NotImplementedError

    def user_exists(self, username: str) -> bool:
        raise NotImplementedError

    def clone_repo(self, name: str, destination: str, attempts: int = 1) -> git.Repo:
        # Imported here; git_exceptions depends on this module's RepoError.
        from repomanage.backends.exceptions import RetryableGitError
        from repomanage.backends.git_exceptions import raiseRetryableGitError

        url = self.clone_url(name)
        logger.debug("Cloning %s...", name)
        repo = None
        for attempt in range(0, attempts):
            if attempts > 1:
                logger.debug("Attempt %d of %d...", attempt + 1, attempts)

            try: # for exp. backoff
                try:
                    repo = git.Repo.clone_from(url, destination)
                    logger.debug("Cloned %s.", name)
                #pylint: disable=no-member
                except git.exc.GitCommandError as e:
                    # GitPython may delete this directory
                    # and the caller may have opinions about that,
                    # so go ahead and re-create it just to be safe.
                    os.makedirs(destination, exist_ok=True)
                    raiseRetryableGitError(e)
                    raise RepoError(e)

                # if we got this far, we succeeded!
                break

            except RetryableGitError as e:
                if attempt == (attempts - 1):
                    raise
                else:
                    logger.debug(e)

                    duration = 0.5 * 2 ** attempt
                    logger.debug("Retrying after %.1f seconds...", duration)
                    sleep(duration)

        return repo

    def __repr__(self):
        return "{}(host={!r}, organization={!r})".format(
            self.__class__.__name__, self.host, self.organization
        )


def insert_auth(url: str, username: str, token: str) -> str:
    """ Embed credentials in an https clone url. """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise RepoError("{} is not a valid url.".format(url))

    netloc = "{}:{}@{}".format(quote(username, safe=""), quote(token, safe=""), parts.netloc)
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
