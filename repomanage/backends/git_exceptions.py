from git.exc import GitCommandError

from repomanage.backends.exceptions import (
    RetryableGitError,
)

def raiseRetryableGitError(err: GitCommandError):
    """
    Intended to catch git errors that might be able to be recovered from,
    such as 'Connection reset by peer' when cloning.

    Git reports these (and little else during a clone) with exit status 128.
    """

    try:
        status = int(err.status)
    except (ValueError, TypeError):
        return

    if status != 128:
        return

    raise RetryableGitError(err)
