from repomanage.backends.base import RepoError


class RetryableGitError(RepoError):
    """ Git has encountered an error that may be spurious. """

class RepositoryAlreadyExists(RepoError):
    """ The repository has already been created. """

class RepositoryNotFound(RepoError):
    """ The repository does not exist on the platform. """

class AuthenticationFailed(RepoError):
    """ The platform rejected the configured token. """

class OrganizationNotFound(RepoError):
    """ The organization (or group) repositories are created in does not exist. """
