from repomanage.exceptions import RepoManageException


class LmsError(RepoManageException):
    """ The LMS could not be reached or returned an unexpected response. """

class AuthenticationFailed(LmsError):
    """ The LMS rejected the configured token. """

class CourseNotFound(LmsError):
    """ The course does not exist or is not visible to the token's owner. """
