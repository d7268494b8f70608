class RepoManageException(Exception):
    """ Base class for every error raised by repomanage. """


class StorageError(RepoManageException):
    """ A profile or roster file could not be read or written. """


class ImportFormatError(RepoManageException):
    """ An import file is missing required columns or cannot be parsed. """


class AssignmentNotFound(RepoManageException):
    """ The requested assignment does not exist in the roster. """


class OperationFailed(RepoManageException):
    """ A repository operation finished with failures or skipped groups. """


class ValidationFailed(RepoManageException):
    """ Validation found blocking issues. """


class NotFound(RepoManageException):
    """ A member, group, group set or assignment named on the command line does not exist. """
