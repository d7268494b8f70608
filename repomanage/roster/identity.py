import logging

from repomanage.roster.types import GitUsernameStatus

logger = logging.getLogger(__name__)


class UsernameVerificationSummary:
    def __init__(self):
        self.verified = 0
        self.invalid = []
        self.unset = 0

    @property
    def changed(self):
        return self.verified > 0 or bool(self.invalid)


def verify_git_usernames(roster, platform, members=None):
    """Check each member's git username against the platform.

    Sets ``git_username_status`` to ``verified`` or ``invalid``. Members with
    no username are counted and left alone. Platform failures propagate.
    """
    summary = UsernameVerificationSummary()
    for member in (roster.members() if members is None else members):
        if not member.git_username:
            summary.unset += 1
            continue

        if platform.user_exists(member.git_username):
            member.git_username_status = GitUsernameStatus.verified
            summary.verified += 1
        else:
            logger.warning("%s (%s) does not exist on %s.",
                           member.git_username, member.name, platform.name)
            member.git_username_status = GitUsernameStatus.invalid
            summary.invalid.append(member)

    logger.info("Verified %d git usernames, %d invalid.",
                summary.verified, len(summary.invalid))
    return summary
