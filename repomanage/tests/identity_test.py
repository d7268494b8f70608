from unittest.mock import MagicMock

from repomanage.backends.base import PlatformBase, RepoError
from repomanage.roster.identity import verify_git_usernames
from repomanage.roster.types import GitUsernameStatus, Roster
from repomanage.tests.utils import RepoManageTestCase, make_member


class VerifyGitUsernamesTestCase(RepoManageTestCase):
    def setUp(self):
        self.platform = MagicMock(spec=PlatformBase)
        self.platform.name = "github"
        self.platform.user_exists.side_effect = lambda username: username != "ghost"

        self.roster = Roster.empty()
        self.alice = make_member("Alice Smith", "a@x.edu", "alice")
        self.ghost = make_member("Gus Host", "g@x.edu", "ghost")
        self.nobody = make_member("No Body", "n@x.edu")
        self.roster.students.extend([self.alice, self.ghost, self.nobody])

    def test_statuses(self):
        summary = verify_git_usernames(self.roster, self.platform)

        self.assertEqual(summary.verified, 1)
        self.assertEqual(summary.invalid, [self.ghost])
        self.assertEqual(summary.unset, 1)
        self.assertEqual(self.alice.git_username_status, GitUsernameStatus.verified)
        self.assertEqual(self.ghost.git_username_status, GitUsernameStatus.invalid)
        self.assertEqual(self.nobody.git_username_status, GitUsernameStatus.unset)

    def test_subset(self):
        summary = verify_git_usernames(self.roster, self.platform, [self.alice])
        self.assertEqual(summary.verified, 1)
        self.platform.user_exists.assert_called_once_with("alice")

    def test_platform_errors_propagate(self):
        self.platform.user_exists.side_effect = RepoError("rate limited")
        with self.assertRaises(RepoError):
            verify_git_usernames(self.roster, self.platform)
