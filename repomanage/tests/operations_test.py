import os
import threading

from unittest.mock import MagicMock

from repomanage.backends.base import PlatformBase, RepoError
from repomanage.exceptions import AssignmentNotFound
from repomanage.operations import (
    CloneLayout,
    RepoOperation,
    SkipReason,
    blocked_groups,
    clone_destination,
    preflight,
    run_operation,
)
from repomanage.roster.types import Assignment, GitIdentityMode, Group, MemberStatus, Roster
from repomanage.roster.validation import validate_assignment
from repomanage.tests.utils import RepoManageTestCase, make_assignment, make_member


class RunOperationTestCase(RepoManageTestCase):
    def setUp(self):
        self.platform = MagicMock(spec=PlatformBase)
        self.platform.repo_exists.return_value = False

        self.roster = Roster.empty()
        self.members = [make_member("Student {}".format(n), "s{}@x.edu".format(n), "s{}".format(n))
                        for n in range(3)]
        self.roster.students.extend(self.members)
        self.groups = [Group.new("Team {}".format(n), [m.id]) for n, m in enumerate(self.members)]
        self.assignment = make_assignment(self.roster, "HW1", self.groups)

    def run_create(self, **kwargs):
        return run_operation(self.platform, self.roster, self.assignment.id,
                             RepoOperation.create, **kwargs)

    def test_creates_every_repo(self):
        result = self.run_create()

        self.assertTrue(result.is_success)
        self.assertEqual(result.succeeded, 3)
        created = [c[0][0] for c in self.platform.create_repo.call_args_list]
        self.assertEqual(created, ["hw1-team-0", "hw1-team-1", "hw1-team-2"])

    def test_partial_failure(self):
        """
        One failing repository is recorded and the others still succeed.
        """
        def create(name, private=True, owning_group=None):
            if name == "hw1-team-1":
                raise RepoError("quota exceeded")
            return name
        self.platform.create_repo.side_effect = create

        result = self.run_create(max_workers=3)

        self.assertEqual(result.succeeded, 2)
        self.assertEqual(result.failed, 1)
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].repo_name, "hw1-team-1")
        self.assertIn("quota exceeded", result.errors[0].message)
        self.assertFalse(result.is_success)

    def test_network_errors_are_isolated(self):
        self.platform.create_repo.side_effect = [None, ConnectionError("reset"), None]

        result = self.run_create()

        self.assertEqual((result.succeeded, result.failed), (2, 1))

    def test_existing_repo_skipped(self):
        self.platform.repo_exists.side_effect = lambda name: name == "hw1-team-0"

        result = self.run_create()

        self.assertEqual(result.succeeded, 2)
        self.assertEqual([(s.group_name, s.reason) for s in result.skipped_groups],
                         [("Team 0", SkipReason.repo_exists)])
        self.assertFalse(self.platform.delete_repo.called)

    def test_overwrite(self):
        self.platform.repo_exists.return_value = True

        result = self.run_create(overwrite=True)

        self.assertEqual(result.succeeded, 3)
        self.assertEqual(self.platform.delete_repo.call_count, 3)

    def test_blocked_groups_skipped(self):
        self.members[1].git_username = None
        validation = validate_assignment(self.roster, self.assignment.id,
                                         GitIdentityMode.username)

        result = self.run_create(validation=validation)

        self.assertEqual(result.succeeded, 2)
        skipped = result.skipped_groups[0]
        self.assertEqual(skipped.group_id, self.groups[1].id)
        self.assertEqual(skipped.reason, SkipReason.blocked)
        self.assertEqual(skipped.context, "missing_git_username")

    def test_empty_group_skipped(self):
        self.members[2].status = MemberStatus.inactive

        result = self.run_create()

        self.assertEqual(result.succeeded, 2)
        self.assertEqual(result.skipped_groups[0].reason, SkipReason.empty_group)
        self.assertFalse(result.is_success)

    def test_cancelled(self):
        cancel = threading.Event()
        cancel.set()

        result = self.run_create(cancel_event=cancel)

        self.assertEqual(result.succeeded, 0)
        self.assertEqual([s.reason for s in result.skipped_groups], [SkipReason.cancelled] * 3)
        self.assertFalse(self.platform.create_repo.called)

    def test_progress(self):
        calls = []
        self.run_create(on_progress=lambda done, total: calls.append((done, total)))
        self.assertEqual(calls, [(1, 3), (2, 3), (3, 3)])

    def test_unknown_assignment(self):
        with self.assertRaises(AssignmentNotFound):
            run_operation(self.platform, self.roster, "nope", RepoOperation.create)

    def test_delete(self):
        self.platform.repo_exists.side_effect = lambda name: name != "hw1-team-2"

        result = run_operation(self.platform, self.roster, self.assignment.id,
                               RepoOperation.delete)

        self.assertEqual(result.succeeded, 2)
        self.assertEqual(result.skipped_groups[0].reason, SkipReason.repo_not_found)

    def test_clone(self):
        target = self._create_tempdir()
        os.makedirs(os.path.join(target, "hw1-team-0"))
        self.platform.repo_exists.return_value = True

        result = run_operation(self.platform, self.roster, self.assignment.id,
                               RepoOperation.clone, target_dir=target)

        self.assertEqual(result.succeeded, 2)
        self.assertEqual(result.skipped_groups[0].reason, SkipReason.directory_exists)
        self.platform.clone_repo.assert_any_call(
            "hw1-team-1", os.path.join(target, "hw1-team-1"), attempts=3
        )

    def test_preflight(self):
        self.platform.repo_exists.side_effect = lambda name: name == "hw1-team-2"

        collisions = preflight(self.platform, self.roster, self.assignment.id,
                               RepoOperation.create)

        self.assertEqual([c.repo_name for c in collisions], ["hw1-team-2"])
        self.assertFalse(self.platform.create_repo.called)


class HelpersTestCase(RepoManageTestCase):
    def test_clone_destination(self):
        assignment = Assignment("a", "HW 1", "gs")
        group = Group("g", "Team 1")
        self.assertEqual(clone_destination("/t", CloneLayout.flat, assignment, group, "r"),
                         os.path.join("/t", "r"))
        self.assertEqual(clone_destination("/t", CloneLayout.by_group, assignment, group, "r"),
                         os.path.join("/t", "team-1", "r"))
        self.assertEqual(
            clone_destination("/t", CloneLayout.by_assignment, assignment, group, "r"),
            os.path.join("/t", "hw-1", "r"))

    def test_blocked_groups_without_validation(self):
        self.assertEqual(blocked_groups(Roster.empty(), [], None), {})
