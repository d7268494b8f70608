import shutil
import tempfile

from unittest import TestCase
from unittest.mock import patch

from repomanage.roster.types import (
    Assignment,
    EnrollmentType,
    Group,
    GroupSet,
    GroupSetKind,
    Member,
    MemberDraft,
    Roster,
)


class RepoManageTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        if hasattr(cls, "_CLASS_CLEANUP"):
            for x in cls._CLASS_CLEANUP:
                x()

    @classmethod
    def _create_class_patch(cls, target, **kwargs):
        """
        Shortcut for creating a class-level patch with proper
        cleanup handled.
        """
        target_patch = patch(target, **kwargs)
        target_mock = target_patch.start()

        if not hasattr(cls, "_CLASS_CLEANUP"):
            cls._CLASS_CLEANUP = []

        cls._CLASS_CLEANUP.append(target_patch.stop)
        return target_mock

    def _create_patch(self, target, **kwargs):
        """
        Shortcut for creating a class and having it cleaned up
        properly.
        """
        target_patch = patch(target, **kwargs)
        target_mock = target_patch.start()
        self.addCleanup(target_patch.stop)

        return target_mock

    def _create_tempdir(self):
        path = tempfile.mkdtemp(prefix="repomanage-test-")
        self.addCleanup(shutil.rmtree, path, ignore_errors=True)
        return path


class RepoManageIntegrationTestCase(RepoManageTestCase):
    """Runs commands against a throwaway config directory."""

    def setUp(self):
        self.mock_logging = self._create_patch(
            "repomanage.logging", autospec=True
        )
        self.config_dir = self._create_tempdir()


def make_member(name, email, git_username=None, role=EnrollmentType.student, **kwargs):
    member = Member.new(MemberDraft(name, email, git_username=git_username,
                                    enrollment_type=role))
    for key, value in kwargs.items():
        setattr(member, key, value)
    return member


def make_assignment(roster, name, groups, template=None):
    """Add a local group set holding ``groups`` and an assignment using it."""
    group_set = GroupSet.new(name + " groups", GroupSetKind.local)
    for group in groups:
        if roster.find_group(group.id) is None:
            roster.groups.append(group)
        group_set.group_ids.append(group.id)
    roster.group_sets.append(group_set)

    assignment = Assignment.new(name, group_set.id, repo_name_template=template)
    roster.assignments.append(assignment)
    return assignment


def two_student_roster():
    """a@x.edu and b@x.edu in "Team 1" for "HW1"."""
    roster = Roster.empty()
    alice = make_member("Alice Smith", "a@x.edu", "alice")
    bob = make_member("Bob Jones", "b@x.edu", "bob")
    roster.students.extend([alice, bob])
    team = Group.new("Team 1", [alice.id, bob.id])
    assignment = make_assignment(roster, "HW1", [team], "{assignment}-{group}")
    return roster, assignment, team
