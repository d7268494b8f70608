from repomanage.roster.reconcile import import_git_usernames, import_group_set, import_members
from repomanage.roster.types import (
    EnrollmentType,
    GitUsernameStatus,
    GroupDraft,
    GroupSetKind,
    MemberDraft,
    ORIGIN_LMS,
    ORIGIN_LOCAL,
    Roster,
)
from repomanage.tests.utils import RepoManageTestCase


def drafts():
    return [
        MemberDraft("Alice Smith", "a@x.edu", student_number="1001"),
        MemberDraft("Bob Jones", "B@X.edu "),
        MemberDraft("Carol Lee", "c@x.edu", git_username="CarolL"),
    ]


class ImportMembersTestCase(RepoManageTestCase):
    def setUp(self):
        self.roster = Roster.empty()

    def test_adds_new_members(self):
        summary = import_members(self.roster, drafts()).summary

        self.assertEqual(summary.added, 3)
        self.assertEqual([m.email for m in self.roster.students],
                         ["a@x.edu", "b@x.edu", "c@x.edu"])
        self.assertEqual(self.roster.students[2].git_username, "caroll")

    def test_idempotent(self):
        """
        Importing the same batch twice adds nothing and keeps member ids.
        """
        import_members(self.roster, drafts())
        ids = [m.id for m in self.roster.students]

        summary = import_members(self.roster, drafts()).summary

        self.assertEqual(summary.added, 0)
        self.assertEqual(summary.updated, 0)
        self.assertEqual(summary.unchanged, 3)
        self.assertEqual([m.id for m in self.roster.students], ids)

    def test_non_destructive(self):
        """
        Members missing from a batch are left in the roster.
        """
        import_members(self.roster, drafts())
        summary = import_members(self.roster, drafts()[:1]).summary

        self.assertEqual(summary.unchanged, 1)
        self.assertEqual(len(self.roster.students), 3)

    def test_updates_matched_member(self):
        import_members(self.roster, drafts())
        alice_id = self.roster.students[0].id

        summary = import_members(
            self.roster, [MemberDraft("Alice Walker", "A@x.edu", student_number="2002")]
        ).summary

        alice = self.roster.find_member(alice_id)
        self.assertEqual(summary.updated, 1)
        self.assertEqual(alice.name, "Alice Walker")
        self.assertEqual(alice.student_number, "2002")

    def test_missing_email_is_reported(self):
        summary = import_members(self.roster, [MemberDraft("No Email", "  ")]).summary

        self.assertEqual(summary.missing_email, 1)
        self.assertEqual(summary.missing_email_drafts[0].name, "No Email")
        self.assertEqual(self.roster.students, [])

    def test_matches_by_lms_id_before_email(self):
        import_members(self.roster, [MemberDraft("Alice", "a@x.edu", lms_user_id="42")])
        alice_id = self.roster.students[0].id

        summary = import_members(
            self.roster, [MemberDraft("Alice", "alice@new.edu", lms_user_id="42")]
        ).summary

        self.assertEqual(summary.updated, 1)
        self.assertEqual(len(self.roster.students), 1)
        self.assertEqual(self.roster.students[0].id, alice_id)
        self.assertEqual(self.roster.students[0].email, "alice@new.edu")

    def test_changed_email_frees_old_address(self):
        """
        Once a member's email changes through an LMS id match, a later record
        in the same batch with the old address is someone else.
        """
        import_members(self.roster, [MemberDraft("Ann", "a@x.edu", lms_user_id="1")])
        ann_id = self.roster.students[0].id

        summary = import_members(self.roster, [
            MemberDraft("Ann", "ann@new.edu", lms_user_id="1"),
            MemberDraft("Bob", "a@x.edu"),
        ]).summary

        self.assertEqual(summary.updated, 1)
        self.assertEqual(summary.added, 1)
        self.assertEqual([(m.name, m.email) for m in self.roster.students],
                         [("Ann", "ann@new.edu"), ("Bob", "a@x.edu")])
        self.assertEqual(self.roster.students[0].id, ann_id)

    def test_lms_id_conflict(self):
        import_members(self.roster, [MemberDraft("Alice", "a@x.edu", lms_user_id="42")])

        summary = import_members(
            self.roster, [MemberDraft("Impostor", "a@x.edu", lms_user_id="99")]
        ).summary

        self.assertEqual(len(summary.conflicts), 1)
        conflict = summary.conflicts[0]
        self.assertEqual(conflict.roster_lms_user_id, "42")
        self.assertEqual(conflict.incoming_lms_user_id, "99")
        self.assertEqual(self.roster.students[0].name, "Alice")

    def test_staff_kept_apart(self):
        staff = MemberDraft("Pat Prof", "a@x.edu", enrollment_type=EnrollmentType.teacher)
        import_members(self.roster, drafts() + [staff])

        self.assertEqual(len(self.roster.students), 3)
        self.assertEqual(len(self.roster.staff), 1)
        self.assertEqual(self.roster.staff[0].enrollment_type, EnrollmentType.teacher)

    def test_duplicate_in_batch_last_wins(self):
        summary = import_members(self.roster, [
            MemberDraft("First", "a@x.edu"),
            MemberDraft("Second", "a@x.edu"),
        ]).summary

        self.assertEqual(summary.added, 1)
        self.assertEqual(summary.updated, 1)
        self.assertEqual(self.roster.students[0].name, "Second")

    def test_changed_username_resets_status(self):
        import_members(self.roster, drafts())
        carol = self.roster.students[2]
        carol.git_username_status = GitUsernameStatus.verified

        import_members(self.roster, [MemberDraft("Carol Lee", "c@x.edu", git_username="carol2")])

        self.assertEqual(carol.git_username, "carol2")
        self.assertEqual(carol.git_username_status, GitUsernameStatus.unset)

    def test_source_applies_to_new_members(self):
        import_members(self.roster, drafts()[:1], source="csv")
        self.assertEqual(self.roster.students[0].source, "csv")


class ImportGroupSetTestCase(RepoManageTestCase):
    def setUp(self):
        self.roster = Roster.empty()
        import_members(self.roster, [
            MemberDraft("Alice Smith", "a@x.edu", lms_user_id="1"),
            MemberDraft("Bob Jones", "b@x.edu", lms_user_id="2"),
            MemberDraft("Carol Lee", "c@x.edu", lms_user_id="3"),
        ])
        self.alice, self.bob, self.carol = self.roster.students

    def lms_drafts(self):
        return [
            GroupDraft("Team 1", lms_group_id="10", member_lms_ids=["1", "2"]),
            GroupDraft("Team 2", lms_group_id="11", member_lms_ids=["3"]),
        ]

    def test_creates_lms_group_set(self):
        result = import_group_set(self.roster, "Projects", self.lms_drafts(),
                                  lms_group_set_id="7")

        self.assertEqual(result.summary.groups_added, 2)
        self.assertEqual(result.group_set.kind, GroupSetKind.lms)
        groups = [self.roster.find_group(gid) for gid in result.group_set.group_ids]
        self.assertEqual([g.member_ids for g in groups],
                         [[self.alice.id, self.bob.id], [self.carol.id]])
        self.assertTrue(all(g.origin == ORIGIN_LMS for g in groups))

    def test_reimport_keeps_ids(self):
        first = import_group_set(self.roster, "Projects", self.lms_drafts(), lms_group_set_id="7")
        ids = list(first.group_set.group_ids)

        drafts = self.lms_drafts()
        drafts[0].name = "Team One"
        second = import_group_set(self.roster, "Renamed", drafts, lms_group_set_id="7")

        self.assertIs(second.group_set, first.group_set)
        self.assertEqual(second.group_set.group_ids, ids)
        self.assertEqual(second.summary.groups_updated, 1)
        self.assertEqual(second.summary.groups_unchanged, 1)
        self.assertEqual(self.roster.find_group(ids[0]).name, "Team One")

    def test_additive(self):
        first = import_group_set(self.roster, "Projects", self.lms_drafts(), lms_group_set_id="7")
        import_group_set(self.roster, "Projects", self.lms_drafts()[:1], lms_group_set_id="7")

        self.assertEqual(len(first.group_set.group_ids), 2)

    def test_local_import_by_email(self):
        drafts = [GroupDraft("Pair", member_emails=["A@x.edu", "c@x.edu", "nobody@x.edu"])]
        result = import_group_set(self.roster, "Pairs", drafts, kind=GroupSetKind.imported)

        group = self.roster.find_group(result.group_set.group_ids[0])
        self.assertEqual(group.member_ids, [self.alice.id, self.carol.id])
        self.assertEqual(group.origin, ORIGIN_LOCAL)
        self.assertEqual(result.summary.unresolved_members, 1)

    def test_local_reimport_matches_by_name(self):
        drafts = [GroupDraft("Pair", member_emails=["a@x.edu"])]
        first = import_group_set(self.roster, "Pairs", drafts, kind=GroupSetKind.imported)
        drafts = [GroupDraft("pair", member_emails=["a@x.edu", "b@x.edu"])]
        second = import_group_set(self.roster, "Pairs", drafts, kind=GroupSetKind.imported)

        self.assertIs(second.group_set, first.group_set)
        self.assertEqual(len(second.group_set.group_ids), 1)
        self.assertEqual(second.summary.groups_updated, 1)


class ImportGitUsernamesTestCase(RepoManageTestCase):
    def test_sets_usernames(self):
        roster = Roster.empty()
        import_members(roster, drafts())

        summary = import_git_usernames(roster, [
            ("a@x.edu", "AliceS"),
            ("c@x.edu", "caroll"),
            ("z@x.edu", "zed"),
        ])

        self.assertEqual(summary.updated, 1)
        self.assertEqual(summary.unchanged, 1)
        self.assertEqual(summary.not_found, ["z@x.edu"])
        self.assertEqual(roster.students[0].git_username, "alices")
