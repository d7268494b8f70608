import io

from repomanage.exceptions import ImportFormatError
from repomanage.importers import (
    parse_git_usernames_csv,
    parse_groups_csv,
    parse_role,
    parse_students_csv,
)
from repomanage.roster.types import EnrollmentType, MemberStatus
from repomanage.tests.utils import RepoManageTestCase


STUDENTS = """\
Name,E-mail,Student Number,Git Username,Section,Status
Alice Smith, Alice@X.edu ,1001,AliceS,A,
Bob Jones,b@x.edu,,,B,inactive
,,,,,
No Email,,1003,,A,
"""


class ParseStudentsTestCase(RepoManageTestCase):
    def test_missing_required_header(self):
        with self.assertRaisesRegex(ImportFormatError, "email"):
            parse_students_csv(io.StringIO("name,student_number\nAlice,1\n"))

    def test_empty_file(self):
        with self.assertRaises(ImportFormatError):
            parse_students_csv(io.StringIO(""))

    def test_header_variants(self):
        drafts = parse_students_csv(io.StringIO("NAME,EMAIL\nAlice,a@x.edu\n"))
        self.assertEqual(drafts[0].email, "a@x.edu")

    def test_rows(self):
        drafts = parse_students_csv(io.StringIO(STUDENTS))

        self.assertEqual(len(drafts), 3)
        alice, bob, nobody = drafts
        self.assertEqual(alice.email, "alice@x.edu")
        self.assertEqual(alice.student_number, "1001")
        self.assertEqual(alice.git_username, "alices")
        self.assertEqual(alice.custom_fields, {"Section": "A"})
        self.assertIsNone(alice.status)
        self.assertEqual(alice.source, "csv")

        self.assertEqual(bob.status, MemberStatus.inactive)
        self.assertIsNone(bob.git_username)

        self.assertEqual(nobody.email, "")

    def test_role_column(self):
        drafts = parse_students_csv(io.StringIO(
            "name,email,role\nPat,p@x.edu,Teaching Assistant\nSam,s@x.edu,\n"))
        self.assertEqual(drafts[0].enrollment_type, EnrollmentType.ta)
        self.assertIsNone(drafts[1].enrollment_type)

    def test_enrollment_type_override(self):
        drafts = parse_students_csv(io.StringIO("name,email,role\nPat,p@x.edu,student\n"),
                                    enrollment_type=EnrollmentType.teacher)
        self.assertEqual(drafts[0].enrollment_type, EnrollmentType.teacher)

    def test_parse_role(self):
        self.assertEqual(parse_role("Instructor"), EnrollmentType.teacher)
        self.assertEqual(parse_role("janitor"), EnrollmentType.other)
        self.assertIsNone(parse_role(""))


class ParseGitUsernamesTestCase(RepoManageTestCase):
    def test_entries(self):
        entries = parse_git_usernames_csv(io.StringIO(
            "Email,Git Username\nA@x.edu, Alice \nb@x.edu,\n"))
        self.assertEqual(entries, [("a@x.edu", "alice")])

    def test_missing_header(self):
        with self.assertRaises(ImportFormatError):
            parse_git_usernames_csv(io.StringIO("email,username\n"))


class ParseGroupsTestCase(RepoManageTestCase):
    def test_groups(self):
        drafts = parse_groups_csv(io.StringIO(
            "group,email\nTeam 2,b@x.edu\nTeam 1,a@x.edu\nTeam 2,C@x.edu\nTeam 2,b@x.edu\n,d@x.edu\n"))

        self.assertEqual([d.name for d in drafts], ["Team 2", "Team 1"])
        self.assertEqual(drafts[0].member_emails, ["b@x.edu", "c@x.edu"])
        self.assertEqual(drafts[1].member_emails, ["a@x.edu"])
