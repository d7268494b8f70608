from unittest.mock import MagicMock

from requests.exceptions import ConnectionError, HTTPError

from repomanage.lms import fetch_course_groups, fetch_course_users, fetch_group_sets, user_to_draft
from repomanage.lms.canvas import CanvasAPI
from repomanage.lms.exceptions import AuthenticationFailed, CourseNotFound, LmsError
from repomanage.roster.types import EnrollmentType, MemberStatus
from repomanage.tests.utils import RepoManageTestCase


def response(payload, status=200, links=None):
    mock = MagicMock()
    mock.json.return_value = payload
    mock.links = links or {}
    mock.status_code = status
    if status >= 400:
        mock.raise_for_status.side_effect = HTTPError(response=mock)
    return mock


class CanvasAPITestCase(RepoManageTestCase):
    def setUp(self):
        self.mock_requests = self._create_patch("repomanage.lms.canvas.requests")
        self.api = CanvasAPI("token", "canvas.example.edu")

    def test_website_root(self):
        self.assertEqual(self.api.website_root, "https://canvas.example.edu")
        self.assertEqual(self.api.headers, {"Authorization": "Bearer token"})

    def test_follows_pagination(self):
        self.mock_requests.get.side_effect = [
            response([{"id": 1}], links={"next": {"url": "https://canvas.example.edu/next"}}),
            response([{"id": 2}]),
        ]

        users = self.api.get_course_users(5)

        self.assertEqual(users, [{"id": 1}, {"id": 2}])
        first, second = self.mock_requests.get.call_args_list
        self.assertEqual(first[0][0], "https://canvas.example.edu/api/v1/courses/5/users")
        self.assertEqual(first[1]["params"]["per_page"], 100)
        self.assertEqual(second[0][0], "https://canvas.example.edu/next")

    def test_unauthorized(self):
        self.mock_requests.get.return_value = response({}, status=401)
        with self.assertRaises(AuthenticationFailed):
            self.api.get_course(5)

    def test_not_found(self):
        self.mock_requests.get.return_value = response({}, status=404)
        with self.assertRaises(CourseNotFound):
            self.api.get_course(5)

    def test_server_error(self):
        self.mock_requests.get.return_value = response({}, status=500)
        with self.assertRaises(LmsError):
            self.api.get_course(5)

    def test_network_error(self):
        self.mock_requests.get.side_effect = ConnectionError("unreachable")
        with self.assertRaises(LmsError):
            self.api.get_course(5)


class LmsDraftsTestCase(RepoManageTestCase):
    def setUp(self):
        self.api = MagicMock(spec=CanvasAPI)

    def test_user_to_draft(self):
        draft = user_to_draft({
            "id": 17,
            "name": "Alice Smith",
            "email": "Alice@X.edu",
            "sis_user_id": "1001",
            "enrollments": [
                {"type": "StudentEnrollment", "enrollment_state": "active"},
                {"type": "TaEnrollment", "enrollment_state": "active"},
            ],
        })

        self.assertEqual(draft.lms_user_id, "17")
        self.assertEqual(draft.student_number, "1001")
        self.assertEqual(draft.enrollment_type, EnrollmentType.ta)
        self.assertEqual(draft.status, MemberStatus.active)
        self.assertEqual(draft.source, "lms")

    def test_login_id_as_email(self):
        draft = user_to_draft({
            "id": 3, "name": "Bob", "login_id": "b@x.edu",
            "enrollments": [{"type": "StudentEnrollment", "enrollment_state": "inactive"}],
        })
        self.assertEqual(draft.email, "b@x.edu")
        self.assertEqual(draft.status, MemberStatus.inactive)

    def test_fetch_course_users(self):
        self.api.get_course_users.return_value = [{"id": 1, "name": "A", "email": "a@x.edu"}]
        drafts = fetch_course_users(self.api, 5)
        self.assertEqual([d.email for d in drafts], ["a@x.edu"])
        self.assertEqual(drafts[0].enrollment_type, EnrollmentType.student)

    def test_fetch_group_sets(self):
        self.api.get_group_categories.return_value = [{"id": 7, "name": "Projects"}]
        self.assertEqual(fetch_group_sets(self.api, 5), [("7", "Projects")])

    def test_fetch_course_groups(self):
        self.api.get_group_categories.return_value = [{"id": 7, "name": "Projects"}]
        self.api.get_category_groups.return_value = [{"id": 70, "name": "Team 1"}]
        self.api.get_group_users.return_value = [{"id": 1}, {"id": 2}]

        drafts = fetch_course_groups(self.api, 5, "7")

        self.assertEqual(len(drafts), 1)
        self.assertEqual(drafts[0].lms_group_id, "70")
        self.assertEqual(drafts[0].member_lms_ids, ["1", "2"])
        self.api.get_group_users.assert_called_once_with(70)

    def test_fetch_unknown_group_set(self):
        self.api.get_group_categories.return_value = []
        with self.assertRaises(CourseNotFound):
            fetch_course_groups(self.api, 5, "7")
