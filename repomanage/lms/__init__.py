"""Course data from a learning management system, as roster drafts."""
import logging

from repomanage.lms.canvas import CanvasAPI
from repomanage.lms.exceptions import AuthenticationFailed, CourseNotFound, LmsError
from repomanage.roster.types import EnrollmentType, GroupDraft, MemberDraft, MemberStatus

logger = logging.getLogger(__name__)

pyflakes = [AuthenticationFailed, CourseNotFound]

ENROLLMENT_TYPES = {
    "StudentEnrollment": EnrollmentType.student,
    "TeacherEnrollment": EnrollmentType.teacher,
    "TaEnrollment": EnrollmentType.ta,
    "DesignerEnrollment": EnrollmentType.designer,
    "ObserverEnrollment": EnrollmentType.observer,
}

# When a user holds several enrollments, the most privileged one wins.
ENROLLMENT_PRIORITY = [
    EnrollmentType.teacher,
    EnrollmentType.ta,
    EnrollmentType.designer,
    EnrollmentType.student,
    EnrollmentType.observer,
    EnrollmentType.other,
]


def from_config(config):
    settings = config.get("lms") or {}
    name = settings.get("name", "canvas")
    if name != "canvas":
        raise LmsError("Unsupported LMS {}".format(name))
    if not settings.get("token") or not settings.get("host"):
        raise LmsError("lms.host and lms.token must be configured")
    return CanvasAPI(settings["token"], settings["host"])


def _enrollment(user):
    types = []
    active = False
    for enrollment in user.get("enrollments") or []:
        types.append(ENROLLMENT_TYPES.get(enrollment.get("type"), EnrollmentType.other))
        if enrollment.get("enrollment_state", "active") == "active":
            active = True
    if not types:
        return EnrollmentType.student, MemberStatus.active

    enrollment_type = min(types, key=ENROLLMENT_PRIORITY.index)
    return enrollment_type, MemberStatus.active if active else MemberStatus.inactive


def _user_email(user):
    email = user.get("email")
    if not email:
        login = user.get("login_id") or ""
        email = login if "@" in login else ""
    return email


def user_to_draft(user):
    enrollment_type, status = _enrollment(user)
    return MemberDraft(
        name=user.get("name") or user.get("sortable_name") or "",
        email=_user_email(user),
        student_number=user.get("sis_user_id") or None,
        lms_user_id=str(user["id"]),
        status=status,
        enrollment_type=enrollment_type,
        source="lms",
    )


def fetch_course_users(api, course_id):
    """Every user of a course, students and staff, as member drafts."""
    users = api.get_course_users(course_id)
    logger.debug("Fetched %d users for course %s.", len(users), course_id)
    return [user_to_draft(user) for user in users]


def fetch_group_sets(api, course_id):
    """``(id, name)`` of each group category in the course."""
    return [(str(c["id"]), c["name"]) for c in api.get_group_categories(course_id)]


def fetch_course_groups(api, course_id, group_set_id):
    """The groups of one group category, with members given by LMS user id."""
    known = {str(gs_id) for gs_id, _ in fetch_group_sets(api, course_id)}
    if str(group_set_id) not in known:
        raise CourseNotFound("Course {} has no group set {}".format(course_id, group_set_id))

    drafts = []
    for group in api.get_category_groups(group_set_id):
        members = api.get_group_users(group["id"])
        drafts.append(GroupDraft(
            name=group["name"],
            lms_group_id=str(group["id"]),
            member_lms_ids=[str(m["id"]) for m in members],
        ))
    logger.debug("Fetched %d groups for group set %s.", len(drafts), group_set_id)
    return drafts
