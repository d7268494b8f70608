import logging

from repomanage.backends.decorators import requires_config_and_platform
from repomanage.lms import from_config as lms_from_config

help = "Check the platform and LMS credentials of a profile"

logger = logging.getLogger(__name__)


@requires_config_and_platform
def verify(conf, platform, args):
    username = platform.verify_credentials()
    print("{}: authenticated as {} (organization {}).".format(
        platform.name, username, platform.organization))

    lms = conf.get("lms")
    if lms and not args.skip_lms:
        api = lms_from_config(conf)
        if lms.get("course-id"):
            course = api.get_course(lms["course-id"])
            print("canvas: course {} ({}).".format(course.get("name"), course.get("id")))
        else:
            courses = api.get_instructor_courses()
            print("canvas: {} courses available.".format(len(courses)))


def setup_parser(parser):
    parser.add_argument("--skip-lms", action="store_true", help="Only check the git platform")
    parser.set_defaults(run=verify)
