import logging
import requests

from requests.exceptions import HTTPError, RequestException

from repomanage.lms.exceptions import AuthenticationFailed, CourseNotFound, LmsError

logger = logging.getLogger(__name__)

# Transparently use a common TLS session for each request
requests = requests.Session()

PER_PAGE = 100


class CanvasAPI:
    def __init__(self, canvas_token, website_root):
        if "://" not in website_root:
            website_root = "https://" + website_root
        self.website_root = website_root.rstrip("/")
        self.headers = {"Authorization": "Bearer " + canvas_token}

    def _get(self, url, params=None):
        if not url.startswith("http"):
            url = self.website_root + url
        try:
            response = requests.get(url, params=params, headers=self.headers)
            response.raise_for_status()
        except HTTPError as e:
            status = e.response.status_code
            if status == 401:
                raise AuthenticationFailed("Canvas rejected the access token") from e
            if status == 404:
                raise CourseNotFound("{} was not found".format(url)) from e
            raise LmsError(e) from e
        except RequestException as e:
            raise LmsError(e) from e
        return response

    def _get_all_pages(self, url, params=None):
        """
        Get the full results from a query by following the ``next`` pagination
        links Canvas returns in the Link header.
        """
        params = dict(params or {})
        params.setdefault("per_page", PER_PAGE)

        response = self._get(url, params)
        result = list(response.json())
        while "next" in response.links:
            next_url = response.links["next"]["url"]
            logger.debug("Getting next page for %s via %s", url, next_url)
            # The next url already carries every query parameter.
            response = self._get(next_url)
            result.extend(response.json())

        return result

    def get_course(self, course_id):
        return self._get("/api/v1/courses/{}".format(course_id)).json()

    def get_instructor_courses(self):
        get = lambda x: self._get_all_pages('/api/v1/courses',
                                            {'enrollment_type': x, 'state[]': ['available']})
        result = get('teacher')
        result.extend(get('ta'))
        return result

    def get_course_users(self, course_id):
        params = {
            "include[]": ["email", "enrollments"],
            "enrollment_state[]": ["active", "invited", "inactive"],
        }
        return self._get_all_pages("/api/v1/courses/{}/users".format(course_id), params)

    def get_group_categories(self, course_id):
        return self._get_all_pages("/api/v1/courses/{}/group_categories".format(course_id))

    def get_category_groups(self, category_id):
        return self._get_all_pages("/api/v1/group_categories/{}/groups".format(category_id))

    def get_group_users(self, group_id):
        return self._get_all_pages("/api/v1/groups/{}/users".format(group_id))
