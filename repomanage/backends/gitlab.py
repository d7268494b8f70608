#pylint: disable=dangerous-default-value
import logging
import requests

from requests.exceptions import HTTPError
from urllib.parse import quote

from repomanage.backends.base import PlatformBase, RepoError, insert_auth
from repomanage.backends.http_exceptions import (
    raiseAuthenticationFailed,
    raiseOrganizationNotFound,
    raiseRepositoryAlreadyExists,
    raiseRepositoryNotFound,
)

logger = logging.getLogger(__name__)

# Transparently use a common TLS session for each request
requests = requests.Session()


class GitlabPlatform(PlatformBase):
    """GitLab; repositories are projects inside the configured group."""

    name = "gitlab"

    def __init__(self, host, token, organization, user=None):
        host = (host or "https://gitlab.com").rstrip("/")
        if host.endswith("/api/v4"):
            host = host[:-len("/api/v4")]
        super().__init__(host, token, organization, user)

    def _gl_get(self, path, params={}):
        """Make a Gitlab GET request"""
        headers = {"Private-Token": self.token}
        r = requests.get(self.host + "/api/v4" + path, params=params, headers=headers)
        r.raise_for_status()
        return r.json()

    def _gl_post(self, path, payload={}, params={}):
        """Make a Gitlab POST request"""
        headers = {"Private-Token": self.token}
        r = requests.post(self.host + "/api/v4" + path, params=params, data=payload, headers=headers)
        r.raise_for_status()
        return r.json()

    def _gl_delete(self, path, params={}):
        """Make a Gitlab DELETE request"""
        headers = {"Private-Token": self.token}
        r = requests.delete(self.host + "/api/v4" + path, params=params, headers=headers)
        r.raise_for_status()

    def _project_path(self, name):
        return quote("{}/{}".format(self.organization, name), safe="")

    def _namespace_id(self, owning_group=None):
        path = self.organization
        if owning_group:
            path = "{}/{}".format(self.organization, owning_group)
        try:
            return self._gl_get("/groups/{}".format(quote(path, safe="")))["id"]
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseOrganizationNotFound(e)
            raise RepoError(e)

    def repo_exists(self, name):
        try:
            self._gl_get("/projects/{}".format(self._project_path(name)))
        except HTTPError as e:
            if e.response.status_code == 404:
                logger.debug("Could not find project %s/%s.", self.organization, name)
                return False
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        return True

    def create_repo(self, name, private=True, owning_group=None):
        payload = {
            "name": name,
            "path": name,
            "namespace_id": self._namespace_id(owning_group),
            "visibility": "private" if private else "public",
            "issues_enabled": False,
            "wiki_enabled": False,
        }
        try:
            result = self._gl_post("/projects", payload)
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseRepositoryAlreadyExists(e)
            raise RepoError(e)

        logger.debug("Created %s.", result.get("path_with_namespace", name))
        return result["http_url_to_repo"]

    def delete_repo(self, name):
        try:
            self._gl_delete("/projects/{}".format(self._project_path(name)))
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseRepositoryNotFound(e)
            raise RepoError(e)
        logger.debug("Deleted %s.", name)

    def clone_url(self, name):
        url = "{}/{}/{}.git".format(self.host, self.organization, name)
        return insert_auth(url, "oauth2", self.token)

    def verify_credentials(self):
        try:
            username = self._gl_get("/user")["username"]
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raise RepoError(e)

        self._namespace_id()
        logger.debug("Authenticated to %s as %s.", self.host, username)
        return username

    def user_exists(self, username):
        try:
            users = self._gl_get("/users", params={"username": username})
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        return any(u["username"].lower() == username.lower() for u in users)
