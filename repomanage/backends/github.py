#pylint: disable=dangerous-default-value
import logging
import requests

from requests.exceptions import HTTPError

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


class GithubPlatform(PlatformBase):
    """GitHub and GitHub Enterprise; repositories live in an organization."""

    name = "github"

    def __init__(self, host, token, organization, user=None):
        super().__init__(host or "https://github.com", token, organization, user)
        if "github.com" in self.host:
            self.api_url = "https://api.github.com"
            self.html_url = "https://github.com"
        else:
            self.api_url = self.host + "/api/v3"
            self.html_url = self.host

    def _headers(self):
        return {
            "Authorization": "token {}".format(self.token),
            "Accept": "application/vnd.github+json",
        }

    def _gh_get(self, path, params={}):
        """Make a GitHub GET request"""
        r = requests.get(self.api_url + path, params=params, headers=self._headers())
        r.raise_for_status()
        return r.json()

    def _gh_post(self, path, payload={}):
        """Make a GitHub POST request"""
        r = requests.post(self.api_url + path, json=payload, headers=self._headers())
        r.raise_for_status()
        return r.json()

    def _gh_delete(self, path):
        """Make a GitHub DELETE request"""
        r = requests.delete(self.api_url + path, headers=self._headers())
        r.raise_for_status()

    def _team_id(self, slug):
        try:
            return self._gh_get("/orgs/{}/teams/{}".format(self.organization, slug))["id"]
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            if e.response.status_code == 404:
                raise RepoError("No team {} in {}.".format(slug, self.organization))
            raise RepoError(e)

    def repo_exists(self, name):
        try:
            self._gh_get("/repos/{}/{}".format(self.organization, name))
        except HTTPError as e:
            if e.response.status_code == 404:
                return False
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        return True

    def create_repo(self, name, private=True, owning_group=None):
        payload = {
            "name": name,
            "private": private,
            "has_issues": False,
            "has_wiki": False,
        }
        if owning_group:
            payload["team_id"] = self._team_id(owning_group)

        try:
            result = self._gh_post("/orgs/{}/repos".format(self.organization), payload)
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseOrganizationNotFound(e)
            raiseRepositoryAlreadyExists(e)
            raise RepoError(e)

        logger.debug("Created %s.", result.get("full_name", name))
        return result["clone_url"]

    def delete_repo(self, name):
        try:
            self._gh_delete("/repos/{}/{}".format(self.organization, name))
        except HTTPError as e:
            raiseRepositoryNotFound(e)
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        logger.debug("Deleted %s.", name)

    def clone_url(self, name):
        url = "{}/{}/{}.git".format(self.html_url, self.organization, name)
        return insert_auth(url, "x-access-token", self.token)

    def verify_credentials(self):
        try:
            username = self._gh_get("/user")["login"]
            self._gh_get("/orgs/{}".format(self.organization))
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseOrganizationNotFound(e)
            raise RepoError(e)

        logger.debug("Authenticated to %s as %s.", self.api_url, username)
        return username

    def user_exists(self, username):
        try:
            self._gh_get("/users/{}".format(username))
        except HTTPError as e:
            if e.response.status_code == 404:
                return False
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        return True
