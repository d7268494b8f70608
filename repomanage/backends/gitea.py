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


class GiteaPlatform(PlatformBase):
    """Gitea (and Forgejo); repositories live in an organization."""

    name = "gitea"

    def __init__(self, host, token, organization, user=None):
        host = (host or "").rstrip("/")
        if host.endswith("/api/v1"):
            host = host[:-len("/api/v1")]
        super().__init__(host, token, organization, user)
        self.api_url = self.host + "/api/v1"

    def _headers(self):
        return {"Authorization": "token {}".format(self.token)}

    def _gt_get(self, path, params={}):
        """Make a Gitea GET request"""
        r = requests.get(self.api_url + path, params=params, headers=self._headers())
        r.raise_for_status()
        return r.json()

    def _gt_post(self, path, payload={}):
        """Make a Gitea POST request"""
        r = requests.post(self.api_url + path, json=payload, headers=self._headers())
        r.raise_for_status()
        return r.json()

    def _gt_put(self, path):
        """Make a Gitea PUT request without a body"""
        r = requests.put(self.api_url + path, headers=self._headers())
        r.raise_for_status()

    def _gt_delete(self, path):
        """Make a Gitea DELETE request"""
        r = requests.delete(self.api_url + path, headers=self._headers())
        r.raise_for_status()

    def _team_id(self, team_name):
        try:
            result = self._gt_get("/orgs/{}/teams/search".format(self.organization),
                                  params={"q": team_name})
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseOrganizationNotFound(e)
            raise RepoError(e)

        for team in result.get("data", []):
            if team["name"] == team_name:
                return team["id"]
        raise RepoError("No team {} in {}.".format(team_name, self.organization))

    def repo_exists(self, name):
        try:
            self._gt_get("/repos/{}/{}".format(self.organization, name))
        except HTTPError as e:
            if e.response.status_code == 404:
                return False
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        return True

    def create_repo(self, name, private=True, owning_group=None):
        team_id = self._team_id(owning_group) if owning_group else None
        try:
            result = self._gt_post("/orgs/{}/repos".format(self.organization),
                                   {"name": name, "private": private})
            if team_id is not None:
                self._gt_put("/teams/{}/repos/{}/{}".format(team_id, self.organization, name))
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseRepositoryAlreadyExists(e)
            raise RepoError(e)

        logger.debug("Created %s.", result.get("full_name", name))
        return result["clone_url"]

    def delete_repo(self, name):
        try:
            self._gt_delete("/repos/{}/{}".format(self.organization, name))
        except HTTPError as e:
            raiseRepositoryNotFound(e)
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        logger.debug("Deleted %s.", name)

    def clone_url(self, name):
        url = "{}/{}/{}.git".format(self.host, self.organization, name)
        return insert_auth(url, self.user or "git", self.token)

    def verify_credentials(self):
        try:
            username = self._gt_get("/user")["login"]
            self._gt_get("/orgs/{}".format(self.organization))
        except HTTPError as e:
            raiseAuthenticationFailed(e)
            raiseOrganizationNotFound(e)
            raise RepoError(e)

        logger.debug("Authenticated to %s as %s.", self.host, username)
        return username

    def user_exists(self, username):
        try:
            self._gt_get("/users/{}".format(username))
        except HTTPError as e:
            if e.response.status_code == 404:
                return False
            raiseAuthenticationFailed(e)
            raise RepoError(e)
        return True
