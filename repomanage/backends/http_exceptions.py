from requests.exceptions import HTTPError

from repomanage.backends.exceptions import (
    AuthenticationFailed,
    OrganizationNotFound,
    RepositoryAlreadyExists,
    RepositoryNotFound,
)

def raiseAuthenticationFailed(err: HTTPError):
    """
    Any request made with a missing, expired or underprivileged token.

    Expected response: HTTP 401 (or 403 from GitHub and Gitea)
    """
    if err.response.status_code not in (401, 403):
        return

    raise AuthenticationFailed(err)

def raiseRepositoryAlreadyExists(err: HTTPError):
    """
    Request urls:
        POST /orgs/{}/repos        (GitHub, Gitea)
        POST /api/v4/projects      (GitLab)

    Expected response: HTTP 422 (GitHub), 409 (Gitea) or 400 (GitLab)
    """
    if err.response.status_code not in (400, 409, 422):
        return

    raise RepositoryAlreadyExists(err)

def raiseRepositoryNotFound(err: HTTPError):
    """
    Request urls:
        GET/DELETE /repos/{}/{}             (GitHub, Gitea)
        GET/DELETE /api/v4/projects/{}      (GitLab)

    Expected response: HTTP 404
    """
    if err.response.status_code != 404:
        return

    raise RepositoryNotFound(err)

def raiseOrganizationNotFound(err: HTTPError):
    """
    Request urls:
        GET /orgs/{}           (GitHub, Gitea)
        GET /api/v4/groups/{}  (GitLab)

    Expected response: HTTP 404
    """
    if err.response.status_code != 404:
        return

    raise OrganizationNotFound(err)
