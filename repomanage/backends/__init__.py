from repomanage.backends.base import PlatformBase, RepoError
from repomanage.backends.gitea import GiteaPlatform
from repomanage.backends.github import GithubPlatform
from repomanage.backends.gitlab import GitlabPlatform
from repomanage.backends.local import LocalPlatform

pyflakes = [PlatformBase, RepoError]

backend_names = {
    "github": GithubPlatform,
    "gitlab": GitlabPlatform,
    "gitea": GiteaPlatform,
    "local": LocalPlatform,
    }

class NoSuchBackend(Exception):
    pass

def from_name(name: str):
    try:
        return backend_names[name]
    except KeyError:
        raise NoSuchBackend("Cannot find backend with name {}".format(name)) from None

def detect_platform(url: str) -> str:
    """ Guess the platform name from a host url. """
    lowered = (url or "").lower()
    if lowered.startswith("/") or lowered.startswith("file://") or lowered.startswith("~"):
        return "local"
    for name in ("github", "gitlab", "gitea"):
        if name in lowered:
            return name
    raise NoSuchBackend(
        "Cannot detect the platform of {}; set platform.name explicitly".format(url)
    )

def platform_name(settings) -> str:
    """ The name set in a ``platform`` section, else the one its host implies. """
    host = settings.get("host") or settings.get("base-dir")
    return settings.get("name") or detect_platform(host)

def from_config(config) -> PlatformBase:
    """ Build the platform described by a profile's ``platform`` section. """
    settings = config.get("platform") or {}
    host = settings.get("host") or settings.get("base-dir")
    name = platform_name(settings)
    cls = from_name(name)

    if name == "local":
        return cls(settings.get("base-dir") or host, None,
                   settings.get("organization", "repos"), settings.get("user"))
    return cls(host, settings.get("token"), settings.get("organization"), settings.get("user"))
