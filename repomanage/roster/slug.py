import re
import unicodedata

MAX_SLUG_LENGTH = 100

DEFAULT_REPO_TEMPLATE = "{assignment}-{group}"

_SEPARATOR_RE = re.compile(r"[ _]")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")


def slugify(value):
    """Make a filesystem and URL safe name out of free text.

    Never fails; only ``[a-z0-9-]`` survives, with no leading, trailing or
    doubled hyphens, and at most ``MAX_SLUG_LENGTH`` characters.
    """
    decomposed = unicodedata.normalize("NFKD", value or "")
    ascii_text = decomposed.encode("ascii", "ignore").decode("ascii")

    slug = _SEPARATOR_RE.sub("-", ascii_text.lower())
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug).strip("-")

    if len(slug) > MAX_SLUG_LENGTH:
        slug = slug[:MAX_SLUG_LENGTH].rstrip("-")

    return slug


def expand_template(template, assignment, group, initials="", surnames=""):
    # {initials} and {surnames} need roster context; callers resolve them.
    return (template
            .replace("{assignment}", assignment.name)
            .replace("{group}", group.name)
            .replace("{group_id}", group.id)
            .replace("{initials}", initials)
            .replace("{surnames}", surnames))


def compute_repo_name(template, assignment, group):
    return slugify(expand_template(template, assignment, group))
