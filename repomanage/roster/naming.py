"""Group names derived from member names.

- 1 member: ``firstname_lastname`` (``alice_smith``)
- 2-5 members: surnames joined with dashes (``smith-jones-lee``)
- 6+ members: five surnames and the remainder (``smith-jones-lee-park-chen-+2``)
"""
from repomanage.roster.ids import generate_id
from repomanage.roster.slug import slugify

MAX_SURNAMES = 5
MAX_COLLISION_ATTEMPTS = 1000


def _first_word(name):
    words = (name or "").split()
    return words[0] if words else ""


def _last_word(name):
    words = (name or "").split()
    return words[-1] if words else ""


def short_id(member_id):
    """First four alphanumeric characters of an id, lowercased."""
    return "".join(c for c in member_id if c.isalnum())[:4].lower()


def _surname(member):
    return slugify(_last_word(member.name)) or short_id(member.id)


def generate_group_name(members):
    if not members:
        return "empty-group"

    if len(members) == 1:
        member = members[0]
        first = slugify(_first_word(member.name))
        last = slugify(_last_word(member.name)) if len(member.name.split()) > 1 else ""
        if not first and not last:
            return "member-{}".format(short_id(member.id))
        if not first:
            return last
        if not last:
            return first
        return "{}_{}".format(first, last)

    surnames = [_surname(m) for m in members[:MAX_SURNAMES]]
    if len(members) <= MAX_SURNAMES:
        return "-".join(surnames)

    return "{}-+{}".format("-".join(surnames), len(members) - MAX_SURNAMES)


def resolve_collision(base_name, existing_names, member_id=None):
    """Find a variant of ``base_name`` that is not in ``existing_names``.

    Individuals get their short member id appended, everything else an
    increasing ``-N`` suffix.
    """
    if member_id is not None:
        candidate = "{}_{}".format(base_name, short_id(member_id))
        if candidate not in existing_names:
            return candidate

    for counter in range(2, MAX_COLLISION_ATTEMPTS + 1):
        candidate = "{}-{}".format(base_name, counter)
        if candidate not in existing_names:
            return candidate

    return "{}-{}".format(base_name, generate_id()[:8])


def generate_unique_group_name(members, existing_names):
    base_name = generate_group_name(members)
    if base_name not in existing_names:
        return base_name

    member_id = members[0].id if len(members) == 1 else None
    return resolve_collision(base_name, existing_names, member_id)
