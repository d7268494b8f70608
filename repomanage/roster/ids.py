import secrets
import string

ID_LENGTH = 21
ID_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase + "_-"


def generate_id():
    """Random 21 character URL-safe id (126 bits of entropy)."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
