import random
import string

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 8


def generate_id() -> str:
    """Short opaque id for client-side tree nodes. Not a security token."""
    return "".join(random.choices(ID_ALPHABET, k=ID_LENGTH))
