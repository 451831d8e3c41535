import secrets
import string

SLUG_LENGTH = 8
URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_slug(length: int = SLUG_LENGTH) -> str:
    return ''.join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))


def generate_suffix(length: int = 6) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))
