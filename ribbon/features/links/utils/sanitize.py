import re

MAX_SANITIZED_LENGTH = 50

_FORBIDDEN_CHARS = re.compile(r"[<>'\"]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)


def sanitize_name(value: str) -> str:
    """
    Strip angle brackets, quotes and `javascript:` from a display name and cap
    it at 50 characters.

    Removal repeats until stable so that inputs such as
    "javajavascript:script:" cannot reassemble the scheme.
    """
    cleaned = value
    while True:
        stripped = _JAVASCRIPT_SCHEME.sub("", _FORBIDDEN_CHARS.sub("", cleaned))
        if stripped == cleaned:
            break
        cleaned = stripped
    return cleaned[:MAX_SANITIZED_LENGTH]
