import re

MAX_SANITIZED_LENGTH = 500

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

_SLUG_DROP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_SLUG_SEPARATORS_RE = re.compile(r"[\s_-]+")


def sanitize_string(value: str, max_length: int = MAX_SANITIZED_LENGTH) -> str:
    """Strip markup and control characters from untrusted text.

    Removes ``<`` and ``>``, removes C0 control characters and DEL, trims
    surrounding whitespace and hard-truncates to ``max_length``. Trailing
    whitespace exposed by the cut is trimmed as well, so
    ``sanitize_string(sanitize_string(x)) == sanitize_string(x)``.

    Args:
        value: Raw user input.
        max_length: Maximum number of characters kept.

    Returns:
        str: Sanitized text.
    """
    value = _ANGLE_BRACKETS_RE.sub("", value)
    value = _CONTROL_CHARS_RE.sub("", value)
    return value.strip()[:max_length].rstrip()


def slugify(title: str) -> str:
    """Build the lookup slug for a book title.

    >>> slugify("  Atomic Habits: Tiny Changes! ")
    'atomic-habits-tiny-changes'
    """
    slug = _SLUG_DROP_RE.sub("", title.lower().strip())
    slug = _SLUG_SEPARATORS_RE.sub("-", slug)
    return slug.strip("-")
