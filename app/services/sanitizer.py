import re
from typing import Any

# a tag or comment: "<" directly followed by a name, "/" or "!". "a < b" and "<3" are text
_TAG = re.compile(r"</?[A-Za-z!][^<>]*>")


def sanitize(raw: Any) -> str:
    """
    strip markup and surrounding whitespace

    tags are removed until nothing changes, otherwise "<<b>script>" would leave a new tag behind
    and sanitize(sanitize(x)) != sanitize(x). None and non-strings turn into "".
    """
    if not isinstance(raw, str):
        return ""
    text = raw
    while True:
        stripped = _TAG.sub("", text)
        if stripped == text:
            break
        text = stripped
    return text.strip()
