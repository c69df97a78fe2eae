"""Package identifier parsing.

Identifiers take the form ``publisher.name``. Users may also paste a
marketplace item URL; its ``itemName`` query parameter carries the
identifier.
"""

import re
import urllib.parse
from dataclasses import dataclass

from .errors import ValidationError

_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class PackageIdentifier:
    publisher: str
    name: str

    @property
    def key(self) -> str:
        """Case-insensitive lookup key; the marketplace ignores case."""
        return str(self).lower()

    def __str__(self) -> str:
        return f"{self.publisher}.{self.name}"


def parse_identifier(text: str) -> PackageIdentifier:
    """Split ``publisher.name`` on its first dot.

    Raises:
        ValidationError: If either side is empty or contains whitespace
    """
    if not isinstance(text, str) or _WHITESPACE.search(text):
        raise ValidationError(
            f"Invalid package identifier {text!r}. Expected format: publisher.name",
            identifier=str(text),
        )

    publisher, dot, name = text.partition(".")
    if not dot or not publisher or not name:
        raise ValidationError(
            f"Invalid package identifier {text!r}. Expected format: publisher.name",
            identifier=text,
        )
    return PackageIdentifier(publisher=publisher, name=name)


def is_valid_identifier(text: str) -> bool:
    try:
        parse_identifier(text)
    except ValidationError:
        return False
    return True


def extract_identifier(raw: str) -> str:
    """Return the identifier from a bare id or a marketplace item URL.

    Examples:
        >>> extract_identifier("https://marketplace.visualstudio.com/items?itemName=ms-python.python")
        'ms-python.python'
        >>> extract_identifier("  ms-python.python ")
        'ms-python.python'
    """
    text = (raw or "").strip()
    parsed = urllib.parse.urlparse(text)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        item_names = urllib.parse.parse_qs(parsed.query).get("itemName")
        if not item_names or not item_names[0]:
            raise ValidationError(
                f"URL has no itemName parameter: {text}", identifier=text
            )
        return item_names[0].strip()
    return text


__all__ = [
    "PackageIdentifier",
    "parse_identifier",
    "is_valid_identifier",
    "extract_identifier",
]
