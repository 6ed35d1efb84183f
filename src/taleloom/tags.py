import re
from enum import Enum
from typing import Iterable, Iterator, Optional
from .errors import InvalidExpression
from .util import split_trimmed

class Manipulation(Enum):
    ADD = "add"
    REMOVE = "remove"
    INVERT = "invert"

# A tag may not contain whitespace, e.g. "lamp lit" is two tags missing a comma.
# Whitespace around the commas is fine.
INNER_WHITESPACE = re.compile(r"[^\s,]\s+[^\s,]")

class TagSet:
    """
    An ordered set of short string facts.
    Iteration is sorted, so listings are stable regardless of the order tags were added.
    Mutators report whether membership actually changed.
    """
    def __init__(self, tags: Optional[Iterable[str]] = None):
        self._tags: set[str] = set(tags) if tags else set()

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"TagSet({list(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self._tags == other._tags
        if isinstance(other, (set, frozenset)):
            return self._tags == other
        return NotImplemented

    def add(self, tag: str) -> bool:
        if tag in self._tags:
            return False
        self._tags.add(tag)
        return True

    def discard(self, tag: str) -> bool:
        if tag not in self._tags:
            return False
        self._tags.remove(tag)
        return True

    def apply(self, tag: str, manipulation: Manipulation) -> bool:
        """Adds, removes or toggles the tag. Returns True if membership changed."""
        if manipulation is Manipulation.ADD:
            return self.add(tag)
        if manipulation is Manipulation.REMOVE:
            return self.discard(tag)
        if tag in self._tags:
            return self.discard(tag)
        return self.add(tag)

def parse_tags(raw: Optional[str | list[str]]) -> TagSet:
    """Parses a comma separated tag expression (or a list of tags) into a TagSet."""
    if raw is None:
        return TagSet()

    entries = raw if isinstance(raw, list) else [raw]
    tags: list[str] = []
    for entry in entries:
        if INNER_WHITESPACE.search(entry):
            raise InvalidExpression(entry, "tags may not contain whitespace")
        tags.extend(split_trimmed(entry, ","))

    return TagSet(tags)
