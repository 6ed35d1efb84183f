"""
Impact language.

An impact list is a comma separated list of directives, each a prefix and an argument:
    +ref    add a tag (or an item, for inventory.x)
    -ref    remove a tag / item
    !ref    toggle a tag / item
    >key    move the focus to the location with the given key
    #ref    send an event to the referenced scope
"""
from dataclasses import dataclass
from typing import Optional
from .errors import InvalidExpression
from .references import Reference, parse_reference
from .tags import Manipulation

MANIPULATION_PREFIXES = {
    "+": Manipulation.ADD,
    "-": Manipulation.REMOVE,
    "!": Manipulation.INVERT,
}

@dataclass(frozen=True)
class ManipulateImpact:
    reference: Reference
    manipulation: Manipulation

    def __str__(self) -> str:
        prefix = next(p for p, m in MANIPULATION_PREFIXES.items() if m is self.manipulation)
        return f"{prefix}{self.reference}"

@dataclass(frozen=True)
class FocusImpact:
    key: str

    def __str__(self) -> str:
        return f">{self.key}"

@dataclass(frozen=True)
class EventImpact:
    reference: Reference

    def __str__(self) -> str:
        return f"#{self.reference}"

Impact = ManipulateImpact | FocusImpact | EventImpact

def parse_impact(expression: str) -> Impact:
    expression = expression.strip()
    if len(expression) < 2:
        raise InvalidExpression(expression, "not enough arguments")

    prefix, argument = expression[0], expression[1:]

    if prefix in MANIPULATION_PREFIXES:
        return ManipulateImpact(parse_reference(argument), MANIPULATION_PREFIXES[prefix])

    if prefix == ">":
        if "." in argument:
            raise InvalidExpression(expression, "focus target must be a plain key")
        return FocusImpact(argument)

    if prefix == "#":
        return EventImpact(parse_reference(argument))

    raise InvalidExpression(expression, f"unknown prefix '{prefix}'")

def parse_impacts(expression: Optional[str]) -> list[Impact]:
    """Parses a comma separated impact list. A missing list has no impacts."""
    if expression is None:
        return []
    return [parse_impact(part) for part in expression.split(",")]
