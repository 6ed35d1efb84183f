from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from .impacts import Impact
from .requirements import FactPredicate, Requirement
from .tags import TagSet

class Correlation(str, Enum):
    """Sequential correlation of a descriptor to its preceding sibling."""
    NONE = "none"
    ELSE = "else"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None

@dataclass(eq=False, kw_only=True)
class Describable:
    """
    Anything with a (conditional) description.
    The description is composed from this node's own text and its nested descriptors.
    """
    description: Optional[str] = None
    requirement: Optional[Requirement] = None
    impacts: list[Impact] = field(default_factory=list)
    descriptors: list[Descriptor] = field(default_factory=list)
    evaluation_count: int = 0
    evaluation_limit: int = 0                                                   # 0 = unlimited
    owner: Optional[int] = None                                                 # World index of the entity local references resolve to

    @property
    def exhausted(self) -> bool:
        return self.evaluation_limit > 0 and self.evaluation_count >= self.evaluation_limit

    def is_available(self, has: FactPredicate) -> bool:
        if self.exhausted:
            return False
        if self.requirement is None:
            return True
        return self.requirement.evaluate(has)

@dataclass(eq=False, kw_only=True)
class Descriptor(Describable):
    """A non-selectable fragment of an entity's description."""
    correlation: Correlation = Correlation.NONE

@dataclass(eq=False, kw_only=True)
class Interaction(Describable):
    """An action the player can select at a location."""
    name: str

    def __str__(self) -> str:
        return self.name

@dataclass(eq=False, kw_only=True)
class Combination(Describable):
    """The outcome of using the owning entity together with the entity keyed 'target'."""
    target: str

@dataclass(eq=False, kw_only=True)
class Taggable(Describable):
    name: str
    key: Optional[str] = None
    tags: TagSet = field(default_factory=TagSet)
    combinations: list[Combination] = field(default_factory=list)
    eid: int = -1                                                               # Index in the world, assigned on registration

    @property
    def label(self) -> str:
        return self.key or self.name

    def __str__(self) -> str:
        return self.name

@dataclass(eq=False, kw_only=True)
class Location(Taggable):
    """A node of the world graph. Parent and sub-locations are world indices."""
    parent: Optional[int] = None
    sub_locations: list[int] = field(default_factory=list)
    interactions: list[Interaction] = field(default_factory=list)
    disable_exit: bool = False

    def is_available(self, has: FactPredicate) -> bool:
        # Root locations are always available
        if self.parent is None:
            return True
        return super().is_available(has)

@dataclass(eq=False, kw_only=True)
class Item(Taggable):
    """An entity the player can carry."""

@dataclass(eq=False, kw_only=True)
class Player:
    tags: TagSet = field(default_factory=TagSet)
    inventory: TagSet = field(default_factory=TagSet)                           # Keys of held items
