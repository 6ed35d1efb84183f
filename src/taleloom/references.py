from dataclasses import dataclass
from enum import Enum
from typing import Optional
from .errors import MalformedReference

class Scope(Enum):
    LOCAL = "local"             # Tag of the acting entity
    PLAYER = "player"           # Tag of the player
    INVENTORY = "inventory"     # Item held by the player
    GLOBAL = "global"           # Tag of the entity with the given key

@dataclass(frozen=True)
class Reference:
    """A parsed 'property' or 'element.property' path."""
    scope: Scope
    property: str
    element: Optional[str] = None

    def __str__(self) -> str:
        if self.scope is Scope.LOCAL:
            return self.property
        return f"{self.element}.{self.property}"

def parse_reference(expression: str) -> Reference:
    parts = expression.split(".")
    if len(parts) > 2 or not all(parts):
        raise MalformedReference(expression)

    if len(parts) == 1:
        return Reference(Scope.LOCAL, parts[0])

    element, property = parts
    if element.lower() == "player":
        return Reference(Scope.PLAYER, property, element)
    if element.lower() == "inventory":
        return Reference(Scope.INVENTORY, property, element)
    return Reference(Scope.GLOBAL, property, element)
