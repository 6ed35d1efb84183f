from typing import Iterable, Optional
import logging
from .combinations import find_combination
from .entities import Combination, Describable, Interaction, Item, Location, Player, Taggable
from .errors import DuplicateKey, InvalidEventTarget, UnknownReference
from .evaluation import evaluate_describable
from .events import EventBus, FocusChanged, FocusGained, FocusLost, ImpactEvent, ItemChanged, TagChanged
from .impacts import EventImpact, FocusImpact, Impact, ManipulateImpact
from .references import Reference, Scope
from .tags import Manipulation

logger = logging.getLogger(__name__)

PLAYER_HOLDER = "player"

class WorldState:
    """
    Holds every location and item, the player and the current focus.

    Entities live in an arena ('entities') and refer to each other by index.
    Keyed entities can also be resolved by key.
    Evaluating an entity collects its text and impacts first, then applies the
    impacts in order. State never changes during a walk.
    """
    def __init__(self, player: Optional[Player] = None, bus: Optional[EventBus] = None):
        self.entities: list[Taggable] = []
        self.keys: dict[str, int] = {}
        self.player = player or Player()
        self.bus = bus or EventBus()
        self.focus: Optional[Location] = None

    # Registry

    def register(self, entity: Taggable) -> int:
        if entity.key:
            if entity.key in self.keys:
                raise DuplicateKey(entity.key)
            self.keys[entity.key] = len(self.entities)
        entity.eid = len(self.entities)
        self.entities.append(entity)
        return entity.eid

    def entity(self, eid: int) -> Taggable:
        return self.entities[eid]

    def location(self, eid: int) -> Location:
        entity = self.entities[eid]
        assert isinstance(entity, Location)
        return entity

    def resolve(self, key: Optional[str]) -> Optional[Taggable]:
        if not key or key not in self.keys:
            return None
        return self.entities[self.keys[key]]

    def resolve_location(self, key: Optional[str]) -> Optional[Location]:
        entity = self.resolve(key)
        return entity if isinstance(entity, Location) else None

    def resolve_item(self, key: Optional[str]) -> Optional[Item]:
        entity = self.resolve(key)
        return entity if isinstance(entity, Item) else None

    def require(self, key: str) -> Taggable:
        entity = self.resolve(key)
        if entity is None:
            raise UnknownReference(key)
        return entity

    def parent_of(self, location: Location) -> Optional[Location]:
        return self.location(location.parent) if location.parent is not None else None

    def sub_locations(self, location: Location) -> list[Location]:
        return [self.location(eid) for eid in location.sub_locations]

    @property
    def locations(self) -> list[Location]:
        return [entity for entity in self.entities if isinstance(entity, Location)]

    @property
    def items(self) -> list[Item]:
        return [entity for entity in self.entities if isinstance(entity, Item)]

    def source_of(self, node: Describable) -> Taggable:
        """The entity local references of this node resolve to."""
        if isinstance(node, Taggable):
            return node
        if node.owner is None:
            raise ValueError(f"{node!r} has no owning entity")
        return self.entities[node.owner]

    # Facts

    def has_fact(self, source: Taggable, reference: Reference) -> bool:
        match reference.scope:
            case Scope.INVENTORY:
                return reference.property in self.player.inventory
            case Scope.PLAYER:
                return reference.property in self.player.tags
            case Scope.LOCAL:
                return reference.property in source.tags
            case Scope.GLOBAL:
                assert reference.element is not None
                return reference.property in self.require(reference.element).tags
        raise ValueError(f"Unknown scope: {reference.scope}")

    def is_available(self, node: Describable) -> bool:
        source = self.source_of(node)
        return node.is_available(lambda reference: self.has_fact(source, reference))

    # Impacts

    def apply(self, source: Taggable, impact: Impact) -> None:
        logger.debug("Apply %s (source: %s)", impact, source.label)
        match impact:
            case ManipulateImpact(reference, manipulation):
                self.manipulate(source, reference, manipulation)
            case FocusImpact(key):
                location = self.resolve_location(key)
                if location is None:
                    raise UnknownReference(key, "location")
                self.set_focus(location)
            case EventImpact(reference):
                self.raise_event(source, reference)
            case _:
                raise TypeError(f"Unknown impact: {impact!r}")

    def apply_all(self, source: Taggable, impacts: Iterable[Impact]) -> None:
        for impact in impacts:
            self.apply(source, impact)

    def manipulate(self, source: Taggable, reference: Reference, manipulation: Manipulation) -> None:
        tag = reference.property
        match reference.scope:
            case Scope.INVENTORY:
                if self.player.inventory.apply(tag, manipulation):
                    self.bus.emit(ItemChanged(item=tag, added=tag in self.player.inventory))
                return
            case Scope.PLAYER:
                holder, tags = PLAYER_HOLDER, self.player.tags
            case Scope.LOCAL:
                holder, tags = source.label, source.tags
            case Scope.GLOBAL:
                assert reference.element is not None
                target = self.require(reference.element)
                holder, tags = target.label, target.tags

        if tags.apply(tag, manipulation):
            self.bus.emit(TagChanged(holder=holder, tag=tag, added=tag in tags))

    def raise_event(self, source: Taggable, reference: Reference) -> None:
        match reference.scope:
            case Scope.INVENTORY:
                raise InvalidEventTarget(f"Cannot delegate impact event '{reference}' to the inventory.")
            case Scope.PLAYER:
                target = None
            case Scope.LOCAL:
                target = source.label
            case Scope.GLOBAL:
                assert reference.element is not None
                target = self.require(reference.element).label

        self.bus.emit(ImpactEvent(target=target, argument=reference.property, source=source.key))

    # Focus

    def set_focus(self, location: Location) -> None:
        if location is self.focus:
            return

        previous = self.focus
        if previous is not None:
            self.bus.emit(FocusLost(previous.eid))
        self.focus = location
        logger.info("Focus: %s -> %s", previous.label if previous else None, location.label)
        self.bus.emit(FocusChanged(previous=previous.eid if previous else None, current=location.eid))
        self.bus.emit(FocusGained(location.eid))

    # Evaluation

    def evaluate(self, node: Describable, count: bool = True) -> str:
        """
        Evaluates the node's full description for the current state and applies its impacts.
        Returns the description text, with markup still embedded.
        """
        source = self.source_of(node)
        result = evaluate_describable(node, lambda reference: self.has_fact(source, reference), count)
        self.apply_all(source, result.impacts)
        return result.text

    def available_interactions(self, location: Location) -> list[Interaction]:
        return [interaction for interaction in location.interactions if self.is_available(interaction)]

    def available_sub_locations(self, location: Location) -> list[Location]:
        return [sub for sub in self.sub_locations(location) if self.is_available(sub)]

    def available_children(self, location: Location) -> list[Interaction | Location]:
        return [*self.available_interactions(location), *self.available_sub_locations(location)]

    def available_items(self) -> list[Item]:
        """Items in the player's inventory that are currently available."""
        items = (self.resolve_item(key) for key in self.player.inventory)
        return [item for item in items if item is not None and self.is_available(item)]

    def combination_with(self, a: Taggable, b: Taggable) -> Optional[Combination]:
        return find_combination(a, b, self.is_available)
