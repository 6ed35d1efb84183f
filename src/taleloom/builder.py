"""
Builds the runtime world state from a loaded world model.

All requirement and impact expressions are compiled here, once. Any compile
error fails the whole build.
"""
from typing import Iterator, Optional
import logging
from .entities import Combination, Describable, Descriptor, Interaction, Item, Location, Player
from .errors import CompileError, UnknownReference
from .events import EventBus
from .impacts import EventImpact, FocusImpact, ManipulateImpact, parse_impacts
from .references import Reference, Scope
from .requirements import Requirement
from .state import WorldState
from .tags import parse_tags
from .world import CombinationModel, DescriptorModel, InteractionModel, ItemModel, LocationModel, WorldModel

logger = logging.getLogger(__name__)

def compile_node(node: Describable, model, owner: int, label: str) -> None:
    """Copies the describable fields of the model onto the node, compiling expressions."""
    try:
        node.requirement = Requirement(model.requires) if model.requires is not None else None
        node.impacts = parse_impacts(model.impact)
    except CompileError as exc:
        logger.error("Cannot compile %s: %s", label, exc)
        raise

    node.description = model.description
    node.evaluation_limit = model.limit
    node.evaluation_count = model.evaluations
    node.owner = owner
    node.descriptors = [
        build_descriptor(descriptor, owner, f"{label} > descriptor {i + 1}")
        for i, descriptor in enumerate(model.descriptors)
    ]

def build_descriptor(model: DescriptorModel, owner: int, label: str) -> Descriptor:
    descriptor = Descriptor(correlation=model.correlation)
    compile_node(descriptor, model, owner, label)
    return descriptor

def build_interaction(model: InteractionModel, owner: int, label: str) -> Interaction:
    interaction = Interaction(name=model.name)
    compile_node(interaction, model, owner, f"{label} > interaction '{model.name}'")
    return interaction

def build_combination(model: CombinationModel, owner: int, label: str) -> Combination:
    combination = Combination(target=model.item)
    compile_node(combination, model, owner, f"{label} > combination with '{model.item}'")
    return combination

def build_location(state: WorldState, model: LocationModel, parent: Optional[int]) -> Location:
    label = f"location '{model.key or model.name}'"
    location = Location(
        name=model.name,
        key=model.key,
        tags=parse_tags(model.tags),
        parent=parent,
        disable_exit=model.disable_exit,
    )
    eid = state.register(location)
    compile_node(location, model, eid, label)
    location.interactions = [build_interaction(interaction, eid, label) for interaction in model.interactions]
    location.combinations = [build_combination(combination, eid, label) for combination in model.combinations]
    location.sub_locations = [build_location(state, sub, eid).eid for sub in model.locations]
    return location

def build_item(state: WorldState, model: ItemModel) -> Item:
    label = f"item '{model.key or model.name}'"
    item = Item(name=model.name, key=model.key, tags=parse_tags(model.tags))
    eid = state.register(item)
    compile_node(item, model, eid, label)
    item.combinations = [build_combination(combination, eid, label) for combination in model.combinations]
    return item

def build_world(model: WorldModel, bus: Optional[EventBus] = None) -> WorldState:
    player = Player(tags=parse_tags(model.player.tags), inventory=parse_tags(model.player.inventory))
    state = WorldState(player, bus)

    for location in model.locations:
        build_location(state, location, None)
    for item in model.items:
        build_item(state, item)

    start = state.resolve_location(model.start)
    if start is None:
        raise UnknownReference(model.start, "start location")
    state.set_focus(start)

    logger.info(
        "Built world '%s': %d locations, %d items",
        model.title, len(state.locations), len(state.items)
    )
    return state

# Validation

def iter_nodes(node: Describable, label: str) -> Iterator[tuple[str, Describable]]:
    yield label, node
    for i, descriptor in enumerate(node.descriptors):
        yield from iter_nodes(descriptor, f"{label} > descriptor {i + 1}")

def iter_describables(state: WorldState) -> Iterator[tuple[str, Describable]]:
    """Every describable in the world, with a label for messages."""
    for entity in state.entities:
        label = f"{type(entity).__name__.lower()} '{entity.label}'"
        yield from iter_nodes(entity, label)
        if isinstance(entity, Location):
            for interaction in entity.interactions:
                yield from iter_nodes(interaction, f"{label} > interaction '{interaction.name}'")
        for combination in entity.combinations:
            yield from iter_nodes(combination, f"{label} > combination with '{combination.target}'")

def check_reference(state: WorldState, reference: Reference) -> Optional[str]:
    if reference.scope is Scope.GLOBAL and state.resolve(reference.element) is None:
        return f"unknown key '{reference.element}'"
    if reference.scope is Scope.INVENTORY and state.resolve_item(reference.property) is None:
        return f"unknown item '{reference.property}'"
    return None

def validate_world(state: WorldState) -> list[str]:
    """
    Looks for references that would fail (or never hold) at runtime.
    Returns a list of human readable issues.
    """
    issues: list[str] = []

    for label, node in iter_describables(state):
        if node.requirement is not None:
            for reference in node.requirement.references():
                problem = check_reference(state, reference)
                if problem:
                    issues.append(f"{label}: requirement '{node.requirement}' references {problem}.")

        for impact in node.impacts:
            problem = None
            match impact:
                case ManipulateImpact(reference, _):
                    problem = check_reference(state, reference)
                case FocusImpact(key):
                    if state.resolve_location(key) is None:
                        problem = f"unknown location '{key}'"
                case EventImpact(reference):
                    if reference.scope is Scope.INVENTORY:
                        problem = "the inventory, which cannot receive events"
                    else:
                        problem = check_reference(state, reference)
            if problem:
                issues.append(f"{label}: impact '{impact}' targets {problem}.")

        if isinstance(node, Combination) and state.resolve(node.target) is None:
            issues.append(f"{label}: unknown combination target '{node.target}'.")

    for key in state.player.inventory:
        if state.resolve_item(key) is None:
            issues.append(f"Player inventory: '{key}' is not an item.")

    for issue in issues:
        logger.warning("World validation: %s", issue)

    return issues
