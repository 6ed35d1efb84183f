from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import logging
from dacite import Config, from_dict
from dacite.exceptions import DaciteError
import yaml
from .entities import Correlation
from .errors import WorldFileError

logger = logging.getLogger(__name__)

# Raw tag lists may be written as a comma separated string or a YAML list
RawTags = Union[str, list[str]]

@dataclass
class DescriptorModel:
    description: Optional[str] = None
    requires: Optional[str] = None                                              # Requirement expression
    impact: Optional[str] = None                                                # Comma separated impact list
    limit: int = 0                                                              # Maximum number of evaluations (0 = unlimited)
    evaluations: int = 0                                                        # Initial evaluation count
    correlation: Correlation = Correlation.NONE                                 # 'else' is skipped when the previous descriptor fired
    descriptors: list[DescriptorModel] = field(default_factory=list)

@dataclass
class InteractionModel:
    name: str
    description: Optional[str] = None
    requires: Optional[str] = None
    impact: Optional[str] = None
    limit: int = 0
    evaluations: int = 0
    descriptors: list[DescriptorModel] = field(default_factory=list)

@dataclass
class CombinationModel:
    item: str                                                                   # Key of the entity to combine with
    description: Optional[str] = None
    requires: Optional[str] = None
    impact: Optional[str] = None
    limit: int = 0
    evaluations: int = 0
    descriptors: list[DescriptorModel] = field(default_factory=list)

@dataclass
class ItemModel:
    name: str
    key: Optional[str] = None
    tags: Optional[RawTags] = None
    description: Optional[str] = None
    requires: Optional[str] = None
    impact: Optional[str] = None
    limit: int = 0
    evaluations: int = 0
    descriptors: list[DescriptorModel] = field(default_factory=list)
    combinations: list[CombinationModel] = field(default_factory=list)

@dataclass
class LocationModel:
    name: str
    key: Optional[str] = None
    tags: Optional[RawTags] = None
    description: Optional[str] = None
    requires: Optional[str] = None
    impact: Optional[str] = None
    limit: int = 0
    evaluations: int = 0
    disable_exit: bool = False                                                  # Hide the "back to parent" option
    descriptors: list[DescriptorModel] = field(default_factory=list)
    locations: list[LocationModel] = field(default_factory=list)
    interactions: list[InteractionModel] = field(default_factory=list)
    combinations: list[CombinationModel] = field(default_factory=list)

@dataclass
class PlayerModel:
    tags: Optional[RawTags] = None
    inventory: Optional[RawTags] = None

@dataclass
class WorldModel:
    """
    A story world definition, loaded from a yaml file.
    Expressions are kept as raw strings. They are compiled when the world is built.
    """
    start: str
    title: str = "Taleloom"
    player: PlayerModel = field(default_factory=PlayerModel)
    locations: list[LocationModel] = field(default_factory=list)
    items: list[ItemModel] = field(default_factory=list)

DACITE_CONFIG = Config(cast=[Correlation], strict=True)

def parse_world(world_yaml: str) -> WorldModel:
    try:
        parsed_world = yaml.safe_load(world_yaml)
        if not isinstance(parsed_world, dict):
            raise WorldFileError("Invalid world definition: expected a mapping at the top level")
        return from_dict(WorldModel, parsed_world, config=DACITE_CONFIG)
    except (yaml.YAMLError, DaciteError, ValueError) as exc:
        raise WorldFileError(f"Invalid world definition: {exc}") from exc

def load_world(path: Path) -> WorldModel:
    logger.info("Loading world: %s", path)
    try:
        world_yaml = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WorldFileError(f"Cannot read world file '{path}': {exc}") from exc
    return parse_world(world_yaml)
