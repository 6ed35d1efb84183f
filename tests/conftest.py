"""Shared test fixtures."""

from pathlib import Path

import pytest

from taleloom.builder import build_world
from taleloom.engine import GameEngine
from taleloom.events import EventBus
from taleloom.state import WorldState
from taleloom.world import parse_world

EXAMPLE_WORLD = Path(__file__).resolve().parents[1] / "assets" / "worlds" / "example.yaml"

WORLD_YAML = """
title: Test World
start: hall

player:
  tags: [brave]
  inventory: [key, oil]

locations:
  - name: Hall
    key: hall
    tags: dark
    description: "A hall."
    descriptors:
      - description: " It is dark."
        requires: dark
      - description: " It is bright."
        correlation: else
    interactions:
      - name: Flip the switch
        description: "Click."
        impact: "!dark"
      - name: Shout
        limit: 1
        description: "Echo."
      - name: Sneak
        requires: "!player.brave"
        description: "You sneak."
      - name: Do nothing
    combinations:
      - item: key
        description: "You unlock the hall door."
        impact: "+unlocked, #door"
    locations:
      - name: Cellar
        key: cellar
        requires: "!hall.dark"
        description: "A cellar."
        interactions:
          - name: Climb out
            description: "You climb out."
            impact: ">hall"
      - name: Garden
        key: garden
        description: "A garden."
        disable_exit: true

items:
  - name: Old Key
    key: key
    description: "A rusty key."
  - name: Oil
    key: oil
    description: "Oil."
    combinations:
      - item: key
        description: "You oil the key."
        impact: "+key.oiled, -inventory.oil"
"""


class EventRecorder:
    """Collects every event of the subscribed types, in order."""

    def __init__(self, bus: EventBus, *event_types: type) -> None:
        self.events: list = []
        for event_type in event_types:
            bus.subscribe(event_type, self.events.append)


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def state(bus: EventBus) -> WorldState:
    """The test world, focused on the hall."""
    return build_world(parse_world(WORLD_YAML), bus)


@pytest.fixture()
def engine(state: WorldState) -> GameEngine:
    engine = GameEngine(state)
    engine.get_intro()
    return engine
