from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging
from .commands import ParsedCommand, parse_command
from .entities import Interaction, Item, Location, Taggable
from .events import FocusChanged
from .state import WorldState

logger = logging.getLogger(__name__)

INTERACTION_KEYS = "12345678"
SUB_LOCATION_KEYS = "abcdefgh"
ITEM_KEYS = "12345678"
EXIT_KEY = "x"

class ActionStatus(Enum):
    OK = "ok"
    NO_EFFECT = "no_effect"
    INVALID = "invalid"

@dataclass
class ActionResult:
    status: ActionStatus
    message: str

def ok_result(message: str) -> ActionResult:
    return ActionResult(status=ActionStatus.OK, message=message)

def invalid_result(message: str) -> ActionResult:
    return ActionResult(status=ActionStatus.INVALID, message=message)

class Mode(Enum):
    EXPLORE = "explore"                                                         # Choosing interactions and locations
    INVENTORY = "inventory"                                                     # Picking an item
    COMBINE = "combine"                                                         # Picking what to combine the selected item with

class GameEngine:
    """
    Implements a choice driven story engine.
    The player is presented with the focused location's description and a list
    of options: interactions (1-8), sub-locations (a-h) and the way back (x).
    'i' opens the inventory, where items can be examined and combined with each
    other or with the current location.
    Returned messages still contain markup, to be expanded by the front end.
    """
    def __init__(self, state: WorldState, exit_name: str = "Back to"):
        self.state = state
        self.exit_name = exit_name
        self.mode = Mode.EXPLORE
        self.options: dict[str, Interaction | Location] = {}
        self.items: dict[str, Item] = {}
        self.selected_item: Optional[Item] = None
        self.focus_changed = False
        state.bus.subscribe(FocusChanged, self.on_focus_changed)

    def on_focus_changed(self, event: FocusChanged) -> None:
        self.focus_changed = True

    def current_location(self) -> Location:
        assert self.state.focus is not None
        return self.state.focus

    # Presentation

    def describe_current_location(self, count: bool = True) -> str:
        """
        Describes the focused location and its options.
        If the description's impacts move the focus, the new location is described as well.
        """
        lines: list[str] = []
        visited: set[int] = set()
        location = self.current_location()
        while True:
            visited.add(location.eid)
            description = self.state.evaluate(location, count)
            lines.extend([
                f"[i]{location.name.upper()}",
                "",
                f"[n]{description}",
                "",
            ])
            focus = self.current_location()
            if focus is location:
                break
            if focus.eid in visited:
                logger.warning("Focus loop entering %s, stopped at %s", location.label, focus.label)
                break
            location = focus

        lines.append(self.describe_options())
        return "\n".join(lines)

    def describe_options(self) -> str:
        location = self.current_location()
        self.options = {}
        lines: list[str] = []

        for key, interaction in zip(INTERACTION_KEYS, self.state.available_interactions(location)):
            self.options[key] = interaction
            lines.append(f"[[{key}] {interaction.name}")

        sub_locations = list(zip(SUB_LOCATION_KEYS, self.state.available_sub_locations(location)))
        if lines and sub_locations:
            lines.append("")
        for key, sub_location in sub_locations:
            self.options[key] = sub_location
            lines.append(f"[[{key}] {sub_location.name}")

        parent = self.state.parent_of(location)
        if parent is not None and not location.disable_exit:
            if lines:
                lines.append("")
            self.options[EXIT_KEY] = parent
            lines.append(f"[[{EXIT_KEY.upper()}] {self.exit_name} {parent.name}")

        return "[i]" + "\n".join(lines)

    def describe_inventory(self) -> str:
        self.items = {}
        lines = ["[i]INVENTORY", ""]

        available_items = self.state.available_items()
        if not available_items:
            lines.append("You carry nothing.")
        for key, item in zip(ITEM_KEYS, available_items):
            self.items[key] = item
            lines.append(f"[[{key}] {item.name}")

        lines.append(f"[[{EXIT_KEY.upper()}] {self.exit_name} {self.current_location().name}")
        return "\n".join(lines)

    def get_intro(self) -> ActionResult:
        return ok_result(self.describe_current_location())

    def get_help(self) -> str:
        return "\n".join([
            "[i]Type the key of an option to choose it.",
            "  i   inventory",
            "  x   back",
            "  l   look around again",
        ])

    # Commands

    def handle_raw_command(self, raw_command: str) -> ActionResult:
        command = parse_command(raw_command)
        if command.error:
            return invalid_result(command.error)

        return self.handle_command(command)

    def handle_command(self, command: ParsedCommand) -> ActionResult:
        self.focus_changed = False

        if command.verb == "help":
            return ok_result(self.get_help())

        if self.mode == Mode.EXPLORE:
            return self.handle_explore(command)
        if self.mode == Mode.INVENTORY:
            return self.handle_inventory(command)
        return self.handle_combine(command)

    def handle_explore(self, command: ParsedCommand) -> ActionResult:
        if command.verb == "look":
            return ok_result(self.describe_current_location(count=False))

        if command.verb == "inventory":
            self.mode = Mode.INVENTORY
            self.selected_item = None
            return ok_result(self.describe_inventory())

        if command.verb == "back":
            if EXIT_KEY not in self.options:
                return invalid_result("There is no way back from here.")
            return self.choose(self.options[EXIT_KEY])

        assert command.key is not None
        option = self.options.get(command.key)
        if option is None:
            return invalid_result(f"'{command.key}' is not an option.")
        return self.choose(option)

    def choose(self, option: Interaction | Location) -> ActionResult:
        if isinstance(option, Location):
            self.state.set_focus(option)
            return ok_result(self.describe_current_location())

        # Interaction
        response = self.state.evaluate(option)
        if self.focus_changed:
            return ok_result(f"[n]{response}\n\n{self.describe_current_location()}")
        if not response:
            return ActionResult(status=ActionStatus.NO_EFFECT, message=self.describe_options())
        return ok_result(f"[n]{response}\n\n{self.describe_options()}")

    def handle_inventory(self, command: ParsedCommand) -> ActionResult:
        if command.verb == "back":
            self.mode = Mode.EXPLORE
            return ok_result(self.describe_current_location())

        if command.verb in ("inventory", "look"):
            return ok_result(self.describe_inventory())

        item = self.items.get(command.key or "")
        if item is None:
            return invalid_result(f"'{command.key}' is not an item.")

        # Choosing the selected item again starts combining it
        if item is self.selected_item:
            self.mode = Mode.COMBINE
            return ok_result(f"[i]Combining {item.name} with ...\n\n{self.describe_inventory()}")

        self.selected_item = item
        return ok_result(f"[n]{self.state.evaluate(item)}\n\n{self.describe_inventory()}")

    def handle_combine(self, command: ParsedCommand) -> ActionResult:
        assert self.selected_item is not None
        selected = self.selected_item

        other: Optional[Taggable] = None
        if command.verb == "back":
            other = self.current_location()
        elif command.verb == "choose":
            other = self.items.get(command.key or "")
            if other is None:
                return invalid_result(f"'{command.key}' is not an item.")
            if other is selected:
                # Picking the same item again cancels
                self.mode = Mode.INVENTORY
                return ok_result(f"[n]{self.state.evaluate(selected)}\n\n{self.describe_inventory()}")
        else:
            return ok_result(f"[i]Combining {selected.name} with ...\n\n{self.describe_inventory()}")

        self.mode = Mode.INVENTORY
        combination = self.state.combination_with(other, selected)
        if combination is None:
            return ActionResult(status=ActionStatus.NO_EFFECT, message=f"Nothing happens...\n\n{self.describe_inventory()}")

        logger.debug("Combining %s with %s", selected.label, other.label)
        response = self.state.evaluate(combination)
        if self.focus_changed:
            self.mode = Mode.EXPLORE
            return ok_result(f"[n]{response}\n\n{self.describe_current_location()}")
        return ok_result(f"[n]{response}\n\n{self.describe_inventory()}")
