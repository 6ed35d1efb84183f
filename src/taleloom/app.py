from typing import Optional
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import logging
from .builder import build_world, validate_world
from .engine import ActionStatus, GameEngine, ActionResult, ok_result, invalid_result
from .events import EventBus, ImpactEvent, ScriptEvent
from .util import describe_string_list, strip_quotes
from .world import load_world

logger = logging.getLogger(__name__)

class App:
    def __init__(self, args):
        self.dev_mode: bool = args.dev
        self.world_path: Path = args.world

        # Load world definition
        self.world = load_world(args.world)
        self.bus = EventBus()
        self.state = build_world(self.world, self.bus)
        issues = validate_world(self.state)
        if issues:
            issue_lines = "\n".join([f"- {issue}" for issue in issues])
            print(f"WORLD VALIDATION FAILED\nFile: {args.world}\n{issue_lines}")

        # Create game engine
        self.engine = GameEngine(self.state)

        self.bus.subscribe(ImpactEvent, self.on_impact_event)
        self.bus.subscribe(ScriptEvent, self.on_script_event)

        print()
        print("**************************************************")
        print(self.world.title)
        print(f"Taleloom v{get_version()}")
        if self.dev_mode:
            print("Developer mode enabled.")
        print("**************************************************")

    def on_impact_event(self, event: ImpactEvent) -> None:
        logger.info("Impact event '%s' (target: %s, source: %s)", event.argument, event.target or "player", event.source)

    def on_script_event(self, event: ScriptEvent) -> None:
        logger.info("Script event '%s'", event.argument)

    def handle_raw_command(self, raw_command: str) -> ActionResult:
        return self.handle_system_command(raw_command) or self.engine.handle_raw_command(raw_command)

    def handle_system_command(self, raw: str) -> Optional[ActionResult]:
        raw = strip_quotes(raw.strip()).strip()
        parts = raw.split()

        if not parts or not self.dev_mode:
            return None

        # Developer mode commands
        command = parts[0].lower()
        if command == "/goto":
            return self.handle_dev_goto(parts)
        if command == "/state":
            return self.handle_dev_state(parts)
        if command == "/run":
            return self.handle_dev_run(parts)

        return None

    def handle_dev_goto(self, parts: list[str]) -> ActionResult:
        """Developer cheat: Go to location"""
        if len(parts) != 2:
            return invalid_result("Usage: /GOTO location_key")

        location = self.state.resolve_location(parts[1])
        if location is None:
            return invalid_result(f"'{parts[1]}' is not a valid location key")

        self.state.set_focus(location)
        return ok_result(self.engine.describe_current_location())

    def handle_dev_state(self, parts: list[str]) -> ActionResult:
        """Developer cheat: Show player tags, inventory and focus"""
        player = self.state.player
        focus = self.engine.current_location()
        lines = [
            f"[i]Focus: {focus.label} (tags: {describe_string_list(list(focus.tags), 'and') or 'none'})",
            f"Player tags: {describe_string_list(list(player.tags), 'and') or 'none'}",
            f"Inventory: {describe_string_list(list(player.inventory), 'and') or 'nothing'}",
        ]
        return ok_result("\n".join(lines))

    @property
    def scripts_folder(self) -> Path:
        return self.world_path.parent / "scripts"

    def handle_dev_run(self, parts: list[str]) -> ActionResult:
        """Developer cheat: Run script"""
        if len(parts) != 2:
            return invalid_result("Usage: /RUN scriptfile")

        # Read script
        file_path = (self.scripts_folder / parts[1]).with_suffix(".txt")
        if not file_path.resolve().is_relative_to(self.scripts_folder.resolve()):
            return invalid_result("Invalid filename")
        print(f"(Running: {file_path})")
        if not file_path.exists():
            return invalid_result("No script found.")
        script_text = file_path.read_text(encoding="utf-8")

        # Execute lines
        script_lines = [line.strip() for line in script_text.split('\n')]
        output: list[str] = []
        for line in script_lines:
            if line and not line.startswith("#"):
                output.append(f"[i]> {line}")
                result = self.handle_raw_command(line)
                if result.status == ActionStatus.INVALID:
                    output.append(f"ERROR: {result.message}")
                    break
                output.append(result.message)

        output.append("[i]Script completed.")
        return ok_result('\n'.join(output))

def get_version() -> str:
    try:
        return version("taleloom")
    except PackageNotFoundError:
        # Running from a source checkout (run.py)
        return "dev"
