import random
import sys
import time
from typing import Callable, Optional, TextIO
from .events import EventBus, ScriptEvent
from .markup import Pause, RenderState, Speed, iter_fragments

ANSI_RESET = "\033[0m"

ANSI_FOREGROUND = {
    "black": 30, "darkred": 31, "darkgreen": 32, "darkyellow": 33,
    "darkblue": 34, "darkmagenta": 35, "darkcyan": 36, "gray": 37,
    "darkgray": 90, "red": 91, "green": 92, "yellow": 93,
    "blue": 94, "magenta": 95, "cyan": 96, "white": 97,
}

def ansi_style(state: RenderState) -> str:
    codes = []
    if state.foreground:
        codes.append(str(ANSI_FOREGROUND[state.foreground]))
    if state.background:
        codes.append(str(ANSI_FOREGROUND[state.background] + 10))
    if not codes:
        return ANSI_RESET
    return f"{ANSI_RESET}\033[{';'.join(codes)}m"

class ConsolePresenter:
    """
    Writes engine output to the console, expanding markup as it goes.
    Text is typed out at the current markup speed, unless delays are disabled.
    """
    def __init__(
        self,
        bus: Optional[EventBus] = None,
        speed: Speed = Speed.NORMAL,
        delay: bool = True,
        color: bool = True,
        rng: Optional[random.Random] = None,
        out: Optional[TextIO] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.bus = bus
        self.speed = speed
        self.delay = delay
        self.color = color
        self.rng = rng or random.Random()
        self.out = out or sys.stdout
        self.sleep = sleep

    def emit_script_event(self, argument: str) -> None:
        if self.bus:
            self.bus.emit(ScriptEvent(argument))

    def write(self, text: str) -> None:
        # Each write starts from a fresh render state, like a new text box
        state = RenderState(speed=self.speed, rng=self.rng, on_event=self.emit_script_event)

        for fragment in iter_fragments(text, state):
            if isinstance(fragment, Pause):
                if self.delay:
                    self.out.flush()
                    self.sleep(fragment.seconds)
                continue

            if self.color:
                self.out.write(ansi_style(state))

            if not self.delay or state.speed.delay <= 0:
                self.out.write(fragment)
                continue

            for c in fragment:
                self.out.write(c)
                if not c.isspace():
                    self.out.flush()
                    self.sleep(state.speed.delay)

        if self.color:
            self.out.write(ANSI_RESET)
        self.out.write("\n")
        self.out.flush()
