"""
Inline markup interpreter.

Rendered text can contain directives of the form [name]{arg}{arg}...
Braces in arguments may nest. Directives are expanded left to right, one at a
time. Each directive is cut from the text and replaced by its result (if any),
and scanning continues at the same position, so a result may itself contain
directives.

    [i] [inst]          instant speed
    [q] [quick]         quick speed
    [n] [norm]          normal speed
    [s] [slow]          slow speed
    [w] [wait]{sec}     pause
    [f] [fore]{color}   foreground color
    [b] [back]{color}   background color
    [p] [parm]{n}       set the iteration counter
    [r] [rand]{a}{b}..  random argument
    [c] [cycl]{a}{b}..  argument at iteration modulo count
    [a] [augm]{a}{b}..  argument at iteration, sticking to the last one
    [#] [evnt]{arg}     notify listeners

'[[' produces a literal '['.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional
import logging
import random

logger = logging.getLogger(__name__)

class Speed(Enum):
    INSTANT = "instant"
    QUICK = "quick"
    NORMAL = "normal"
    SLOW = "slow"

    @property
    def delay(self) -> float:
        """Seconds per character."""
        return SPEED_DELAYS[self]

SPEED_DELAYS = {
    Speed.INSTANT: 0.0,
    Speed.QUICK: 0.015,
    Speed.NORMAL: 0.075,
    Speed.SLOW: 0.3,
}

COLORS = {
    "black", "darkblue", "darkgreen", "darkcyan", "darkred", "darkmagenta", "darkyellow", "gray",
    "darkgray", "blue", "green", "cyan", "red", "magenta", "yellow", "white",
}

@dataclass(frozen=True)
class Directive:
    index: int                                                                  # Position of the opening '['
    length: int                                                                 # Length of the directive including its arguments
    name: Optional[str]                                                         # None for the escaped bracket of '[['
    arguments: tuple[str, ...] = ()

@dataclass(frozen=True)
class Pause:
    seconds: float

@dataclass
class RenderState:
    iteration: int = 0
    speed: Speed = Speed.NORMAL
    foreground: Optional[str] = None
    background: Optional[str] = None
    rng: random.Random = field(default_factory=random.Random)
    on_event: Optional[Callable[[str], None]] = None

def find_directive(text: str, start: int = 0) -> Optional[Directive]:
    """Finds the next directive in text at or after 'start'."""
    index = -1
    length = 0
    name = ""
    arguments: list[str] = []
    buffer = ""
    depth = 0
    state = "search"

    for n in range(start, len(text)):
        c = text[n]

        if state == "search":
            if c == "[":
                index = n
                state = "name"

        elif state == "name":
            if c == "]":
                name = buffer
                length = n - index + 1
                state = "arguments"
            elif c == "[":
                # Second bracket before the closing one. Cut the inner bracket only.
                return Directive(n, 1, None)
            else:
                buffer += c

        elif state == "arguments":
            if c != "{":
                return Directive(index, length, name, tuple(arguments))
            depth = 1
            buffer = ""
            state = "argument"

        elif state == "argument":
            if c == "{":
                depth += 1
            elif c == "}":
                depth -= 1
                if depth == 0:
                    length = n - index + 1
                    arguments.append(buffer)
                    state = "arguments"
                    continue
            buffer += c

    if state in ("search", "name"):
        return None
    return Directive(index, length, name, tuple(arguments))

def parse_float(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None

def parse_color(value: str) -> Optional[str]:
    color = value.strip().lower()
    return color if color in COLORS else None

def apply_directive(directive: Directive, state: RenderState) -> Optional[str | Pause]:
    """
    Applies the directive to the render state.
    Returns the text to insert in its place, a pause, or None.
    """
    args = directive.arguments
    name = directive.name

    if name in ("i", "inst"):
        state.speed = Speed.INSTANT
    elif name in ("q", "quick"):
        state.speed = Speed.QUICK
    elif name in ("n", "norm"):
        state.speed = Speed.NORMAL
    elif name in ("s", "slow"):
        state.speed = Speed.SLOW
    elif name in ("w", "wait"):
        seconds = parse_float(args[0]) if args else None
        if seconds is not None:
            return Pause(seconds)
    elif name in ("f", "fore"):
        color = parse_color(args[0]) if args else None
        if color:
            state.foreground = color
    elif name in ("b", "back"):
        color = parse_color(args[0]) if args else None
        if color:
            state.background = color
    elif name in ("p", "parm"):
        if args:
            try:
                state.iteration = int(args[0])
            except ValueError:
                state.iteration = 0
    elif name in ("r", "rand"):
        if args:
            return state.rng.choice(args)
    elif name in ("c", "cycl"):
        if args:
            return args[state.iteration % len(args)]
    elif name in ("a", "augm"):
        if args:
            return args[min(state.iteration, len(args) - 1)]
    elif name in ("#", "evnt"):
        if args and state.on_event:
            state.on_event(args[0])
    elif name is not None:
        logger.warning("Unknown markup directive: [%s]", name)

    return None

def iter_fragments(text: str, state: RenderState) -> Iterator[str | Pause]:
    """
    Expands the text's directives, yielding plain text chunks and pauses.
    Style changes are applied to 'state' before the text they affect is yielded.
    """
    position = 0
    while True:
        directive = find_directive(text, position)
        if directive is None:
            if position < len(text):
                yield text[position:]
            return

        if directive.index > position:
            yield text[position:directive.index]

        logger.debug("Directive %s%s at %d", directive.name, list(directive.arguments), directive.index)
        result = apply_directive(directive, state)
        replacement = result if isinstance(result, str) else ""
        text = text[:directive.index] + replacement + text[directive.index + directive.length:]
        position = directive.index

        if isinstance(result, Pause):
            yield result

def expand(text: str, state: Optional[RenderState] = None) -> str:
    """Expands all directives and returns the resulting plain text."""
    state = state or RenderState()
    return "".join(
        fragment
        for fragment in iter_fragments(text, state)
        if isinstance(fragment, str)
    )
