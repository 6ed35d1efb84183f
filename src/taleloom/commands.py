from dataclasses import dataclass
from typing import Optional

VALID_VERBS = {
    "choose",
    "look",
    "inventory",
    "back",
    "help",
}

VERB_ALIASES = {
    "l": "look",
    "i": "inventory",
    "inv": "inventory",
    "x": "back",
    "?": "help",
    "pick": "choose",
    "select": "choose",
}

# Option keys: interactions / inventory items, then sub-locations
OPTION_KEYS = set("12345678abcdefgh")

@dataclass
class ParsedCommand:
    raw: str
    verb: Optional[str] = None
    key: Optional[str] = None
    error: Optional[str] = None

def parse_command(raw: str) -> ParsedCommand:
    raw = raw.strip()
    cmd = ParsedCommand(raw = raw)
    if not raw:
        cmd.error = "No command provided."
        return cmd

    tokens = [part.lower() for part in raw.split()]

    # Bare option key
    if len(tokens) == 1 and tokens[0] in OPTION_KEYS:
        cmd.verb = "choose"
        cmd.key = tokens[0]
        return cmd

    # Expand verb aliases
    verb_token = tokens[0]
    verb = VERB_ALIASES.get(verb_token, verb_token)
    if verb not in VALID_VERBS:
        cmd.error = f"Unknown command '{verb_token}'."
        return cmd
    cmd.verb = verb

    if verb != "choose":
        if len(tokens) > 1:
            cmd.error = f"'{verb_token}' does not take an option."
        return cmd

    # choose KEY
    if len(tokens) != 2:
        cmd.error = f"{verb_token} what?"
        return cmd
    if tokens[1] not in OPTION_KEYS:
        cmd.error = f"'{tokens[1]}' is not an option."
        return cmd
    cmd.key = tokens[1]

    return cmd
