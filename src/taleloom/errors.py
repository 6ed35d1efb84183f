from typing import Optional

class TaleloomError(Exception):
    """Base class for all errors raised by the story engine."""

class CompileError(TaleloomError):
    """Raised while compiling world content. The whole load fails."""

class MalformedReference(CompileError):
    """Raised when a reference path is not of the form 'property' or 'element.property'."""
    def __init__(self, expression: str):
        super().__init__(f"Malformed reference: \"{expression}\"")
        self.expression = expression

class InvalidExpression(CompileError):
    """Raised when a requirement or impact expression cannot be parsed."""
    def __init__(self, expression: str, reason: Optional[str] = None):
        message = f"Could not parse expression: \"{expression}\""
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.expression = expression
        self.reason = reason

class UnbalancedParens(InvalidExpression):
    """Raised when a requirement expression has a missing opening or closing bracket."""

class DuplicateKey(CompileError):
    """Raised when two entities are registered with the same key."""
    def __init__(self, key: str):
        super().__init__(f"Element with key \"{key}\" is ambiguous with another element.")
        self.key = key

class EvaluationError(TaleloomError):
    """Raised while evaluating content against the world state."""

class UnknownReference(EvaluationError):
    """Raised when a key does not resolve to a suitable entity."""
    def __init__(self, key: str, expected: str = "element"):
        super().__init__(f"Unable to find {expected} with key \"{key}\".")
        self.key = key

class InvalidEventTarget(EvaluationError):
    """Raised when an event impact is delegated to the inventory."""

class WorldFileError(TaleloomError):
    """Raised when a world file cannot be read or does not match the world schema."""
