"""
Descriptor accumulation.

Walks a describable and its nested descriptors depth-first, collecting the text
of every fragment that is available together with the impacts it carries.
Impacts are only collected here. The caller applies them once the walk is
complete, so the text never reflects changes caused by its own impacts.
"""
from dataclasses import dataclass, field
from .entities import Correlation, Describable
from .impacts import Impact
from .requirements import FactPredicate

@dataclass
class Accumulation:
    parts: list[str] = field(default_factory=list)
    impacts: list[Impact] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.parts)

def format_description(node: Describable) -> str:
    # Prefix with the evaluation count, so markup can vary the text per iteration
    if node.description is None:
        return ""
    return f"[p]{{{node.evaluation_count}}}{node.description}"

def accumulate(node: Describable, has: FactPredicate, count: bool, into: Accumulation) -> bool:
    """
    Adds the node's text and impacts (and those of its available descriptors) to 'into'.
    Returns whether the node itself was available.
    """
    if not node.is_available(has):
        return False

    into.parts.append(format_description(node))
    if count:
        node.evaluation_count += 1
    into.impacts.extend(node.impacts)

    # An 'else' descriptor is skipped when its predecessor fired.
    # The skipped descriptor passes that on, so else-chains behave like if/elif/else.
    previous_fired = False
    for descriptor in node.descriptors:
        if descriptor.correlation is Correlation.ELSE and previous_fired:
            continue
        previous_fired = accumulate(descriptor, has, count, into)

    return True

def evaluate_describable(node: Describable, has: FactPredicate, count: bool = True) -> Accumulation:
    result = Accumulation()
    accumulate(node, has, count, result)
    return result
