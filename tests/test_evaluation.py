"""Descriptor accumulation: availability, correlation, limits and counting"""

import re

from taleloom.entities import Correlation, Descriptor, Interaction
from taleloom.evaluation import evaluate_describable, format_description
from taleloom.impacts import parse_impacts
from taleloom.requirements import Requirement


def facts(*true_refs: str):
    return lambda reference: str(reference) in true_refs


def descriptor(text: str, requires: str | None = None, correlation: Correlation = Correlation.NONE, **kwargs) -> Descriptor:
    return Descriptor(
        description=text,
        requirement=Requirement(requires) if requires else None,
        correlation=correlation,
        **kwargs,
    )


def plain(text: str) -> str:
    """Strips the iteration prefixes added by format_description."""
    return re.sub(r"\[p\]\{\d+\}", "", text)


class TestFormatDescription:

    def test_prefixes_evaluation_count(self) -> None:
        node = descriptor("Hello", evaluation_count=3)
        assert format_description(node) == "[p]{3}Hello"

    def test_no_description(self) -> None:
        assert format_description(Descriptor()) == ""


class TestAccumulate:

    def test_unavailable_node_contributes_nothing(self) -> None:
        node = descriptor("Root", requires="x", descriptors=[descriptor("Child")])
        result = evaluate_describable(node, facts())
        assert result.text == ""
        assert node.evaluation_count == 0
        assert node.descriptors[0].evaluation_count == 0

    def test_depth_first_order(self) -> None:
        node = descriptor("A", descriptors=[
            descriptor("B", descriptors=[descriptor("C")]),
            descriptor("D"),
        ])
        assert plain(evaluate_describable(node, facts()).text) == "ABCD"

    def test_else_follows_fired_predecessor(self) -> None:
        node = Interaction(name="Look", descriptors=[
            descriptor("X", requires="x"),
            descriptor("Y", correlation=Correlation.ELSE),
            descriptor("Z"),
        ])
        assert plain(evaluate_describable(node, facts("x")).text) == "XZ"
        assert plain(evaluate_describable(node, facts()).text) == "YZ"

    def test_else_chain(self) -> None:
        node = Interaction(name="Look", descriptors=[
            descriptor("A", requires="a"),
            descriptor("B", requires="b", correlation=Correlation.ELSE),
            descriptor("C", correlation=Correlation.ELSE),
        ])
        assert plain(evaluate_describable(node, facts("a", "b")).text) == "A"
        assert plain(evaluate_describable(node, facts("b")).text) == "B"
        assert plain(evaluate_describable(node, facts()).text) == "C"

    def test_leading_else_always_considered(self) -> None:
        node = Interaction(name="Look", descriptors=[descriptor("E", correlation=Correlation.ELSE)])
        assert plain(evaluate_describable(node, facts()).text) == "E"

    def test_limit(self) -> None:
        node = Interaction(name="Look", descriptors=[descriptor("Once", evaluation_limit=2)])
        texts = [plain(evaluate_describable(node, facts()).text) for _ in range(3)]
        assert texts == ["Once", "Once", ""]
        assert node.descriptors[0].exhausted

    def test_uncounted_evaluation(self) -> None:
        node = descriptor("A", evaluation_limit=1)
        evaluate_describable(node, facts(), count=False)
        evaluate_describable(node, facts(), count=False)
        assert node.evaluation_count == 0
        assert not node.exhausted

    def test_iteration_prefix_uses_count_before_increment(self) -> None:
        node = descriptor("A")
        assert evaluate_describable(node, facts()).text == "[p]{0}A"
        assert evaluate_describable(node, facts()).text == "[p]{1}A"

    def test_impacts_collected_in_order(self) -> None:
        node = descriptor("A", impacts=parse_impacts("+a"), descriptors=[
            descriptor("B", requires="x", impacts=parse_impacts("+b")),
            descriptor("C", impacts=parse_impacts("-c, >hall")),
        ])
        result = evaluate_describable(node, facts())
        assert [str(impact) for impact in result.impacts] == ["+a", "-c", ">hall"]
