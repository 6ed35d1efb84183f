"""Requirement expression compiler and evaluation"""

import itertools

import pytest

from taleloom.errors import InvalidExpression, MalformedReference, UnbalancedParens
from taleloom.references import Reference, Scope, parse_reference
from taleloom.requirements import And, Not, Or, Requirement, Var, to_postfix, tokenize


def facts(*true_refs: str):
    """Predicate holding for the given reference paths only."""
    return lambda reference: str(reference) in true_refs


def var(path: str) -> Var:
    return Var(parse_reference(path))


# ── Parsing ──


class TestTokenize:

    def test_operators_and_whitespace(self) -> None:
        assert tokenize(" lamp.lit * !( a+b ) ") == ["lamp.lit", "*", "!", "(", "a", "+", "b", ")"]

    def test_postfix(self) -> None:
        assert to_postfix("a+b*c") == ["a", "b", "c", "*", "+"]
        assert to_postfix("(a+b)*c") == ["a", "b", "+", "c", "*"]


class TestPrecedence:

    def test_and_binds_tighter_than_or(self) -> None:
        assert Requirement("a+b*c").root == Or(var("a"), And(var("b"), var("c")))

    def test_not_binds_tighter_than_and(self) -> None:
        assert Requirement("!a*b").root == And(Not(var("a")), var("b"))

    def test_parentheses(self) -> None:
        assert Requirement("!(a+b)").root == Not(Or(var("a"), var("b")))

    def test_double_negation(self) -> None:
        assert Requirement("!!a").root == Not(Not(var("a")))

    def test_left_associative(self) -> None:
        assert Requirement("a+b+c").root == Or(Or(var("a"), var("b")), var("c"))


class TestInvalidExpressions:

    @pytest.mark.parametrize("expression", ["(a+b", "a+b)", "((a)", ")a("])
    def test_unbalanced(self, expression: str) -> None:
        with pytest.raises(UnbalancedParens):
            Requirement(expression)

    @pytest.mark.parametrize("expression", ["", "   ", "a+", "*a", "!", "a b(c)", "()"])
    def test_invalid(self, expression: str) -> None:
        with pytest.raises(InvalidExpression):
            Requirement(expression)

    def test_malformed_reference(self) -> None:
        with pytest.raises(MalformedReference):
            Requirement("a.b.c * d")


# ── Evaluation ──


class TestEvaluate:

    def test_truth_table(self) -> None:
        requirement = Requirement("a*b+!c")
        for a, b, c in itertools.product([False, True], repeat=3):
            true_refs = [name for name, value in zip("abc", (a, b, c)) if value]
            assert requirement.evaluate(facts(*true_refs)) == ((a and b) or not c)

    def test_scoped_references(self) -> None:
        requirement = Requirement("lamp.lit * !player.scared + inventory.torch")
        assert requirement.evaluate(facts("lamp.lit"))
        assert not requirement.evaluate(facts("lamp.lit", "player.scared"))
        assert requirement.evaluate(facts("player.scared", "inventory.torch"))

    def test_both_operands_always_evaluated(self) -> None:
        asked: list[str] = []

        def has(reference: Reference) -> bool:
            asked.append(str(reference))
            return False

        Requirement("a*b").evaluate(has)
        Requirement("!c+d").evaluate(has)
        assert asked == ["a", "b", "c", "d"]

    def test_references(self) -> None:
        references = list(Requirement("hall.dark * !player.brave + lit").references())
        assert [r.scope for r in references] == [Scope.GLOBAL, Scope.PLAYER, Scope.LOCAL]

    def test_str(self) -> None:
        assert str(Requirement("a * b")) == "a * b"
