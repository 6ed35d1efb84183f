"""
Requirement language.

A requirement is a boolean expression over references:
    !   NOT (prefix)
    *   AND
    +   OR
    ( ) grouping
NOT binds tighter than AND, which binds tighter than OR. Whitespace is ignored.
For example "lamp.lit * !player.scared + inventory.torch".

Expressions are parsed eagerly into a small expression tree and evaluated
later against a predicate that answers whether a reference holds.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterator
from .errors import InvalidExpression, UnbalancedParens
from .references import Reference, parse_reference

OPERATORS = {"!", "*", "+", "(", ")"}

# Operators popped from the stack before pushing the given operator
POPPED_BY = {
    "*": {"*", "!"},
    "+": {"*", "!", "+"},
}

FactPredicate = Callable[[Reference], bool]

@dataclass(frozen=True)
class Var:
    reference: Reference

@dataclass(frozen=True)
class Not:
    operand: Node

@dataclass(frozen=True)
class And:
    left: Node
    right: Node

@dataclass(frozen=True)
class Or:
    left: Node
    right: Node

Node = Var | Not | And | Or

def evaluate_node(node: Node, has: FactPredicate) -> bool:
    # Both operands are always evaluated. No short-circuiting.
    match node:
        case Var(reference):
            return has(reference)
        case Not(operand):
            return not evaluate_node(operand, has)
        case And(left, right):
            left_result = evaluate_node(left, has)
            right_result = evaluate_node(right, has)
            return left_result and right_result
        case Or(left, right):
            left_result = evaluate_node(left, has)
            right_result = evaluate_node(right, has)
            return left_result or right_result
    raise TypeError(f"Unknown requirement node: {node!r}")

def iter_references(node: Node) -> Iterator[Reference]:
    match node:
        case Var(reference):
            yield reference
        case Not(operand):
            yield from iter_references(operand)
        case And(left, right) | Or(left, right):
            yield from iter_references(left)
            yield from iter_references(right)

def tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    buffer = ""
    for c in expression:
        if c.isspace():
            continue
        if c in OPERATORS:
            if buffer:
                tokens.append(buffer)
                buffer = ""
            tokens.append(c)
        else:
            buffer += c
    if buffer:
        tokens.append(buffer)
    return tokens

def to_postfix(expression: str) -> list[str]:
    """Shunting-yard conversion of the expression's tokens to postfix order."""
    output: list[str] = []
    stack: list[str] = []

    for token in tokenize(expression):
        if token in ("!", "("):
            stack.append(token)
        elif token in POPPED_BY:
            while stack and stack[-1] in POPPED_BY[token]:
                output.append(stack.pop())
            stack.append(token)
        elif token == ")":
            while stack and stack[-1] != "(":
                output.append(stack.pop())
            if not stack:
                raise UnbalancedParens(expression, "missing opening bracket")
            stack.pop()
        else:
            output.append(token)

    while stack:
        token = stack.pop()
        if token == "(":
            raise UnbalancedParens(expression, "missing closing bracket")
        output.append(token)

    return output

def build_tree(expression: str, postfix: list[str]) -> Node:
    stack: list[Node] = []
    try:
        for token in postfix:
            if token == "!":
                stack.append(Not(stack.pop()))
            elif token == "*":
                right = stack.pop()
                stack.append(And(stack.pop(), right))
            elif token == "+":
                right = stack.pop()
                stack.append(Or(stack.pop(), right))
            else:
                stack.append(Var(parse_reference(token)))
    except IndexError:
        raise InvalidExpression(expression, "missing operand") from None

    if len(stack) != 1:
        raise InvalidExpression(expression, "missing operator" if stack else "empty expression")

    return stack[0]

class Requirement:
    """A compiled requirement expression."""
    def __init__(self, expression: str):
        self.expression = expression
        self.root: Node = build_tree(expression, to_postfix(expression))

    def evaluate(self, has: FactPredicate) -> bool:
        return evaluate_node(self.root, has)

    def references(self) -> Iterator[Reference]:
        return iter_references(self.root)

    def __str__(self) -> str:
        return self.expression

    def __repr__(self) -> str:
        return f"Requirement({self.expression!r})"
