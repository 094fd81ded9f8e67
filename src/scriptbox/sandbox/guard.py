"""Source guard and compilation for sandboxed programs."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from types import CodeType

from .allowlist import is_forbidden_attribute

SOURCE_NAME = "<sandbox>"


@dataclass(frozen=True)
class CompiledProgram:
    """A program split into its body and an optional trailing expression."""

    body: CodeType
    tail: CodeType | None
    """Code for the final expression statement, evaluated for the return value."""


def check_tree(tree: ast.AST) -> None:
    """Reject attribute access that could walk out of the realm.

    Class patterns in ``match`` statements read attributes too: keyword
    sub-patterns are checked like attribute access, and positional ones are
    refused because their names come from ``__match_args__`` at runtime.

    Raises :class:`SyntaxError` naming the offending attribute and line.
    """
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and is_forbidden_attribute(node.attr):
            _reject(f"access to attribute {node.attr!r} is not allowed", node)
        elif isinstance(node, ast.MatchClass):
            for name in node.kwd_attrs:
                if is_forbidden_attribute(name):
                    _reject(f"access to attribute {name!r} is not allowed", node)
            if node.patterns:
                _reject("positional sub-patterns in class patterns are not allowed", node)


def _reject(message: str, node: ast.AST) -> None:
    err = SyntaxError(message)
    err.lineno = node.lineno  # type: ignore[attr-defined]
    raise err


def compile_program(source: str) -> CompiledProgram:
    """Parse, guard and compile *source*.

    If the last statement is a bare expression it is compiled separately so
    its value can be reported, the way an interactive prompt echoes it.
    Raises :class:`SyntaxError` (or ``ValueError`` for null bytes,
    ``RecursionError``/``MemoryError`` for pathological nesting).
    """
    tree = ast.parse(source, filename=SOURCE_NAME, mode="exec")
    check_tree(tree)

    tail: CodeType | None = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body.pop()
        expression = ast.Expression(body=last.value)  # type: ignore[attr-defined]
        tail = compile(expression, SOURCE_NAME, "eval", dont_inherit=True)

    body = compile(tree, SOURCE_NAME, "exec", dont_inherit=True)
    return CompiledProgram(body=body, tail=tail)


def describe_compile_error(exc: BaseException) -> str:
    """One-line description of a compile failure."""
    if isinstance(exc, SyntaxError):
        name = type(exc).__name__
        msg = exc.msg or "invalid syntax"
        if exc.lineno:
            return f"{name}: {msg} (line {exc.lineno})"
        return f"{name}: {msg}"
    if isinstance(exc, RecursionError):
        return "SyntaxError: program is nested too deeply"
    if isinstance(exc, MemoryError):
        return "SyntaxError: program is too large to compile"
    return f"SyntaxError: {exc}"
