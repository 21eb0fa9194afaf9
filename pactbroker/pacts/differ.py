"""Structural comparison of pact bodies.

Two pacts are "distinct" when their parsed JSON documents differ. Key
order is ignored. Keys present on only one side are differences (strict
mode, there is no leniency switch). Values are compared by JSON type as
well as value, so ``1`` vs ``true`` or ``1`` vs ``"1"`` differ.

Deterministic, no I/O.
"""

import json
from dataclasses import dataclass
from typing import Any


# ---------------------------------------------------------------------------
# Difference
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Difference:
    """A single structural difference between two documents.

    ``path`` is a JSONPath-like location, ``$`` being the document root.
    ``expected`` / ``actual`` are ``MISSING`` when the key or index is absent
    on that side.
    """

    path: str
    expected: Any
    actual: Any


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_content(content: str | bytes | Any) -> Any:
    """Parse raw pact JSON. Already-parsed documents pass through.

    Raises:
        ValueError: If the content is not valid JSON.
    """
    if not isinstance(content, (str, bytes, bytearray)):
        return content
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        msg = f"Pact content is not valid JSON: {exc}"
        raise ValueError(msg) from exc


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def _json_kind(value: Any) -> str:
    # bool before int: bool is an int subclass
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _collect(expected: Any, actual: Any, path: str, out: list[Difference]) -> None:
    kind = _json_kind(expected)
    if kind != _json_kind(actual):
        out.append(Difference(path, expected, actual))
        return

    if kind == "object":
        for key in expected.keys() | actual.keys():
            child = f"{path}.{key}"
            if key not in actual:
                out.append(Difference(child, expected[key], MISSING))
            elif key not in expected:
                out.append(Difference(child, MISSING, actual[key]))
            else:
                _collect(expected[key], actual[key], child, out)
    elif kind == "array":
        for index in range(max(len(expected), len(actual))):
            child = f"{path}[{index}]"
            if index >= len(actual):
                out.append(Difference(child, expected[index], MISSING))
            elif index >= len(expected):
                out.append(Difference(child, MISSING, actual[index]))
            else:
                _collect(expected[index], actual[index], child, out)
    elif expected != actual:
        out.append(Difference(path, expected, actual))


def diff(content_a: str | bytes | Any, content_b: str | bytes | Any) -> list[Difference]:
    """Return every structural difference between two pact bodies.

    Differences are sorted by path so the result is stable regardless of
    key insertion order.

    Raises:
        ValueError: If either side is not valid JSON.
    """
    expected = parse_content(content_a)
    actual = parse_content(content_b)
    out: list[Difference] = []
    _collect(expected, actual, "$", out)
    return sorted(out, key=lambda d: d.path)


def differs(content_a: str | bytes | Any, content_b: str | bytes | Any) -> bool:
    """True iff the two pact bodies are not structurally equal."""
    return bool(diff(content_a, content_b))
