"""
Node shape grammar shared by the parser and the generator.

Each supported shape maps to the delimiters that wrap a node label in
flowchart source, e.g. ``A{Decision}`` is a diamond. Both directions of the
conversion read this table so that a node parsed from ``{x}`` is written
back as ``{x}``.
"""

import re
from typing import Dict, List, Tuple

DEFAULT_SHAPE = "rectangle"

SHAPE_SYNTAX: Dict[str, Tuple[str, str]] = {
    'rectangle': ('[', ']'),
    'rounded':   ('(', ')'),
    'diamond':   ('{', '}'),
    'circle':    ('((', '))'),
}

SHAPES = tuple(SHAPE_SYNTAX)

IDENTIFIER = r'[A-Za-z_][A-Za-z0-9_]*'

# Longer delimiters first: ((x)) is also a valid rounded match.
_MATCH_ORDER = ('circle', 'diamond', 'rounded', 'rectangle')


def delimiters(shape: str) -> Tuple[str, str]:
    """Return (open, close) for a shape; unknown shapes render as rectangles."""
    return SHAPE_SYNTAX.get(shape, SHAPE_SYNTAX[DEFAULT_SHAPE])


def format_node(node_id: str, label: str, shape: str) -> str:
    """Return the full node declaration, e.g. ``B{Decision}``."""
    open_, close = delimiters(shape)
    return f"{node_id}{open_}{label}{close}"


def _compile(shape: str) -> "re.Pattern[str]":
    open_, close = SHAPE_SYNTAX[shape]
    return re.compile(rf'^({IDENTIFIER}){re.escape(open_)}(.+){re.escape(close)}$')


NODE_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [(s, _compile(s)) for s in _MATCH_ORDER]
BARE_ID_PATTERN = re.compile(rf'^({IDENTIFIER})$')
