"""
PromQL expression parsing and AST traversal.

Parsing is delegated to promql_parser; this module only knows how to
walk the resulting tree and how to read vector selectors out of it.
"""

import regex
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence

import promql_parser

from .errors import ExpressionParseError

# Child attributes per AST node type, in evaluation order.
_CHILD_ATTRS = {
    'AggregateExpr': ('param', 'expr'),
    'BinaryExpr': ('lhs', 'rhs'),
    'MatrixSelector': ('vector_selector',),
    'ParenExpr': ('expr',),
    'SubqueryExpr': ('expr',),
    'UnaryExpr': ('expr',),
}


class MatchKind(Enum):
    EQUAL = '='
    NOT_EQUAL = '!='
    REGEX = '=~'
    NOT_REGEX = '!~'


_MATCH_OPS = {
    'Equal': MatchKind.EQUAL,
    'NotEqual': MatchKind.NOT_EQUAL,
    'Re': MatchKind.REGEX,
    'NotRe': MatchKind.NOT_REGEX,
}


@dataclass(frozen=True)
class LabelMatcher:
    """One `label<op>"value"` predicate from a selector."""
    name: str
    value: str
    kind: MatchKind

    def matches(self, candidate: str) -> bool:
        """Evaluate the matcher against a label value (regexes are anchored)."""
        if self.kind is MatchKind.EQUAL:
            return candidate == self.value
        if self.kind is MatchKind.NOT_EQUAL:
            return candidate != self.value
        found = regex.fullmatch(self.value, candidate) is not None
        return found if self.kind is MatchKind.REGEX else not found

    def __str__(self) -> str:
        return f'{self.name}{self.kind.value}"{self.value}"'


@dataclass(frozen=True)
class SeriesReference:
    """A vector selector, reduced to its metric name and label matchers."""
    name: str
    matchers: List[LabelMatcher] = field(default_factory=list)

    def matchers_for(self, label: str) -> List[LabelMatcher]:
        return [m for m in self.matchers if m.name == label]


class Visitor(Protocol):
    def visit(self, node: Any, path: Sequence[Any]) -> Optional['Visitor']:
        """Handle one node; return the visitor for its children, or None to prune."""
        ...


def parse_expr(text: str) -> Any:
    """Parse a PromQL expression string into an AST."""
    try:
        return promql_parser.parse(text)
    except Exception as err:
        raise ExpressionParseError(text, str(err)) from err


def children(node: Any) -> List[Any]:
    """Return the direct child nodes of an AST node."""
    kind = type(node).__name__
    if kind == 'Call':
        return [arg for arg in (getattr(node, 'args', None) or []) if arg is not None]

    result = []
    for attr in _CHILD_ATTRS.get(kind, ()):
        child = getattr(node, attr, None)
        if child is not None:
            result.append(child)
    return result


def walk(visitor: Visitor, node: Any, path: Optional[List[Any]] = None):
    """Depth-first traversal of the tree rooted at node."""
    if path is None:
        path = []

    next_visitor = visitor.visit(node, path)
    if next_visitor is None:
        return

    path = path + [node]
    for child in children(node):
        walk(next_visitor, child, path)


def _match_kind(op: Any) -> MatchKind:
    key = str(op).rsplit('.', 1)[-1]
    if key in _MATCH_OPS:
        return _MATCH_OPS[key]
    # Some bindings render the operator itself
    for kind in MatchKind:
        if key == kind.value:
            return kind
    raise ValueError(f"Unsupported label matcher operator: {op!r}")


def series_reference(node: Any) -> Optional[SeriesReference]:
    """Return the series reference for a vector selector node, else None."""
    if type(node).__name__ != 'VectorSelector':
        return None

    matchers_obj = getattr(node, 'matchers', None)
    raw = getattr(matchers_obj, 'matchers', None) or []
    matchers = [LabelMatcher(m.name, m.value, _match_kind(m.op)) for m in raw]

    return SeriesReference(name=node.name or '', matchers=matchers)
