"""
Dependency extraction from PromQL expressions.

Walks an expression's AST and lists every series it reads. References
to the ALERTS pseudo-series are resolved against the alerting rules
already known to the graph.
"""

from typing import Any, List, Mapping, Optional, Sequence

from .nodes import NodeType
from .promql import SeriesReference, series_reference, walk

ALERTS_METRIC = 'ALERTS'
ALERTNAME_LABEL = 'alertname'


class DependencyExtractor:
    """Collects successor names while walking one expression tree."""

    def __init__(self, nodes: Mapping[str, NodeType]):
        # Read-only view of the node classification built so far
        self.nodes = nodes
        self.found: List[str] = []

    def extract(self, expr: Any) -> List[str]:
        """Return referenced names in discovery order, duplicates kept."""
        self.found = []
        walk(self, expr)
        return list(self.found)

    def visit(self, node: Any, path: Sequence[Any]) -> Optional['DependencyExtractor']:
        ref = series_reference(node)
        if ref is None:
            return self

        if ref.name == ALERTS_METRIC:
            self.found.extend(self.matching_alerts(ref))
        elif ref.name:
            self.found.append(ref.name)

        return self

    def matching_alerts(self, ref: SeriesReference) -> List[str]:
        """Declared alerts selected by each alertname matcher of an ALERTS reference."""
        alerts = sorted(name for name, kind in self.nodes.items() if kind is NodeType.ALERTED)

        matched = []
        for matcher in ref.matchers_for(ALERTNAME_LABEL):
            matched.extend(name for name in alerts if matcher.matches(name))
        return matched


def extract_dependencies(expr: Any, nodes: Mapping[str, NodeType]) -> List[str]:
    return DependencyExtractor(nodes).extract(expr)
