"""
Graph Builder for rule dependencies
Builds: one directed graph, rule -> every rule or metric its expression reads
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from .errors import ExpressionParseError
from .extractor import DependencyExtractor
from .nodes import NodeType, node_type_for
from .promql import parse_expr
from .rulefmt import Rule, RuleGroup

logger = logging.getLogger(__name__)


class RuleGraph:
    """Nodes classified by NodeType, and deduplicated dependency edges."""

    def __init__(self, graph: Optional[nx.DiGraph] = None):
        self.graph = graph if graph is not None else nx.DiGraph()

    def add_node(self, name: str, node_type: NodeType):
        self.graph.add_node(name, type=node_type)

    def ensure_node(self, name: str):
        """Add name as an UNKNOWN node unless it is already present."""
        if name not in self.graph:
            self.add_node(name, NodeType.UNKNOWN)

    def add_edge(self, source: str, target: str):
        self.ensure_node(source)
        self.ensure_node(target)
        self.graph.add_edge(source, target)

    def node_type(self, name: str) -> NodeType:
        return self.graph.nodes[name]['type']

    def node_types(self) -> Dict[str, NodeType]:
        return {name: data['type'] for name, data in self.graph.nodes(data=True)}

    def nodes(self) -> List[Tuple[str, NodeType]]:
        """All nodes, sorted by name."""
        return sorted(self.node_types().items())

    def edges(self) -> List[Tuple[str, str]]:
        """All edges as (from, to), sorted."""
        return sorted(self.graph.edges())

    def successors(self, name: str) -> List[str]:
        return sorted(self.graph.successors(name))

    def number_of_nodes(self) -> int:
        return self.graph.number_of_nodes()

    def number_of_edges(self) -> int:
        return self.graph.number_of_edges()

    def __contains__(self, name: str) -> bool:
        return name in self.graph

    def __eq__(self, other) -> bool:
        if not isinstance(other, RuleGraph):
            return NotImplemented
        return self.nodes() == other.nodes() and self.edges() == other.edges()


class GraphBuilder:
    """Build a RuleGraph from loaded rule groups."""

    def __init__(self, groups: Iterable[RuleGroup]):
        self.groups = list(groups)
        self.rule_graph = RuleGraph()

    def rules(self) -> Iterable[Rule]:
        for group in self.groups:
            yield from group.rules

    def register_nodes(self):
        """First pass: one node per declared rule. Later declarations win."""
        for rule in self.rules():
            self.rule_graph.add_node(rule.name, node_type_for(rule))

    def build_edges(self):
        """Second pass: edges from every rule to what its expression reads."""
        # Only declared alerts matter for ALERTS resolution, and those are all
        # registered by now.
        extractor = DependencyExtractor(self.rule_graph.node_types())

        for rule in self.rules():
            try:
                expr = parse_expr(rule.expr)
            except ExpressionParseError as err:
                raise ExpressionParseError(rule.expr, err.reason, rule_name=rule.name) from err

            for successor in extractor.extract(expr):
                self.rule_graph.add_edge(rule.name, successor)

    def build(self) -> RuleGraph:
        """Run both passes, strictly in order, over the full rule set."""
        self.register_nodes()
        self.build_edges()

        logger.info(
            "Built rule graph: %d nodes, %d edges",
            self.rule_graph.number_of_nodes(),
            self.rule_graph.number_of_edges(),
        )
        return self.rule_graph


def build_rule_graph(groups: Iterable[RuleGroup]) -> RuleGraph:
    return GraphBuilder(groups).build()
