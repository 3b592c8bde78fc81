"""Serialise a RuleGraph as a Graphviz DOT digraph."""

import io
from typing import TextIO

from .graph_builder import RuleGraph
from .nodes import NodeType

SHAPES = {
    NodeType.RECORDED: 'oval',
    NodeType.ALERTED: 'doubleoctagon',
    NodeType.UNKNOWN: 'rect',
}


def quote(name: str) -> str:
    """Quote names containing ':' (the recording rule level separator)."""
    if ':' in name:
        return f'"{name}"'
    return name


def build_edge(source: str, target: str) -> str:
    return f"{quote(source)} -> {quote(target)}"


def emit_graph(rule_graph: RuleGraph, sink: TextIO):
    """Write the graph to sink. Nodes and edges come out sorted."""
    sink.write("digraph {\n")

    for name, node_type in rule_graph.nodes():
        sink.write(f"  {quote(name)} [shape={SHAPES[node_type]}]\n")

    sink.write("\n")

    for source, target in rule_graph.edges():
        sink.write(f"  {build_edge(source, target)}\n")

    sink.write("}\n")


def render_graph(rule_graph: RuleGraph) -> str:
    out = io.StringIO()
    emit_graph(rule_graph, out)
    return out.getvalue()
