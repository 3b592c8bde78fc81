"""Tests for DOT output."""

import io

from promgraph.graph_builder import RuleGraph
from promgraph.nodes import NodeType
from promgraph.render import build_edge, emit_graph, quote, render_graph


def sample_graph():
    g = RuleGraph()
    g.add_node("test:rule:sum", NodeType.RECORDED)
    g.add_node("TestAlert", NodeType.ALERTED)
    g.add_edge("test:rule:sum", "up")
    g.add_edge("TestAlert", "test:rule:sum")
    return g


def test_quote():
    assert quote("up") == "up"
    assert quote("job:up:sum") == '"job:up:sum"'


def test_build_edge_quotes_each_side():
    assert build_edge("a:b", "c") == '"a:b" -> c'
    assert build_edge("a", "c:d") == 'a -> "c:d"'


def test_render_sorted():
    want = (
        "digraph {\n"
        "  TestAlert [shape=doubleoctagon]\n"
        '  "test:rule:sum" [shape=oval]\n'
        "  up [shape=rect]\n"
        "\n"
        '  TestAlert -> "test:rule:sum"\n'
        '  "test:rule:sum" -> up\n'
        "}\n"
    )
    assert render_graph(sample_graph()) == want


def test_render_is_repeatable():
    g = sample_graph()
    assert render_graph(g) == render_graph(g)


def test_emit_to_sink():
    out = io.StringIO()
    emit_graph(RuleGraph(), out)
    assert out.getvalue() == "digraph {\n\n}\n"
