"""Tests for image output."""

import matplotlib.pyplot as plt
import pytest

from promgraph.graph_builder import RuleGraph
from promgraph.nodes import NodeType
from promgraph.visualize import visualize_graph


def test_visualize_writes_image(tmp_path):
    g = RuleGraph()
    g.add_node("job:up:sum", NodeType.RECORDED)
    g.add_node("Down", NodeType.ALERTED)
    g.add_edge("job:up:sum", "up")
    g.add_edge("Down", "job:up:sum")

    target = tmp_path / "out" / "graph.png"
    assert visualize_graph(g, target) is True
    assert target.stat().st_size > 0


def test_visualize_skips_empty_graph(tmp_path):
    target = tmp_path / "graph.png"
    assert visualize_graph(RuleGraph(), target) is False
    assert not target.exists()


def test_visualize_closes_figure_on_failure(tmp_path, monkeypatch):
    def broken_savefig(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(plt, "savefig", broken_savefig)
    g = RuleGraph()
    g.add_edge("Down", "up")

    with pytest.raises(OSError):
        visualize_graph(g, tmp_path / "graph.png")
    assert plt.get_fignums() == []
