"""
Draw a rule graph to an image file.

The DOT output is the primary format; this is a quick look at the same
graph without needing Graphviz installed.
"""

import logging
from pathlib import Path
from typing import Union

import matplotlib

matplotlib.use('Agg')

import matplotlib.pyplot as plt  # noqa: E402
import networkx as nx  # noqa: E402
from matplotlib.patches import Patch  # noqa: E402

from .graph_builder import RuleGraph  # noqa: E402
from .nodes import NodeType  # noqa: E402

logger = logging.getLogger(__name__)

# colour, edge colour, matplotlib marker, legend label
NODE_STYLES = {
    NodeType.RECORDED: ('#3498db', '#2c3e50', 'o', 'Recording rules'),
    NodeType.ALERTED: ('#e74c3c', '#c0392b', '8', 'Alerting rules'),
    NodeType.UNKNOWN: ('#95a5a6', '#7f8c8d', 's', 'Metrics'),
}


def visualize_graph(rule_graph: RuleGraph, output_file: Union[str, Path]) -> bool:
    """Draw the graph; returns False when there was nothing to draw."""
    if rule_graph.number_of_nodes() == 0:
        logger.warning("Rule graph is empty, not drawing %s", output_file)
        return False

    fig = plt.figure(figsize=(20, 14))
    try:
        _draw(rule_graph)
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(output_file, dpi=150, bbox_inches='tight', facecolor='white')
    finally:
        plt.close(fig)

    logger.info("Saved graph image to %s", output_file)
    return True


def _draw(rule_graph: RuleGraph):
    """Draw nodes, edges, labels and legend onto the current figure."""
    graph = rule_graph.graph
    pos = nx.spring_layout(graph, k=2.5, iterations=100, seed=42)

    for node_type, (colour, edge_colour, shape, _) in NODE_STYLES.items():
        nodelist = [name for name, kind in rule_graph.nodes() if kind is node_type]
        if not nodelist:
            continue
        nx.draw_networkx_nodes(
            graph, pos,
            nodelist=nodelist,
            node_color=colour,
            node_size=2000,
            node_shape=shape,
            alpha=0.9,
            linewidths=2,
            edgecolors=edge_colour
        )

    nx.draw_networkx_edges(
        graph, pos,
        edge_color='#7f8c8d',
        arrows=True,
        arrowsize=20,
        width=2,
        alpha=0.6,
        arrowstyle='->',
        connectionstyle='arc3,rad=0.1'
    )

    nx.draw_networkx_labels(
        graph, pos,
        font_size=9,
        font_weight='bold',
        bbox=dict(boxstyle='round,pad=0.3', facecolor='white', alpha=0.75)
    )

    legend_elements = [
        Patch(facecolor=colour, edgecolor=edge_colour, label=label)
        for colour, edge_colour, _, label in NODE_STYLES.values()
    ]
    plt.legend(handles=legend_elements, loc='upper right', fontsize=12, framealpha=0.9)

    plt.title("Rule Dependencies", fontsize=18, fontweight='bold', pad=20)
    plt.axis('off')
    plt.tight_layout()
