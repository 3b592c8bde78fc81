"""Tests for dependency extraction."""

import pytest

from promgraph.extractor import DependencyExtractor, extract_dependencies
from promgraph.nodes import NodeType
from promgraph.promql import parse_expr

KNOWN = {
    "TestAlert": NodeType.ALERTED,
    "OtherAlert": NodeType.ALERTED,
    "test:rule:sum": NodeType.RECORDED,
    "up": NodeType.UNKNOWN,
}


def extract(text, nodes=None):
    return extract_dependencies(parse_expr(text), KNOWN if nodes is None else nodes)


@pytest.mark.parametrize("text,want", [
    ("a+b", ["a", "b"]),
    ("max_over_time(a[1h]) > 3", ["a"]),
    ("a + a", ["a", "a"]),
    ('{job="x"}', []),
    ("vector(1)", []),
])
def test_plain_references(text, want):
    assert extract(text) == want


def test_alerts_reference_resolves_declared_alert():
    assert extract('ALERTS{alertname="TestAlert"}') == ["TestAlert"]


def test_alerts_reference_without_match_is_empty():
    assert extract('ALERTS{alertname="NoSuchAlert"}') == []


def test_alerts_reference_only_matches_alerts():
    # test:rule:sum is declared, but as a recording rule
    assert extract('ALERTS{alertname="test:rule:sum"}') == []


def test_alerts_reference_with_regex():
    assert extract('ALERTS{alertname=~".*Alert"}') == ["OtherAlert", "TestAlert"]


def test_alerts_reference_with_negative_matchers():
    assert extract('ALERTS{alertname!="TestAlert"}') == ["OtherAlert"]
    assert extract('ALERTS{alertname!~"Test.*"}') == ["OtherAlert"]


def test_alerts_reference_without_alertname_is_empty():
    assert extract('ALERTS{alertstate="firing"}') == []


def test_alerts_is_never_a_successor():
    assert "ALERTS" not in extract('count(ALERTS{alertname="TestAlert"}) + up')


def test_extractor_can_be_reused():
    extractor = DependencyExtractor(KNOWN)
    assert extractor.extract(parse_expr("a")) == ["a"]
    assert extractor.extract(parse_expr("b")) == ["b"]


@pytest.mark.parametrize("text,want", [
    (r'ALERTS{alertname=~"\\p{Lu}.*"}', ["Down", "HighLatency"]),
    ('ALERTS{alertname=~"[[:upper:]][[:lower:]]+"}', ["Down"]),
])
def test_alerts_reference_with_re2_classes(text, want):
    nodes = {
        "Down": NodeType.ALERTED,
        "HighLatency": NodeType.ALERTED,
        "disk:full": NodeType.RECORDED,
    }
    assert extract(text, nodes) == want
