"""Node classification for rule dependency graphs."""

from enum import Enum

from .rulefmt import Rule, RuleKind


class NodeType(Enum):
    RECORDED = 'recorded'
    ALERTED = 'alerted'
    UNKNOWN = 'unknown'  # referenced, but not declared by any rule


def node_type_for(rule: Rule) -> NodeType:
    if rule.kind is RuleKind.RECORDING:
        return NodeType.RECORDED
    return NodeType.ALERTED
