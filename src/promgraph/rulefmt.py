"""
Prometheus rule file loading.

Reads the `groups: [{name, rules: [...]}]` YAML layout and applies the
structural checks Prometheus itself applies before accepting a file.
Problems are collected per file and raised together as a CompoundError.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import CompoundError, ExpressionParseError, RuleFileError
from .promql import parse_expr

logger = logging.getLogger(__name__)

METRIC_NAME_RE = re.compile(r'^[a-zA-Z_:][a-zA-Z0-9_:]*$')

FILE_KEYS = {'groups'}
GROUP_KEYS = {'name', 'interval', 'query_offset', 'limit', 'labels', 'rules'}
RULE_KEYS = {'record', 'alert', 'expr', 'for', 'keep_firing_for', 'labels', 'annotations'}


class RuleKind(Enum):
    RECORDING = 'recording'
    ALERTING = 'alerting'


@dataclass(frozen=True)
class Rule:
    """One recording or alerting rule as written in a rule file."""
    expr: str
    record: str = ''
    alert: str = ''
    for_: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> RuleKind:
        if self.record == '':
            return RuleKind.ALERTING
        return RuleKind.RECORDING

    @property
    def name(self) -> str:
        """Base name the rule is referenced by (any `{...}` suffix dropped)."""
        name = self.record or self.alert
        brace = name.find('{')
        if brace >= 0:
            name = name[:brace]
        return name


@dataclass(frozen=True)
class RuleGroup:
    name: str
    rules: List[Rule]
    interval: Optional[str] = None
    source: str = ''


def _unknown_keys(data: dict, allowed: set) -> List[str]:
    return sorted(str(k) for k in data if k not in allowed)


def _check_rule(raw: Any, filename: str, group: str, index: int, errors: CompoundError) -> Optional[Rule]:
    """Validate one raw rule mapping; record problems in errors."""
    if not isinstance(raw, dict):
        errors.accumulate(RuleFileError(filename, "rule must be a mapping", group, index))
        return None

    record = str(raw.get('record') or '')
    alert = str(raw.get('alert') or '')
    expr = raw.get('expr')
    expr = '' if expr is None else str(expr)
    name = record or alert

    def fail(message: str):
        errors.accumulate(RuleFileError(filename, message, group, index, name or None))

    start = len(errors.errors)

    for key in _unknown_keys(raw, RULE_KEYS):
        fail(f"field {key} not found in rule")

    if record and alert:
        fail("only one of 'record' and 'alert' must be set")
    elif not record and not alert:
        fail("one of 'record' or 'alert' must be set")

    if not expr.strip():
        fail("field 'expr' must be set in rule")
    else:
        try:
            parse_expr(expr)
        except ExpressionParseError as err:
            fail(f"could not parse expression: {err.reason}")

    if record:
        if raw.get('annotations'):
            fail("invalid field 'annotations' in recording rule")
        if raw.get('for'):
            fail("invalid field 'for' in recording rule")
        if not METRIC_NAME_RE.match(record):
            fail(f"invalid recording rule name: {record}")

    for attr in ('labels', 'annotations'):
        value = raw.get(attr)
        if value is not None and not isinstance(value, dict):
            fail(f"field '{attr}' must be a mapping")

    if len(errors.errors) > start:
        return None

    return Rule(
        expr=expr,
        record=record,
        alert=alert,
        for_=str(raw['for']) if raw.get('for') is not None else None,
        labels={str(k): str(v) for k, v in (raw.get('labels') or {}).items()},
        annotations={str(k): str(v) for k, v in (raw.get('annotations') or {}).items()},
    )


def parse_rule_groups(data: Any, filename: str) -> List[RuleGroup]:
    """
    Turn the decoded YAML document of one rule file into rule groups.

    Raises:
        CompoundError: one RuleFileError per problem found.
    """
    errors = CompoundError()

    if data is None:
        return []
    if not isinstance(data, dict):
        errors.accumulate(RuleFileError(filename, f"expected a mapping at top level, got {type(data).__name__}"))
        raise errors

    for key in _unknown_keys(data, FILE_KEYS):
        errors.accumulate(RuleFileError(filename, f"field {key} not found in rule file"))

    raw_groups = data.get('groups') or []
    if not isinstance(raw_groups, list):
        errors.accumulate(RuleFileError(filename, "field 'groups' must be a list"))
        raise errors

    groups: List[RuleGroup] = []
    seen = set()

    for raw_group in raw_groups:
        if not isinstance(raw_group, dict):
            errors.accumulate(RuleFileError(filename, "group must be a mapping"))
            continue

        group_name = str(raw_group.get('name') or '')
        if not group_name:
            errors.accumulate(RuleFileError(filename, "Groupname must not be empty"))
        elif group_name in seen:
            errors.accumulate(RuleFileError(filename, f"groupname: \"{group_name}\" is repeated in the same file"))
        seen.add(group_name)

        for key in _unknown_keys(raw_group, GROUP_KEYS):
            errors.accumulate(RuleFileError(filename, f"field {key} not found in group", group_name))

        raw_rules = raw_group.get('rules') or []
        if not isinstance(raw_rules, list):
            errors.accumulate(RuleFileError(filename, "field 'rules' must be a list", group_name))
            continue

        rules = []
        for index, raw_rule in enumerate(raw_rules, start=1):
            rule = _check_rule(raw_rule, filename, group_name, index, errors)
            if rule is not None:
                rules.append(rule)

        interval = raw_group.get('interval')
        groups.append(RuleGroup(
            name=group_name,
            rules=rules,
            interval=str(interval) if interval is not None else None,
            source=filename,
        ))

    errors.raise_if_errors()
    return groups


def load_rule_file(path: Union[str, Path]) -> List[RuleGroup]:
    """
    Load and validate one rule file.

    Raises:
        CompoundError: if the file cannot be read, is not valid YAML, or
            holds rules Prometheus would reject.
    """
    filename = str(path)

    try:
        with open(path, encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as err:
        raise CompoundError([RuleFileError(filename, err.strerror or str(err))]) from err
    except yaml.YAMLError as err:
        raise CompoundError([RuleFileError(filename, f"invalid YAML: {err}")]) from err
    except UnicodeDecodeError as err:
        raise CompoundError([RuleFileError(filename, f"invalid UTF-8: {err}")]) from err

    groups = parse_rule_groups(data, filename)
    logger.debug("Loaded %d group(s) from %s", len(groups), filename)
    return groups
