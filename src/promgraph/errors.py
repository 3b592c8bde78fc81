"""
Error types shared by the loader, the graph builder and the CLI.
"""

from typing import List, Optional


class PromgraphError(Exception):
    """Base class for everything promgraph raises on purpose."""


class RuleFileError(PromgraphError):
    """A single problem found while loading a rule file."""

    def __init__(
        self,
        filename: str,
        message: str,
        group: Optional[str] = None,
        rule_index: Optional[int] = None,
        rule_name: Optional[str] = None,
    ):
        self.filename = filename
        self.message = message
        self.group = group
        self.rule_index = rule_index  # 1-based, like the file reads
        self.rule_name = rule_name
        super().__init__(str(self))

    def __str__(self) -> str:
        where = []
        if self.group is not None:
            where.append(f'group "{self.group}"')
        if self.rule_index is not None:
            where.append(f"rule {self.rule_index}")
        if self.rule_name:
            where.append(f'"{self.rule_name}"')
        if where:
            return f"{self.filename}: {', '.join(where)}: {self.message}"
        return f"{self.filename}: {self.message}"


class ExpressionParseError(PromgraphError):
    """A PromQL expression could not be parsed."""

    def __init__(self, expr: str, reason: str, rule_name: Optional[str] = None):
        self.expr = expr
        self.reason = reason
        self.rule_name = rule_name
        super().__init__(str(self))

    def __str__(self) -> str:
        prefix = f'rule "{self.rule_name}": ' if self.rule_name else ""
        return f"{prefix}could not parse expression {self.expr!r}: {self.reason}"


class CompoundError(PromgraphError):
    """
    An ordered, flat collection of errors reported as one failure.

    Accumulating another CompoundError copies its contents in, so a
    CompoundError never contains another one.
    """

    def __init__(self, errors: Optional[List[Exception]] = None):
        super().__init__()
        self.errors: List[Exception] = []
        if errors:
            self.accumulate(*errors)

    def accumulate(self, *errs: Exception):
        """Append errors in order, flattening nested compound errors."""
        for err in errs:
            if isinstance(err, CompoundError):
                self.errors.extend(err.errors)
            else:
                self.errors.append(err)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def raise_if_errors(self):
        if self.has_errors():
            raise self

    def __str__(self) -> str:
        return "".join(f"{err}\n" for err in self.errors)
