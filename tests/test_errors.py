"""Tests for error aggregation."""

from promgraph.errors import CompoundError, ExpressionParseError, RuleFileError


def test_compound_error_message():
    ce = CompoundError()
    ce.accumulate(ValueError("error1"))
    ce.accumulate(ValueError("error2"))

    assert str(ce) == "error1\nerror2\n"


def test_empty_compound_error_has_no_errors():
    ce = CompoundError()
    assert not ce.has_errors()
    assert str(ce) == ""
    ce.raise_if_errors()


def test_compound_error_flattens():
    inner = CompoundError([ValueError("a"), ValueError("b")])
    outer = CompoundError([ValueError("first")])
    outer.accumulate(inner)

    assert [str(e) for e in outer.errors] == ["first", "a", "b"]
    assert not any(isinstance(e, CompoundError) for e in outer.errors)


def test_accumulate_many_keeps_order():
    ce = CompoundError()
    ce.accumulate(ValueError("x"), CompoundError([ValueError("y")]), ValueError("z"))
    assert str(ce) == "x\ny\nz\n"


def test_rule_file_error_location():
    err = RuleFileError("a.rule", "field 'expr' must be set in rule", "grp", 2, "foo:bar")
    assert str(err) == 'a.rule: group "grp", rule 2, "foo:bar": field \'expr\' must be set in rule'
    assert str(RuleFileError("a.rule", "invalid YAML")) == "a.rule: invalid YAML"


def test_expression_parse_error_names_rule():
    err = ExpressionParseError("sum(", "unexpected end", rule_name="r")
    assert "rule \"r\"" in str(err)
    assert "sum(" in str(err)
