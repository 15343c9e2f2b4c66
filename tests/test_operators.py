from __future__ import annotations

import pytest

from loam.eval.helpers import is_truthy
from loam.runtime import LoamArray, LoamBool, LoamMap, LoamNumber, LoamString
from loam.utils import loam_equals, render, wrap_i64
from tests.support.harness import (
    LoamTypeError,
    LoamZeroDivisionError,
    output_lines,
    run_case,
)

I64_MAX = 2**63 - 1
I64_MIN = -(2**63)

SCENARIOS = [
    pytest.param("print 1 + 2 * 3;", output_lines(7), None, id="precedence"),
    pytest.param("print (1 + 2) * 3;", output_lines(9), None, id="grouping"),
    pytest.param("print 10 - 4 - 3;", output_lines(3), None, id="sub-left-assoc"),
    pytest.param("print 100 / 10 / 5;", output_lines(2), None, id="div-left-assoc"),
    pytest.param("print 7 / 2;", output_lines(3), None, id="int-division"),
    pytest.param("print -7 / 2;", output_lines(-3), None, id="division-truncates-toward-zero"),
    pytest.param("print 7 / -2;", output_lines(-3), None, id="division-negative-divisor"),
    pytest.param("print -7 / -2;", output_lines(3), None, id="division-both-negative"),
    pytest.param("print 1 / 0;", None, LoamZeroDivisionError, id="division-by-zero"),
    pytest.param("print 0 / 5;", output_lines(0), None, id="zero-numerator"),
    pytest.param("print -5;", output_lines(-5), None, id="unary-minus"),
    pytest.param("print - -5;", output_lines(5), None, id="double-negation"),
    pytest.param(f"print {I64_MAX} + 1;", output_lines(I64_MIN), None, id="add-wraps"),
    pytest.param(f"print -{I64_MAX} - 2;", output_lines(I64_MAX), None, id="sub-wraps"),
    pytest.param(f"print {I64_MAX} * 2;", output_lines(-2), None, id="mul-wraps"),
    pytest.param(f"print -{I64_MAX} - 1;", output_lines(I64_MIN), None, id="min-value"),
    pytest.param(f"print -(-{I64_MAX} - 1);", output_lines(I64_MIN), None, id="negate-min-wraps"),
    pytest.param(f"print (-{I64_MAX} - 1) / -1;", output_lines(I64_MIN), None, id="divide-min-wraps"),
    pytest.param("print 1 < 2; print 2 <= 2; print 3 > 4; print 4 >= 5;", output_lines("true", "true", "false", "false"), None, id="comparisons"),
    pytest.param('print "a" < "b";', None, LoamTypeError, id="compare-strings-rejected"),
    pytest.param("print 1 == 1; print 1 != 1;", output_lines("true", "false"), None, id="number-equality"),
    pytest.param('print 1 == "1";', output_lines("false"), None, id="mixed-type-equality"),
    pytest.param('print "ab" == "ab"; print "ab" != "ba";', output_lines("true", "true"), None, id="string-equality"),
    pytest.param("print true == true; print true == 1;", output_lines("true", "false"), None, id="bool-equality"),
    pytest.param("fn f() {} print f == f;", output_lines("false"), None, id="functions-never-equal"),
    pytest.param('print "n=" + 5;', output_lines("n=5"), None, id="string-plus-number"),
    pytest.param('print "ok: " + true;', output_lines("ok: true"), None, id="string-plus-bool"),
    pytest.param('print "xs: " + [1, "a"];', output_lines("xs: [1, a]"), None, id="string-plus-array"),
    pytest.param('print "m: " + {k: 1};', output_lines("m: {k: 1}"), None, id="string-plus-map"),
    pytest.param('print "a" + "b" + 1 + 2;', output_lines("ab12"), None, id="string-concat-left-assoc"),
    pytest.param('print 1 + 2 + "a";', None, LoamTypeError, id="number-plus-string"),
    pytest.param("print 1 + true;", None, LoamTypeError, id="number-plus-bool"),
    pytest.param("print [1] + 2;", None, LoamTypeError, id="array-plus-number"),
    pytest.param("print {} + {};", None, LoamTypeError, id="map-plus-map"),
    pytest.param('print "a" - "b";', None, LoamTypeError, id="string-minus"),
    pytest.param('print -"a";', None, LoamTypeError, id="negate-string"),
    pytest.param("print true * 2;", None, LoamTypeError, id="bool-times-number"),
    pytest.param("print !true; print !0; print !\"\"; print ![]; print !{};", output_lines("false", "true", "true", "true", "true"), None, id="not-falsy-values"),
    pytest.param('print !1; print !"x"; print ![0]; print !{a: 0};', output_lines("false", "false", "false", "false"), None, id="not-truthy-values"),
    pytest.param("fn f() {} print !f;", output_lines("false"), None, id="functions-truthy"),
    pytest.param("print 1 and 2; print 0 or 0;", output_lines("true", "false"), None, id="logical-yields-bool"),
    pytest.param('print "" or [1];', output_lines("true"), None, id="or-any-truthy"),
    pytest.param(
        "let hits = 0; fn hit() { hits = hits + 1; return true; } let r = false and hit(); print hits; print r;",
        output_lines(0, "false"),
        None,
        id="and-short-circuits",
    ),
    pytest.param(
        "let hits = 0; fn hit() { hits = hits + 1; return true; } let r = true or hit(); print hits; print r;",
        output_lines(0, "true"),
        None,
        id="or-short-circuits",
    ),
    pytest.param(
        "let hits = 0; fn hit() { hits = hits + 1; return false; } print true and hit(); print hits;",
        output_lines("false", 1),
        None,
        id="and-evaluates-right-when-needed",
    ),
    pytest.param("let a = 1; let b = 2; a = b = 7; print a + b;", output_lines(14), None, id="chained-assignment"),
    pytest.param("let x = 0; print x = 5;", output_lines(5), None, id="assignment-is-expression"),
]


@pytest.mark.parametrize("source, expected_output, expected_exc", SCENARIOS)
def test_operator_scenarios(source, expected_output, expected_exc) -> None:
    run_case(source, expected_output, expected_exc)


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(0, 0, id="zero"),
        pytest.param(I64_MAX, I64_MAX, id="max"),
        pytest.param(I64_MAX + 1, I64_MIN, id="max-plus-one"),
        pytest.param(I64_MIN - 1, I64_MAX, id="min-minus-one"),
        pytest.param(2**64 + 5, 5, id="full-turn"),
        pytest.param(-(2**64) - 5, -5, id="full-turn-negative"),
    ],
)
def test_wrap_i64(value: int, expected: int) -> None:
    assert wrap_i64(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(LoamBool(False), False, id="false"),
        pytest.param(LoamBool(True), True, id="true"),
        pytest.param(LoamNumber(0), False, id="zero"),
        pytest.param(LoamNumber(-1), True, id="negative"),
        pytest.param(LoamString(""), False, id="empty-string"),
        pytest.param(LoamString("0"), True, id="string-zero"),
        pytest.param(LoamArray([]), False, id="empty-array"),
        pytest.param(LoamArray([LoamNumber(0)]), True, id="array"),
        pytest.param(LoamMap({}), False, id="empty-map"),
        pytest.param(LoamMap({"k": LoamNumber(0)}), True, id="map"),
    ],
)
def test_truthiness(value, expected: bool) -> None:
    assert is_truthy(value) is expected


def test_render_nested_values() -> None:
    value = LoamMap({
        "name": LoamString("loam"),
        "tags": LoamArray([LoamString("a"), LoamNumber(2), LoamBool(True)]),
    })
    assert render(value) == "{name: loam, tags: [a, 2, true]}"


def test_structural_equality_recurses() -> None:
    left = LoamArray([LoamMap({"a": LoamArray([LoamNumber(1)])})])
    right = LoamArray([LoamMap({"a": LoamArray([LoamNumber(1)])})])
    other = LoamArray([LoamMap({"a": LoamArray([LoamNumber(2)])})])

    assert loam_equals(left, right)
    assert not loam_equals(left, other)
    assert not loam_equals(LoamNumber(1), LoamBool(True))
