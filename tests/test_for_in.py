"""Tests for the indexed-iteration patcher: strategies, steps and bindings."""

import logging
import re
from types import SimpleNamespace

import pytest

from builders import build_patchers, find_patchers, make_context
from unbrew import Editor, PatcherError, transform
from unbrew.nodes import Block, Node
from unbrew.patchers import ForInPatcher, make_patcher


def _run(source: str, **options) -> str:
    return transform(make_context(source, **options)).code


def _loop(source: str, **options) -> ForInPatcher:
    root, _ = build_patchers(source, **options)
    return find_patchers(root, ForInPatcher)[0]


def _header(source: str) -> str:
    for line in _run(source).split("\n"):
        if line.lstrip().startswith("for ("):
            return line.strip()
    raise ValueError(f"no loop header in output of {source!r}")


# ============================================================
# strategy selection
# ============================================================


def test_map_chain_without_step():
    assert _loop("x = for a in b then f(a)").can_patch_as_map_expression()
    assert _loop("x = for a, j in b then f(a)").can_patch_as_map_expression()
    assert _loop("x = for a in b when c then f(a)").can_patch_as_map_expression()


def test_step_rules_out_map_chain():
    assert not _loop("x = for a in b by 1 then f(a)").can_patch_as_map_expression()
    assert not _loop("x = for a in b by n then f(a)").can_patch_as_map_expression()


def test_key_with_filter_rules_out_map_chain():
    assert not _loop("x = for a, j in b when c then f(a)").can_patch_as_map_expression()


def test_statement_body_rules_out_map_chain():
    assert not _loop("x = for a in b\n  return a").can_patch_as_map_expression()


def test_map_expressions_option():
    assert not _loop("x = for a in b then f(a)", map_expressions=False).can_patch_as_map_expression()
    assert _run("x = for a in b then f(a)", map_expressions=False) == (
        "x = (() => {\n"
        "  result = [];\n"
        "  for (i = 0; i < b.length; i++) { a = b[i]; result.push(f(a)); }\n"
        "  return result;\n"
        "})();"
    )


def test_map_chain_ends_in_map_call():
    out = _run("x = for a in b when c then f(a)")
    assert out.startswith("x = b.filter(")
    assert out.endswith(".map((a) => f(a));")
    assert "for" not in out


def test_loop_statement_needs_no_semicolon():
    assert not _loop("for a in b\n  f(a)").statement_needs_semicolon()
    assert _loop("x = for a in b then f(a)").statement_needs_semicolon()


def test_strategy_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="unbrew"):
        _run("x = for a in b by 2\n  f(a)")
    assert "falling back to IIFE" in caplog.text
    assert "claimed binding 'result'" in caplog.text


# ============================================================
# step descriptor
# ============================================================


def test_step_defaults_without_by():
    step = _loop("for a in b\n  f(a)").get_step()
    assert step.is_literal
    assert not step.negated
    assert step.number == 1
    assert step.update == "1"


def test_step_strips_negations():
    step = _loop("for a in b by - - -2\n  f(a)").get_step()
    assert step.is_literal
    assert step.negated
    assert step.number == 2
    assert step.update == "2"
    assert step.raw == "- - -2"


def test_dynamic_step_claims_binding():
    step = _loop("for a in b by n.m\n  f(a)").get_step()
    assert not step.is_literal
    assert step.number is None
    assert step.init == "n.m"
    assert step.update == "step"


def test_step_is_memoized():
    loop = _loop("for a in b by n\n  f(a)")
    assert loop.get_step() is loop.get_step()


def test_float_step():
    assert _header("for a in b by 0.5\n  f(a)") == (
        "for (i = 0; i < b.length; i += 0.5) {"
    )


def test_double_negation_matches_plain_step():
    assert _header("for a in b by - -3\n  f(a)") == _header("for a in b by 3\n  f(a)")


def test_dynamic_step_evaluated_once():
    out = _run("for a in b by g(x)\n  f(a)")
    assert out.count("g(x)") == 1
    assert _header("for a in b by -g(x)\n  f(a)") == (
        "for (i = b.length - 1, step = g(x); i >= 0; i -= step) {"
    )


# ============================================================
# bindings
# ============================================================


def test_synthesized_names_avoid_names_in_scope():
    out = _run("i = j = k = step = iterable = result = 0\nx = for a in f() by n\n  g(a)")
    assert "result1 = [];" in out
    assert "iterable1 = f()" in out
    assert "for (i1 = 0, step1 = n; i1 < iterable1.length; i1 += step1) {" in out
    assert "a = iterable1[i1];" in out


def test_bindings_claimed_in_patch_order():
    context = make_context("x = for a in f() by n\n  g(a)")
    transform(context)
    assert context.scope_for(context.program).claimed_bindings() == [
        "result",
        "i",
        "iterable",
        "step",
    ]


def test_operator_target_is_parenthesized_where_indexed():
    loop = _loop("for a in b or c\n  f(a)")
    assert loop.target.needs_parens_for_member_access()
    assert not loop.requires_extracting_target()
    assert _header("for a in b or c\n  f(a)") == "for (i = 0; i < (b || c).length; i++) {"
    assert not _loop("for a in b.c\n  f(a)").target.needs_parens_for_member_access()


def test_sibling_loops_do_not_reuse_index():
    out = _run("for a in b\n  f(a)\nfor c in d\n  g(c)")
    assert "for (i = 0; i < b.length; i++) {" in out
    assert "for (j = 0; j < d.length; j++) {" in out


# ============================================================
# indentation
# ============================================================


def test_tab_indentation_is_detected():
    assert _run("for a in b when c\n\tf(a)") == (
        "for (i = 0; i < b.length; i++) {\n\ta = b[i];\n\tif (c) {\n\t\tf(a);\n\t}\n}"
    )


def test_indent_option_overrides_detection():
    assert _run("for a in b when c\n  f(a)", indent="    ") == (
        "for (i = 0; i < b.length; i++) {\n"
        "    a = b[i];\n"
        "    if (c) {\n"
        "        f(a);\n"
        "    }\n"
        "}"
    )


def test_nested_filtered_loops():
    assert _run("for a in b when c\n  for d in a when e\n    f(d)") == (
        "for (i = 0; i < b.length; i++) {\n"
        "  a = b[i];\n"
        "  if (c) {\n"
        "    for (j = 0; j < a.length; j++) {\n"
        "      d = a[j];\n"
        "      if (e) {\n"
        "        f(d);\n"
        "      }\n"
        "    }\n"
        "  }\n"
        "}"
    )


# ============================================================
# comments
# ============================================================


def test_untouched_comments_are_reported():
    source = "# top\nfor a in b\n  # inner\n  f(a)"
    context = make_context(source)
    result = transform(context)
    assert [source[t.start : t.end] for t in result.comments] == ["# top", "# inner"]
    assert "# top\nfor (i = 0;" in result.code


# ============================================================
# malformed trees
# ============================================================


def _first_loop_node(context):
    assert context.program.body is not None
    return context.program.body.statements[0]


def test_missing_target_raises():
    context = make_context("for a in b\n  f(a)")
    _first_loop_node(context).target = None
    with pytest.raises(PatcherError, match="no target"):
        make_patcher(context.program, context, Editor(context.source))


def test_missing_value_assignee_raises():
    context = make_context("for a in b\n  f(a)")
    _first_loop_node(context).val_assignee = None
    with pytest.raises(PatcherError, match="no value assignee"):
        make_patcher(context.program, context, Editor(context.source))


def test_empty_body_raises():
    context = make_context("for a in b\n  f(a)")
    loop = _first_loop_node(context)
    loop.body = Block(loop.body.range, [])
    with pytest.raises(PatcherError, match="empty body"):
        make_patcher(context.program, context, Editor(context.source))


def test_unknown_node_raises():
    class Strange(Node):
        pass

    context = make_context("a")
    assert context.program.body is not None
    context.program.body.statements[0] = Strange((0, 1))
    with pytest.raises(PatcherError, match="no patcher for node type Strange"):
        make_patcher(context.program, context, Editor(context.source))


# ============================================================
# index sequence of generated headers
# ============================================================

_HEADER_RE = re.compile(r"for \((\w+) = ([^;,]+)(?:, \w+ = [^;]+)?; ([^;]+); ([^)]+)\) \{")


def _simulate(header: str, length: int) -> list[int]:
    """Indexes visited by a generated loop header over a collection of length."""
    m = _HEADER_RE.match(header)
    assert m is not None, header
    name, init, test, update = m.groups()
    update = re.sub(rf"^{name}\+\+$", f"{name} + 1", update)
    update = re.sub(rf"^{name}--$", f"{name} - 1", update)
    update = re.sub(rf"^{name} ([+-])= (.+)$", rf"{name} \1 \2", update)
    env = {"b": SimpleNamespace(length=length)}
    index = eval(init, env)
    visited: list[int] = []
    while eval(test, env, {name: index}):
        visited.append(index)
        index = eval(update, env, {name: index})
        assert len(visited) <= length, header
    return visited


@pytest.mark.parametrize("step", ["1", "2", "3", "-1", "-2", "- -2", "- - -3"])
@pytest.mark.parametrize("length", [0, 1, 5, 6])
def test_header_visits_expected_indexes(step: str, length: int):
    header = _header(f"for a in b by {step}\n  f(a)")
    value = int(step.replace(" ", "").replace("--", ""))
    if value > 0:
        expected = list(range(0, length, value))
    else:
        expected = list(range(length - 1, -1, value))
    assert _simulate(header, length) == expected


# ============================================================
# chain and indexed strategies agree
# ============================================================


class _Array(list):
    """List with the array members generated code touches."""

    @property
    def length(self) -> int:
        return len(self)

    def map(self, fn):
        return _Array(_call(fn, value, index) for index, value in enumerate(self))

    def filter(self, fn):
        return _Array(value for index, value in enumerate(self) if _call(fn, value, index))


def _call(fn, value, index):
    if fn.__code__.co_argcount == 2:
        return fn(value, index)
    return fn(value)


def _py(code: str) -> str:
    for js, py in (("===", "=="), ("!==", "!="), ("&&", " and "), ("||", " or ")):
        code = code.replace(js, py)
    return code


_ARROW_RE = re.compile(r"\(([\w, ]*)\) => ")

_IIFE_RE = re.compile(
    r"^x = \(\(\) => \{ (?P<result>\w+) = \[\]; "
    r"for \((?P<init>[^;]+); (?P<test>[^;]+); (?P<update>[^)]+)\) \{ "
    r"(?P<value>[^;]+); "
    r"(?:if \((?P<filter>.+?)\) \{ )?"
    r"(?P=result)\.push\((?P<body>.+)\); (?:\} )?\} "
    r"return (?P=result); \}\)\(\);$"
)


def _evaluate_chain(code: str, env: dict) -> list:
    flat = " ".join(code.split())
    assert flat.startswith("x = ") and flat.endswith(";"), code
    assert "for (" not in flat, code
    return list(eval(_py(_ARROW_RE.sub(r"lambda \1: ", flat[4:-1])), dict(env)))


def _evaluate_indexed(code: str, env: dict) -> list:
    m = _IIFE_RE.match(" ".join(code.split()))
    assert m is not None, code
    scope = dict(env)
    exec(_py(m["init"]), scope)
    update = re.sub(r"^(\w+)\+\+$", r"\1 += 1", m["update"])
    result: list = []
    while eval(_py(m["test"]), scope):
        exec(_py(m["value"]), scope)
        if m["filter"] is None or eval(_py(m["filter"]), scope):
            result.append(eval(_py(m["body"]), scope))
        exec(update, scope)
        assert len(result) <= 10, code
    return result


@pytest.mark.parametrize(
    "source,expected",
    [
        ("x = for a in b then f(a)", [(1,), (2,), (3,)]),
        ("x = for a, j in b then f(a, j)", [(1, 0), (2, 1), (3, 2)]),
        ("x = for a in b when a > 1 then f(a)", [(2,), (3,)]),
        ("x = for a in b or c then f(a)", [(1,), (2,), (3,)]),
        ("x = for a in b or c when a > 1 then f(a)", [(2,), (3,)]),
        ("x = for a in (c or b) then a * 2", [8, 10]),
    ],
)
def test_chain_and_indexed_loop_agree(source: str, expected: list):
    env = {"b": _Array([1, 2, 3]), "c": _Array([4, 5]), "f": lambda *args: args}
    chain = _run(source)
    indexed = _run(source, map_expressions=False)
    assert _evaluate_chain(chain, env) == expected
    assert _evaluate_indexed(indexed, env) == expected
