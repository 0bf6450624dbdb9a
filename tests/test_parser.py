from textwrap import dedent

import pytest

from renderviz.parser import (
	SourceSyntaxError,
	detect_grammar,
	node_text,
	parse_source,
	position_of,
	walk,
	walk_events,
)


def test_detect_grammar_by_extension():
	assert detect_grammar(None) == "tsx"
	assert detect_grammar("Widget.tsx") == "tsx"
	assert detect_grammar("Widget.JSX") == "tsx"
	assert detect_grammar("src/store.ts") == "typescript"
	assert detect_grammar("README") == "tsx"


def test_parse_valid_tsx():
	tree = parse_source("const el = <div className=\"a\">{value}</div>;\n")
	assert tree.root_node.type == "program"
	assert not tree.root_node.has_error


def test_parse_plain_typescript_cast():
	tree = parse_source("const n = <number>value;\n", "cast.ts")
	assert not tree.root_node.has_error


def test_parse_error_reports_position():
	source = dedent(
		"""
		const a = 1;
		const b = ;
		"""
	)
	with pytest.raises(SourceSyntaxError) as info:
		parse_source(source)
	assert info.value.line >= 2
	assert "syntax error at line" in str(info.value)


def test_walk_is_document_order():
	tree = parse_source("f(a, b);\n")
	names = [node_text(n) for n in walk(tree.root_node) if n.type == "identifier"]
	assert names == ["f", "a", "b"]


def test_walk_events_are_balanced():
	tree = parse_source("const x = <A><B /></A>;\n")
	depth = 0
	for event, _ in walk_events(tree.root_node):
		depth += 1 if event == "enter" else -1
		assert depth >= 0
	assert depth == 0


def test_position_is_one_based_line():
	tree = parse_source("\n  foo();\n")
	call = next(n for n in walk(tree.root_node) if n.type == "call_expression")
	pos = position_of(call)
	assert pos.line == 2
	assert pos.column == 2
