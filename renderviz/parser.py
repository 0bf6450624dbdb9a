"""Thin wrapper around tree-sitter for component source files.

tree-sitter never raises on malformed input; it marks the damage with ERROR and
missing nodes instead. ``parse_source`` turns that into ``SourceSyntaxError`` so
the analyzer can report it.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from .model import Position

log = logging.getLogger(__name__)


EXTENSION_GRAMMAR: Dict[str, str] = {
	".ts": "typescript",
	".mts": "typescript",
	".cts": "typescript",
	".tsx": "tsx",
	".jsx": "tsx",
	".js": "tsx",
	".mjs": "tsx",
	".cjs": "tsx",
}

_LANGUAGES: Dict[str, Language] = {
	"typescript": Language(tstypescript.language_typescript()),
	"tsx": Language(tstypescript.language_tsx()),
}

FUNCTION_TYPES = {"arrow_function", "function_expression", "function"}
ASSIGNMENT_TYPES = {"assignment_expression", "augmented_assignment_expression"}


class SourceSyntaxError(Exception):
	def __init__(self, line: int, column: int):
		super().__init__(f"syntax error at line {line}, column {column}")
		self.line = line
		self.column = column


def detect_grammar(file_name: Optional[str]) -> str:
	if not file_name:
		return "tsx"
	_, ext = os.path.splitext(file_name)
	return EXTENSION_GRAMMAR.get(ext.lower(), "tsx")


def _first_error_point(root: Node) -> Tuple[int, int]:
	stack: List[Node] = [root]
	while stack:
		node = stack.pop()
		if node.type == "ERROR" or node.is_missing:
			return node.start_point[0] + 1, node.start_point[1]
		# Only subtrees flagged with an error can contain one.
		stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
	return root.start_point[0] + 1, root.start_point[1]


def encode_source(text: str) -> bytes:
	"""UTF-8 bytes of ``text``; lone surrogates become ``?``."""
	return text.encode("utf-8", errors="replace")


def clean_source(text: str) -> str:
	return encode_source(text).decode("utf-8")


def parse_source(text: str, file_name: Optional[str] = None) -> Tree:
	grammar = detect_grammar(file_name)
	parser = Parser(_LANGUAGES[grammar])
	tree = parser.parse(encode_source(text))
	if tree.root_node.has_error:
		line, column = _first_error_point(tree.root_node)
		raise SourceSyntaxError(line, column)
	log.debug("parsed %d bytes with %s grammar", len(text), grammar)
	return tree


def named_children(node: Node) -> List[Node]:
	return [c for c in node.named_children if c.type != "comment"]


def walk(node: Node) -> Iterator[Node]:
	"""Yield ``node`` and its named descendants in document order."""
	stack: List[Node] = [node]
	while stack:
		current = stack.pop()
		yield current
		stack.extend(reversed(named_children(current)))


def walk_events(node: Node) -> Iterator[Tuple[str, Node]]:
	"""Like ``walk`` but also reports when each node's subtree is finished.

	Yields ``("enter", n)`` before the descendants of ``n`` and ``("exit", n)``
	after them.
	"""
	stack: List[Tuple[Node, bool]] = [(node, False)]
	while stack:
		current, exiting = stack.pop()
		if exiting:
			yield "exit", current
			continue
		yield "enter", current
		stack.append((current, True))
		stack.extend((child, False) for child in reversed(named_children(current)))


def node_text(node: Optional[Node]) -> str:
	if node is None or node.text is None:
		return ""
	return node.text.decode("utf-8")


def string_value(node: Node) -> str:
	text = node_text(node)
	if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
		return text[1:-1]
	return text


def position_of(node: Node) -> Position:
	return Position(line=node.start_point[0] + 1, column=node.start_point[1])


def is_function(node: Optional[Node]) -> bool:
	return node is not None and node.is_named and node.type in FUNCTION_TYPES
