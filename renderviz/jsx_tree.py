from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from tree_sitter import Node

from .model import ElementNode
from .parser import named_children, node_text, position_of, walk_events

log = logging.getLogger(__name__)


PLACEHOLDER_NAME = "Unknown"
REF_ATTRIBUTE = "ref"
ELEMENT_TYPES = {"jsx_element", "jsx_self_closing_element"}
DOTTED_NAME_TYPES = {"member_expression", "nested_identifier"}


class OpenElementStack:
	"""Ids of the elements whose subtree the walk is currently inside."""

	def __init__(self) -> None:
		self._ids: List[str] = []

	def push(self, element_id: str) -> None:
		self._ids.append(element_id)

	def pop(self) -> str:
		return self._ids.pop()

	def top(self) -> Optional[str]:
		return self._ids[-1] if self._ids else None

	def __len__(self) -> int:
		return len(self._ids)


def _dotted_name(name: Node) -> str:
	parts: List[str] = []
	current: Optional[Node] = name
	while current is not None and current.type in DOTTED_NAME_TYPES:
		children = named_children(current)
		if not children:
			break
		prop = current.child_by_field_name("property") or children[-1]
		parts.insert(0, node_text(prop))
		current = current.child_by_field_name("object") or children[0]
	if current is not None and current.type not in DOTTED_NAME_TYPES:
		parts.insert(0, node_text(current))
	return ".".join(parts) if parts else PLACEHOLDER_NAME


def element_name(name: Optional[Node]) -> str:
	if name is None:
		return PLACEHOLDER_NAME
	if name.type in ("identifier", "jsx_identifier"):
		return node_text(name)
	if name.type in DOTTED_NAME_TYPES:
		return _dotted_name(name)
	if name.type == "jsx_namespace_name":
		parts = named_children(name)
		if len(parts) == 2:
			return f"{node_text(parts[0])}:{node_text(parts[1])}"
	return PLACEHOLDER_NAME


def _opening_tag(node: Node) -> Optional[Node]:
	if node.type == "jsx_self_closing_element":
		return node
	if node.type == "jsx_element":
		return node.child_by_field_name("open_tag")
	return None


def _tag_name(node: Node) -> Optional[Node]:
	"""Name node of an element's tag, or None for fragments."""
	if node.type not in ELEMENT_TYPES:
		return None
	opening = _opening_tag(node)
	if opening is None:
		return None
	return opening.child_by_field_name("name")


def _member_root(member: Node) -> Optional[str]:
	current: Optional[Node] = member
	while current is not None and current.type == "member_expression":
		current = current.child_by_field_name("object")
	if current is not None and current.type == "identifier":
		return node_text(current)
	return None


def _bound_identifier(container: Node) -> Optional[str]:
	inner = named_children(container)
	if not inner:
		return None
	expr = inner[0]
	if expr.type == "identifier":
		return node_text(expr)
	if expr.type == "member_expression":
		return _member_root(expr)
	return None


def _bound_names(node: Node) -> Tuple[List[str], List[str]]:
	props: List[str] = []
	ref_props: List[str] = []

	opening = _opening_tag(node)
	for attr in named_children(opening) if opening is not None else []:
		if attr.type != "jsx_attribute":
			continue
		parts = named_children(attr)
		if len(parts) < 2 or parts[0].type != "property_identifier" or parts[1].type != "jsx_expression":
			continue
		name = _bound_identifier(parts[1])
		if name is None:
			continue
		props.append(name)
		if node_text(parts[0]) == REF_ATTRIBUTE:
			ref_props.append(name)

	if node.type == "jsx_element":
		for child in named_children(node):
			if child.type != "jsx_expression":
				continue
			name = _bound_identifier(child)
			if name is not None:
				props.append(name)

	return list(dict.fromkeys(props)), list(dict.fromkeys(ref_props))


def collect_element_tree(root: Node) -> List[ElementNode]:
	"""Flatten the markup under ``root`` into document-ordered element records.

	Fragments are transparent: they get no record and their children attach to
	the nearest enclosing element.
	"""
	elements: List[ElementNode] = []
	stack = OpenElementStack()

	for event, node in walk_events(root):
		name = _tag_name(node)
		if name is None:
			continue
		if event == "exit":
			stack.pop()
			continue

		props, ref_props = _bound_names(node)
		element_id = f"jsx-{len(elements) + 1}"
		elements.append(
			ElementNode(
				id=element_id,
				component=element_name(name),
				depth=len(stack),
				parent_id=stack.top(),
				props=props,
				ref_props=ref_props,
				defined_at=position_of(node),
			)
		)
		stack.push(element_id)

	log.debug("collected %d elements", len(elements))
	return elements
