from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from .exports import collect_exports, collect_import_map, pick_primary_component
from .hooks import AnalysisContext, binding_names, collect_declarations
from .jsx_tree import collect_element_tree
from .model import ElementNode, FactModel
from .parser import SourceSyntaxError, clean_source, is_function, named_children, node_text, parse_source, walk

log = logging.getLogger(__name__)


PARAMETER_TYPES = {"required_parameter", "optional_parameter"}


def find_component(root: Node, name: str) -> Optional[Node]:
	"""Return the first function node declared under ``name``."""
	for node in walk(root):
		if node.type == "function_declaration" or is_function(node):
			fn_name = node.child_by_field_name("name")
			if fn_name is not None and node_text(fn_name) == name:
				return node
		elif node.type == "variable_declarator":
			decl_name = node.child_by_field_name("name")
			value = node.child_by_field_name("value")
			if decl_name is not None and decl_name.type == "identifier" and node_text(decl_name) == name and is_function(value):
				return value
	return None


def component_props(component: Node) -> List[str]:
	"""Names destructured from the component's first parameter.

	``function Card({ title, onClose = noop })`` gives ``title`` and
	``onClose``. A plain ``props`` parameter gives nothing.
	"""
	params = component.child_by_field_name("parameters")
	if params is None:
		return []
	first = next(iter(named_children(params)), None)
	if first is not None and first.type in PARAMETER_TYPES:
		first = first.child_by_field_name("pattern")
	if first is None or first.type != "object_pattern":
		return []
	return [name for name, _, _ in binding_names(first)]


def analyze(source: str, file_name: Optional[str] = None) -> FactModel:
	source = clean_source(source)
	if file_name is not None:
		file_name = clean_source(file_name)
	try:
		tree = parse_source(source, file_name)
	except SourceSyntaxError as e:
		log.warning("could not parse %s: %s", file_name or "<source>", e)
		return FactModel(source=source, file_name=file_name, errors=[f"Failed to parse source: {e}"])

	root = tree.root_node
	import_map = collect_import_map(root)
	exports = collect_exports(root)
	component_name = pick_primary_component(exports, file_name)

	ctx = AnalysisContext(import_map=import_map)
	elements: List[ElementNode] = []
	props: List[str] = []
	component = find_component(root, component_name) if component_name else None
	body = component.child_by_field_name("body") if component is not None else None
	if body is not None:
		props = component_props(component)
		elements = collect_element_tree(body)
		collect_declarations(body, ctx)
	elif component_name:
		log.debug("component %s is exported but its body was not found", component_name)

	return FactModel(
		source=source,
		file_name=file_name,
		component_name=component_name,
		props=props,
		hooks=ctx.hooks,
		effects=ctx.effects,
		callbacks=ctx.callbacks,
		variables=ctx.variables,
		elements=elements,
		meta=exports,
		errors=[],
		called_names=list(ctx.called_names),
	)
