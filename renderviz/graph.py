"""Turn a fact model into positioned nodes and edges.

Nodes are stacked in five fixed columns. Edges are matched by name and are
best-effort: an edge whose endpoint cannot be found is left out.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .layout import anchor_edge, fit_canvas, pack_element_tree, pair_state_nodes, TREE_DEPTH_GAP_X
from .model import ColumnX, EdgeKind, FactModel, GraphEdge, GraphLayout, GraphNode, NodeKind

log = logging.getLogger(__name__)


COL_BASE_X = 80
COL_GAP_X = 220
ROW_START_Y = 80
NODE_WIDTH = 120
NODE_HEIGHT = 32
EMPTY_WIDTH_MARGIN = 200
DEFAULT_HEIGHT = 800

ROW_GAP_Y: Dict[str, int] = {
	"independent": 50,
	"prop": 50,
	"state": 40,
	"variable": 40,
	"side_effect": 40,
	"external": 40,
	"element": 48,
}

ID_PREFIX: Dict[str, str] = {
	"independent": "independent",
	"prop": "prop",
	"state": "state",
	"variable": "variable",
	"side_effect": "effect",
	"element": "jsx",
	"external": "external",
}

STATE_KINDS = {"local_state", "external_store", "async_query"}
VARIABLE_KINDS = {"reducer", "memoized_value", "unclassified"}
EFFECT_LABELS = {"effect": "useEffect", "layout_effect": "useLayoutEffect"}

SETTER_NAME = re.compile(r"^set([A-Z].*)")


def build_column_x() -> ColumnX:
	return ColumnX(
		independent=COL_BASE_X,
		state=COL_BASE_X + COL_GAP_X,
		variable=COL_BASE_X + COL_GAP_X * 2,
		effect=COL_BASE_X + COL_GAP_X * 3,
		jsx=COL_BASE_X + COL_GAP_X * 4,
	)


def state_name_for_setter(setter: str) -> str:
	"""``setCount`` -> ``count``; ``todo.mutate`` -> ``todo``."""
	if "." in setter:
		return setter.split(".", 1)[0]
	match = SETTER_NAME.match(setter)
	if not match:
		return setter
	rest = match.group(1)
	return rest[0].lower() + rest[1:]


class GraphBuilder:
	def __init__(self, col_x: ColumnX):
		self.col_x = col_x
		self.nodes: Dict[str, GraphNode] = {}
		self.edges: List[GraphEdge] = []
		self._edge_ids: Set[str] = set()

	def add_node(self, node: GraphNode) -> GraphNode:
		if node.id in self.nodes:
			return self.nodes[node.id]
		self.nodes[node.id] = node
		return node

	def stack_column(
		self,
		items: Iterable[Tuple[str, str, Dict[str, Any]]],
		kind: NodeKind,
		x: float,
		start_y: float = ROW_START_Y,
	) -> List[GraphNode]:
		placed: List[GraphNode] = []
		for index, (item_id, label, meta) in enumerate(items):
			node = self.add_node(
				GraphNode(
					id=f"{ID_PREFIX[kind]}-{item_id}",
					label=label,
					kind=kind,
					x=x,
					y=start_y + index * ROW_GAP_Y[kind],
					width=NODE_WIDTH,
					height=NODE_HEIGHT,
					meta=meta,
				)
			)
			placed.append(node)
		return placed

	def add_edge(
		self,
		edge_id: str,
		source: Optional[GraphNode],
		target: Optional[GraphNode],
		kind: EdgeKind,
		label: Optional[str] = None,
	) -> Optional[GraphEdge]:
		if source is None or target is None:
			log.debug("skipping edge %s: unresolved endpoint", edge_id)
			return None
		if edge_id in self._edge_ids:
			return None
		if source.id not in self.nodes or target.id not in self.nodes:
			return None
		edge = anchor_edge(edge_id, source, target, kind, label)
		self.edges.append(edge)
		self._edge_ids.add(edge_id)
		return edge

	def to_layout(self) -> GraphLayout:
		layout = GraphLayout(
			nodes=list(self.nodes.values()),
			edges=self.edges,
			width=self.col_x.jsx + EMPTY_WIDTH_MARGIN,
			height=DEFAULT_HEIGHT,
			col_x=self.col_x,
		)
		return fit_canvas(layout)


class _Lookup:
	"""Name-based resolution of hook, prop and variable nodes."""

	def __init__(
		self,
		refs: List[GraphNode],
		states: List[GraphNode],
		variables: List[GraphNode],
		props: List[GraphNode],
	):
		self.refs = refs
		self.states = states
		self.variables = variables
		self.props = props

	def ref(self, name: str) -> Optional[GraphNode]:
		return next((n for n in self.refs if n.label == name), None)

	def state(self, name: str) -> Optional[GraphNode]:
		return next((n for n in self.states if n.label.startswith(name)), None)

	def state_named(self, name: str) -> Optional[GraphNode]:
		# exact hook name, ignoring the "(global)" label suffix
		return next((n for n in self.states if n.meta.get("name") == name), None)

	def variable(self, name: str) -> Optional[GraphNode]:
		return next((n for n in self.variables if n.label == name), None)

	def prop(self, name: str) -> Optional[GraphNode]:
		return next((n for n in self.props if n.label == name), None)


def _hook_meta(hook) -> Dict[str, Any]:
	return {"hook_id": hook.id, "name": hook.name, "hook_kind": hook.kind, "scope": hook.scope}


def _add_nodes(builder: GraphBuilder, facts: FactModel) -> Dict[str, List[GraphNode]]:
	col_x = builder.col_x

	refs = builder.stack_column(
		((h.id, h.name, _hook_meta(h)) for h in facts.hooks if h.kind == "ref"),
		"independent",
		col_x.independent,
	)
	# Component props continue the independent column below the refs.
	props = builder.stack_column(
		((name, name, {"prop": name}) for name in facts.props),
		"prop",
		col_x.independent,
		start_y=ROW_START_Y + len(refs) * ROW_GAP_Y["independent"],
	)
	states = builder.stack_column(
		(
			(h.id, f"{h.name} (global)" if h.scope == "global" else h.name, _hook_meta(h))
			for h in facts.hooks
			if h.kind in STATE_KINDS
		),
		"state",
		col_x.state,
	)

	variable_items: List[Tuple[str, str, Dict[str, Any]]] = [
		(h.id, h.name, _hook_meta(h)) for h in facts.hooks if h.kind in VARIABLE_KINDS
	]
	for var in facts.variables:
		variable_items.append((var.id, var.name, {"variable_id": var.id, "dependencies": list(var.dependencies)}))
	variables = builder.stack_column(variable_items, "variable", col_x.variable)

	side_items: List[Tuple[str, str, Dict[str, Any]]] = []
	for effect in facts.effects:
		side_items.append((effect.id, EFFECT_LABELS[effect.kind], {"type": "effect", **effect.model_dump(mode="json")}))
	for cb in facts.callbacks:
		side_items.append((cb.id, cb.name or "callback", {"type": "callback", **cb.model_dump(mode="json")}))
	side_effects = builder.stack_column(side_items, "side_effect", col_x.effect)

	call_names: List[str] = []
	for record in [*facts.effects, *facts.callbacks]:
		call_names.extend(record.external_calls)
	externals = builder.stack_column(
		((name, name, {"call": name}) for name in dict.fromkeys(call_names)),
		"external",
		col_x.effect,
		start_y=ROW_START_Y + len(side_items) * ROW_GAP_Y["side_effect"] + ROW_GAP_Y["external"],
	)

	elements: List[GraphNode] = []
	for index, element in enumerate(facts.elements):
		elements.append(
			builder.add_node(
				GraphNode(
					id=f"{ID_PREFIX['element']}-{element.id}",
					label=element.component,
					kind="element",
					x=col_x.jsx + element.depth * TREE_DEPTH_GAP_X,
					y=ROW_START_Y + index * ROW_GAP_Y["element"],
					width=NODE_WIDTH,
					height=NODE_HEIGHT,
					meta={
						"element_id": element.id,
						"depth": element.depth,
						"props": list(element.props),
						"ref_props": list(element.ref_props),
						"parent_id": f"{ID_PREFIX['element']}-{element.parent_id}" if element.parent_id else None,
					},
				)
			)
		)

	return {
		"refs": refs,
		"props": props,
		"states": states,
		"variables": variables,
		"side_effects": side_effects,
		"externals": externals,
		"elements": elements,
	}


def _resolve_dependency(lookup: _Lookup, name: str) -> Optional[GraphNode]:
	return lookup.state(name) or lookup.ref(name) or lookup.variable(name) or lookup.prop(name)


def _add_variable_edges(builder: GraphBuilder, facts: FactModel, lookup: _Lookup) -> None:
	"""Edges into each derived variable from the names its initializer reads."""
	for var in facts.variables:
		target = builder.nodes.get(f"{ID_PREFIX['variable']}-{var.id}")
		if target is None:
			continue
		for name in var.dependencies:
			source = lookup.state_named(name) or lookup.ref(name) or lookup.prop(name) or lookup.variable(name)
			if source is None or source.id == target.id:
				continue
			builder.add_edge(f"var-dep-{source.id}-{target.id}-{name}", source, target, "dependency", name)


def _add_side_effect_edges(builder: GraphBuilder, facts: FactModel, lookup: _Lookup) -> None:
	side = {n.meta["id"]: n for n in builder.nodes.values() if n.kind == "side_effect"}
	externals = {n.label: n for n in builder.nodes.values() if n.kind == "external"}

	for effect in facts.effects:
		node = side.get(effect.id)
		if node is None:
			continue
		for dep in effect.dependencies:
			source = _resolve_dependency(lookup, dep.name)
			if source is not None:
				builder.add_edge(f"dep-{source.id}-{node.id}-{dep.name}", source, node, "dependency", dep.name)
		for name in effect.ref_reads:
			ref = lookup.ref(name)
			if ref is not None:
				builder.add_edge(f"dep-ref-{ref.id}-{node.id}-{name}", ref, node, "dependency", name)
		for setter in effect.setters:
			state = lookup.state(state_name_for_setter(setter))
			if state is not None:
				builder.add_edge(f"mut-{node.id}-{state.id}-{setter}", node, state, "mutation", setter)
		for name in effect.ref_writes:
			ref = lookup.ref(name)
			if ref is not None:
				builder.add_edge(f"mut-ref-{node.id}-{ref.id}-{name}", node, ref, "mutation", name)

	for cb in facts.callbacks:
		node = side.get(cb.id)
		if node is None:
			continue
		for name in cb.dependencies:
			source = _resolve_dependency(lookup, name)
			if source is not None:
				builder.add_edge(f"dep-{source.id}-{node.id}-{name}", source, node, "dependency", name)
		for setter in cb.setters:
			state = lookup.state(state_name_for_setter(setter))
			if state is not None:
				builder.add_edge(f"cb-mut-{node.id}-{state.id}-{setter}", node, state, "mutation", setter)

	for record in [*facts.effects, *facts.callbacks]:
		node = side.get(record.id)
		for call in record.external_calls:
			target = externals.get(call)
			if node is not None and target is not None:
				builder.add_edge(f"ext-{node.id}-{target.id}", node, target, "external", call)


def _add_element_edges(builder: GraphBuilder, elements: List[GraphNode], lookup: _Lookup) -> None:
	for jsx in elements:
		ref_props = jsx.meta.get("ref_props", [])
		for name in jsx.meta.get("props", []):
			ref = lookup.ref(name)
			if ref is not None and name in ref_props:
				builder.add_edge(f"jsx-ref-attr-{jsx.id}-{ref.id}-{name}", jsx, ref, "mutation", name)
				continue
			if ref is not None:
				builder.add_edge(f"jsx-ref-prop-{ref.id}-{jsx.id}-{name}", ref, jsx, "dependency", name)
				continue
			state = lookup.state(name)
			if state is not None:
				builder.add_edge(f"jsx-prop-{state.id}-{jsx.id}-{name}", state, jsx, "dependency", name)
				continue
			prop = lookup.prop(name)
			if prop is not None:
				builder.add_edge(f"prop-jsx-{prop.id}-{jsx.id}-{name}", prop, jsx, "dependency", name)
				continue
			variable = lookup.variable(name)
			if variable is not None:
				builder.add_edge(f"jsx-var-{variable.id}-{jsx.id}-{name}", variable, jsx, "dependency", name)

	for jsx in elements:
		parent_id = jsx.meta.get("parent_id")
		if parent_id:
			builder.add_edge(f"jsx-tree-{parent_id}-{jsx.id}", builder.nodes.get(parent_id), jsx, "flow")


def build_layout(facts: Optional[FactModel]) -> GraphLayout:
	col_x = build_column_x()
	if facts is None:
		return GraphLayout(width=col_x.jsx + EMPTY_WIDTH_MARGIN, height=DEFAULT_HEIGHT, col_x=col_x)

	builder = GraphBuilder(col_x)
	columns = _add_nodes(builder, facts)
	lookup = _Lookup(columns["refs"], columns["states"], columns["variables"], columns["props"])
	_add_side_effect_edges(builder, facts, lookup)
	_add_variable_edges(builder, facts, lookup)
	_add_element_edges(builder, columns["elements"], lookup)

	layout = builder.to_layout()
	pack_element_tree(layout)
	pair_state_nodes(layout, facts)
	log.debug("built layout with %d nodes and %d edges", len(layout.nodes), len(layout.edges))
	return layout
