"""Second-stage placement for the element tree and the state column.

Both refiners move nodes that already have edges attached, so each one finishes
by re-reading every edge endpoint from its node's new position.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from .model import EdgeEndpoint, EdgeKind, FactModel, GraphEdge, GraphLayout, GraphNode, HookRecord

log = logging.getLogger(__name__)


TREE_BASE_Y = 80
TREE_DEPTH_GAP_X = 160
TREE_ROW_GAP_Y = 48
STATE_BASE_Y = 80
STATE_ROW_GAP_Y = 40
STATE_SUBCOLUMN_OFFSET = 65
CANVAS_MARGIN = 120


def anchor_edge(
	edge_id: str,
	source: GraphNode,
	target: GraphNode,
	kind: EdgeKind,
	label: Optional[str] = None,
) -> GraphEdge:
	"""Edge leaving the right middle of ``source`` into the left middle of ``target``."""
	return GraphEdge(
		id=edge_id,
		source=EdgeEndpoint(node_id=source.id, x=source.x + source.width / 2, y=source.y),
		target=EdgeEndpoint(node_id=target.id, x=target.x - target.width / 2, y=target.y),
		kind=kind,
		label=label,
	)


def refresh_edge_endpoints(layout: GraphLayout) -> GraphLayout:
	nodes = {n.id: n for n in layout.nodes}
	for i, edge in enumerate(layout.edges):
		source = nodes.get(edge.source.node_id)
		target = nodes.get(edge.target.node_id)
		if source is None or target is None:
			continue
		layout.edges[i] = anchor_edge(edge.id, source, target, edge.kind, edge.label)
	return layout


def fit_canvas(layout: GraphLayout) -> GraphLayout:
	for node in layout.nodes:
		layout.width = max(layout.width, node.x + node.width / 2 + CANVAS_MARGIN)
		layout.height = max(layout.height, node.y + node.height / 2 + CANVAS_MARGIN)
	return layout


def _place_element(node: GraphNode, row: int, base_x: float) -> None:
	node.x = base_x + node.meta.get("depth", 0) * TREE_DEPTH_GAP_X
	node.y = TREE_BASE_Y + row * TREE_ROW_GAP_Y
	node.meta["row"] = row


def _pack_subtree(root_id: str, start_row: int, by_id: Dict[str, GraphNode], children: Dict[str, List[str]], base_x: float) -> int:
	"""Place one subtree and return how many rows it spans.

	Each frame is ``[node_id, own_row, next_free_row, next_child_index]``.
	"""
	_place_element(by_id[root_id], start_row, base_x)
	frames: List[List[Any]] = [[root_id, start_row, start_row, 0]]
	consumed = 1
	while frames:
		frame = frames[-1]
		node_id, row, next_row, index = frame
		kids = children[node_id]
		if index < len(kids):
			frame[3] += 1
			child_id = kids[index]
			_place_element(by_id[child_id], next_row, base_x)
			frames.append([child_id, next_row, next_row, 0])
			continue
		frames.pop()
		consumed = max(next_row - row, 1)
		if frames:
			frames[-1][2] += consumed
	return consumed


def pack_element_tree(layout: GraphLayout) -> GraphLayout:
	"""Assign element nodes to rows so that no two subtrees overlap.

	A first child shares its parent's row; every later sibling starts below all
	rows taken by the siblings before it. Root subtrees follow one another.
	"""
	elements = [n for n in layout.nodes if n.kind == "element"]
	if not elements:
		return layout

	by_id: Dict[str, GraphNode] = {n.id: n for n in elements}
	children: Dict[str, List[str]] = {n.id: [] for n in elements}
	roots: List[str] = []
	for node in elements:
		parent_id = node.meta.get("parent_id")
		if parent_id in by_id and parent_id != node.id:
			children[parent_id].append(node.id)
		else:
			roots.append(node.id)

	row = 0
	for root_id in roots:
		row += _pack_subtree(root_id, row, by_id, children, layout.col_x.jsx)

	log.debug("packed %d elements from %d roots into %d rows", len(elements), len(roots), row)
	refresh_edge_endpoints(layout)
	return fit_canvas(layout)


def _same_statement(a: HookRecord, b: HookRecord) -> bool:
	return a.defined_at is not None and b.defined_at is not None and a.defined_at == b.defined_at


def _setter_partner(hook: HookRecord, rest: List[HookRecord]) -> Optional[HookRecord]:
	if hook.meta.pattern != "array" or hook.meta.position != 0:
		return None
	for other in rest:
		if other.meta.pattern == "array" and other.meta.position == 1 and _same_statement(hook, other):
			return other
	return None


def _place(node: GraphNode, x: float, row: int, slot: str) -> None:
	node.x = x
	node.y = STATE_BASE_Y + row * STATE_ROW_GAP_Y
	node.meta["slot"] = slot


def pair_state_nodes(layout: GraphLayout, facts: FactModel) -> GraphLayout:
	"""Lay state values and their setters side by side.

	Two hooks pair up when they are the first and second names of one array
	destructuring and share its source position. Unpaired names go to the
	right-hand sub-column when the component calls them, otherwise the left.
	"""
	nodes: Dict[str, GraphNode] = {}
	for node in layout.nodes:
		if node.kind == "state" and "hook_id" in node.meta:
			nodes[node.meta["hook_id"]] = node
	if not nodes:
		return layout

	hooks = [h for h in facts.hooks if h.id in nodes]
	called = set(facts.called_names)
	edge_ids = {e.id for e in layout.edges}
	left = layout.col_x.state - STATE_SUBCOLUMN_OFFSET
	right = layout.col_x.state + STATE_SUBCOLUMN_OFFSET

	taken: Set[str] = set()
	row = 0
	for i, hook in enumerate(hooks):
		if hook.id in taken:
			continue
		value_node = nodes[hook.id]
		partner = _setter_partner(hook, hooks[i + 1:])
		if partner is not None:
			setter_node = nodes[partner.id]
			taken.add(partner.id)
			_place(value_node, left, row, "value")
			_place(setter_node, right, row, "setter")
			link_id = f"link-{value_node.id}-{setter_node.id}"
			if link_id not in edge_ids:
				layout.edges.append(anchor_edge(link_id, value_node, setter_node, "link"))
				edge_ids.add(link_id)
		elif hook.name in called:
			_place(value_node, right, row, "function")
		else:
			_place(value_node, left, row, "value")
		row += 1

	refresh_edge_endpoints(layout)
	return fit_canvas(layout)
