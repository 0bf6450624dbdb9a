"""Hook classification and effect/callback body analysis.

Everything here is a name-convention heuristic over the syntax tree. A call is
classified by its callee name and, where that is ambiguous, by the module the
name was imported from. Nothing is resolved across files and nothing is
executed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from .model import CallbackRecord, EffectDependency, EffectRecord, HookKind, HookMeta, HookRecord, VariableRecord
from .parser import ASSIGNMENT_TYPES, is_function, named_children, node_text, position_of, walk

log = logging.getLogger(__name__)


FRAMEWORK_HOOKS: Dict[str, HookKind] = {
	"useState": "local_state",
	"useRef": "ref",
	"useReducer": "reducer",
	"useEffect": "effect",
	"useLayoutEffect": "layout_effect",
	"useCallback": "memoized_callback",
	"useMemo": "memoized_value",
}

STORE_PREFIX = "use"
STORE_SUFFIX = "Store"
STORE_MARKERS = ("zustand",)
QUERY_MARKERS = ("reactQuery", "@tanstack/react-query")
QUERY_WORDS = ("mutation", "query")

GLOBAL_KINDS = {"external_store", "async_query"}
EFFECT_KINDS = {"effect", "layout_effect"}

SETTER_PATTERN = re.compile(r"^set[A-Z]")
MUTATE_METHODS = {"mutate", "mutateAsync"}
REF_SUFFIX = "Ref"
NETWORK_CALLEES = {"fetch", "axios"}
IDENTIFIER_TYPES = {"identifier", "shorthand_property_identifier"}


def _framework_rule(name: str, source: Optional[str]) -> Optional[HookKind]:
	return FRAMEWORK_HOOKS.get(name)


def _store_rule(name: str, source: Optional[str]) -> Optional[HookKind]:
	if not source or not any(marker in source for marker in STORE_MARKERS):
		return None
	if name.startswith(STORE_PREFIX) and name.endswith(STORE_SUFFIX):
		return "external_store"
	return None


def _query_rule(name: str, source: Optional[str]) -> Optional[HookKind]:
	if not source or not any(marker in source for marker in QUERY_MARKERS):
		return None
	lower = name.lower()
	if any(word in lower for word in QUERY_WORDS):
		return "async_query"
	return None


# First match wins.
CLASSIFICATION_RULES: Tuple[Callable[[str, Optional[str]], Optional[HookKind]], ...] = (
	_framework_rule,
	_store_rule,
	_query_rule,
)


def classify_hook(callee: str, import_source: Optional[str] = None) -> HookKind:
	for rule in CLASSIFICATION_RULES:
		kind = rule(callee, import_source)
		if kind is not None:
			return kind
	return "unclassified"


def binding_names(pattern: Optional[Node]) -> List[Tuple[str, str, int]]:
	"""Names bound by a declarator's left side as ``(name, pattern, index)``.

	``index`` is the element position inside an array pattern and 0 otherwise.
	Object patterns yield the local binding name, not the source key.
	"""
	if pattern is None:
		return []
	if pattern.type == "identifier":
		return [(node_text(pattern), "identifier", 0)]
	names: List[Tuple[str, str, int]] = []
	if pattern.type == "array_pattern":
		index = 0
		for child in pattern.children:
			if child.type == ",":
				index += 1
			elif child.type == "identifier":
				names.append((node_text(child), "array", index))
	elif pattern.type == "object_pattern":
		for prop in named_children(pattern):
			if prop.type == "shorthand_property_identifier_pattern":
				names.append((node_text(prop), "object", 0))
			elif prop.type == "object_assignment_pattern":
				left = prop.child_by_field_name("left")
				if left is not None and left.type in ("shorthand_property_identifier_pattern", "identifier"):
					names.append((node_text(left), "object", 0))
			elif prop.type == "pair_pattern":
				value = prop.child_by_field_name("value")
				if value is not None and value.type == "identifier":
					names.append((node_text(value), "object", 0))
	return names


def _unique(items: List[str]) -> List[str]:
	return list(dict.fromkeys(items))


def _call_arguments(call: Node) -> List[Node]:
	args = call.child_by_field_name("arguments")
	if args is None or args.type != "arguments":
		return []
	return named_children(args)


def _dependency_names(node: Optional[Node]) -> List[str]:
	if node is None or node.type != "array":
		return []
	return [node_text(el) for el in named_children(node) if el.type == "identifier"]


@dataclass
class BodyScan:
	setters: List[str] = field(default_factory=list)
	ref_reads: List[str] = field(default_factory=list)
	ref_writes: List[str] = field(default_factory=list)
	external_calls: List[str] = field(default_factory=list)


def _scan_call(call: Node, scan: BodyScan) -> None:
	callee = call.child_by_field_name("function")
	if callee is None:
		return
	if callee.type == "identifier":
		name = node_text(callee)
		if SETTER_PATTERN.match(name):
			scan.setters.append(name)
		if name in NETWORK_CALLEES:
			scan.external_calls.append(name)
	elif callee.type == "member_expression":
		obj = callee.child_by_field_name("object")
		prop = callee.child_by_field_name("property")
		if obj is None or prop is None or obj.type != "identifier":
			return
		obj_name, method = node_text(obj), node_text(prop)
		if method in MUTATE_METHODS:
			scan.setters.append(f"{obj_name}.{method}")
		if obj_name in NETWORK_CALLEES:
			scan.external_calls.append(f"{obj_name}.{method}")


def _scan_ref_access(member: Node, scan: BodyScan) -> None:
	obj = member.child_by_field_name("object")
	if obj is None or obj.type != "identifier":
		return
	name = node_text(obj)
	if not name.endswith(REF_SUFFIX):
		return
	parent = member.parent
	if parent is not None and parent.type in ASSIGNMENT_TYPES and parent.child_by_field_name("left") == member:
		scan.ref_writes.append(name)
	else:
		scan.ref_reads.append(name)


def scan_function_body(fn: Optional[Node], track_refs: bool = True) -> BodyScan:
	scan = BodyScan()
	if not is_function(fn):
		return scan
	body = fn.child_by_field_name("body")
	if body is None:
		return scan
	# The body node itself is included so expression bodies count too.
	for node in walk(body):
		if node.type == "call_expression":
			_scan_call(node, scan)
		elif track_refs and node.type == "member_expression":
			_scan_ref_access(node, scan)
	return BodyScan(
		setters=_unique(scan.setters),
		ref_reads=_unique(scan.ref_reads),
		ref_writes=_unique(scan.ref_writes),
		external_calls=_unique(scan.external_calls),
	)


def analyze_effect_call(call: Node, effect_id: str, kind: HookKind, global_names: Set[str]) -> EffectRecord:
	args = _call_arguments(call)
	callback = args[0] if args else None
	deps = args[1] if len(args) > 1 else None

	scan = scan_function_body(callback)
	return EffectRecord(
		id=effect_id,
		kind=kind,
		dependencies=[EffectDependency(name=name, is_global=name in global_names) for name in _dependency_names(deps)],
		setters=scan.setters,
		ref_reads=scan.ref_reads,
		ref_writes=scan.ref_writes,
		external_calls=scan.external_calls,
		defined_at=position_of(call),
	)


def _bound_name(call: Node) -> Optional[str]:
	parent = call.parent
	if parent is None or parent.type != "variable_declarator":
		return None
	if parent.child_by_field_name("value") != call:
		return None
	name = parent.child_by_field_name("name")
	if name is None or name.type != "identifier":
		return None
	return node_text(name)


def analyze_callback_call(call: Node, callback_id: str) -> CallbackRecord:
	args = _call_arguments(call)
	callback = args[0] if args else None
	deps = args[1] if len(args) > 1 else None

	scan = scan_function_body(callback, track_refs=False)
	return CallbackRecord(
		id=callback_id,
		name=_bound_name(call),
		dependencies=_unique(_dependency_names(deps)),
		setters=scan.setters,
		external_calls=scan.external_calls,
		defined_at=position_of(call),
	)


@dataclass
class AnalysisContext:
	"""Accumulators threaded through one walk of a component body."""

	import_map: Dict[str, str]
	hooks: List[HookRecord] = field(default_factory=list)
	effects: List[EffectRecord] = field(default_factory=list)
	callbacks: List[CallbackRecord] = field(default_factory=list)
	variables: List[VariableRecord] = field(default_factory=list)
	global_names: Set[str] = field(default_factory=set)
	called_names: Dict[str, None] = field(default_factory=dict)


def initializer_names(value: Optional[Node], exclude: Optional[str] = None) -> List[str]:
	"""Identifiers an initializer reads, in first-seen order."""
	if value is None:
		return []
	names = [node_text(n) for n in walk(value) if n.type in IDENTIFIER_TYPES]
	return _unique([name for name in names if name != exclude])


def _record_variable(declarator: Node, value: Optional[Node], ctx: AnalysisContext) -> None:
	name = declarator.child_by_field_name("name")
	if name is None or name.type != "identifier":
		return
	own = node_text(name)
	ctx.variables.append(
		VariableRecord(
			id=f"var-{len(ctx.variables) + 1}",
			name=own,
			dependencies=initializer_names(value, exclude=own),
			defined_at=position_of(declarator),
		)
	)


def _classify_declarator(declarator: Node, ctx: AnalysisContext) -> None:
	value = declarator.child_by_field_name("value")
	# Handlers and other local functions are neither hooks nor values.
	if is_function(value):
		return
	callee = value.child_by_field_name("function") if value is not None and value.type == "call_expression" else None
	if callee is None or callee.type != "identifier":
		_record_variable(declarator, value, ctx)
		return

	callee_name = node_text(callee)
	source = ctx.import_map.get(callee_name)
	kind = classify_hook(callee_name, source)
	scope = "global" if kind in GLOBAL_KINDS else "local"
	where = position_of(value)

	for name, pattern, index in binding_names(declarator.child_by_field_name("name")):
		ctx.hooks.append(
			HookRecord(
				id=f"hook-{len(ctx.hooks) + 1}",
				name=name,
				kind=kind,
				scope=scope,
				defined_at=where,
				meta=HookMeta(import_source=source, callee=callee_name, pattern=pattern, position=index),
			)
		)
		if scope == "global":
			ctx.global_names.add(name)


def _inspect_call(call: Node, ctx: AnalysisContext) -> None:
	callee = call.child_by_field_name("function")
	if callee is None or callee.type != "identifier":
		return
	name = node_text(callee)
	ctx.called_names[name] = None

	kind = classify_hook(name, ctx.import_map.get(name))
	if kind in EFFECT_KINDS:
		ctx.effects.append(analyze_effect_call(call, f"effect-{len(ctx.effects) + 1}", kind, ctx.global_names))
	elif kind == "memoized_callback":
		ctx.callbacks.append(analyze_callback_call(call, f"callback-{len(ctx.callbacks) + 1}"))


def collect_declarations(body: Node, ctx: AnalysisContext) -> AnalysisContext:
	"""Classify declarations and analyze effects/callbacks in one pass.

	A declarator is always visited before its initializer call, so names a
	store hook binds are already global when a later effect lists them.
	"""
	for node in walk(body):
		if node.type == "variable_declarator":
			_classify_declarator(node, ctx)
		elif node.type == "call_expression":
			_inspect_call(node, ctx)
	log.debug(
		"collected %d hooks, %d effects, %d callbacks, %d variables",
		len(ctx.hooks),
		len(ctx.effects),
		len(ctx.callbacks),
		len(ctx.variables),
	)
	return ctx
