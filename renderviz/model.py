from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict


HookKind = Literal[
	"local_state",
	"ref",
	"reducer",
	"effect",
	"layout_effect",
	"memoized_callback",
	"memoized_value",
	"external_store",
	"async_query",
	"unclassified",
]
Scope = Literal["local", "global", "external"]
EffectKind = Literal["effect", "layout_effect"]
BindingPattern = Literal["identifier", "array", "object"]

NodeKind = Literal["independent", "prop", "state", "variable", "side_effect", "element", "external"]
EdgeKind = Literal["flow", "dependency", "mutation", "link", "external"]


class FactRecord(BaseModel):
	"""Base for everything reachable from a ``FactModel``.

	Frozen, with tuples instead of lists, so a finished analysis cannot be
	changed in place.
	"""

	model_config = ConfigDict(frozen=True)


class Position(FactRecord):
	line: int
	column: int


class HookMeta(FactRecord):
	import_source: Optional[str] = None
	callee: Optional[str] = None
	pattern: BindingPattern = "identifier"
	# index inside an array pattern
	position: int = 0


class HookRecord(FactRecord):
	id: str
	name: str
	kind: HookKind
	scope: Scope = "local"
	defined_at: Optional[Position] = None
	meta: HookMeta = HookMeta()


class EffectDependency(FactRecord):
	name: str
	is_global: bool = False


class EffectRecord(FactRecord):
	id: str
	kind: EffectKind
	dependencies: Tuple[EffectDependency, ...] = ()
	setters: Tuple[str, ...] = ()
	ref_reads: Tuple[str, ...] = ()
	ref_writes: Tuple[str, ...] = ()
	external_calls: Tuple[str, ...] = ()
	defined_at: Optional[Position] = None


class CallbackRecord(FactRecord):
	id: str
	name: Optional[str] = None
	dependencies: Tuple[str, ...] = ()
	setters: Tuple[str, ...] = ()
	external_calls: Tuple[str, ...] = ()
	defined_at: Optional[Position] = None


class VariableRecord(FactRecord):
	"""A plain ``const``/``let`` inside the component that is not a hook call."""

	id: str
	name: str
	dependencies: Tuple[str, ...] = ()
	defined_at: Optional[Position] = None


class ElementNode(FactRecord):
	id: str
	component: str
	depth: int
	parent_id: Optional[str] = None
	props: Tuple[str, ...] = ()
	ref_props: Tuple[str, ...] = ()
	defined_at: Optional[Position] = None


class ExportInfo(FactRecord):
	default_export: Optional[str] = None
	exported_components: Tuple[str, ...] = ()


class FactModel(FactRecord):
	source: str
	file_name: Optional[str] = None
	component_name: Optional[str] = None
	props: Tuple[str, ...] = ()
	hooks: Tuple[HookRecord, ...] = ()
	effects: Tuple[EffectRecord, ...] = ()
	callbacks: Tuple[CallbackRecord, ...] = ()
	variables: Tuple[VariableRecord, ...] = ()
	elements: Tuple[ElementNode, ...] = ()
	meta: ExportInfo = ExportInfo()
	errors: Tuple[str, ...] = ()
	called_names: Tuple[str, ...] = ()


class Summaries(BaseModel):
	global_overview: str
	per_kind: Dict[str, str]
	per_effect: Dict[str, str]


class ColumnX(BaseModel):
	independent: float
	state: float
	variable: float
	effect: float
	jsx: float


class GraphNode(BaseModel):
	id: str
	label: str
	kind: NodeKind
	x: float
	y: float
	width: float = 120
	height: float = 32
	meta: Dict[str, Any] = {}


class EdgeEndpoint(BaseModel):
	node_id: str
	x: float
	y: float


class GraphEdge(BaseModel):
	id: str
	source: EdgeEndpoint
	target: EdgeEndpoint
	kind: EdgeKind
	label: Optional[str] = None


class GraphLayout(BaseModel):
	nodes: List[GraphNode] = []
	edges: List[GraphEdge] = []
	width: float
	height: float
	col_x: ColumnX


class AnalyzeResult(BaseModel):
	facts: FactModel
	summaries: Summaries


class LayoutResult(BaseModel):
	facts: FactModel
	layout: GraphLayout
