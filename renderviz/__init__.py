"""Static render-flow analysis for a single UI component file.

Modules:
- parser.py: tree-sitter parsing and iterative tree walks.
- exports.py: export/primary-component resolution and the import table.
- hooks.py: hook classification and effect/callback body analysis.
- jsx_tree.py: flattened element tree with parent links.
- mapping.py: ``analyze`` entry point assembling the fact model.
- graph.py: ``build_layout`` turning a fact model into nodes and edges.
- layout.py: element-tree row packing and state/setter pairing.
- summarize.py: deterministic textual summary of a fact model.
"""

from .graph import build_layout
from .mapping import analyze

__all__ = [
	"analyze",
	"build_layout",
]
