from __future__ import annotations

import os
from typing import Dict, List, Optional

from tree_sitter import Node

from .model import ExportInfo
from .parser import is_function, named_children, node_text, string_value


def _declared_function_names(decl: Node) -> List[str]:
	if decl.type == "function_declaration":
		name = decl.child_by_field_name("name")
		return [node_text(name)] if name is not None else []
	if decl.type in ("lexical_declaration", "variable_declaration"):
		names: List[str] = []
		for declarator in named_children(decl):
			if declarator.type != "variable_declarator":
				continue
			name = declarator.child_by_field_name("name")
			if name is not None and name.type == "identifier" and is_function(declarator.child_by_field_name("value")):
				names.append(node_text(name))
		return names
	return []


def _is_default_export(node: Node) -> bool:
	return any(child.type == "default" for child in node.children)


def collect_exports(root: Node) -> ExportInfo:
	default_export: Optional[str] = None
	named: List[str] = []

	for node in named_children(root):
		if node.type != "export_statement":
			continue
		decl = node.child_by_field_name("declaration")
		if _is_default_export(node):
			value = node.child_by_field_name("value")
			if value is not None and value.type == "identifier":
				default_export = node_text(value)
			elif is_function(value) and value.child_by_field_name("name") is not None:
				default_export = node_text(value.child_by_field_name("name"))
			elif decl is not None and decl.type == "function_declaration":
				names = _declared_function_names(decl)
				if names:
					default_export = names[0]
			continue
		if decl is not None:
			named.extend(_declared_function_names(decl))
		for clause in named_children(node):
			if clause.type != "export_clause":
				continue
			for specifier in named_children(clause):
				if specifier.type != "export_specifier":
					continue
				exported = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
				if exported is not None and exported.type == "identifier":
					named.append(node_text(exported))

	return ExportInfo(default_export=default_export, exported_components=named)


def pick_primary_component(info: ExportInfo, file_name: Optional[str] = None) -> Optional[str]:
	if info.default_export:
		return info.default_export
	if len(info.exported_components) == 1:
		return info.exported_components[0]
	if file_name:
		base = os.path.splitext(os.path.basename(file_name))[0]
		if base in info.exported_components:
			return base
	return info.exported_components[0] if info.exported_components else None


def collect_import_map(root: Node) -> Dict[str, str]:
	"""Map each locally bound import name to its module specifier."""
	imports: Dict[str, str] = {}
	for node in named_children(root):
		if node.type != "import_statement":
			continue
		source = node.child_by_field_name("source")
		if source is None:
			continue
		module = string_value(source)
		for clause in named_children(node):
			if clause.type != "import_clause":
				continue
			for part in named_children(clause):
				if part.type == "identifier":
					imports[node_text(part)] = module
				elif part.type == "namespace_import":
					for alias in named_children(part):
						if alias.type == "identifier":
							imports[node_text(alias)] = module
				elif part.type == "named_imports":
					for specifier in named_children(part):
						if specifier.type != "import_specifier":
							continue
						local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
						if local is not None:
							imports[node_text(local)] = module
	return imports
