from textwrap import dedent
from typing import Dict, List, Optional

from renderviz.mapping import analyze


def _elements(code: str):
	return analyze(dedent(code), "View.tsx").elements


def test_depth_and_parent_follow_nesting():
	elements = _elements(
		"""
		export default function View() {
			return (
				<main>
					<header>
						<h1>Title</h1>
					</header>
					<section />
				</main>
			);
		}
		"""
	)
	assert [(e.id, e.component, e.depth, e.parent_id) for e in elements] == [
		("jsx-1", "main", 0, None),
		("jsx-2", "header", 1, "jsx-1"),
		("jsx-3", "h1", 2, "jsx-2"),
		("jsx-4", "section", 1, "jsx-1"),
	]


def test_parent_ids_precede_children_and_rebuild_nesting():
	elements = _elements(
		"""
		export default function View() {
			return (
				<ul>
					<li><a><b /></a></li>
					<li><i /></li>
				</ul>
			);
		}
		"""
	)
	seen = set()
	children: Dict[Optional[str], List[str]] = {}
	for e in elements:
		if e.parent_id is not None:
			assert e.parent_id in seen
		seen.add(e.id)
		children.setdefault(e.parent_id, []).append(e.id)

	by_id = {e.id: e.component for e in elements}

	def rebuild(node_id):
		return (by_id[node_id], [rebuild(c) for c in children.get(node_id, [])])

	trees = [rebuild(root) for root in children[None]]
	assert trees == [("ul", [("li", [("a", [("b", [])])]), ("li", [("i", [])])])]


def test_element_names_for_member_and_namespace_tags():
	elements = _elements(
		"""
		export default function View() {
			return (
				<Layout.Sidebar.Item>
					<svg:rect />
				</Layout.Sidebar.Item>
			);
		}
		"""
	)
	assert [e.component for e in elements] == ["Layout.Sidebar.Item", "svg:rect"]


def test_bound_identifiers_and_ref_attachments():
	elements = _elements(
		"""
		import { useRef } from "react";
		export default function View({ label }) {
			const menuRef = useRef(null);
			const wrapperRef = useRef(null);
			return <Menu anchor={wrapperRef.current} ref={menuRef} title="x" onClose={() => close()} />;
		}
		"""
	)
	assert len(elements) == 1
	menu = elements[0]
	assert menu.props == ("wrapperRef", "menuRef")
	assert menu.ref_props == ("menuRef",)


def test_child_expressions_count_as_bound_identifiers():
	elements = _elements(
		"""
		export default function View({ count, user }) {
			return <p>{count} by {user.name} {count + 1}</p>;
		}
		"""
	)
	assert elements[0].props == ("count", "user")
	assert elements[0].ref_props == ()


def test_fragments_are_transparent():
	elements = _elements(
		"""
		export const View = () => (
			<>
				<A />
				<B><C /></B>
			</>
		);
		"""
	)
	assert [(e.component, e.depth, e.parent_id) for e in elements] == [
		("A", 0, None),
		("B", 0, None),
		("C", 1, "jsx-2"),
	]


def test_markup_inside_attributes_is_nested():
	elements = _elements(
		"""
		export default function View() {
			return <Button icon={<Icon />}>Go</Button>;
		}
		"""
	)
	assert [(e.component, e.parent_id) for e in elements] == [("Button", None), ("Icon", "jsx-1")]
