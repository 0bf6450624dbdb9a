import json
from textwrap import dedent

import pytest
from pydantic import ValidationError

from renderviz.mapping import analyze


def test_counter_scenario():
	facts = analyze(
		dedent(
			"""
			import { useEffect, useState } from "react";

			export default function Counter() {
				const [count, setCount] = useState(0);
				useEffect(() => setCount(count + 1), [count]);
				return <div>{count}</div>;
			}
			"""
		),
		"Counter.tsx",
	)
	assert facts.errors == ()
	assert facts.component_name == "Counter"
	assert facts.meta.default_export == "Counter"
	assert [h.name for h in facts.hooks if h.kind == "local_state" and h.name == "count"] == ["count"]
	effect = facts.effects[0]
	assert [d.name for d in effect.dependencies] == ["count"]
	assert effect.setters == ("setCount",)
	assert [(e.component, e.props) for e in facts.elements] == [("div", ("count",))]


def test_malformed_markup_returns_single_error():
	facts = analyze(
		dedent(
			"""
			export default function Broken() {
				return (
					<div>
				);
			}
			"""
		)
	)
	assert len(facts.errors) == 1
	assert facts.errors[0].startswith("Failed to parse source")
	assert facts.component_name is None
	assert facts.hooks == ()
	assert facts.effects == ()
	assert facts.callbacks == ()
	assert facts.elements == ()
	assert facts.called_names == ()


def test_no_exports_yields_empty_model():
	facts = analyze("const x = 1;\nfunction helper() { return x; }\n")
	assert facts.errors == ()
	assert facts.component_name is None
	assert facts.hooks == ()
	assert facts.elements == ()


def test_only_primary_component_is_analyzed():
	facts = analyze(
		dedent(
			"""
			import { useState } from "react";

			function Helper() {
				const [hidden, setHidden] = useState(false);
				return <aside />;
			}

			export const Card = ({ title }) => {
				const [open, setOpen] = useState(false);
				return <section><h2>{title}</h2><Helper /></section>;
			};
			"""
		),
		"Card.tsx",
	)
	assert facts.component_name == "Card"
	assert [h.name for h in facts.hooks] == ["open", "setOpen"]
	assert [e.component for e in facts.elements] == ["section", "h2", "Helper"]
	assert facts.props == ("title",)


def test_file_name_hint_selects_component():
	source = dedent(
		"""
		export function List() { return <ul />; }
		export function Item() { return <li />; }
		"""
	)
	assert analyze(source, "src/Item.tsx").component_name == "Item"
	assert analyze(source).component_name == "List"


def test_fact_model_is_frozen_and_serializable():
	facts = analyze("export default function A() { return <div />; }\n", "A.tsx")
	with pytest.raises(ValidationError):
		facts.component_name = "B"
	data = json.loads(facts.model_dump_json())
	assert data["elements"][0]["component"] == "div"
	assert data["file_name"] == "A.tsx"


def test_nested_records_cannot_be_changed():
	facts = analyze(
		dedent(
			"""
			import { useState } from "react";
			export default function A() {
				const [on, setOn] = useState(false);
				return <div>{on}</div>;
			}
			"""
		)
	)
	assert isinstance(facts.hooks, tuple)
	assert isinstance(facts.elements[0].props, tuple)
	with pytest.raises(ValidationError):
		facts.hooks[0].name = "off"
	with pytest.raises(ValidationError):
		facts.hooks[0].meta.position = 3
	with pytest.raises(AttributeError):
		facts.elements.append(facts.elements[0])


def test_lone_surrogate_does_not_escape():
	facts = analyze('export default function A() { return <div title="\ud800" />; }', "A\ud800.tsx")
	assert facts.errors == ()
	assert facts.component_name == "A"
	assert [e.component for e in facts.elements] == ["div"]
	assert "\ud800" not in facts.source
	assert facts.file_name == "A?.tsx"
	json.loads(facts.model_dump_json())


def test_props_come_from_destructured_first_parameter():
	source = dedent(
		"""
		export function Card({ title, subtitle: sub, onClose = () => {}, ...rest }, ref) {
			return <div />;
		}
		"""
	)
	assert analyze(source).props == ("title", "sub", "onClose")
	assert analyze("export default function A(props) { return <div />; }").props == ()
	assert analyze("export const B = (props) => <div />;").props == ()


def test_plain_declarations_become_variables():
	facts = analyze(
		dedent(
			"""
			import { useState } from "react";
			export default function Counter({ step }) {
				const [count, setCount] = useState(0);
				const next = count + step;
				const label = `n=${next}`;
				const total = items.reduce((a, b) => a + b, 0);
				const onClick = () => setCount(next);
				let pending;
				return <span onClick={onClick}>{label}</span>;
			}
			"""
		)
	)
	variables = {v.name: v.dependencies for v in facts.variables}
	assert list(variables) == ["next", "label", "total", "pending"]
	assert variables["next"] == ("count", "step")
	assert variables["label"] == ("next",)
	assert variables["total"][:1] == ("items",)
	assert variables["pending"] == ()
	assert [v.id for v in facts.variables] == ["var-1", "var-2", "var-3", "var-4"]
	assert [h.name for h in facts.hooks] == ["count", "setCount"]
