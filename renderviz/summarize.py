from __future__ import annotations

from typing import Dict, List

from .model import CallbackRecord, EffectRecord, FactModel, Summaries


def summarize_effect(record: EffectRecord) -> str:
	parts: List[str] = [f"{record.kind} {record.id}"]
	if record.dependencies:
		parts.append(f"  Depends on: {', '.join(d.name for d in record.dependencies)}")
	if record.setters:
		parts.append(f"  Sets: {', '.join(record.setters)}")
	if record.ref_writes:
		parts.append(f"  Writes refs: {', '.join(record.ref_writes)}")
	if record.external_calls:
		parts.append(f"  Calls out: {', '.join(record.external_calls)}")
	return "\n".join(parts)


def summarize_callback(record: CallbackRecord) -> str:
	parts: List[str] = [f"callback {record.name or record.id}"]
	if record.dependencies:
		parts.append(f"  Depends on: {', '.join(record.dependencies)}")
	if record.setters:
		parts.append(f"  Sets: {', '.join(record.setters)}")
	return "\n".join(parts)


def summarize_facts(facts: FactModel) -> Summaries:
	names_by_kind: Dict[str, List[str]] = {}
	for hook in facts.hooks:
		names_by_kind.setdefault(hook.kind, []).append(hook.name)
	per_kind = {kind: f"{kind}: {', '.join(names)}" for kind, names in names_by_kind.items()}
	if facts.variables:
		per_kind["variable"] = f"variable: {', '.join(v.name for v in facts.variables)}"
	if facts.props:
		per_kind["prop"] = f"prop: {', '.join(facts.props)}"

	per_effect: Dict[str, str] = {}
	for effect in facts.effects:
		per_effect[effect.id] = summarize_effect(effect)
	for cb in facts.callbacks:
		per_effect[cb.id] = summarize_callback(cb)

	if facts.errors:
		global_overview = f"Analysis failed: {'; '.join(facts.errors)}"
	else:
		global_overview = (
			f"Component {facts.component_name or '<none>'}: {len(facts.hooks)} hooks, "
			f"{len(facts.effects)} effects, {len(facts.callbacks)} callbacks, "
			f"{len(facts.variables)} variables, {len(facts.elements)} elements"
		)

	return Summaries(
		global_overview=global_overview,
		per_kind=per_kind,
		per_effect=per_effect,
	)
