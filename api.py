from __future__ import annotations

import hashlib
import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from renderviz.graph import build_layout
from renderviz.mapping import analyze as analyze_source
from renderviz.model import AnalyzeResult, LayoutResult
from renderviz.parser import encode_source
from renderviz.summarize import summarize_facts

log = logging.getLogger(__name__)

app = FastAPI(title="Render Flow Visualizer")

# Same source text -> same graph; the analyzer itself keeps no state.
layout_cache: Dict[str, LayoutResult] = {}


class AnalyzeRequest(BaseModel):
	source: str
	file_name: Optional[str] = None


def _cache_key(req: AnalyzeRequest) -> str:
	digest = hashlib.sha256()
	digest.update(encode_source(req.file_name or ""))
	digest.update(b"\0")
	digest.update(encode_source(req.source))
	return digest.hexdigest()


def _require_source(req: AnalyzeRequest) -> None:
	if not req.source.strip():
		raise HTTPException(status_code=400, detail="source must not be empty")


@app.post("/analyze", response_model=AnalyzeResult)
def analyze(req: AnalyzeRequest) -> AnalyzeResult:
	_require_source(req)
	facts = analyze_source(req.source, req.file_name)
	log.info("analyzed %s: component=%s errors=%d", facts.file_name or "<source>", facts.component_name, len(facts.errors))
	return AnalyzeResult(facts=facts, summaries=summarize_facts(facts))


@app.post("/layout", response_model=LayoutResult)
def layout(req: AnalyzeRequest) -> LayoutResult:
	_require_source(req)
	key = _cache_key(req)
	if key in layout_cache:
		return layout_cache[key]

	facts = analyze_source(req.source, req.file_name)
	result = LayoutResult(facts=facts, layout=build_layout(facts))
	layout_cache[key] = result
	log.info("laid out %s: %d nodes, %d edges", facts.file_name or "<source>", len(result.layout.nodes), len(result.layout.edges))
	return result


def create_app() -> FastAPI:
	return app
