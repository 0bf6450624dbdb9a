from __future__ import annotations

import argparse
import json
import logging
import os

import uvicorn

from renderviz.graph import build_layout
from renderviz.mapping import analyze
from renderviz.summarize import summarize_facts


def cmd_analyze(args: argparse.Namespace) -> None:
	path = os.path.abspath(args.path)
	with open(path, "r", encoding="utf-8") as fh:
		text = fh.read()

	facts = analyze(text, os.path.basename(path))
	output = {"facts": facts.model_dump(), "summaries": summarize_facts(facts).model_dump()}
	if args.layout:
		output["layout"] = build_layout(facts).model_dump()
	print(json.dumps(output, indent=2))


def cmd_serve(args: argparse.Namespace) -> None:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)


def main() -> None:
	parser = argparse.ArgumentParser(prog="renderviz")
	parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Analyze a component file and print facts JSON")
	pa.add_argument("path", help="Path to a .tsx/.jsx/.ts/.js component file")
	pa.add_argument("--layout", action="store_true", help="Also print the graph layout")
	pa.set_defaults(func=cmd_analyze)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args()
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(asctime)s %(name)s %(levelname)s %(message)s",
	)
	if args.cmd == "analyze" and not os.path.isfile(args.path):
		parser.error(f"not a file: {args.path}")
	args.func(args)


if __name__ == "__main__":
	main()
