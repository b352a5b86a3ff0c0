#!/usr/bin/env python3
"""
Flowchart converter, command line tool

Converts between flowchart source text (.mmd) and the editor's graph JSON.

Usage:
    mermaid-flow parse diagram.mmd [-o diagram.graph.json]
    mermaid-flow generate diagram.graph.json [-o diagram.mmd] [--fenced] [--plain-arrows]
    mermaid-flow format diagram.mmd [-o diagram.mmd]
    mermaid-flow new [-o new.mmd] [--json]
    mermaid-flow show diagram.mmd|diagram.graph.json

Pass ``-`` as FILE to read from stdin.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from mermaid_flow.builders import default_graph
from mermaid_flow.config import Settings, load_env
from mermaid_flow.flow_ast import FlowGraph, from_json, summarize, to_json
from mermaid_flow.generator import generate_flowchart
from mermaid_flow.parser import parse_flowchart


def _read_input(name: str) -> Optional[str]:
    if name == '-':
        return sys.stdin.read()
    path = Path(name)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return None
    return path.read_text(encoding='utf-8')


def _write_output(text: str, output: Optional[str]) -> None:
    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + '\n', encoding='utf-8')
        print(f"Written to {out}", file=sys.stderr)
    else:
        print(text)


def _load_any(content: str) -> FlowGraph:
    """Graph JSON if the content is a JSON object, diagram text otherwise."""
    stripped = content.lstrip()
    if stripped.startswith('{'):
        try:
            return from_json(json.loads(stripped))
        except json.JSONDecodeError:
            pass
    return parse_flowchart(content)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mermaid-flow',
        description='Convert between flowchart text and editor graph JSON',
    )
    sub = parser.add_subparsers(dest='command')

    parse_cmd = sub.add_parser('parse', help='Flowchart text -> graph JSON')
    parse_cmd.add_argument('file', help='Input .mmd file, or - for stdin')
    parse_cmd.add_argument('--output', '-o', help='Output file (default: stdout)')

    gen_cmd = sub.add_parser('generate', help='Graph JSON -> flowchart text')
    gen_cmd.add_argument('file', help='Input .graph.json file, or - for stdin')
    gen_cmd.add_argument('--output', '-o', help='Output file (default: stdout)')
    gen_cmd.add_argument('--fenced', action='store_true', default=None,
                         help='Wrap output in a ```mermaid block')
    gen_cmd.add_argument('--plain-arrows', action='store_true',
                         help='Write every edge as --> (drop dotted/thick styling)')

    fmt_cmd = sub.add_parser('format', help='Normalise flowchart text')
    fmt_cmd.add_argument('file', help='Input .mmd file, or - for stdin')
    fmt_cmd.add_argument('--output', '-o', help='Output file (default: stdout)')

    new_cmd = sub.add_parser('new', help='Emit the Start -> Process -> End seed diagram')
    new_cmd.add_argument('--output', '-o', help='Output file (default: stdout)')
    new_cmd.add_argument('--json', action='store_true', help='Emit graph JSON instead of text')

    show_cmd = sub.add_parser('show', help='Summarise a diagram or graph JSON')
    show_cmd.add_argument('file', help='Input file, or - for stdin')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    settings = Settings.from_env()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    if args.command == 'new':
        graph = default_graph()
        if args.json:
            _write_output(json.dumps(to_json(graph), indent=2), args.output)
        else:
            _write_output(generate_flowchart(graph, fenced=settings.fenced_output), args.output)
        return 0

    content = _read_input(args.file)
    if content is None:
        return 1

    if args.command == 'parse':
        graph = parse_flowchart(content)
        _write_output(json.dumps(to_json(graph), indent=2), args.output)
    elif args.command == 'generate':
        try:
            graph = from_json(json.loads(content))
        except (json.JSONDecodeError, ValueError) as exc:
            print(f"Error: invalid graph JSON: {exc}", file=sys.stderr)
            return 1
        fenced = settings.fenced_output if args.fenced is None else args.fenced
        preserve = settings.preserve_edge_styles and not args.plain_arrows
        _write_output(generate_flowchart(graph, preserve_styles=preserve, fenced=fenced), args.output)
    elif args.command == 'format':
        graph = parse_flowchart(content)
        _write_output(generate_flowchart(graph, preserve_styles=settings.preserve_edge_styles), args.output)
    elif args.command == 'show':
        try:
            graph = _load_any(content)
        except ValueError as exc:
            print(f"Error: invalid graph JSON: {exc}", file=sys.stderr)
            return 1
        info = summarize(graph)
        print(f"{info['node_count']} nodes, {info['edge_count']} edges "
              f"({info['orphan_count']} orphan nodes), direction {info['direction']}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
