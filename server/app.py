"""
FastAPI application exposing the flowchart converter to the desktop editor.

The editor front end sends diagram text or an edited graph and gets the
other representation back; it also asks here for fresh node/edge ids and
the seed graph for a new flowchart block.
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from mermaid_flow.builders import SHAPE_LABELS, IdSource, create_edge, create_node, default_graph
from mermaid_flow.config import Settings, load_env
from mermaid_flow.flow_ast import edge_to_json, from_json, node_to_json, summarize, to_json
from mermaid_flow.generator import generate_flowchart
from mermaid_flow.parser import parse_flowchart
from mermaid_flow.shapes import SHAPE_SYNTAX

env_path = load_env()
settings = Settings.from_env()
ids = IdSource()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if env_path:
        print(f"[app] Loaded settings from {env_path}", file=sys.stderr)
    print(
        f"[app] Flowchart service ready (preserve_edge_styles={settings.preserve_edge_styles})",
        file=sys.stderr,
    )
    yield
    print("[app] Shutdown complete", file=sys.stderr)


app = FastAPI(title="Flowchart Converter", lifespan=lifespan)


# ──────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────

async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="request body must be a JSON object")
    return body


def _source_code(body: dict) -> str:
    code = body.get("code")
    if not isinstance(code, str):
        raise HTTPException(status_code=400, detail="code is required")
    if len(code) > settings.max_source_chars:
        raise HTTPException(
            status_code=413,
            detail=f"code exceeds {settings.max_source_chars} characters",
        )
    return code


def _flag(body: dict, name: str, default: bool) -> bool:
    value = body.get(name)
    return default if value is None else bool(value)


# ──────────────────────────────────────────────────────────────────
# REST API: Conversion
# ──────────────────────────────────────────────────────────────────

@app.get("/api/health")
async def health():
    return JSONResponse(content={"ok": True})


@app.post("/api/flowchart/parse")
async def parse(request: Request):
    body = await _json_body(request)
    graph = parse_flowchart(_source_code(body))
    return JSONResponse(content=to_json(graph))


@app.post("/api/flowchart/generate")
async def generate(request: Request):
    body = await _json_body(request)
    payload = body.get("graph")
    if payload is None:
        raise HTTPException(status_code=400, detail="graph is required")
    try:
        graph = from_json(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    code = generate_flowchart(
        graph,
        preserve_styles=_flag(body, "preserve_styles", settings.preserve_edge_styles),
        fenced=_flag(body, "fenced", settings.fenced_output),
    )
    return JSONResponse(content={"code": code, **summarize(graph)})


@app.post("/api/flowchart/normalize")
async def normalize(request: Request):
    """Parse then regenerate, so the editor can show canonical text."""
    body = await _json_body(request)
    graph = parse_flowchart(_source_code(body))
    code = generate_flowchart(graph, preserve_styles=settings.preserve_edge_styles)
    return JSONResponse(content={"code": code, "graph": to_json(graph)})


# ──────────────────────────────────────────────────────────────────
# REST API: Builders
# ──────────────────────────────────────────────────────────────────

@app.get("/api/flowchart/default")
async def default():
    return JSONResponse(content=to_json(default_graph()))


@app.post("/api/flowchart/nodes")
async def new_node(request: Request):
    body = await _json_body(request)
    shape = body.get("shape", "rectangle")
    if not isinstance(shape, str) or shape not in SHAPE_SYNTAX:
        raise HTTPException(
            status_code=400,
            detail=f"shape must be one of {', '.join(SHAPE_SYNTAX)}",
        )
    position = body.get("position") or {}
    try:
        x, y = float(position.get("x", 0)), float(position.get("y", 0))
    except (AttributeError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="position must be {x, y}")
    label = str(body.get("label") or SHAPE_LABELS[shape])
    node = create_node((x, y), shape=shape, label=label, ids=ids)
    return JSONResponse(content=node_to_json(node), status_code=201)


@app.post("/api/flowchart/edges")
async def new_edge(request: Request):
    body = await _json_body(request)
    source, target = body.get("source"), body.get("target")
    if not source or not target:
        raise HTTPException(status_code=400, detail="source and target are required")
    edge = create_edge(str(source), str(target), label=body.get("label"), ids=ids)
    return JSONResponse(content=edge_to_json(edge), status_code=201)


# ──────────────────────────────────────────────────────────────────
# Entrypoint
# ──────────────────────────────────────────────────────────────────

def main() -> None:
    import uvicorn
    uvicorn.run("server.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
