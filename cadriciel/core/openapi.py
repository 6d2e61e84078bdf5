"""
API Documentation
OpenAPI document built from the registered routes plus `@openapi`
annotations found in source files, served through Swagger UI.

An annotation is a JSON object following a line that starts with the
`@openapi` tag, at the end of a module, class or function docstring. Keys
starting with `/` are path items; `components`, `tags`, `servers`,
`security` and `externalDocs` are merged at the root of the document.
"""

import ast
import json
import re
import textwrap
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from fastapi import APIRouter, FastAPI
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from fastapi.responses import HTMLResponse
from starlette.routing import BaseRoute, Mount

from cadriciel.core.config import Settings
from cadriciel.core.logging import get_logger

logger = get_logger(__name__)

ANNOTATION_TAG = re.compile(r"^[ \t]*@openapi\b", re.MULTILINE)
ROOT_KEYS = {"components", "tags", "servers", "security", "externalDocs"}

_DOCUMENTED_NODES = (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)


def _docstrings(tree: ast.AST) -> Iterator[str]:
    for node in ast.walk(tree):
        if isinstance(node, _DOCUMENTED_NODES):
            docstring = ast.get_docstring(node, clean=True)
            if docstring:
                yield docstring


def _annotation(docstring: str) -> Optional[str]:
    """Text following the tag, or None"""
    match = ANNOTATION_TAG.search(docstring)
    if match is None:
        return None
    return textwrap.dedent(docstring[match.end():]).strip()


def parse_annotation(text: str) -> Dict[str, Any]:
    """
    Turn an annotation into a document fragment

    Raises:
        ValueError: the annotation is not a JSON object
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("annotation must be a JSON object")

    fragment: Dict[str, Any] = {}
    for key, value in data.items():
        if key.startswith("/"):
            fragment.setdefault("paths", {})[key] = value
        elif key in ROOT_KEYS or key == "paths":
            fragment[key] = value
        else:
            raise ValueError(f"unsupported annotation key: {key}")
    return fragment


def scan_annotations(pattern: str, base_dir: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Collect document fragments from the files matching `pattern`

    Args:
        pattern: glob evaluated from `base_dir` (`**` recurses)
        base_dir: root of the scan

    Returns:
        list: fragments in file order
    """
    fragments = []
    for path in sorted(Path(base_dir).glob(pattern)):
        if not path.is_file():
            continue
        try:
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        except (SyntaxError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("Skipping unparsable source file", path=str(path), error=str(exc))
            continue

        for docstring in _docstrings(tree):
            text = _annotation(docstring)
            if text is None:
                continue
            try:
                fragments.append(parse_annotation(text))
            except ValueError as exc:
                # json.JSONDecodeError is a ValueError
                logger.warning("Skipping malformed annotation", path=str(path), error=str(exc))
    return fragments


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """Merge `source` into `target`: dicts recursively, lists appended"""
    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            current.extend(item for item in value if item not in current)
        else:
            target[key] = value
    return target


def documented_routes(app: FastAPI) -> List[BaseRoute]:
    """Routes of `app`, with mounted API routers listed under their mount path"""
    routes: List[BaseRoute] = []
    for route in app.routes:
        if isinstance(route, Mount) and isinstance(route.app, APIRouter):
            expanded = APIRouter()
            expanded.include_router(route.app, prefix=route.path)
            routes.extend(expanded.routes)
        else:
            routes.append(route)
    return routes


def build_openapi(app: FastAPI, settings: Settings) -> Dict[str, Any]:
    """
    Generate (once) the OpenAPI document of `app`
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=settings.app_title,
        version=settings.app_version,
        openapi_version=settings.openapi_version,
        routes=documented_routes(app),
    )

    fragments = scan_annotations(settings.docs_apis, settings.docs_base_dir)
    for fragment in fragments:
        deep_merge(openapi_schema, fragment)
    logger.debug("OpenAPI document generated", annotations=len(fragments))

    app.openapi_schema = openapi_schema
    return app.openapi_schema


def mount_docs(app: FastAPI, settings: Settings) -> None:
    """
    Serve Swagger UI at `settings.docs_url`

    The document itself is served at `settings.docs_openapi_url` by FastAPI.
    """
    app.openapi = lambda: build_openapi(app, settings)

    async def swagger_ui() -> HTMLResponse:
        return get_swagger_ui_html(
            openapi_url=settings.docs_openapi_url,
            title=f"{settings.app_title} - Swagger UI",
        )

    app.add_api_route(
        settings.docs_url,
        swagger_ui,
        methods=["GET", "POST"],
        include_in_schema=False,
    )
