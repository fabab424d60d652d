"""
Write the OpenAPI schema of the Task Manager app to interfaces/openapi.json.

Front-end clients generate their command/query bindings from this file, so it
is kept in the repository and regenerated whenever a route changes.

Usage:
    python -m task_manager.generate_openapi [output_path]
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from .logging_setup import setup_logging
from .main import app, openapi_tags
from .settings import get_settings

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """Add any tag from openapi_tags missing in the schema, keeping existing ones."""
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(output_path: Optional[str] = None) -> str:
    """
    Generate the OpenAPI schema and write it to `output_path`
    (default: interfaces/openapi.json under the current directory).

    Returns:
        The path written.
    """
    schema = app.openapi()
    _ensure_tags(schema)

    out_path = output_path or DEFAULT_OUTPUT
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main(argv: Optional[List[str]] = None) -> None:
    setup_logging(get_settings().log_level)
    args = sys.argv[1:] if argv is None else argv
    path = generate_openapi(args[0] if args else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
