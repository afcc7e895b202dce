"""
Utility script to generate and write the OpenAPI schema of the todo procedures.

This script imports the FastAPI application instance and serializes its OpenAPI
schema to interfaces/openapi.json so that clients and documentation tools can
consume the procedure surface without running the server.

Usage:
    python -m dashlist.generate_openapi [output_path]

Notes:
- The script ensures the 'todo' tag is present in the OpenAPI tags metadata.
- The default output path is interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

# Reuse the same app configuration, routes, and tags
from .main import app, openapi_tags

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the expected tags metadata. Existing
    tag definitions are kept; missing ones are appended.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema file and return the written file path."""
    schema = app.openapi()
    _ensure_tags(schema)

    path = out_path or DEFAULT_OUTPUT
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to: %s", path)
    return path


def main() -> None:
    generate_openapi(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
