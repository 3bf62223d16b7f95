"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

Usage:
    python -m src.api.generate_openapi

Writes interfaces/openapi.json next to the src/ directory, making sure the
'health' and 'posts' tag metadata is present.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from .main import create_app, openapi_tags


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Add any tag from openapi_tags missing in the schema; existing entries are kept.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


def _default_path() -> str:
    # <container_root>/interfaces/openapi.json, where src/ lives in <container_root>
    src_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(os.path.dirname(src_dir), "interfaces", "openapi.json")


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the app's OpenAPI schema as JSON and return the written file path."""
    schema = create_app().openapi()
    _ensure_tags(schema)

    path = out_path or _default_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return path


def main() -> None:
    path = generate_openapi()
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
