"""
Utility script to generate and write the OpenAPI schema for the todo API.

Serializes the FastAPI app's OpenAPI schema so API clients and documentation
tools can consume a stable description without running the server.

Usage:
    python -m todo_api.generate_openapi [output-path]

The default output path is interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .main import app, openapi_tags

DEFAULT_OUTPUT = Path("interfaces") / "openapi.json"


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Add any tag from openapi_tags missing in the generated schema, leaving
    existing tag definitions untouched.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(output: Optional[Path] = None) -> Path:
    """Write the OpenAPI schema to output (creating parent directories) and return the path."""
    out_path = Path(output) if output is not None else DEFAULT_OUTPUT
    schema = app.openapi()
    _ensure_tags(schema)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    out_path = generate_openapi(Path(args[0]) if args else None)
    print(f"Wrote OpenAPI schema to: {out_path}")


if __name__ == "__main__":
    main()
