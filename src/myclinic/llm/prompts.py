"""Jinja2-based prompt template loading and rendering."""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)
_env.filters["tojson_plain"] = lambda value: json.dumps(value, ensure_ascii=False, default=str)


def render(template_name: str, **context: object) -> str:
    """Render a prompt template with the given context variables."""
    template = _env.get_template(template_name)
    return template.render(**context)
