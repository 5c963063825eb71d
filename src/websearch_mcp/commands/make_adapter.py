from __future__ import annotations

import re
from pathlib import Path

DEFINITIONS_DIR = Path(__file__).parent.parent / "tools" / "definitions"

TEMPLATE = '''from pydantic import BaseModel, Field

from websearch_mcp.tools.tool_factory.web.http_get import utc_timestamp
from websearch_mcp.tools.tool_models import (
    Adapter,
    AdapterContext,
    AdapterSpec,
    Tool,
    json_result,
)

# ================================================================
# ADAPTER CONFIGURATION GUIDE
# ================================================================
# intent:        What the adapter's tools are for (shown to developers).
# schema_notes:  Input/output conventions callers should know about.
# ================================================================


class {class_name}Input(BaseModel):
    query: str = Field(min_length=1, description="Search or action query")


def build_{module}(context: AdapterContext) -> Adapter:
    async def _run(query: str):
        return json_result(
            {{
                "source": "{adapter_name}",
                "query": query,
                "fetched_at": utc_timestamp(),
            }}
        )

    return Adapter(
        name="{adapter_name}",
        description="{description}",
        tools=(
            Tool(
                name="{module}",
                description="{description}",
                args_schema={class_name}Input,
                handler=_run,
            ),
        ),
    )


adapter = AdapterSpec(
    name="{adapter_name}",
    builder=build_{module},
    intent="{description}",
    schema_notes="Takes a single 'query' string.",
)
'''


def normalize_adapter_name(name: str) -> tuple[str, str]:
    """Return (adapter_name, module_name), e.g. 'Sports APIs' -> ('sports-apis', 'sports_apis')."""
    words = [w for w in re.split(r"[^a-zA-Z0-9]+", name.strip().lower()) if w]
    if not words:
        raise ValueError(f"Invalid adapter name: {name!r}")
    if words[0][0].isdigit():
        raise ValueError(f"Adapter name must start with a letter: {name!r}")
    return "-".join(words), "_".join(words)


def run_make_adapter(
    name: str,
    *,
    description: str | None = None,
    definitions_dir: Path | None = None,
) -> Path | None:
    """Generate a new adapter module; it is picked up by discovery on next start."""
    adapter_name, module = normalize_adapter_name(name)
    description = (description or f"{adapter_name} tools").replace('"', "'")
    class_name = "".join(part.title() for part in module.split("_"))

    target_dir = definitions_dir or DEFINITIONS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    adapter_file = target_dir / f"{module}.py"

    if adapter_file.exists():
        print(f"Error: Adapter file '{adapter_file.name}' already exists.")
        return None

    adapter_file.write_text(
        TEMPLATE.format(
            adapter_name=adapter_name,
            module=module,
            class_name=class_name,
            description=description,
        ),
        encoding="utf-8",
    )

    print(f"Created adapter '{adapter_name}'")
    print(f"Location: {adapter_file}")
    print(f"Tool '{module}' is registered automatically on the next server start.")
    return adapter_file
