from __future__ import annotations

import importlib
import logging
import pkgutil

from websearch_mcp.exceptions import DuplicateToolError
from websearch_mcp.tools import definitions
from websearch_mcp.tools.tool_models import Adapter, AdapterContext, AdapterSpec, Tool

logger = logging.getLogger(__name__)

CONFLICT_POLICIES = ("replace", "error")


class ToolRegistry:
    """Process-wide catalog of adapters and the tools they contribute.

    Tool names are globally unique at any instant. With the default
    ``on_conflict="replace"`` policy the most recently registered tool wins and
    a warning names the adapter that lost the binding; ``"error"`` rejects the
    whole adapter instead, leaving the registry untouched.
    """

    def __init__(self, *, on_conflict: str = "replace") -> None:
        if on_conflict not in CONFLICT_POLICIES:
            raise ValueError(
                f"Unsupported conflict policy {on_conflict!r}. "
                f"Use one of: {', '.join(CONFLICT_POLICIES)}"
            )
        self.on_conflict = on_conflict
        self._adapters: dict[str, Adapter] = {}
        self._tools: dict[str, Tool] = {}
        self._owners: dict[str, str] = {}

    def register(self, adapter: Adapter) -> None:
        if self.on_conflict == "error":
            self._check_conflicts(adapter)

        self._adapters[adapter.name] = adapter
        for tool in adapter.tools:
            previous_owner = self._owners.get(tool.name)
            if previous_owner is not None:
                logger.warning(
                    "Tool %r from adapter %r replaces the one registered by %r",
                    tool.name,
                    adapter.name,
                    previous_owner,
                )
            self._tools[tool.name] = tool
            self._owners[tool.name] = adapter.name
        logger.debug(
            "Registered adapter %r with %d tool(s)", adapter.name, len(adapter.tools)
        )

    def _check_conflicts(self, adapter: Adapter) -> None:
        seen: set[str] = set()
        for tool in adapter.tools:
            if tool.name in seen:
                raise DuplicateToolError(tool.name, adapter.name, adapter.name)
            seen.add(tool.name)
            owner = self._owners.get(tool.name)
            if owner is not None:
                raise DuplicateToolError(tool.name, owner, adapter.name)

    def get_tool(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get_all_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def get_adapter(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def get_all_adapters(self) -> list[Adapter]:
        return list(self._adapters.values())

    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def owner_of(self, tool_name: str) -> str | None:
        return self._owners.get(tool_name)


def discover_adapter_specs() -> list[AdapterSpec]:
    """Collect the module-level ``adapter`` spec of every module in 'definitions'."""
    specs: dict[str, AdapterSpec] = {}
    # Walk recursively so adapters can be organized by domain folders.
    for _, module_name, is_pkg in pkgutil.walk_packages(
        definitions.__path__, prefix="websearch_mcp.tools.definitions."
    ):
        if is_pkg:
            continue

        module = importlib.import_module(module_name)

        adapter_spec = getattr(module, "adapter", None)
        if isinstance(adapter_spec, AdapterSpec):
            if adapter_spec.name in specs:
                raise ValueError(
                    f"Duplicate adapter name detected: {adapter_spec.name} "
                    f"(module {module_name})"
                )
            specs[adapter_spec.name] = adapter_spec

    return list(specs.values())


def build_registry(
    context: AdapterContext, on_conflict: str | None = None
) -> ToolRegistry:
    registry = ToolRegistry(
        on_conflict=on_conflict or context.settings.tool_name_conflict
    )
    for spec in discover_adapter_specs():
        registry.register(spec.builder(context))
    logger.info(
        "Tool registry ready: %d adapter(s), %d tool(s)",
        len(registry.get_all_adapters()),
        len(registry.get_all_tools()),
    )
    return registry
