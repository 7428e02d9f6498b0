"""Tool registry.

Maps tool names to the classes implementing them. Tools join the registry
through the :func:`register_tool` decorator or by package discovery.
"""

import importlib
import inspect
import logging
import pkgutil
import time
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Set, Type

from mcp_tools.interfaces import ToolInterface
from mcp_tools.types import Tool

logger = logging.getLogger(__name__)

# Package members that never contain tools
SKIPPED_MODULES = {"tests", "conftest", "setup"}


def _is_skipped(module_name: str) -> bool:
    return any(
        part in SKIPPED_MODULES or part.startswith("test_")
        for part in module_name.split(".")
    )


@contextmanager
def time_plugin_operation(name: str):
    start_time = time.time()
    logger.info(f"Starting {name}...")
    try:
        yield
    finally:
        logger.info(f"{name} completed in {time.time() - start_time:.2f}s")


class PluginRegistry:
    """Singleton dispatch table of the server.

    ``tools`` maps each tool name to its class; ``instances`` holds the one
    lazily created instance per tool.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.tools: Dict[str, Type[ToolInterface]] = {}
        self.instances: Dict[str, ToolInterface] = {}
        self.discovered_paths: Set[str] = set()

    def register_tool(
        self, tool_class: Type[ToolInterface]
    ) -> Optional[Type[ToolInterface]]:
        """Add a tool class under the name its instances report.

        Args:
            tool_class: Concrete ToolInterface subclass, constructible without arguments

        Returns:
            The class, or None when it is abstract or its definition is unusable

        Raises:
            TypeError: If ``tool_class`` is not a ToolInterface subclass
        """
        if not inspect.isclass(tool_class) or not issubclass(tool_class, ToolInterface):
            raise TypeError(f"{tool_class!r} is not a ToolInterface subclass")

        if inspect.isabstract(tool_class):
            logger.debug(f"Not registering abstract tool class {tool_class.__name__}")
            return None

        # Name and schema come from an instance
        try:
            probe = tool_class()
            tool_name = probe.name
            schema = probe.input_schema
        except Exception as e:
            logger.error(f"Cannot instantiate tool {tool_class.__name__}: {e}")
            return None

        if not isinstance(tool_name, str) or not tool_name:
            logger.warning(f"Tool {tool_class.__name__} has invalid name: {tool_name!r}")
            return None
        if not isinstance(schema, dict):
            logger.warning(f"Tool {tool_name} has invalid input_schema")
            return None

        logger.info(f"Registering tool: {tool_name} ({tool_class.__name__})")
        self.tools[tool_name] = tool_class
        self.instances.pop(tool_name, None)
        return tool_class

    def get_tool_instance(self, tool_name: str) -> Optional[ToolInterface]:
        """Return the shared instance of a tool, matching the name case-insensitively.

        Returns:
            The instance, or None for an unknown tool or a failing constructor
        """
        resolved_name = self._resolve_name(tool_name)
        if resolved_name is None:
            logger.warning(f"Tool '{tool_name}' not found")
            return None

        instance = self.instances.get(resolved_name)
        if instance is None:
            try:
                instance = self.tools[resolved_name]()
            except Exception as e:
                logger.error(f"Cannot instantiate tool {resolved_name}: {e}")
                return None
            self.instances[resolved_name] = instance
        return instance

    def _resolve_name(self, tool_name: str) -> Optional[str]:
        if tool_name in self.tools:
            return tool_name
        lowered = tool_name.lower()
        return next((name for name in self.tools if name.lower() == lowered), None)

    def discover_tools(self, package_name: str) -> None:
        """Import every module below a package and register the tools they define.

        Test modules and packages are never imported.
        """
        logger.info(f"Discovering tools in package: {package_name}")

        try:
            package = importlib.import_module(package_name)
        except ImportError as e:
            logger.error(f"Cannot import tool package {package_name}: {e}")
            return

        for module_info in pkgutil.iter_modules(
            getattr(package, "__path__", []), prefix=f"{package_name}."
        ):
            full_name = module_info.name
            if _is_skipped(full_name) or full_name in self.discovered_paths:
                continue
            self.discovered_paths.add(full_name)

            try:
                if module_info.ispkg:
                    self.discover_tools(full_name)
                else:
                    self._scan_module_for_tools(importlib.import_module(full_name))
            except Exception as e:
                logger.warning(f"Skipping module {full_name}: {e}")

    def _scan_module_for_tools(self, module) -> None:
        """Register the concrete tool classes a module defines (not imports)."""
        module_name = module.__name__
        registered = [
            cls.__name__
            for _, cls in inspect.getmembers(module, inspect.isclass)
            if cls.__module__ == module_name
            and issubclass(cls, ToolInterface)
            and not inspect.isabstract(cls)
            and self.register_tool(cls) is not None
        ]
        if registered:
            logger.info(f"Module {module_name}: registered {', '.join(registered)}")

    def get_all_instances(self) -> List[ToolInterface]:
        """Instances of all registered tools, created on first use."""
        instances = (self.get_tool_instance(name) for name in list(self.tools))
        return [instance for instance in instances if instance is not None]

    def get_tool_definitions(self) -> List[Tool]:
        """Describe every registered tool for a tool listing request."""
        return [
            Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema,
            )
            for tool in self.get_all_instances()
        ]

    def clear(self) -> None:
        self.tools.clear()
        self.instances.clear()
        self.discovered_paths.clear()


registry = PluginRegistry()


def register_tool(cls=None):
    """Class decorator adding a tool to the registry.

    Usable bare or called:

        @register_tool
        class RepositoryTool(ToolInterface):
            ...
    """

    def _register(tool_class):
        registry.register_tool(tool_class)
        return tool_class

    return _register if cls is None else _register(cls)


def discover_and_register_tools(packages: Iterable[str] = ("plugins",)) -> None:
    """Discover and register all tools in the given packages."""
    with time_plugin_operation("Tool discovery"):
        for package_name in packages:
            registry.discover_tools(package_name)

    logger.info(f"Total tools registered: {len(registry.tools)} ({', '.join(registry.tools)})")
