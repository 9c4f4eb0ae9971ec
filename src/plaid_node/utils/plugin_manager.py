"""Plugin architecture for extensible operation loading."""

import importlib
import importlib.util
import inspect
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type, Any
import logging

from ..models.core import NodeConfig, OperationDescription
from ..operations.base import PlaidOperation


logger = logging.getLogger(__name__)

OperationKey = Tuple[str, str]


class OperationPlugin(ABC):
    """Base class for operation plugins"""

    @abstractmethod
    def get_name(self) -> str:
        """Return plugin name"""
        pass

    @abstractmethod
    def get_operation_class(self) -> Type[PlaidOperation]:
        """Return the operation class this plugin provides"""
        pass

    def get_priority(self) -> int:
        """Return plugin priority (higher numbers = higher priority)

        Returns:
            Priority value (default: 0)
        """
        return 0

    def can_handle(self, resource: str, operation: str) -> bool:
        """Check if this plugin handles a (resource, operation) selector

        Args:
            resource: Resource name
            operation: Operation name

        Returns:
            True if plugin can handle the selector
        """
        operation_class = self.get_operation_class()
        return operation_class.resource == resource and operation_class.operation == operation


class PluginManager:
    """Manages loading and registration of operation plugins"""

    def __init__(self, config: NodeConfig):
        """Initialize plugin manager

        Args:
            config: Node configuration containing plugin directories
        """
        self.config = config
        self.registered_operations: Dict[OperationKey, Type[PlaidOperation]] = {}
        self.registered_plugins: Dict[str, OperationPlugin] = {}
        self._priorities: Dict[OperationKey, int] = {}

        # Register built-in operations first
        self._register_builtin_operations()

        # Load plugins from configured directories
        self.load_plugins()

    def _register_builtin_operations(self) -> None:
        """Register built-in operation classes"""
        from ..operations import BUILTIN_OPERATIONS

        # Register with low priority so plugins can override
        for operation_class in BUILTIN_OPERATIONS:
            self.register_operation(operation_class, priority=-10)

        logger.debug(f"{len(BUILTIN_OPERATIONS)} built-in operations registered")

    def load_plugins(self) -> None:
        """Load plugins from configured directories"""
        if not self.config.plugin_directories:
            logger.debug("No plugin directories configured")
            return

        for plugin_dir in self.config.plugin_directories:
            self._load_plugins_from_directory(plugin_dir)

    def _load_plugins_from_directory(self, plugin_dir: str) -> None:
        """Load plugins from a specific directory

        Args:
            plugin_dir: Directory path to scan for plugins
        """
        plugin_dir = os.path.expanduser(plugin_dir)

        if not os.path.exists(plugin_dir):
            logger.debug(f"Plugin directory does not exist: {plugin_dir}")
            return

        if not os.path.isdir(plugin_dir):
            logger.warning(f"Plugin path is not a directory: {plugin_dir}")
            return

        logger.info(f"Loading plugins from: {plugin_dir}")

        # Add plugin directory to Python path temporarily
        original_path = sys.path.copy()
        if plugin_dir not in sys.path:
            sys.path.insert(0, plugin_dir)

        try:
            for file_path in sorted(Path(plugin_dir).rglob("*.py")):
                if file_path.name.startswith('_'):
                    continue  # Skip private modules

                self._load_plugin_from_file(file_path)

        finally:
            sys.path = original_path

    def _load_plugin_from_file(self, file_path: Path) -> None:
        """Load plugin from a Python file

        Args:
            file_path: Path to the Python file
        """
        try:
            module_name = f"plaid_node_plugin_{file_path.stem}_{id(file_path)}"

            spec = importlib.util.spec_from_file_location(module_name, file_path)
            if spec is None or spec.loader is None:
                logger.warning(f"Could not create module spec for {file_path}")
                return

            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)

            self._discover_plugins_in_module(module, str(file_path))

        except Exception as e:
            logger.error(f"Error loading plugin from {file_path}: {e}")

    def _discover_plugins_in_module(self, module: Any, file_path: str) -> None:
        """Discover plugin classes in a loaded module

        Args:
            module: Loaded Python module
            file_path: Path to the module file (for logging)
        """
        for name, obj in inspect.getmembers(module):
            if (inspect.isclass(obj) and
                    issubclass(obj, OperationPlugin) and
                    obj.__module__ == module.__name__ and
                    not inspect.isabstract(obj)):

                try:
                    plugin_instance = obj()
                    self.register_plugin(plugin_instance)
                    logger.info(f"Loaded plugin '{plugin_instance.get_name()}' from {file_path}")

                except Exception as e:
                    logger.error(f"Error instantiating plugin {name} from {file_path}: {e}")

    def register_operation(self, operation_class: Type[PlaidOperation], priority: int = 0) -> bool:
        """Register an operation class under its (resource, operation) key

        Args:
            operation_class: Operation class to register
            priority: Priority level (higher = more preferred)

        Returns:
            True if the class was registered, False if a higher-priority one is kept
        """
        if not (inspect.isclass(operation_class) and issubclass(operation_class, PlaidOperation)):
            raise ValueError(f"Operation class must inherit from PlaidOperation: {operation_class}")
        if not operation_class.resource or not operation_class.operation or not operation_class.endpoint:
            raise ValueError(f"Operation class must declare resource, operation and endpoint: {operation_class}")

        key = (operation_class.resource, operation_class.operation)
        existing_priority = self._priorities.get(key)
        if existing_priority is not None and priority < existing_priority:
            logger.debug(f"Operation {key} already registered with higher priority")
            return False

        self.registered_operations[key] = operation_class
        self._priorities[key] = priority
        logger.debug(f"Registered operation: {key[0]}/{key[1]} (priority: {priority})")
        return True

    def register_plugin(self, plugin: OperationPlugin) -> None:
        """Register a plugin instance

        Args:
            plugin: Plugin instance to register
        """
        plugin_name = plugin.get_name()

        if plugin_name in self.registered_plugins:
            existing = self.registered_plugins[plugin_name]
            if plugin.get_priority() <= existing.get_priority():
                logger.debug(f"Plugin {plugin_name} already registered with higher priority")
                return

        if self.register_operation(plugin.get_operation_class(), plugin.get_priority()):
            self.registered_plugins[plugin_name] = plugin
            logger.info(f"Registered plugin: {plugin_name}")

    def get_operation(self, resource: str, operation: str) -> Optional[PlaidOperation]:
        """Get the operation adapter for a selector

        Args:
            resource: Resource name
            operation: Operation name

        Returns:
            Operation instance if registered, None otherwise
        """
        operation_class = self.registered_operations.get((resource, operation))
        if operation_class is None:
            return None
        return operation_class(self.config)

    def get_available_operations(self) -> List[OperationKey]:
        """Get list of registered (resource, operation) selectors"""
        return list(self.registered_operations.keys())

    def get_available_plugins(self) -> List[str]:
        """Get list of available plugin names"""
        return list(self.registered_plugins.keys())

    def describe_operations(self) -> List[OperationDescription]:
        """Describe every registered operation for the host's parameter forms"""
        return [operation_class.describe() for operation_class in self.registered_operations.values()]

    def get_plugin_info(self, plugin_name: str) -> Optional[Dict[str, Any]]:
        """Get information about a specific plugin

        Args:
            plugin_name: Name of the plugin

        Returns:
            Dictionary with plugin information or None if not found
        """
        if plugin_name not in self.registered_plugins:
            return None

        plugin = self.registered_plugins[plugin_name]
        operation_class = plugin.get_operation_class()

        return {
            'name': plugin.get_name(),
            'resource': operation_class.resource,
            'operation': operation_class.operation,
            'endpoint': operation_class.endpoint,
            'priority': plugin.get_priority(),
            'operation_class': operation_class.__name__
        }

    def reload_plugins(self) -> None:
        """Reload all plugins from configured directories"""
        self.registered_operations.clear()
        self.registered_plugins.clear()
        self._priorities.clear()

        self._register_builtin_operations()
        self.load_plugins()
        logger.info("Plugins reloaded")


class SimpleOperationPlugin(OperationPlugin):
    """Simple implementation of OperationPlugin for easy plugin creation"""

    def __init__(self, name: str, operation_class: Type[PlaidOperation], priority: int = 0):
        """Initialize simple plugin

        Args:
            name: Plugin name
            operation_class: Operation class
            priority: Plugin priority
        """
        self._name = name
        self._operation_class = operation_class
        self._priority = priority

    def get_name(self) -> str:
        return self._name

    def get_operation_class(self) -> Type[PlaidOperation]:
        return self._operation_class

    def get_priority(self) -> int:
        return self._priority
