"""
Node Package Loader

Dynamically loads workflow nodes from the node_packages directory.

Each node package is a directory with:
- manifest.json     form schema and metadata (validated as a NodeManifest)
- backend/execute.py  async execute(context) and optional async validate(config)
- tests/            package tests
"""

import json
import importlib.util
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any, Callable
from dataclasses import dataclass

from pydantic import ValidationError

from addtowallet.workflows.engine.context import NodeContext
from addtowallet.workflows.engine.definitions import WorkflowItem
from addtowallet.workflows.engine.errors import EngineError, NodeOperationError, UnknownNodeTypeError
from addtowallet.workflows.engine.nodes.schema import NodeManifest

logger = logging.getLogger(__name__)


@dataclass
class NodePackage:
    """Represents a loaded node package"""
    id: str
    name: str
    version: int
    manifest: NodeManifest
    execute_fn: Callable
    validate_fn: Optional[Callable] = None
    package_dir: Optional[Path] = None


class NodePackageLoader:
    """
    Loads and manages packaged workflow nodes from the filesystem.

    Usage:
        loader = NodePackageLoader(Path("node_packages"))
        nodes = loader.discover_nodes()
        items = await loader.execute_node("addtowallet.pass", context)
    """

    def __init__(self, packages_dir: Path):
        self.packages_dir = Path(packages_dir)
        self.loaded_nodes: Dict[str, NodePackage] = {}

    def discover_nodes(self) -> List[NodePackage]:
        """
        Scan the packages directory and load all valid node packages.

        Returns:
            List of successfully loaded NodePackage objects
        """
        nodes = []

        if not self.packages_dir.exists():
            logger.warning(f"Node packages directory {self.packages_dir} does not exist")
            return nodes

        # Packages may be nested (official/integrations/<service>/<node>)
        for manifest_path in sorted(self.packages_dir.rglob("manifest.json")):
            package_dir = manifest_path.parent
            relative = package_dir.relative_to(self.packages_dir)
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue

            try:
                node_package = self._load_node_package(package_dir)
                nodes.append(node_package)
                self.loaded_nodes[node_package.id] = node_package
                logger.info(f"Loaded node: {node_package.name} v{node_package.version} ({node_package.id})")
            except Exception as e:
                logger.error(f"Failed to load node {package_dir.name}: {e}", exc_info=True)

        logger.info(f"Loaded {len(nodes)} workflow nodes")
        return nodes

    def _load_node_package(self, package_dir: Path) -> NodePackage:
        """
        Load a single node package from its directory.

        Raises:
            ValueError: If manifest is invalid or execution module missing
        """
        with open(package_dir / "manifest.json", "r", encoding="utf-8") as f:
            raw_manifest = json.load(f)

        manifest = self._validate_manifest(raw_manifest)

        execute_module_path = package_dir / "backend" / "execute.py"
        if not execute_module_path.exists():
            raise ValueError(f"Missing backend/execute.py in {package_dir.name}")

        spec = importlib.util.spec_from_file_location(
            f"addtowallet.node_packages.{manifest.id}.execute",
            execute_module_path
        )
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        if not hasattr(module, "execute"):
            raise ValueError(f"Node package {package_dir.name} missing execute() function")

        return NodePackage(
            id=manifest.id,
            name=manifest.displayName or manifest.name,
            version=manifest.version,
            manifest=manifest,
            execute_fn=module.execute,
            validate_fn=getattr(module, "validate", None),
            package_dir=package_dir
        )

    def _validate_manifest(self, manifest: Dict[str, Any]) -> NodeManifest:
        """
        Validate a parsed manifest.json.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        required_fields = ["id", "name", "version", "inputs", "outputs"]
        for field in required_fields:
            if field not in manifest:
                raise ValueError(f"Manifest missing required field: {field}")

        try:
            return NodeManifest.model_validate(manifest)
        except ValidationError as e:
            raise ValueError(f"Invalid manifest for {manifest['id']}: {e}") from e

    async def execute_node(self, node_id: str, context: NodeContext) -> List[WorkflowItem]:
        """
        Execute a loaded node package with the given context.

        Raises:
            UnknownNodeTypeError: If node not found
            NodeOperationError: If validation or execution fails
        """
        node_package = self.loaded_nodes.get(node_id)
        if not node_package:
            raise UnknownNodeTypeError(f"Node '{node_id}' not found. Available: {list(self.loaded_nodes.keys())}")

        if context.manifest is None:
            context.manifest = node_package.manifest

        if node_package.validate_fn:
            validation_result = await node_package.validate_fn(context.raw_config)
            if not validation_result.get("valid", True):
                errors = validation_result.get("errors", ["Validation failed"])
                raise NodeOperationError(
                    f"Configuration validation failed: {', '.join(errors)}", node_id=node_id
                )

        try:
            return await node_package.execute_fn(context)
        except EngineError:
            raise
        except Exception as e:
            logger.error(f"Node {node_id} execution failed: {e}", exc_info=True)
            raise NodeOperationError(f"Node execution failed: {str(e)}", node_id=node_id) from e

    def get_node(self, node_id: str) -> Optional[NodePackage]:
        """Get a loaded node package by ID"""
        return self.loaded_nodes.get(node_id)

    def list_nodes(self) -> List[Dict[str, Any]]:
        """
        Get a list of all loaded node packages with their metadata.
        """
        return [
            {
                "id": node.id,
                "name": node.name,
                "version": node.version,
                "category": node.manifest.category.value,
                "description": node.manifest.description,
                "inputs": [i.name for i in node.manifest.inputs],
                "credentials": [c.name for c in node.manifest.credentials],
                "author": node.manifest.author,
                "tags": node.manifest.tags
            }
            for node in self.loaded_nodes.values()
        ]

    def reload_node(self, node_id: str) -> bool:
        """
        Reload a specific node package (useful for development).
        """
        node = self.loaded_nodes.get(node_id)
        if not node or not node.package_dir:
            return False

        try:
            new_node = self._load_node_package(node.package_dir)
            self.loaded_nodes[node_id] = new_node
            logger.info(f"Reloaded node: {node_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to reload node {node_id}: {e}")
            return False


# Global instance (initialized on first use)
_node_loader: Optional[NodePackageLoader] = None


def get_node_loader() -> NodePackageLoader:
    """Get the global node loader instance"""
    if _node_loader is None:
        raise RuntimeError("Node loader not initialized. Call initialize_node_loader() first.")
    return _node_loader


def initialize_node_loader(packages_dir: Path) -> NodePackageLoader:
    """Initialize the global node loader"""
    global _node_loader
    _node_loader = NodePackageLoader(packages_dir)
    _node_loader.discover_nodes()
    return _node_loader
