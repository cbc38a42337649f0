"""
Node Registry

Class-level facade over the node package loader. Discovers node packages
once, from the configured packages directory, and hands them out by ID.
"""

import logging
from typing import Dict, List, Optional, Any
from pathlib import Path

from addtowallet.config import settings
from addtowallet.workflows.engine.context import NodeContext
from addtowallet.workflows.engine.definitions import WorkflowItem
from addtowallet.workflows.engine.nodes.loader import NodePackageLoader, NodePackage, initialize_node_loader

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Central registry for all workflow nodes.
    """

    _loader: Optional[NodePackageLoader] = None
    _initialized: bool = False

    @classmethod
    def initialize(cls, packages_dir: Optional[Path] = None):
        """
        Initialize the node registry by discovering all node packages.

        Args:
            packages_dir: Path to node_packages directory (default: from settings)
        """
        if cls._initialized:
            logger.warning("NodeRegistry already initialized")
            return

        if packages_dir is None:
            packages_dir = settings.node_packages_path

        logger.info(f"Initializing NodeRegistry from: {packages_dir}")
        cls._loader = initialize_node_loader(packages_dir)
        cls._initialized = True
        logger.info(f"NodeRegistry initialized with {len(cls._loader.loaded_nodes)} nodes")

    @classmethod
    def get_node(cls, node_type: str) -> Optional[NodePackage]:
        cls._ensure_initialized()
        return cls._loader.get_node(node_type)

    @classmethod
    def list_nodes(cls) -> Dict[str, Dict[str, Any]]:
        """
        List all available nodes with their metadata, keyed by node ID.
        """
        cls._ensure_initialized()
        return {node["id"]: node for node in cls._loader.list_nodes()}

    @classmethod
    async def execute_node(cls, node_id: str, context: NodeContext) -> List[WorkflowItem]:
        cls._ensure_initialized()
        return await cls._loader.execute_node(node_id, context)

    @classmethod
    def reset(cls):
        """Forget all discovered nodes; the next call rediscovers them."""
        cls._loader = None
        cls._initialized = False

    @classmethod
    def _ensure_initialized(cls):
        if not cls._initialized:
            cls.initialize()
