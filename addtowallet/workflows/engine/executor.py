"""
Node Executor

Runs one node package over a list of input items. This is the same call the
engine makes for every node in a workflow, without the scheduling around it.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Union

import httpx

from addtowallet.utils.execution_id import execution_scope
from addtowallet.workflows.engine.context import NodeContext
from addtowallet.workflows.engine.definitions import WorkflowItem
from addtowallet.workflows.engine.nodes.registry import NodeRegistry

logger = logging.getLogger(__name__)


def to_workflow_items(items: Optional[List[Union[WorkflowItem, Dict[str, Any]]]]) -> List[WorkflowItem]:
    """
    Accept plain dicts as item JSON, or dicts already shaped as
    {"json": ..., "binary": ...}.
    """
    result = []
    for item in items or []:
        if isinstance(item, WorkflowItem):
            result.append(item)
        elif isinstance(item, dict) and "json" in item:
            result.append(WorkflowItem.model_validate(item))
        else:
            result.append(WorkflowItem(json=item))
    return result


class NodeExecutor:
    """Builds a NodeContext and executes a registered node with it."""

    @staticmethod
    async def run(
        node_id: str,
        items: Optional[List[Union[WorkflowItem, Dict[str, Any]]]],
        parameters: Dict[str, Any],
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
        continue_on_fail: bool = False,
        workflow_id: str = "manual",
        execution_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> List[WorkflowItem]:
        node_package = NodeRegistry.get_node(node_id)
        manifest = node_package.manifest if node_package else None

        with execution_scope(execution_id) as exec_id:
            context = NodeContext(
                execution_id=exec_id,
                workflow_id=workflow_id,
                node_id=node_id,
                config=parameters,
                input_data=to_workflow_items(items),
                credentials=credentials,
                continue_on_fail=continue_on_fail,
                manifest=manifest,
                transport=transport,
            )

            logger.info(f"Executing node {node_id} with {len(context.input_data)} item(s)...")
            started = time.perf_counter()
            try:
                output = await NodeRegistry.execute_node(node_id, context)
            except Exception as e:
                logger.error(f"Node {node_id} failed: {e}")
                raise

            logger.info(
                f"Node {node_id} produced {len(output)} item(s) in {time.perf_counter() - started:.3f}s"
            )
            return output
