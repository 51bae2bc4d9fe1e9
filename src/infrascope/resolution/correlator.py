"""Node to compute instance correlation."""

from typing import List, Optional, Sequence
import structlog

from infrascope.models.resources import ComputeInstance, Node

logger = structlog.get_logger(__name__)


class NodeInstanceCorrelator:
    """Marks each instance with the node whose provider id embeds its id."""

    def find_node(self, instance_id: str, nodes: Sequence[Node]) -> Optional[Node]:
        if not instance_id:
            return None
        for node in nodes:
            if node.provider_id and instance_id in node.provider_id:
                return node
        return None

    def correlate(self, nodes: Sequence[Node], instances: Sequence[ComputeInstance]) -> List[ComputeInstance]:
        """Return copies of ``instances`` with ``mapped_node`` set where a node matches."""
        correlated = []
        for instance in instances:
            node = self.find_node(instance.instance_id, nodes)
            correlated.append(
                instance.model_copy(update={"mapped_node": node.name if node else None})
            )

        mapped = sum(1 for i in correlated if i.mapped_node)
        logger.debug("Correlated instances", instances=len(correlated), mapped=mapped)
        return correlated
