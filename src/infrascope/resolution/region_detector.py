"""Cloud region detection from node metadata."""

import re
from dataclasses import dataclass
from typing import Optional, Sequence
import structlog

from infrascope.core.exceptions import RegionUnknownError
from infrascope.models.resources import Node

logger = structlog.get_logger(__name__)

# <provider>:///<availability-zone>/<instance-id>, e.g. aws:///us-east-1a/i-0123
PROVIDER_ID_PATTERN = re.compile(
    r"^(?P<provider>[A-Za-z0-9_-]+):///(?P<zone>[^/]+)/(?P<instance_id>[^/]+)$"
)

INSTANCE_ID_PREFIX = "i-"

# Newer key first; the beta key is deprecated but still set on older nodes.
DEFAULT_REGION_LABEL_KEYS = (
    "topology.kubernetes.io/region",
    "failure-domain.beta.kubernetes.io/region",
)


@dataclass(frozen=True)
class ProviderId:
    """Parsed node provider identifier."""

    provider: str
    zone: str
    instance_id: str

    @property
    def region(self) -> Optional[str]:
        """The zone with its trailing zone letter removed."""
        if len(self.zone) < 2 or not self.zone[-1].isalpha():
            return None
        return self.zone[:-1]


def parse_provider_id(provider_id: Optional[str]) -> Optional[ProviderId]:
    if not provider_id:
        return None
    match = PROVIDER_ID_PATTERN.match(provider_id.strip())
    if not match:
        return None
    return ProviderId(**match.groupdict())


def instance_id_from_provider_id(provider_id: Optional[str]) -> Optional[str]:
    """Return the EC2 instance id at the end of a provider identifier, if any."""
    if not provider_id:
        return None
    candidate = provider_id.rstrip("/").split("/")[-1]
    if candidate.startswith(INSTANCE_ID_PREFIX) and len(candidate) > len(INSTANCE_ID_PREFIX):
        return candidate
    return None


class RegionDetector:
    """Derives the cloud region from the first node of a cluster."""

    def __init__(self, label_keys: Sequence[str] = DEFAULT_REGION_LABEL_KEYS):
        self.label_keys = tuple(label_keys)
        self.logger = logger.bind(component="region_detector")

    def detect(self, nodes: Optional[Sequence[Node]]) -> str:
        """Return the region, or raise RegionUnknownError.

        The provider identifier wins; topology labels are the fallback.
        """
        if not nodes:
            raise RegionUnknownError("No nodes found in cluster. Cannot determine AWS region.")

        node = nodes[0]
        parsed = parse_provider_id(node.provider_id)
        if parsed and parsed.region:
            self.logger.debug("Region detected from provider id", node=node.name, region=parsed.region)
            return parsed.region

        for key in self.label_keys:
            value = (node.labels.get(key) or "").strip()
            if value:
                self.logger.debug("Region detected from label", node=node.name, label=key, region=value)
                return value

        raise RegionUnknownError(
            f"Could not detect AWS region from node {node.name}",
            {"node": node.name, "provider_id": node.provider_id, "label_keys": list(self.label_keys)}
        )
