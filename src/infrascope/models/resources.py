"""
Cluster and cloud resource models.

Every collection the pipeline fetches is modelled here. Each model keeps
the untouched provider payload in ``raw`` so the display layer can render
fields the pipeline itself does not care about.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base_models import InfraScopeModel


class Node(InfraScopeModel):
    """Orchestration cluster member as reported by the cluster API."""

    name: str
    provider_id: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)


class ClusterRecord(InfraScopeModel):
    """Managed cluster record (EKS ``DescribeCluster``)."""

    name: str
    arn: Optional[str] = None
    version: Optional[str] = None
    status: Optional[str] = None
    endpoint: Optional[str] = None
    vpc_id: Optional[str] = None
    subnet_ids: List[str] = Field(default_factory=list)
    security_group_ids: List[str] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict)


class VpcRecord(InfraScopeModel):
    """Virtual network detail."""

    vpc_id: str
    name: str = "-"
    cidr_block: Optional[str] = None
    state: Optional[str] = None
    is_default: bool = False
    tags: Dict[str, str] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict)


class SubnetRecord(InfraScopeModel):
    """Subnet inside the cluster's virtual network."""

    subnet_id: str
    name: str = "-"
    vpc_id: Optional[str] = None
    cidr_block: Optional[str] = None
    availability_zone: Optional[str] = None
    available_ip_address_count: Optional[int] = None
    is_public: bool = False
    tags: Dict[str, str] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict)


class ComputeInstance(InfraScopeModel):
    """Compute instance backing (or sharing a network with) the cluster.

    ``mapped_node`` holds the name of the matching Node. It is a relation
    only, set by the correlator, and stays ``None`` for unmanaged instances.
    """

    instance_id: str
    name: str = "-"
    instance_type: Optional[str] = None
    state: Optional[str] = None
    private_ip_address: Optional[str] = None
    vpc_id: Optional[str] = None
    subnet_id: Optional[str] = None
    availability_zone: Optional[str] = None
    launch_time: Optional[datetime] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    mapped_node: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class WorkloadIdentityBinding(InfraScopeModel):
    """Service account to IAM role association (EKS Pod Identity)."""

    association_id: str
    association_arn: Optional[str] = None
    cluster_name: Optional[str] = None
    namespace: Optional[str] = None
    service_account: Optional[str] = None
    role_arn: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)
