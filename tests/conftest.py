"""Shared fixtures: an AsyncMock cloud gateway and typical cluster data."""

from unittest.mock import MagicMock

import pytest

from infrascope.clients.gateway import CloudGateway
from infrascope.config.settings import ResolutionSettings
from infrascope.models.resolution import AuthResult
from infrascope.models.resources import (
    ClusterRecord,
    ComputeInstance,
    Node,
    SubnetRecord,
    VpcRecord,
    WorkloadIdentityBinding,
)
from infrascope.resolution.context import ResolutionContext

CONTEXT = "prod"
REGION = "us-east-1"
INSTANCE_ID = "i-0123"
VPC_ID = "vpc-0a1b2c"


def make_node(name: str = "ip-10-0-1-5.ec2.internal",
              provider_id: str = f"aws:///us-east-1a/{INSTANCE_ID}",
              labels: dict = None) -> Node:
    return Node(name=name, provider_id=provider_id, labels=labels or {})


def make_instance(instance_id: str = INSTANCE_ID, **overrides) -> ComputeInstance:
    values = {
        "instance_id": instance_id,
        "vpc_id": VPC_ID,
        "tags": {"kubernetes.io/cluster/prod-eks": "owned"},
    }
    values.update(overrides)
    return ComputeInstance(**values)


def make_cluster(name: str = "prod-eks", vpc_id: str = VPC_ID) -> ClusterRecord:
    return ClusterRecord(
        name=name,
        arn=f"arn:aws:eks:us-east-1:123456789012:cluster/{name}",
        version="1.29",
        status="ACTIVE",
        vpc_id=vpc_id,
    )


def make_gateway() -> MagicMock:
    """Gateway whose capabilities all succeed for the ``prod`` context."""
    gateway = MagicMock(spec=CloudGateway)
    gateway.list_nodes.return_value = [make_node()]
    gateway.clear_credential_cache.return_value = None
    gateway.check_auth.return_value = AuthResult.ok(
        account="123456789012",
        identity="arn:aws:iam::123456789012:user/dev"
    )
    gateway.get_instance_details.return_value = make_instance()
    gateway.get_managed_cluster.side_effect = (
        lambda region, name: make_cluster(name) if name == "prod-eks" else None
    )
    gateway.get_vpc_details.return_value = VpcRecord(vpc_id=VPC_ID, name="prod-vpc", cidr_block="10.0.0.0/16")
    gateway.list_subnets.return_value = [
        SubnetRecord(subnet_id="subnet-1", vpc_id=VPC_ID, availability_zone="us-east-1a"),
        SubnetRecord(subnet_id="subnet-2", vpc_id=VPC_ID, availability_zone="us-east-1b", is_public=True),
    ]
    gateway.list_compute_instances.return_value = [
        make_instance(),
        make_instance("i-0999", tags={}),
    ]
    gateway.list_workload_identity_bindings.return_value = [
        WorkloadIdentityBinding(
            association_id="a-1",
            cluster_name="prod-eks",
            namespace="default",
            service_account="app",
            role_arn="arn:aws:iam::123456789012:role/app",
        )
    ]
    return gateway


@pytest.fixture
def gateway() -> MagicMock:
    return make_gateway()


@pytest.fixture
def settings() -> ResolutionSettings:
    return ResolutionSettings(fetch_timeout_seconds=1.0, stage_timeout_seconds=1.0)


@pytest.fixture
def context(gateway, settings) -> ResolutionContext:
    return ResolutionContext(gateway=gateway, settings=settings)
