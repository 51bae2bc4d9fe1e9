"""Tests for the AWS cloud gateway wiring."""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from infrascope.clients.aws import AwsClientFactory, Ec2Client, EksClient, StsClient
from infrascope.clients.gateway import AwsCloudGateway, CloudGateway
from infrascope.clients.kubernetes import KubernetesClient


@pytest.fixture
def parts():
    return {
        "aws_factory": MagicMock(spec=AwsClientFactory),
        "k8s_client": MagicMock(spec=KubernetesClient),
        "ec2_client": MagicMock(spec=Ec2Client),
        "eks_client": MagicMock(spec=EksClient),
        "sts_client": MagicMock(spec=StsClient),
    }


@pytest.fixture
def aws_gateway(parts) -> AwsCloudGateway:
    return AwsCloudGateway(config={}, **parts)


class TestAwsCloudGateway:
    """Tests for AwsCloudGateway."""

    def test_from_config(self):
        gateway = AwsCloudGateway.from_config({
            "aws": {"profile": "dev"},
            "kubernetes": {"kubeconfig_path": "/tmp/kubeconfig"},
            "resolution": {"instance_states": ["running", "pending"], "retry_attempts": 5},
        })

        assert isinstance(gateway, CloudGateway)
        assert gateway.aws_factory.profile == "dev"
        assert gateway.k8s_client.kubeconfig_path == "/tmp/kubeconfig"
        assert gateway.ec2_client.instance_states == ["running", "pending"]
        assert gateway.eks_client.retry_attempts == 5
        assert gateway.ec2_client.factory is gateway.aws_factory

    @pytest.mark.asyncio
    async def test_capabilities_delegate(self, aws_gateway, parts):
        await aws_gateway.list_nodes("prod")
        await aws_gateway.check_auth("us-east-1")
        await aws_gateway.get_instance_details("us-east-1", "i-1")
        await aws_gateway.get_managed_cluster("us-east-1", "prod-eks")
        await aws_gateway.get_vpc_details("us-east-1", "vpc-1")
        await aws_gateway.list_subnets("us-east-1", "vpc-1")
        await aws_gateway.list_compute_instances("us-east-1", "vpc-1", "prod-eks")
        await aws_gateway.list_workload_identity_bindings("us-east-1", "prod-eks")

        parts["k8s_client"].list_nodes.assert_awaited_once_with("prod")
        parts["sts_client"].check_auth.assert_awaited_once_with("us-east-1")
        parts["ec2_client"].describe_instance.assert_awaited_once_with("us-east-1", "i-1")
        parts["eks_client"].describe_cluster.assert_awaited_once_with("us-east-1", "prod-eks")
        parts["ec2_client"].describe_vpc.assert_awaited_once_with("us-east-1", "vpc-1")
        parts["ec2_client"].describe_subnets.assert_awaited_once_with("us-east-1", "vpc-1")
        parts["ec2_client"].describe_cluster_instances.assert_awaited_once_with("us-east-1", "vpc-1", "prod-eks")
        parts["eks_client"].list_pod_identity_associations.assert_awaited_once_with("us-east-1", "prod-eks")

    @pytest.mark.asyncio
    async def test_clear_credential_cache(self, aws_gateway, parts):
        await aws_gateway.clear_credential_cache()

        parts["aws_factory"].clear_cache.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_connect_and_health(self, aws_gateway, parts):
        for client in ("k8s_client", "ec2_client", "eks_client", "sts_client"):
            parts[client].is_connected = False
            parts[client].health_check = AsyncMock(return_value=True)

        async with aws_gateway as gateway:
            assert gateway.is_connected
            assert await gateway.health_check()

        parts["sts_client"].connect.assert_awaited_once()
        parts["sts_client"].disconnect.assert_awaited_once()
        assert not aws_gateway.is_connected

    def test_restart_reexecutes_interpreter(self, aws_gateway):
        with patch("infrascope.clients.gateway.os.execv") as execv:
            aws_gateway.restart_application_process()

        execv.assert_called_once_with(sys.executable, [sys.executable] + sys.argv)
