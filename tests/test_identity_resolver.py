"""Tests for cluster identity resolution."""

import asyncio

import pytest
from botocore.exceptions import ClientError

from conftest import VPC_ID, make_cluster, make_instance
from infrascope.clients.aws.errors import provider_error
from infrascope.core.exceptions import ClusterIdentityNotFoundError, ProviderError
from infrascope.resolution.identity_resolver import ClusterIdentityResolver

PROVIDER_ID = "aws:///us-east-1a/i-0123"


class TestCandidates:
    """Tests for candidate name construction and tag parsing."""

    @pytest.fixture
    def resolver(self, context) -> ClusterIdentityResolver:
        return ClusterIdentityResolver(context)

    def test_candidate_order(self, resolver):
        assert resolver.build_candidates("prod", "payments") == ["payments", "prod", "prod-eks"]

    def test_candidates_deduplicated(self, resolver):
        assert resolver.build_candidates("prod", "prod-eks") == ["prod-eks", "prod"]

    def test_candidates_without_tag(self, resolver):
        assert resolver.build_candidates("prod") == ["prod", "prod-eks"]

    def test_cluster_name_from_prefix_tag(self, resolver):
        tags = {"Name": "worker", "kubernetes.io/cluster/payments": "owned"}

        assert resolver.cluster_name_from_tags(tags) == "payments"

    def test_cluster_name_from_value_tag(self, resolver):
        assert resolver.cluster_name_from_tags({"eks:cluster-name": "payments"}) == "payments"

    def test_prefix_tag_wins_over_value_tag(self, resolver):
        tags = {"aws:eks:cluster-name": "other", "kubernetes.io/cluster/payments": "shared"}

        assert resolver.cluster_name_from_tags(tags) == "payments"

    def test_no_cluster_tag(self, resolver):
        assert resolver.cluster_name_from_tags({"Name": "worker"}) is None


class TestClusterIdentityResolver:
    """Tests for ClusterIdentityResolver.resolve."""

    @pytest.mark.asyncio
    async def test_deduplicated_candidates_make_two_lookups(self, context, gateway):
        gateway.get_managed_cluster.side_effect = None
        gateway.get_managed_cluster.return_value = None

        with pytest.raises(ClusterIdentityNotFoundError) as exc_info:
            await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert exc_info.value.candidates == ["prod-eks", "prod"]
        assert gateway.get_managed_cluster.await_count == 2

    @pytest.mark.asyncio
    async def test_halts_at_first_success(self, context, gateway):
        identity, vpc_id = await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert identity.resolved_name == "prod-eks"
        assert identity.record.name == "prod-eks"
        assert vpc_id == VPC_ID
        gateway.get_managed_cluster.assert_awaited_once_with("us-east-1", "prod-eks")

    @pytest.mark.asyncio
    async def test_falls_through_to_raw_context(self, context, gateway):
        gateway.get_instance_details.return_value = make_instance(tags={"kubernetes.io/cluster/payments": "owned"})
        gateway.get_managed_cluster.side_effect = (
            lambda region, name: make_cluster(name) if name == "prod" else None
        )

        identity, _ = await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert identity.resolved_name == "prod"
        assert identity.candidates == ["payments", "prod", "prod-eks"]
        assert identity.failures == {"payments": "not found"}

    @pytest.mark.asyncio
    async def test_all_candidates_fail_without_instance_id(self, context, gateway):
        gateway.get_managed_cluster.side_effect = None
        gateway.get_managed_cluster.return_value = None

        with pytest.raises(ClusterIdentityNotFoundError) as exc_info:
            await ClusterIdentityResolver(context).resolve("us-east-1", "ctx", provider_id=None)

        assert exc_info.value.candidates == ["ctx", "ctx-eks"]
        assert "Tried: ctx, ctx-eks" in exc_info.value.message
        gateway.get_instance_details.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_vpc_adopted_from_cluster_record(self, context, gateway):
        gateway.get_instance_details.return_value = make_instance(vpc_id=None)
        gateway.get_managed_cluster.side_effect = (
            lambda region, name: make_cluster(name, vpc_id="vpc-from-eks") if name == "prod-eks" else None
        )

        _, vpc_id = await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert vpc_id == "vpc-from-eks"

    @pytest.mark.asyncio
    async def test_known_vpc_is_kept(self, context, gateway):
        _, vpc_id = await ClusterIdentityResolver(context).resolve(
            "us-east-1", "prod", PROVIDER_ID, vpc_id="vpc-known"
        )

        assert vpc_id == "vpc-known"

    @pytest.mark.asyncio
    async def test_instance_lookup_failure_is_ignored(self, context, gateway):
        gateway.get_instance_details.side_effect = ProviderError("DescribeInstances", "Throttling")
        gateway.get_managed_cluster.side_effect = (
            lambda region, name: make_cluster(name) if name == "prod" else None
        )

        identity, vpc_id = await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert identity.candidates == ["prod", "prod-eks"]
        assert vpc_id == VPC_ID

    @pytest.mark.asyncio
    async def test_instance_not_found_with_digits_in_id_is_ignored(self, context, gateway):
        gateway.get_instance_details.side_effect = provider_error(
            "DescribeInstances",
            ClientError(
                {"Error": {"Code": "InvalidInstanceID.NotFound",
                           "Message": "The instance ID 'i-04011234' does not exist"}},
                "DescribeInstances"
            )
        )
        gateway.get_managed_cluster.side_effect = (
            lambda region, name: make_cluster(name) if name == "prod-eks" else None
        )

        identity, _ = await ClusterIdentityResolver(context).resolve(
            "us-east-1", "prod", "aws:///us-east-1a/i-04011234"
        )

        assert identity.resolved_name == "prod-eks"
        assert identity.candidates == ["prod", "prod-eks"]

    @pytest.mark.asyncio
    async def test_non_credential_lookup_error_moves_on(self, context, gateway):
        def lookup(region, name):
            if name == "prod-eks":
                raise ProviderError("DescribeCluster", "Rate exceeded")
            return make_cluster(name)

        gateway.get_managed_cluster.side_effect = lookup

        identity, _ = await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert identity.resolved_name == "prod"
        assert "Rate exceeded" in identity.failures["prod-eks"]

    @pytest.mark.asyncio
    async def test_credential_lookup_error_propagates(self, context, gateway):
        gateway.get_managed_cluster.side_effect = ProviderError(
            "DescribeCluster", "ExpiredTokenException", credential_related=True
        )

        with pytest.raises(ProviderError):
            await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert gateway.get_managed_cluster.await_count == 1

    @pytest.mark.asyncio
    async def test_lookup_timeout_recorded(self, context, gateway):
        context.settings.stage_timeout_seconds = 0.01

        async def lookup(region, name):
            if name == "prod-eks":
                await asyncio.sleep(1)
            return make_cluster(name)

        gateway.get_managed_cluster.side_effect = lookup

        identity, _ = await ClusterIdentityResolver(context).resolve("us-east-1", "prod", PROVIDER_ID)

        assert identity.resolved_name == "prod"
        assert identity.failures == {"prod-eks": "timed out"}
