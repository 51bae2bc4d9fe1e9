"""Tests for resource payload mapping."""

import pytest
from kubernetes.client import V1Node, V1NodeSpec, V1ObjectMeta

from infrascope.mappers.resource_mapper import ResourceDataMapper, tags_to_dict


@pytest.fixture
def mapper() -> ResourceDataMapper:
    return ResourceDataMapper()


class TestResourceDataMapper:
    """Tests for ResourceDataMapper."""

    def test_tags_to_dict(self):
        tags = [{"Key": "Name", "Value": "web"}, {"Key": "env"}, {"Value": "orphan"}]

        assert tags_to_dict(tags) == {"Name": "web", "env": ""}
        assert tags_to_dict(None) == {}

    def test_map_node(self, mapper):
        node = V1Node(
            metadata=V1ObjectMeta(name="ip-10-0-1-5", labels={"topology.kubernetes.io/region": "us-east-1"}),
            spec=V1NodeSpec(provider_id="aws:///us-east-1a/i-0123"),
        )

        mapped = mapper.map_node(node)

        assert mapped.name == "ip-10-0-1-5"
        assert mapped.provider_id == "aws:///us-east-1a/i-0123"
        assert mapped.labels["topology.kubernetes.io/region"] == "us-east-1"

    def test_map_node_without_spec(self, mapper):
        mapped = mapper.map_node(V1Node(metadata=V1ObjectMeta(name="n1")))

        assert mapped.provider_id is None
        assert mapped.labels == {}

    def test_map_cluster_without_vpc(self, mapper):
        record = mapper.map_cluster({"name": "prod-eks", "resourcesVpcConfig": {"vpcId": ""}})

        assert record.vpc_id is None
        assert record.subnet_ids == []

    def test_map_subnet_name_tag(self, mapper):
        subnet = mapper.map_subnet({
            "SubnetId": "subnet-1",
            "Tags": [{"Key": "Name", "Value": "private-a"}],
            "AvailableIpAddressCount": 250,
        })

        assert subnet.name == "private-a"
        assert subnet.available_ip_address_count == 250
        assert subnet.is_public is False

    def test_map_instance_defaults(self, mapper):
        instance = mapper.map_instance({"InstanceId": "i-1"})

        assert instance.name == "-"
        assert instance.state is None
        assert instance.mapped_node is None

    def test_map_workload_identity(self, mapper):
        binding = mapper.map_workload_identity({
            "associationId": "a-1",
            "associationArn": "arn:aws:eks:us-east-1:1:podidentityassociation/prod-eks/a-1",
            "clusterName": "prod-eks",
            "namespace": "default",
            "serviceAccount": "app",
        })

        assert binding.namespace == "default"
        assert binding.service_account == "app"
        assert binding.role_arn is None

    def test_map_many_skips_malformed(self, mapper):
        mapped = mapper.map_many(mapper.map_subnet, [{"SubnetId": "subnet-1"}, {"VpcId": "vpc-1"}])

        assert [s.subnet_id for s in mapped] == ["subnet-1"]
