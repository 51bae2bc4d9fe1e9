"""Resource data mapping utilities."""

from typing import Any, Dict, List, Optional
import structlog

from infrascope.models.resources import (
    ClusterRecord,
    ComputeInstance,
    Node,
    SubnetRecord,
    VpcRecord,
    WorkloadIdentityBinding,
)

logger = structlog.get_logger(__name__)


def tags_to_dict(tags: Optional[List[Dict[str, Any]]]) -> Dict[str, str]:
    """Convert EC2 ``[{'Key': k, 'Value': v}]`` tag lists to a mapping."""
    result = {}
    for tag in tags or []:
        key = tag.get('Key')
        if key:
            result[key] = tag.get('Value') or ''
    return result


class ResourceDataMapper:
    """Maps raw cluster API and AWS payloads to InfraScope models."""

    def map_node(self, node) -> Node:
        """Map a kubernetes ``V1Node`` object to a Node."""
        metadata = node.metadata
        spec = node.spec
        return Node(
            name=metadata.name,
            provider_id=spec.provider_id if spec else None,
            labels=dict(metadata.labels or {})
        )

    def map_cluster(self, cluster: Dict[str, Any]) -> ClusterRecord:
        """Map an EKS ``DescribeCluster`` ``cluster`` payload."""
        vpc_config = cluster.get('resourcesVpcConfig') or {}
        return ClusterRecord(
            name=cluster.get('name', ''),
            arn=cluster.get('arn'),
            version=cluster.get('version'),
            status=cluster.get('status'),
            endpoint=cluster.get('endpoint'),
            vpc_id=vpc_config.get('vpcId') or None,
            subnet_ids=list(vpc_config.get('subnetIds') or []),
            security_group_ids=list(vpc_config.get('securityGroupIds') or []),
            tags=dict(cluster.get('tags') or {}),
            raw=cluster
        )

    def map_vpc(self, vpc: Dict[str, Any]) -> VpcRecord:
        """Map an EC2 ``DescribeVpcs`` entry."""
        tags = tags_to_dict(vpc.get('Tags'))
        return VpcRecord(
            vpc_id=vpc['VpcId'],
            name=tags.get('Name', '-'),
            cidr_block=vpc.get('CidrBlock'),
            state=vpc.get('State'),
            is_default=bool(vpc.get('IsDefault', False)),
            tags=tags,
            raw=vpc
        )

    def map_subnet(self, subnet: Dict[str, Any]) -> SubnetRecord:
        """Map an EC2 ``DescribeSubnets`` entry."""
        tags = tags_to_dict(subnet.get('Tags'))
        return SubnetRecord(
            subnet_id=subnet['SubnetId'],
            name=tags.get('Name', '-'),
            vpc_id=subnet.get('VpcId'),
            cidr_block=subnet.get('CidrBlock'),
            availability_zone=subnet.get('AvailabilityZone'),
            available_ip_address_count=subnet.get('AvailableIpAddressCount'),
            is_public=bool(subnet.get('MapPublicIpOnLaunch', False)),
            tags=tags,
            raw=subnet
        )

    def map_instance(self, instance: Dict[str, Any]) -> ComputeInstance:
        """Map an EC2 ``DescribeInstances`` instance entry."""
        tags = tags_to_dict(instance.get('Tags'))
        placement = instance.get('Placement') or {}
        state = instance.get('State') or {}
        return ComputeInstance(
            instance_id=instance['InstanceId'],
            name=tags.get('Name', '-'),
            instance_type=instance.get('InstanceType'),
            state=state.get('Name'),
            private_ip_address=instance.get('PrivateIpAddress'),
            vpc_id=instance.get('VpcId'),
            subnet_id=instance.get('SubnetId'),
            availability_zone=placement.get('AvailabilityZone'),
            launch_time=instance.get('LaunchTime'),
            tags=tags,
            raw=instance
        )

    def map_workload_identity(self, association: Dict[str, Any]) -> WorkloadIdentityBinding:
        """Map an EKS ``ListPodIdentityAssociations`` summary."""
        return WorkloadIdentityBinding(
            association_id=association.get('associationId', ''),
            association_arn=association.get('associationArn'),
            cluster_name=association.get('clusterName'),
            namespace=association.get('namespace'),
            service_account=association.get('serviceAccount'),
            role_arn=association.get('roleArn'),
            raw=association
        )

    def map_many(self, mapper, items: Optional[List[Dict[str, Any]]]) -> list:
        """Apply ``mapper`` to each payload, skipping entries that fail to map."""
        mapped = []
        for item in items or []:
            try:
                mapped.append(mapper(item))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed resource payload", error=str(e))
        return mapped
