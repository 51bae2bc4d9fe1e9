from .vpc_fetcher import VpcFetcher
from .subnet_fetcher import SubnetFetcher
from .instance_fetcher import InstanceFetcher
from .workload_identity_fetcher import WorkloadIdentityFetcher

__all__ = [
    "VpcFetcher",
    "SubnetFetcher",
    "InstanceFetcher",
    "WorkloadIdentityFetcher"
]
