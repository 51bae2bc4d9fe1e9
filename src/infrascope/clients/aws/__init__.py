from .client_factory import AwsClientFactory
from .ec2_client import Ec2Client
from .eks_client import EksClient
from .sts_client import StsClient


__all__ = [
    "AwsClientFactory",
    "Ec2Client",
    "EksClient",
    "StsClient"
]
