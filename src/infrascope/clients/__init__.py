from .gateway import AwsCloudGateway, CloudGateway

__all__ = ["AwsCloudGateway", "CloudGateway"]
