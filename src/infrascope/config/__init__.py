from .settings import AwsSettings, KubernetesSettings, ResolutionSettings, Settings

__all__ = ["AwsSettings", "KubernetesSettings", "ResolutionSettings", "Settings"]
