"""InfraScope: resolve a Kubernetes context to its AWS infrastructure."""

__version__ = "0.1.0"
