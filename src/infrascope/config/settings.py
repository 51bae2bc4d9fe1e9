# config/settings.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from enum import Enum
from dotenv import load_dotenv

# Load .env file explicitly
load_dotenv()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class AwsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AWS_")

    profile: Optional[str] = Field(None, description="Named AWS profile to use")
    access_key_id: Optional[str] = Field(None, description="Static access key id")
    secret_access_key: Optional[str] = Field(None, description="Static secret access key")
    session_token: Optional[str] = Field(None, description="Static session token")
    credential_refresh_interval_seconds: int = Field(
        300, description="Age after which cached client sessions are dropped"
    )


class KubernetesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="K8S_")

    kubeconfig_path: Optional[str] = Field(None, description="Path to kubeconfig file")
    context: Optional[str] = Field(None, description="Kubernetes context to use")


class ResolutionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RESOLUTION_")

    fetch_timeout_seconds: float = Field(30.0, description="Timeout for each resource category fetch")
    stage_timeout_seconds: float = Field(30.0, description="Timeout for each sequential gateway call")
    cluster_name_suffix: str = Field("-eks", description="Suffix appended to the context name as a candidate")
    cluster_tag_prefixes: List[str] = Field(
        default_factory=lambda: ["kubernetes.io/cluster/"],
        description="Instance tag key prefixes whose remainder names the owning cluster"
    )
    cluster_name_tag_keys: List[str] = Field(
        default_factory=lambda: ["eks:cluster-name", "aws:eks:cluster-name"],
        description="Instance tag keys whose value names the owning cluster"
    )
    region_label_keys: List[str] = Field(
        default_factory=lambda: [
            "topology.kubernetes.io/region",
            "failure-domain.beta.kubernetes.io/region",
        ],
        description="Node label keys checked in order for the region"
    )
    instance_states: List[str] = Field(
        default_factory=lambda: ["running"],
        description="Instance states included in the compute instance listing"
    )
    clear_credentials_on_refresh: bool = Field(
        False, description="Invalidate cached credentials before every auth probe"
    )
    retry_attempts: int = Field(3, description="Attempts for transient gateway failures")
    retry_backoff_factor: float = Field(1.5, description="Backoff factor for retries")
    max_concurrency: int = Field(4, description="Concurrent resource fetches")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: Environment = Field(Environment.DEVELOPMENT, description="Environment")
    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_format: str = Field("text", description="Log format (json or text)")
    log_config_path: Optional[str] = Field(None, description="YAML logging dictConfig file")

    aws: AwsSettings = Field(default_factory=lambda: AwsSettings())
    kubernetes: KubernetesSettings = Field(default_factory=lambda: KubernetesSettings())
    resolution: ResolutionSettings = Field(default_factory=lambda: ResolutionSettings())

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
