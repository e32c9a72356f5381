"""
Controller configuration using pydantic-settings.
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Controller settings. Read once at startup and never mutated."""

    # Application
    app_name: str = "GitHook Controller"
    app_version: str = "1.0.0"
    debug: bool = False

    # Logging
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"

    # Health/status server
    host: str = "0.0.0.0"
    port: int = 8081

    # Kubernetes
    kubeconfig: Optional[str] = None  # in-cluster config when unset
    watch_namespace: Optional[str] = None  # all namespaces when unset

    # Receiver service
    webhook_image: str = "githook-receiver:latest"
    receiver_service_account: str = "pipeline-runner"
    receiver_ready_attempts: int = 4
    receiver_ready_interval: float = 2.0  # seconds

    # Ownership markers
    finalizer_name: str = "githook-controller"

    # Scheduler
    resync_interval: int = 30  # seconds
    max_concurrent_reconciles: int = 4

    model_config = SettingsConfigDict(
        env_prefix="GITHOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


# Global settings instance
settings = Settings()
