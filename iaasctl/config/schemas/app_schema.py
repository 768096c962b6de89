"""Main application configuration schema."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .logging_schema import LoggingConfig


class CatalogConfig(BaseModel):
    """Machine catalog storage configuration."""

    type: str = Field("memory", description="Catalog implementation: memory or json")
    path: Optional[str] = Field(None, description="JSON catalog file path")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        valid_types = ["memory", "json"]
        if v not in valid_types:
            raise ValueError(f"Catalog type must be one of {valid_types}")
        return v

    @model_validator(mode="after")
    def ensure_path(self) -> "CatalogConfig":
        """JSON catalogs need a file."""
        if self.type == "json" and not self.path:
            raise ValueError("Catalog path is required for the json catalog")
        return self


class HealConfig(BaseModel):
    """Healer external command configuration."""

    juju_binary: str = Field("juju", description="Cluster CLI executable")
    ssh_binary: str = Field("ssh", description="Remote shell executable")
    status_timeout: float = Field(30.0, description="Upper bound for one status probe in seconds")
    ssh_timeout: float = Field(120.0, description="Upper bound for one remote command in seconds")

    @field_validator("status_timeout", "ssh_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class AppConfig(BaseModel):
    """Application configuration."""

    iaas: Dict[str, Dict[Any, Any]] = Field(
        default_factory=dict, description="IaaS provider sections keyed by kind or instance name"
    )
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    heal: HealConfig = Field(default_factory=HealConfig)

    @field_validator("iaas", mode="before")
    @classmethod
    def validate_iaas(cls, v: Any) -> Any:
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("iaas section must be a mapping")
        for name, section in v.items():
            if section is not None and not isinstance(section, dict):
                raise ValueError(f"iaas section '{name}' must be a mapping")
        return {name: section or {} for name, section in v.items()}


def validate_config(config: Dict[str, Any]) -> AppConfig:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Returns:
        Validated configuration

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return AppConfig(**config)
