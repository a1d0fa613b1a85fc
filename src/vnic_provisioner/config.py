"""Configuration management for the vNIC provisioner."""

from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import urlsplit

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 443
DEFAULT_SDK_PATH = "/sdk"


class InvalidEndpointError(ValueError):
    """Raised when the web service URL cannot be turned into a vSphere endpoint."""


@dataclass(frozen=True)
class Endpoint:
    """Host, port and SDK path of the vSphere web service."""

    host: str
    port: int = DEFAULT_PORT
    path: str = DEFAULT_SDK_PATH


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="VNIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Connection settings
    url: str | None = Field(default=None, description="URL of the vSphere web service")
    username: str | None = Field(default=None, description="Username for authentication")
    password: SecretStr | None = Field(default=None, description="Password for authentication")
    verify_ssl: bool = Field(default=False, description="Verify the server TLS certificate")

    # Host resolution
    empty_host_policy: Literal["no_match", "any_host"] = Field(
        default="no_match",
        description="Host lookup when a datacenter is given without a host name",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Minimum log level for stderr logs")
    log_json: bool = Field(default=False, description="Render logs as JSON")

    @property
    def has_credentials(self) -> bool:
        """Check if url, username and password are all configured."""
        return bool(self.url and self.username and self.password is not None)

    def missing_credentials(self) -> list[str]:
        """Names of the connection settings that are still unset."""
        missing = []
        if not self.url:
            missing.append("url")
        if not self.username:
            missing.append("username")
        if self.password is None:
            missing.append("password")
        return missing

    def endpoint(self) -> Endpoint:
        """Split the configured URL into host, port and SDK path.

        Accepts either a full web service URL (``https://vc.example.com/sdk``)
        or a bare host name with an optional port (``vc.example.com:8443``).

        Raises:
            InvalidEndpointError: If no URL is set or it has no host part.
        """
        if not self.url:
            raise InvalidEndpointError("No vSphere URL configured")

        raw = self.url.strip()
        if "://" not in raw:
            raw = f"https://{raw}"

        try:
            parts = urlsplit(raw)
            port = parts.port
        except ValueError as e:
            raise InvalidEndpointError(f"Invalid vSphere URL {self.url!r}: {e}") from e

        if not parts.hostname:
            raise InvalidEndpointError(f"Invalid vSphere URL {self.url!r}: missing host")

        path = parts.path.rstrip("/") or DEFAULT_SDK_PATH
        return Endpoint(host=parts.hostname, port=port or DEFAULT_PORT, path=path)


def get_settings(**overrides: Any) -> Settings:
    """Build settings, letting non-None overrides win over the environment."""
    return Settings(**{key: value for key, value in overrides.items() if value is not None})
