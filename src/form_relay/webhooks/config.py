"""
Relay service configuration.
Loaded once at process start from environment variables or a ``.env`` file
and injected into the handler.
"""

from typing import Any

from loguru import logger
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import FieldMap


class RelayConfig(BaseSettings):
    """
    Webhook relay configuration.

    The secret, field map and form URL keep their historical variable names
    (``EVENTS_WEBHOOK_SECRET``, ``FORM_ENTRY_MAP_JSON``, ``FORM_ACTION_URL``);
    everything else is read with the ``RELAY_`` prefix.
    """

    # === Server Configuration ===
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Serialize log records as JSON")
    debug: bool = Field(default=False, description="Debug mode")
    endpoint_path: str = Field(
        default="/api/events", description="Path the relay endpoint is served on"
    )

    # === Relay Configuration ===
    webhook_secret: str = Field(
        default="",
        validation_alias=AliasChoices("EVENTS_WEBHOOK_SECRET", "RELAY_WEBHOOK_SECRET"),
        description="Shared secret expected from the calling system",
    )
    form_entry_map_json: str = Field(
        default="{}",
        validation_alias=AliasChoices("FORM_ENTRY_MAP_JSON", "RELAY_FORM_ENTRY_MAP_JSON"),
        description="JSON object mapping body keys to form field identifiers",
    )
    form_action_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FORM_ACTION_URL", "RELAY_FORM_ACTION_URL"),
        description="Form submission URL",
    )
    form_timeout: float = Field(
        default=30.0, description="Form submission timeout in seconds"
    )

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("webhook_secret")
    @classmethod
    def strip_secret(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("endpoint_path")
    @classmethod
    def validate_endpoint_path(cls, v: str) -> str:
        """Endpoint path must be absolute."""
        v = v.strip()
        if not v.startswith("/"):
            v = f"/{v}"
        return v

    @field_validator("form_action_url")
    @classmethod
    def blank_url_is_unset(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    def get_field_map(self) -> FieldMap:
        """Parse the configured field map; invalid JSON yields an empty map."""
        return FieldMap.from_json(self.form_entry_map_json)

    def log_configuration(self):
        """Log configuration (without sensitive data)."""
        field_map = self.get_field_map()
        logger.info("=== FORM RELAY CONFIGURATION ===")
        logger.info("Server: {}:{}", self.host, self.port)
        logger.info("Endpoint: {}", self.endpoint_path)
        logger.info("Log Level: {}", self.log_level)
        logger.info("Form URL: {}", self.form_action_url or "Not configured")
        logger.info("Form Timeout: {}s", self.form_timeout)
        logger.info(
            "Webhook Secret: {}", "Configured" if self.webhook_secret else "Not configured"
        )
        logger.info("Field Map Entries: {}", len(field_map))
        logger.info("================================")

    def validate_configuration(self) -> dict[str, Any]:
        """Validate configuration and return validation result."""
        errors = []
        warnings = []

        if not self.webhook_secret:
            errors.append("EVENTS_WEBHOOK_SECRET is not set - every POST will be rejected")

        if not self.form_action_url:
            errors.append("FORM_ACTION_URL is not set - relaying will fail")
        elif not self.form_action_url.startswith(("http://", "https://")):
            errors.append("FORM_ACTION_URL must be an http(s) URL")

        if self.port < 1 or self.port > 65535:
            errors.append("Server port must be between 1 and 65535")

        if self.form_timeout <= 0:
            errors.append("Form timeout must be positive")

        if len(self.get_field_map()) == 0:
            warnings.append("Field map is empty - only empty forms will be submitted")

        if self.debug:
            warnings.append("Debug mode is enabled")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "warnings": warnings,
        }


def get_config(**overrides: Any) -> RelayConfig:
    """Build the relay configuration from the environment."""
    return RelayConfig(**overrides)
