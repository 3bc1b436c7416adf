"""Configuration models for schemaguard."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemaguard.errors import ConfigError

CONFIG_FILENAME = ".schemaguard.toml"


class InterceptorConfig(BaseModel):
    """Remote interceptor configuration."""

    url: str | None = Field(
        default=None,
        description="Endpoint that may rewrite changes or override the conclusion",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for the whole interceptor round-trip",
    )


class DiffConfig(BaseModel):
    """Engine configuration passed explicitly to every diff."""

    fail_on_dangerous: bool = Field(
        default=False,
        description="Treat dangerous changes as failing the diff",
    )
    interceptor: InterceptorConfig = Field(
        default_factory=InterceptorConfig,
        description="Interceptor settings",
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["terminal", "json", "markdown", "annotations"] = Field(
        default="terminal",
        description="Output format",
    )
    path_label: str | None = Field(
        default=None,
        description="Path reported on annotations (defaults to the new schema file)",
    )


class GuardConfig(BaseSettings):
    """Main schemaguard configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAGUARD_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    version: str = Field(default="1.0", description="Config version")
    diff: DiffConfig = Field(default_factory=DiffConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> GuardConfig:
        """Load configuration from file and environment.

        The first file found is used:
        1. Provided config file path
        2. .schemaguard.toml in current directory
        3. .schemaguard.toml in home directory

        Values missing from the file come from SCHEMAGUARD_* environment
        variables, then built-in defaults.

        Raises:
            ConfigError: If the file is not valid TOML or has invalid values.
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_path}", path=str(config_path))
            locations.append(config_path)
        locations.extend(
            [
                Path.cwd() / CONFIG_FILENAME,
                Path.home() / CONFIG_FILENAME,
            ]
        )

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid TOML in {loc}: {e}", path=str(loc)) from e
                break

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def get_default_config_toml(
    fail_on_dangerous: bool = False,
    interceptor_url: str | None = None,
) -> str:
    """Generate .schemaguard.toml content, optionally with a policy preset.

    Raises:
        ConfigError: If the interceptor URL is not an http(s) URL.
    """
    if interceptor_url is None:
        url_line = '# url = "https://ci.example.com/schema-interceptor"'
    else:
        if not interceptor_url.startswith(("http://", "https://")):
            raise ConfigError(
                f"Interceptor URL must start with http:// or https://: {interceptor_url}",
                url=interceptor_url,
            )
        # JSON string escapes are valid TOML basic-string escapes
        url_line = f"url = {json.dumps(interceptor_url, ensure_ascii=False)}"

    return f"""# schemaguard configuration

version = "1.0"

[diff]
fail_on_dangerous = {str(fail_on_dangerous).lower()}  # Dangerous changes fail the diff when true

[diff.interceptor]
{url_line}
timeout_seconds = 10.0

[output]
format = "terminal"  # terminal | json | markdown | annotations
# path_label = "schema.graphql"
"""
