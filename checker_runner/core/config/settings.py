"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from checker_runner.core.config.loader import ConfigLoader
from checker_runner.core.exceptions.errors import ConfigurationError
from checker_runner.models.options import CheckerOptions

DEFAULT_CONFIG_PATHS = [
    Path("checker-runner.yaml"),
    Path.home() / ".checker-runner" / "config.yaml",
]


class RepositorySettings(BaseSettings):
    """Artifact repository configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHECKER_RUNNER_REPOSITORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    local: Path = Field(
        default_factory=lambda: Path.home() / ".m2" / "repository",
        description="Local Maven repository used as artifact cache",
    )
    remote_url: str = Field(
        default="https://repo.maven.apache.org/maven2",
        description="Remote Maven repository for artifact downloads",
    )
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Download timeout in seconds",
    )
    offline: bool = Field(
        default=False,
        description="Never access the remote repository",
    )
    plugin_classpath: list[Path] = Field(
        default_factory=list,
        description="Jars shipped with the runner, searched for the checker as a last resort",
    )

    @field_validator("remote_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the repository URL."""
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHECKER_RUNNER_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHECKER_RUNNER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    checker: CheckerOptions = Field(default_factory=CheckerOptions)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.

        Raises:
            ConfigurationError: If the file cannot be read or holds invalid values.
        """
        loader = ConfigLoader(path)
        loader.load()

        try:
            return cls(
                repository=RepositorySettings(**loader.get_section("repository")),
                logging=LoggingSettings(**loader.get_section("logging")),
                checker=CheckerOptions(**loader.get_section("checker")),
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}: {e.error_count()} error(s)",
                config_key=str(path),
                details={
                    "errors": [
                        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                        for err in e.errors()
                    ]
                },
            ) from e

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from an explicit file or the default locations.

        Priority: explicit file > checker-runner.yaml > ~/.checker-runner/config.yaml
        > environment variables and .env > defaults

        Args:
            path: Optional explicit YAML configuration file.

        Returns:
            Settings instance.
        """
        if path is not None:
            return cls.from_yaml(path)

        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                return cls.from_yaml(default_path)

        # Environment variables and .env are automatically loaded by pydantic-settings
        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
