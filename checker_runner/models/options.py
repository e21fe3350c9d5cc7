"""User-facing options for a checker run."""

import shlex
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class CheckerOptions(BaseModel):
    """Options controlling how the Checker Framework is invoked."""

    processors: list[str] = Field(
        default_factory=list,
        description="Fully-qualified checker (annotation processor) class names",
    )
    checker_version: str | None = Field(
        default=None,
        description="Checker Framework version (detected from dependencies when unset)",
    )
    extra_args: list[str] = Field(
        default_factory=list,
        description="Extra arguments passed to the compiler",
    )
    skip: bool = Field(
        default=False,
        description="Skip the checker run entirely",
    )
    proc_only: bool = Field(
        default=True,
        description="Only process annotations, do not generate class files",
    )
    fail_on_error: bool = Field(
        default=True,
        description="Fail the build when the checker reports errors",
    )
    exclude_tests: bool = Field(
        default=False,
        description="Do not check test source roots",
    )
    suppress_lombok_warnings: bool = Field(
        default=True,
        description="Suppress known false positives in Lombok-generated code",
    )
    executable: str = Field(
        default="java",
        description="Java launcher used to run the compiler",
    )
    includes: list[str] = Field(
        default_factory=list,
        description="Source inclusion patterns (default: **/*.java)",
    )
    excludes: list[str] = Field(
        default_factory=list,
        description="Source exclusion patterns",
    )
    java_home: Path | None = Field(
        default=None,
        description="JDK home used as the build toolchain",
    )
    timeout: int | None = Field(
        default=None,
        ge=1,
        description="Maximum compiler run time in seconds (None = unlimited)",
    )

    @field_validator("processors", "includes", "excludes", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        """Accept comma-separated strings for list options."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("extra_args", mode="before")
    @classmethod
    def split_extra_args(cls, v: Any) -> Any:
        """Accept a shell-style string for extra compiler arguments."""
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @field_validator("java_home", mode="before")
    @classmethod
    def validate_java_home(cls, v: str | None) -> Path | None:
        """Validate and convert java_home to Path."""
        if v is None or v == "":
            return None
        return Path(v)

    def merged_with(self, overrides: dict[str, Any]) -> "CheckerOptions":
        """Return a copy with the given non-empty overrides applied.

        Args:
            overrides: Field values taking precedence over this instance.

        Returns:
            New CheckerOptions instance.
        """
        data = self.model_dump()
        for key, value in overrides.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)) and not value:
                continue
            data[key] = value
        return CheckerOptions.model_validate(data)
