"""Registry of boxes to mirror.

The registry is a list of (os, requirement) pairs. A built-in default is
used unless a YAML file is configured, which must contain a list of
mappings:

    - os: centos
      requirement: "~> 7.0"
    - os: ubuntu
      requirement: "14.04"
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bento_sync.catalog.versions import (
    DEFAULT_REQUIREMENT,
    MalformedConstraint,
    VersionRequirement,
)


class RegistryError(Exception):
    """Raised when a registry file cannot be loaded."""

    def __init__(self, message: str, code: str = "registry_error") -> None:
        """Initialize RegistryError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class RegistryItem(BaseModel):
    """One box group to mirror.

    Attributes:
        os: Operating system name as used in box filenames.
        requirement: Version requirement, e.g. '~> 7.0'.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    os: str = Field(pattern=r"^[a-z]+$", description="Operating system name")
    requirement: str = Field(
        default=DEFAULT_REQUIREMENT, description="Version requirement"
    )

    @field_validator("requirement", mode="before")
    @classmethod
    def validate_requirement(cls, v: Any) -> str:
        """Accept bare numbers and check the requirement parses."""
        if isinstance(v, (int, float)):
            v = str(v)
        if not isinstance(v, str):
            raise ValueError(f"requirement must be a string, got {type(v).__name__}")
        try:
            VersionRequirement.parse(v)
        except MalformedConstraint as e:
            raise ValueError(str(e)) from e
        return v


DEFAULT_REGISTRY: tuple[RegistryItem, ...] = (
    RegistryItem(os="centos", requirement="~> 5.0"),
    RegistryItem(os="centos", requirement="~> 6.0"),
    RegistryItem(os="centos", requirement="~> 7.0"),
    RegistryItem(os="ubuntu", requirement="14.04"),
    RegistryItem(os="debian", requirement="~> 7.0"),
)


def parse_registry_data(data: Any) -> list[RegistryItem]:
    """Validate registry data loaded from a file.

    Args:
        data: Parsed YAML content, expected to be a list of mappings.

    Returns:
        List of RegistryItem in file order.

    Raises:
        RegistryError: If the data is not a list or an item is invalid.
    """
    if not isinstance(data, list):
        raise RegistryError(f"Expected a YAML list, got {type(data).__name__}")

    items = []
    for index, raw in enumerate(data):
        try:
            items.append(RegistryItem.model_validate(raw))
        except ValidationError as e:
            raise RegistryError(f"Invalid registry item #{index + 1}: {e}") from e
    return items


def load_registry(path: Path | None = None) -> list[RegistryItem]:
    """Load the registry from a YAML file, or return the default.

    Args:
        path: Optional YAML registry file.

    Returns:
        List of RegistryItem.

    Raises:
        RegistryError: If the file is missing, not valid YAML, or invalid.
    """
    if path is None:
        return list(DEFAULT_REGISTRY)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RegistryError(f"Cannot read registry file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RegistryError(f"Invalid YAML in registry file {path}: {e}") from e

    return parse_registry_data(data)


__all__ = [
    "DEFAULT_REGISTRY",
    "RegistryError",
    "RegistryItem",
    "load_registry",
    "parse_registry_data",
]
