"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, field_validator, model_validator

from fstx.core.constants import (
    BACKUP_SUFFIX,
    ENV_BACKUP_SUFFIX,
    ENV_REMOVED_SUFFIX,
    ENV_UNESCAPE_CONTENT,
    REMOVED_SUFFIX,
    TRUTHY_VALUES,
)

__all__ = ["FstxSettings", "resolve_settings"]


class FstxSettings(BaseModel):
    """Settings shared by the backup store and the file tools.

    Attributes:
        backup_suffix: Sibling suffix for modification snapshots
        removed_suffix: Sibling suffix for deletion snapshots
        unescape_content: Whether write/append turn literal escape
            sequences (``\\n``, ``\\t``...) into real characters
    """

    backup_suffix: str = BACKUP_SUFFIX
    removed_suffix: str = REMOVED_SUFFIX
    unescape_content: bool = True

    model_config = {"frozen": True}

    @field_validator("backup_suffix", "removed_suffix")
    @classmethod
    def validate_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("suffix must start with '.' and name an extension")
        if "/" in value or "\\" in value:
            raise ValueError("suffix cannot contain path separators")
        return value

    @model_validator(mode="after")
    def validate_distinct(self) -> "FstxSettings":
        if self.backup_suffix == self.removed_suffix:
            raise ValueError("backup and removed suffixes must differ")
        return self


def resolve_settings(**overrides: object) -> FstxSettings:
    """Build settings from FSTX_* environment variables.

    Explicit keyword overrides win over the environment, which wins over
    the defaults.

    Returns:
        Validated, frozen settings.
    """

    values: dict[str, object] = {}

    backup_suffix = os.getenv(ENV_BACKUP_SUFFIX)
    if backup_suffix:
        values["backup_suffix"] = backup_suffix

    removed_suffix = os.getenv(ENV_REMOVED_SUFFIX)
    if removed_suffix:
        values["removed_suffix"] = removed_suffix

    unescape = os.getenv(ENV_UNESCAPE_CONTENT)
    if unescape is not None and unescape.strip():
        values["unescape_content"] = unescape.strip().lower() in TRUTHY_VALUES

    values.update({key: value for key, value in overrides.items() if value is not None})
    return FstxSettings.model_validate(values)
