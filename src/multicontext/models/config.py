"""Configuration models for multicontext."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from multicontext.graph.redirect import RedirectPolicy


class StorageConfig(BaseModel):
    """Where the JSON store lives."""

    data_dir: str = Field(
        default="~/.local/share/multicontext",
        validate_default=True,
        description="Directory holding items.json and context_children.json"
    )

    @field_validator("data_dir")
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        """Expand ~ and reject paths that exist but are not directories."""
        path = Path(v).expanduser()
        if path.exists() and not path.is_dir():
            raise ValueError(
                f"Data path is not a directory: {path}\n"
                f"Please provide a valid directory path"
            )
        return str(path)

    model_config = {"frozen": True}


class OutlineConfig(BaseModel):
    """Behaviour of the graph queries."""

    root_value: str = Field(
        default="root",
        min_length=1,
        description="Value of the root item; contexts starting with it are not derived"
    )

    redirect_policy: RedirectPolicy = Field(
        default=RedirectPolicy.REDIRECT,
        description="What to do when a derived context is empty (redirect, ignore, error)"
    )

    verify_invariants: bool = Field(
        default=False,
        description="Check index consistency after every submit"
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Dispatch of sync requests to the store."""

    auto_drain: bool = Field(
        default=True,
        description="Dispatch queued sync requests right after each submit"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for multicontext."""

    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage settings")
    outline: OutlineConfig = Field(default_factory=OutlineConfig, description="Graph settings")
    sync: SyncConfig = Field(default_factory=SyncConfig, description="Sync settings")

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Please create the file with the following format:\n\n"
                f"storage:\n"
                f"  data_dir: ~/.local/share/multicontext\n\n"
                f"outline:\n"
                f"  root_value: root\n"
                f"  redirect_policy: redirect\n"
            )

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    model_config = {"frozen": True}
