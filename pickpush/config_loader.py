"""
Configuration loader for PICKPUSH.
Merges defaults with per-repo .pickpush/config.yaml overrides,
then applies PICKPUSH_* environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ConfigError(RuntimeError):
    pass


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class GitConfig(_Frozen):
    timeout: int = Field(default=120, gt=0)


class InspectConfig(_Frozen):
    include_untracked: bool = True


class StagingConfig(_Frozen):
    reset_on_cancel: bool = True


class CommitConfig(_Frozen):
    default_message: str = "Auto commit on {timestamp}"
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    no_verify: bool = False

    @field_validator("default_message")
    @classmethod
    def _only_timestamp_placeholder(cls, value: str) -> str:
        try:
            value.format(timestamp="")
        except (AttributeError, IndexError, KeyError, ValueError) as e:
            raise ValueError(f"default_message may only use the {{timestamp}} placeholder: {e}") from e
        return value


class PushConfig(_Frozen):
    remote: str | None = None
    branch: str | None = None
    set_upstream: bool = False


class AuditConfig(_Frozen):
    enabled: bool = True
    file: str = "pickpush-audit.jsonl"  # relative paths resolve against the git dir


class PickPushConfig(_Frozen):
    git: GitConfig = Field(default_factory=GitConfig)
    inspect: InspectConfig = Field(default_factory=InspectConfig)
    staging: StagingConfig = Field(default_factory=StagingConfig)
    commit: CommitConfig = Field(default_factory=CommitConfig)
    push: PushConfig = Field(default_factory=PushConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config: {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping at top level: {path}")
    return data


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    remote = os.environ.get("PICKPUSH_REMOTE")
    branch = os.environ.get("PICKPUSH_BRANCH")
    if remote or branch:
        overrides["push"] = {}
        if remote:
            overrides["push"]["remote"] = remote
        if branch:
            overrides["push"]["branch"] = branch

    no_verify = os.environ.get("PICKPUSH_NO_VERIFY")
    if no_verify is not None:
        overrides["commit"] = {"no_verify": no_verify.strip().lower() in _TRUTHY}

    timeout = os.environ.get("PICKPUSH_GIT_TIMEOUT")
    if timeout:
        overrides["git"] = {"timeout": timeout}

    return overrides


def load_config(repo_path: Path | None = None) -> PickPushConfig:
    """
    Load config by merging:
      1. Built-in defaults (pickpush/config.yaml)
      2. Repo-level overrides (<repo>/.pickpush/config.yaml)
      3. Environment variable overrides (PICKPUSH_*)
    """
    base = _read_yaml(_DEFAULT_CONFIG_PATH)

    if repo_path:
        repo_config = repo_path / ".pickpush" / "config.yaml"
        if repo_config.exists():
            base = _deep_merge(base, _read_yaml(repo_config))

    base = _deep_merge(base, _env_overrides())

    try:
        return PickPushConfig(**base)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration:\n{e}") from e
