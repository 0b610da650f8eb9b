"""YAML config loading with env var expansion and GAM_* overrides."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from automessage.errors import ConfigurationError

from .models import AutoMessageConfig

PROJECT_CONFIG = Path("automessage.yaml")

# Dotted keys accepted by `automessage config set`.
SETTABLE_KEYS: tuple[str, ...] = (
    "llm.provider",
    "llm.base_url",
    "llm.model",
    "llm.api_key",
    "llm.api_key_env",
    "llm.timeout",
    "llm.max_attempts",
    "llm.retry_delay",
    "language",
    "prompt",
    "emoji",
    "multi_line",
    "max_diff_chars",
    "changelog.path",
    "changelog.commits",
    "log_level",
    "log_format",
)

# Environment variables that win over file values.
_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "GAM_PROVIDER": ("llm", "provider"),
    "GAM_BASE_URL": ("llm", "base_url"),
    "GAM_MODEL": ("llm", "model"),
    "GAM_LANGUAGE": ("language",),
}


def user_config_path() -> Path:
    return Path.home() / ".config" / "git-automessage" / "config.yaml"


def load_config(cli_path: str | None = None) -> AutoMessageConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ConfigurationError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        PROJECT_CONFIG,
        user_config_path(),
    ]

    raw: dict = {}
    source = "defaults"
    for path in config_paths:
        if path and path.exists():
            loaded = _read_yaml(path)
            if loaded is None:
                continue
            raw = loaded
            source = str(path)
            break

    raw = _expand_env_vars(raw)
    raw = _apply_env_overrides(raw)
    try:
        return AutoMessageConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config in {source}: {e}") from e


def set_config_value(path: Path, key: str, value: str) -> AutoMessageConfig:
    """Set one dotted key in a YAML config file, validating before writing."""
    if key not in SETTABLE_KEYS:
        raise ConfigurationError(
            f"Unknown config key {key!r}. Known keys: {', '.join(SETTABLE_KEYS)}"
        )

    raw = (_read_yaml(path) if path.exists() else None) or {}
    node = raw
    *parents, leaf = key.split(".")
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[leaf] = _coerce_scalar(value)

    try:
        config = AutoMessageConfig(**_expand_env_vars(raw))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid value for {key}: {e}") from e

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(raw, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return config


def _coerce_scalar(value: str) -> object:
    """Parse booleans and numbers; everything else stays a string."""
    if not value:
        return None
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    return parsed if isinstance(parsed, (bool, int, float)) else value


def _read_yaml(path: Path) -> dict | None:
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    if loaded is not None and not isinstance(loaded, dict):
        raise ConfigurationError(f"Invalid config in {path}: expected a mapping")
    return loaded


def _apply_env_overrides(raw: dict) -> dict:
    result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in raw.items()}
    for var, keys in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        node = result
        for part in keys[:-1]:
            node = node.setdefault(part, {})
        node[keys[-1]] = value
    return result


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `automessage config init`
DEFAULT_CONFIG_TEMPLATE = """\
# automessage.yaml

# LLM Provider
llm:
  provider: "openai"           # openai | deepseek | kimi | anthropic | ollama
  # base_url: "https://api.openai.com/v1"   # defaults per provider
  # model: "gpt-4o-mini"                    # defaults per provider
  api_key_env: "GAM_API_KEY"   # falls back to the provider's own variable
  timeout: 30
  max_attempts: 3
  retry_delay: 1.0

# Output language for generated text (BCP 47 tag)
language: "en-US"

# Default instruction prepended to every request
# prompt: "Describe the change for a reviewer who has not seen the code."

# Commit message style
emoji: false                   # gitmoji instead of conventional-commit prefixes
multi_line: false              # subject line plus body
max_diff_chars: 12000

# Changelog
changelog:
  path: "CHANGELOG.md"
  commits: 10

# Logging
log_level: "warn"              # debug | info | warn | error
log_format: "text"             # text | json
"""
