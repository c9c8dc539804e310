"""
Configuration file loader for repo-secret-manager.

Supports loading configuration from:
- repo-secret-manager.toml / .repo-secret-manager.toml
- rsm.toml / .rsm.toml
- rsm.yml / .rsm.yml / rsm.yaml / .rsm.yaml

CLI flags override config file values.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import DEFAULT_PASSWORD_ENV, DEFAULT_VAULT_FILE
from .errors import ParseError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

# Config file search order (first found wins)
CONFIG_FILE_NAMES = [
    "repo-secret-manager.toml",
    ".repo-secret-manager.toml",
    "rsm.toml",
    ".rsm.toml",
    "rsm.yml",
    ".rsm.yml",
    "rsm.yaml",
    ".rsm.yaml",
]

# Accepted nested section names
SECTION_NAMES = ("repo-secret-manager", "rsm")


@dataclass
class ProjectConfig:
    """
    Project-level configuration loaded from config files.

    All fields are optional - CLI flags will override any values set here.
    """

    vault_file: str | None = None
    pattern: str | None = None

    # Behavior options
    update_gitignore: bool | None = None
    untrack_redacted: bool | None = None
    use_index: bool | None = None
    strict: bool | None = None

    # Password sources
    password_file: Path | None = None
    password_env: str | None = None

    # Source file path (for debugging)
    _config_file: Path | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (sorted keys for determinism)."""
        result: dict[str, Any] = {}

        if self.vault_file is not None:
            result["vault_file"] = self.vault_file
        if self.pattern is not None:
            result["pattern"] = self.pattern
        if self.update_gitignore is not None:
            result["update_gitignore"] = self.update_gitignore
        if self.untrack_redacted is not None:
            result["untrack_redacted"] = self.untrack_redacted
        if self.use_index is not None:
            result["use_index"] = self.use_index
        if self.strict is not None:
            result["strict"] = self.strict
        if self.password_file is not None:
            result["password_file"] = str(self.password_file)
        if self.password_env is not None:
            result["password_env"] = self.password_env

        if self._config_file is not None:
            result["_loaded_from"] = str(self._config_file)

        return dict(sorted(result.items()))


def find_config_file(repo_root: Path) -> Path | None:
    """
    Find a configuration file in the repository root.

    Args:
        repo_root: Root directory of the repository

    Returns:
        Path to the config file, or None if not found
    """
    for name in CONFIG_FILE_NAMES:
        config_path = repo_root / name
        if config_path.exists() and config_path.is_file():
            return config_path
    return None


def _select_section(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    for section in SECTION_NAMES:
        if isinstance(data.get(section), dict):
            return data[section]
    return data


def _parse_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML config file."""
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return _select_section(data)


def _parse_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML config file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _select_section(data)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0"):
        return False
    raise ParseError(f"Config key {key!r} must be a boolean, got {value!r}")


def load_config(repo_root: Path, config_path: Path | None = None) -> ProjectConfig:
    """
    Load configuration from a config file.

    Args:
        repo_root: Root directory of the repository
        config_path: Explicit path to config file (optional)

    Returns:
        ProjectConfig with loaded values (unset values remain None)

    Raises:
        ParseError: the file exists but is malformed or has a bad value
    """
    if config_path is None:
        config_path = find_config_file(repo_root)

    if config_path is None:
        return ProjectConfig()

    if not config_path.exists():
        logger.warning("Config file not found: %s", config_path)
        return ProjectConfig()

    # Parse based on extension
    suffix = config_path.suffix.lower()
    try:
        if suffix == ".toml":
            data = _parse_toml(config_path)
        elif suffix in (".yml", ".yaml"):
            data = _parse_yaml(config_path)
        else:
            logger.warning("Unsupported config file type: %s", config_path)
            return ProjectConfig()
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ParseError(f"Could not parse config file {config_path}: {e}") from e

    config = ProjectConfig(_config_file=config_path)

    if "vault_file" in data:
        config.vault_file = str(data["vault_file"])
    if "pattern" in data:
        config.pattern = str(data["pattern"]) or None

    for key in ("update_gitignore", "untrack_redacted", "use_index", "strict"):
        if key in data:
            setattr(config, key, _as_bool(data[key], key))

    if "password_file" in data:
        password_file = Path(str(data["password_file"])).expanduser()
        if not password_file.is_absolute():
            password_file = repo_root / password_file
        config.password_file = password_file
    if "password_env" in data:
        config.password_env = str(data["password_env"])

    logger.debug("Loaded config from %s", config_path)
    return config


def merge_cli_with_config(
    config: ProjectConfig,
    *,
    # CLI arguments (None means not specified on CLI)
    vault_file: str | None = None,
    pattern: str | None = None,
    no_gitignore: bool = False,
    no_git_remove: bool = False,
    no_index: bool = False,
    strict: bool | None = None,
    password_file: Path | None = None,
) -> dict[str, Any]:
    """
    Merge CLI arguments with config file values.

    CLI arguments take precedence over config file values.

    Returns:
        Dictionary with merged configuration values
    """
    result: dict[str, Any] = {}

    # Vault file
    if vault_file is not None:
        result["vault_file"] = vault_file
    elif config.vault_file is not None:
        result["vault_file"] = config.vault_file
    else:
        result["vault_file"] = DEFAULT_VAULT_FILE

    # Index pattern
    if pattern:
        result["pattern"] = pattern
    else:
        result["pattern"] = config.pattern

    # Update .gitignore (CLI --nogitignore sets False)
    if no_gitignore:
        result["update_gitignore"] = False
    elif config.update_gitignore is not None:
        result["update_gitignore"] = config.update_gitignore
    else:
        result["update_gitignore"] = True

    # Untrack originals (CLI --nogitremove sets False)
    if no_git_remove:
        result["untrack_redacted"] = False
    elif config.untrack_redacted is not None:
        result["untrack_redacted"] = config.untrack_redacted
    else:
        result["untrack_redacted"] = True

    # Use index (CLI --noindex sets False)
    if no_index:
        result["use_index"] = False
    elif config.use_index is not None:
        result["use_index"] = config.use_index
    else:
        result["use_index"] = True

    # Strict overlap check
    if strict is not None:
        result["strict"] = strict
    elif config.strict is not None:
        result["strict"] = config.strict
    else:
        result["strict"] = False

    # Password sources
    result["password_file"] = password_file if password_file is not None else config.password_file
    result["password_env"] = config.password_env or DEFAULT_PASSWORD_ENV

    return result
