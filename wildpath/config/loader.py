# wildpath/config/loader.py
"""
Handles loading and merging of configurations from TOML files.
"""
import toml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import fields as dataclass_fields

from wildpath.exceptions import ConfigError

from .settings import EntryType, OutputFormat, SortMethod, WalkConfig
from wildpath.logging_setup import get_logger

log = get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".wildpath.toml", "wildpath.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "wildpath"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP: Dict[str, str] = {
    "follow_symlinks": "follow_symlinks",
    "exclude": "exclude_patterns",
    "exclude_patterns": "exclude_patterns",
    "gitignore": "respect_gitignore",
    "hidden": "include_hidden",
    "type": "entry_type",
    "min_size": "min_size",
    "max_size": "max_size",
    "case_sensitive": "case_sensitive",
    "sort": "sort_method",
    "format": "output_format",
    "absolute_paths": "absolute_paths",
    "output_file": "output_file",
    "clipboard": "clipboard",
    "summary": "show_summary",
}

def _load_toml_file_data(file_path: Path, strict: bool = False) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        if strict:
            raise ConfigError(f"could not read config file {file_path}: {e}") from e
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}
    if file_path.name == "pyproject.toml":
        return data.get("tool", {}).get("wildpath", {})
    return data

def load_and_merge_configs(
    config_file: Optional[Path] = None,
    search_dir: Optional[Path] = None,
    user_config_file: Path = USER_CONFIG_FILE,
) -> Dict[str, Any]:
    # user settings first, then the project file; project profiles override user profiles by name.
    merged: Dict[str, Any] = {}
    if user_config_file.is_file():
        log.info("loading_user_global_config", path=str(user_config_file))
        merged.update(_load_toml_file_data(user_config_file))

    if config_file is not None:
        if not config_file.is_file():
            raise ConfigError(f"config file not found: {config_file}")
        candidates = [config_file]
    else:
        directory = search_dir if search_dir is not None else Path.cwd()
        candidates = [directory / name for name in PROJECT_CONFIG_FILENAMES]

    for candidate in candidates:
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate, strict=config_file is not None)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        project_profiles = project_settings.pop("profiles", None)
        if isinstance(project_profiles, dict) and project_profiles:
            user_profiles = merged.get("profiles")
            if isinstance(user_profiles, dict):
                user_profiles.update(project_profiles)
            else:
                merged["profiles"] = project_profiles
        merged.update(project_settings)
        break

    if not merged:
        log.debug("no_configuration_files_loaded")
    return merged

def select_config_values(raw: Dict[str, Any], profile_name: Optional[str] = None) -> Dict[str, Any]:
    # maps known toml keys to WalkConfig attributes, applying the named profile on top.
    values: Dict[str, Any] = {}
    for toml_key, attr in CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP.items():
        if toml_key in raw:
            values[attr] = raw[toml_key]

    unknown = sorted(k for k in raw if k not in CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP and k != "profiles")
    if unknown:
        log.warning("unknown_config_keys_ignored", keys=unknown)

    if profile_name:
        profile = raw.get("profiles", {}).get(profile_name)
        if not isinstance(profile, dict):
            raise ConfigError(f"profile '{profile_name}' not found in configuration files")
        log.info("applying_profile_settings", profile=profile_name)
        for toml_key, attr in CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP.items():
            if toml_key in profile:
                values[attr] = profile[toml_key]
    return values

def build_walk_config(values: Dict[str, Any]) -> WalkConfig:
    # coerces raw toml/cli values into a WalkConfig, rejecting unusable ones.
    kwargs = dict(values)
    for attr, enum_cls in (("sort_method", SortMethod), ("output_format", OutputFormat), ("entry_type", EntryType)):
        val = kwargs.get(attr)
        if isinstance(val, str):
            parsed = enum_cls.from_string(val)
            if parsed is None:
                kwargs.pop(attr)
            else:
                kwargs[attr] = parsed
    if isinstance(kwargs.get("output_file"), str):
        kwargs["output_file"] = Path(kwargs["output_file"]) if kwargs["output_file"] else None
    if isinstance(kwargs.get("exclude_patterns"), str):
        kwargs["exclude_patterns"] = [kwargs["exclude_patterns"]]
    for attr in ("patterns", "exclude_patterns"):
        if attr in kwargs:
            kwargs[attr] = list(kwargs[attr])
    for attr in ("min_size", "max_size"):
        val = kwargs.get(attr)
        if val is not None and (isinstance(val, bool) or not isinstance(val, int) or val < 0):
            raise ConfigError(f"'{attr}' must be a non-negative integer, got {val!r}")

    valid_fields = {f.name for f in dataclass_fields(WalkConfig) if f.init}
    return WalkConfig(**{k: v for k, v in kwargs.items() if k in valid_fields})
