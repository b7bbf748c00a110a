"""Launch profile loading and validation for YAML-based emuctl profiles."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import validators
from jsonschema.exceptions import best_match

from emuctl.core.errors import ProfileLoadError, ProfileValidationError
from emuctl.core.model import LaunchProfile, StartOptions

LOGGER = logging.getLogger(__name__)

_FLAG_OPTIONS = (
    "no_snapshot_load",
    "no_snapshot_save",
    "no_snapshot",
    "wipe_data",
    "show_kernel",
    "verbose",
    "netfast",
    "no_accel",
    "no_jni",
    "no_boot_anim",
    "no_window",
)
_LIST_OPTIONS = ("debug", "logcat", "dns_servers", "extra_args")
_PATH_OPTIONS = ("sdcard", "tcpdump")
_PROFILE_SUFFIXES = (".yml", ".yaml")
_YAML_BOOL_TAG = "tag:yaml.org,2002:bool"
_YAML_MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """Safe YAML loader for profile files.

    Duplicate mapping keys are errors, and YAML 1.1 booleans (`on`, `off`,
    `yes`, `no`) load as plain strings so emulator switches like `accel: off`
    reach the schema unchanged.
    """

    yaml_implicit_resolvers = {
        first_char: [(tag, regexp) for tag, regexp in resolvers if tag != _YAML_BOOL_TAG]
        for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode) or key_node.tag == _YAML_MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise ProfileValidationError(f"Duplicate key '{key}' in YAML document{_mark(key_node)}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _mark(node: yaml.Node) -> str:
    mark = node.start_mark
    return f" at line {mark.line + 1}" if mark is not None else ""


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, LaunchProfile]
    warnings: tuple[str, ...]


def _schema_validator() -> Any:
    schema = json.loads(
        resources.files("emuctl.schemas").joinpath("profile.schema.json").read_text(encoding="utf-8")
    )
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _user_profile_dirs() -> list[Path]:
    home = Path.home()
    roots = (
        os.environ.get("XDG_CONFIG_HOME") or home / ".config",
        os.environ.get("XDG_DATA_HOME") or home / ".local/share",
    )
    return [Path(root) / "emuctl" / "profiles" for root in roots]


def _profile_sources() -> Iterator[tuple[bool, Path | Traversable]]:
    """Yield `(is_user, path)` for every profile file, packaged files first."""
    packaged = resources.files("emuctl.profiles")
    for item in sorted(packaged.iterdir(), key=lambda entry: entry.name):
        if item.name.endswith(_PROFILE_SUFFIXES):
            yield False, item
    for directory in _user_profile_dirs():
        if not directory.is_dir():
            continue
        for path in sorted(directory.iterdir()):
            if path.suffix in _PROFILE_SUFFIXES:
                yield True, path


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _flag(value: Any, *, context: str) -> bool:
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    if isinstance(value, bool):
        return value
    raise ProfileValidationError(f"{context} must be boolean true/false")


def _build_options(raw: dict[str, Any], *, profile_id: str) -> StartOptions:
    values: dict[str, Any] = {}
    for key, value in raw.items():
        context = f"{profile_id}.options.{key}"
        if key in _FLAG_OPTIONS:
            values[key] = _flag(value, context=context)
        elif key in _LIST_OPTIONS:
            values[key] = tuple(str(item) for item in value)
        elif key in _PATH_OPTIONS:
            values[key] = Path(value).expanduser()
        elif key == "ports":
            console, adb = value
            if console == adb:
                raise ProfileValidationError(f"{context} console and adb ports must differ")
            values[key] = (int(console), int(adb))
        elif key in ("memory_mb", "port"):
            values[key] = int(value)
        else:
            values[key] = str(value)
    return StartOptions(**values)


def _build_profile(doc: dict[str, Any], source: Path | Traversable, validator: Any) -> LaunchProfile:
    error = best_match(validator.iter_errors(doc))
    if error is not None:
        location = ".".join(str(part) for part in error.absolute_path)
        where = f" ({location})" if location else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {error.message}")

    return LaunchProfile(
        id=doc["id"],
        name=doc["name"],
        avd=doc["avd"],
        boot_timeout_s=float(doc.get("boot_timeout_s", 0)),
        options=_build_options(doc.get("options", {}), profile_id=doc["id"]),
    )


def load_profiles() -> LoadedProfiles:
    """Load packaged profiles, then user profiles, with later files winning by id."""
    validator = _schema_validator()
    profiles: dict[str, LaunchProfile] = {}
    user_sources: dict[str, Path | Traversable] = {}
    warnings: list[str] = []

    for is_user, path in _profile_sources():
        profile = _build_profile(_read_yaml(path), path, validator)
        if is_user and profile.id in profiles:
            earlier = user_sources.get(profile.id)
            if earlier is not None:
                warning = f"User profile '{profile.id}' in {path} overrides {earlier}"
            else:
                warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile
        if is_user:
            user_sources[profile.id] = path

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
