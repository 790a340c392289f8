"""
hintcodec Configuration

Settings for the in-memory VM, the value inspector and logging. Every
setting lives in a two-level namespace (``section.name``) and resolves
through layers, highest first:

    1. Environment variable (HINTCODEC_*)
    2. Runtime override (``ConfigManager.set``)
    3. Config file (``hintcodec.yaml``, ``~/.hintcodec/config.yaml``,
       or the file named by HINTCODEC_CONFIG)
    4. Built-in default

    memory:
      max_offset: 0xffffffffffffffff
      max_segments: 1000000
    inspect:
      log_level: info
    observability:
      log_level: warning
      log_format: json

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar, Union

import yaml

T = TypeVar("T")

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

CONFIG_PATH_ENV = "HINTCODEC_CONFIG"


class ConfigError(Exception):
    """Configuration could not be loaded or addressed."""
    pass


class ConfigValidationError(ConfigError):
    """A value breaks a setting's constraints."""
    pass


@dataclass
class ConfigValue(Generic[T]):
    """
    One setting: a default plus file, override and environment layers.

    Constraints are declarative: ``choices`` restricts the value to a fixed
    set and ``minimum`` bounds integers from below. Strings given for an
    integer setting are read with ``int(text, 0)``, so ``0x`` hex works.
    """
    default: T
    env_var: Optional[str] = None
    description: str = ""
    choices: Optional[Tuple[T, ...]] = None
    minimum: Optional[int] = None
    _file_value: Optional[T] = field(default=None, repr=False)
    _override: Optional[T] = field(default=None, repr=False)
    _callbacks: List[Callable[[T, T], None]] = field(default_factory=list, repr=False)

    def get(self) -> T:
        if self.env_var:
            raw = os.environ.get(self.env_var)
            if raw is not None:
                return self._coerce(raw)
        if self._override is not None:
            return self._override
        if self._file_value is not None:
            return self._file_value
        return self.default

    def check(self, value: Any) -> Optional[str]:
        """Reason ``value`` is unacceptable, or None."""
        if isinstance(self.default, int):
            if isinstance(value, bool) or not isinstance(value, int):
                return "expected an integer"
        elif not isinstance(value, type(self.default)):
            return f"expected {type(self.default).__name__}"
        if self.choices is not None and value not in self.choices:
            return "expected one of " + ", ".join(str(c) for c in self.choices)
        if self.minimum is not None and value < self.minimum:
            return f"must be at least {self.minimum}"
        return None

    def set(self, value: Any, from_file: bool = False) -> None:
        """Validate and store ``value`` in the override (or file) layer."""
        if isinstance(value, str) and not isinstance(self.default, str):
            value = self._coerce(value)
        problem = self.check(value)
        if problem:
            raise ConfigValidationError(f"{problem}, got {value!r}")

        before = self.get()
        if from_file:
            self._file_value = value
        else:
            self._override = value
        self._notify(before)

    def reset(self) -> None:
        """Forget file and override layers."""
        before = self.get() if self._callbacks else None
        self._file_value = None
        self._override = None
        if self._callbacks:
            self._notify(before)

    def _notify(self, before: T) -> None:
        after = self.get()
        if after != before:
            for callback in self._callbacks:
                callback(before, after)

    def _coerce(self, raw: str) -> T:
        if isinstance(self.default, int):
            try:
                return int(raw.strip(), 0)  # type: ignore
            except ValueError as e:
                raise ConfigValidationError(f"expected an integer, got {raw!r}") from e
        return raw.strip()  # type: ignore

    def on_change(self, callback: Callable[[T, T], None]) -> None:
        """Call ``callback(old, new)`` whenever the effective value changes."""
        self._callbacks.append(callback)

    def schema(self) -> Dict[str, Any]:
        """JSON-Schema style description of the setting."""
        entry: Dict[str, Any] = {
            "type": "integer" if isinstance(self.default, int) else "string",
            "default": self.default,
            "description": self.description,
        }
        if self.choices is not None:
            entry["enum"] = list(self.choices)
        if self.minimum is not None:
            entry["minimum"] = self.minimum
        if self.env_var:
            entry["x-env-var"] = self.env_var
        return entry


def _declare(default: Any, env_var: str, description: str, **constraints: Any):
    return field(default_factory=lambda: ConfigValue(
        default=default,
        env_var=env_var,
        description=description,
        **constraints,
    ))


@dataclass
class MemoryConfig:
    """Limits of ``SegmentedMemory``."""
    max_offset: ConfigValue[int] = _declare(
        2**64 - 1, "HINTCODEC_MEMORY_MAX_OFFSET",
        "Highest addressable offset within a segment", minimum=1,
    )
    max_segments: ConfigValue[int] = _declare(
        1_000_000, "HINTCODEC_MEMORY_MAX_SEGMENTS",
        "Maximum number of segments a memory may allocate", minimum=1,
    )


@dataclass
class InspectConfig:
    """Gating of ``ValueInspector`` output."""
    log_level: ConfigValue[str] = _declare(
        "info", "HINTCODEC_LOG_LEVEL_VM",
        "VM log level; info shows Info: lines, debug also shows Debug: lines",
        choices=LOG_LEVELS,
    )


@dataclass
class ObservabilityConfig:
    """Structured logging."""
    log_level: ConfigValue[str] = _declare(
        "warning", "HINTCODEC_LOG_LEVEL",
        "Level of hintcodec's own log events", choices=LOG_LEVELS,
    )
    log_format: ConfigValue[str] = _declare(
        "json", "HINTCODEC_LOG_FORMAT",
        "Log line format", choices=("json", "text"),
    )


@dataclass
class CodecConfig:
    """Root of all settings, one attribute per section."""
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    inspect: InspectConfig = field(default_factory=InspectConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def settings(self) -> Iterator[Tuple[str, str, ConfigValue]]:
        """Yield ``(section, name, value)`` for every setting."""
        for section in fields(self):
            group = getattr(self, section.name)
            for item in fields(group):
                yield section.name, item.name, getattr(group, item.name)

    def section(self, name: str) -> Dict[str, Any]:
        return {key: value.get() for sec, key, value in self.settings() if sec == name}

    def to_dict(self) -> Dict[str, Any]:
        return {section.name: self.section(section.name) for section in fields(self)}

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)


class ConfigManager:
    """
    Process-wide owner of the active ``CodecConfig``.

    A singleton: every ``ConfigManager()`` returns the same instance.
    """

    _instance: Optional["ConfigManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ConfigManager":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._config = CodecConfig()
                instance._config_paths = []
                cls._instance = instance
            return cls._instance

    @property
    def config(self) -> CodecConfig:
        return self._config

    @property
    def config_paths(self) -> List[Path]:
        """Files loaded so far, in load order."""
        return list(self._config_paths)

    def _setting(self, path: str) -> ConfigValue:
        section, _, name = path.partition(".")
        for sec, key, value in self._config.settings():
            if sec == section and key == name:
                return value
        raise ConfigError(f"Invalid config path: {path}")

    def load_from_file(self, path: Union[str, Path]) -> None:
        """
        Apply a YAML file to the file layer.

        Raises:
            ConfigError: File missing, not a mapping, or naming an unknown key
            ConfigValidationError: A value breaks its setting's constraints
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

        for section, values in data.items():
            if not isinstance(values, dict):
                raise ConfigError(f"Section {section!r} in {path} must be a mapping")
            for key, value in values.items():
                try:
                    self._setting(f"{section}.{key}").set(value, from_file=True)
                except ConfigValidationError as e:
                    raise ConfigValidationError(f"{section}.{key}: {e}") from e
                except ConfigError as e:
                    raise ConfigError(f"Unknown config key: {section}.{key}") from e
        self._config_paths.append(path)

    def load_defaults(self) -> None:
        """Load the project file, the user file, then HINTCODEC_CONFIG, if present."""
        candidates = [
            Path("hintcodec.yaml"),
            Path.home() / ".hintcodec" / "config.yaml",
        ]
        if os.environ.get(CONFIG_PATH_ENV):
            candidates.append(Path(os.environ[CONFIG_PATH_ENV]))

        for path in candidates:
            if path.is_file():
                self.load_from_file(path)

    def set(self, path: str, value: Any) -> None:
        """Runtime override, e.g. ``set("memory.max_segments", 64)``."""
        self._setting(path).set(value)

    def get(self, path: str) -> Any:
        """Effective value of a setting, or a dict for a whole section."""
        if "." not in path:
            section = self._config.section(path)
            if not section:
                raise ConfigError(f"Invalid config path: {path}")
            return section
        return self._setting(path).get()

    def reset(self) -> None:
        """Back to built-in defaults; loaded files are forgotten."""
        for _, _, setting in self._config.settings():
            setting.reset()
        self._config_paths = []

    def validate(self) -> List[str]:
        """Check every effective value (environment included); list the problems."""
        errors: List[str] = []
        for section, key, setting in self._config.settings():
            path = f"{section}.{key}"
            try:
                problem = setting.check(setting.get())
            except ConfigError as e:
                problem = str(e)
            if problem:
                errors.append(f"{path}: {problem}")
        return errors

    def export_schema(self) -> Dict[str, Any]:
        """Describe every setting, grouped by section."""
        properties: Dict[str, Any] = {}
        for section, key, setting in self._config.settings():
            group = properties.setdefault(section, {"type": "object", "properties": {}})
            group["properties"][key] = setting.schema()
        return {"type": "object", "properties": properties}


def get_config() -> CodecConfig:
    """Active configuration."""
    return ConfigManager().config


def get_config_manager() -> ConfigManager:
    return ConfigManager()
