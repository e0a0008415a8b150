"""Configuration model and loaders for humantouch.

Responsibilities:
- Define document normalization and batch run settings as typed dataclasses.
- Provide a YAML loader with strict key validation and permissive value parsing.

Key types:
- `NormalizerConfig`: exclusion zones, rewritten attributes, aggressive tier flag.
- `BatchConfig`: file patterns, pool size, and write policies for one batch run.
- `ConfigLoader`: static construction helpers for `BatchConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import parse_permissive_boolean, parse_positive_int, parse_string_list

DEFAULT_PATTERNS = ("**/*.html",)
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_EXCLUDED_ZONES = ("script", "style", "pre", "code", "[contenteditable]")
DEFAULT_NORMALIZED_ATTRIBUTES = ("title", "alt", "placeholder", "aria-label", "content")


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    """Settings for one document normalization call.

    Attributes:
        excluded_zones: `tag` or `[attribute]` selectors whose subtrees are never rewritten.
        normalized_attributes: Attribute names whose values are normalized.
        aggressive: Whether the aggressive replacement tier runs.
    """

    excluded_zones: tuple[str, ...] = DEFAULT_EXCLUDED_ZONES
    normalized_attributes: tuple[str, ...] = DEFAULT_NORMALIZED_ATTRIBUTES
    aggressive: bool = False


@dataclass(frozen=True, slots=True)
class BatchConfig:
    """Runtime configuration for one batch run.

    Attributes:
        patterns: Glob patterns expanded into the file list.
        max_concurrency: Maximum number of files processed at once.
        create_backup: Copy each changed file to `<path>.bak` before writing.
        aggressive: Apply the aggressive replacement tier.
        dry_run: Compute and report changes without writing.
        fail_on_hazards: Fail the batch when invisible/bidi characters are found.
        excluded_zones: Selectors forwarded to document normalization.
        normalized_attributes: Attribute names forwarded to document normalization.
    """

    patterns: tuple[str, ...] = DEFAULT_PATTERNS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    create_backup: bool = False
    aggressive: bool = False
    dry_run: bool = False
    fail_on_hazards: bool = False
    excluded_zones: tuple[str, ...] = DEFAULT_EXCLUDED_ZONES
    normalized_attributes: tuple[str, ...] = DEFAULT_NORMALIZED_ATTRIBUTES

    def validate(self) -> None:
        """Validate configuration values before a batch run."""

        if isinstance(self.max_concurrency, bool) or not isinstance(self.max_concurrency, int):
            raise ValueError("`max_concurrency` must be a positive integer.")
        if self.max_concurrency <= 0:
            raise ValueError("`max_concurrency` must be a positive integer.")
        if not self.patterns:
            raise ValueError("`patterns` must contain at least one glob pattern.")
        self._require_non_empty_items(self.patterns, "patterns")
        self._require_non_empty_items(self.excluded_zones, "excluded_zones")
        self._require_non_empty_items(self.normalized_attributes, "normalized_attributes")

    def normalizer_config(self) -> NormalizerConfig:
        """Return the document normalization settings carried by this batch config."""

        return NormalizerConfig(
            excluded_zones=self.excluded_zones,
            normalized_attributes=self.normalized_attributes,
            aggressive=self.aggressive,
        )

    @staticmethod
    def _require_non_empty_items(values: tuple[str, ...], field_name: str) -> None:
        """Raise when any configured item is blank."""

        if any(not value.strip() for value in values):
            raise ValueError(f"`{field_name}` must not contain blank entries.")


@dataclass(frozen=True, slots=True)
class ConfigOverrides:
    """Explicit CLI values layered over file or default configuration.

    `None` means "not provided"; provided values always win.
    """

    patterns: tuple[str, ...] | None = None
    max_concurrency: int | None = None
    create_backup: bool | None = None
    aggressive: bool | None = None
    dry_run: bool | None = None
    fail_on_hazards: bool | None = None

    def apply(self, base: BatchConfig) -> BatchConfig:
        """Return a new config with every provided override applied to `base`."""

        return BatchConfig(
            patterns=self.patterns if self.patterns else base.patterns,
            max_concurrency=(
                self.max_concurrency if self.max_concurrency is not None else base.max_concurrency
            ),
            create_backup=_pick(self.create_backup, base.create_backup),
            aggressive=_pick(self.aggressive, base.aggressive),
            dry_run=_pick(self.dry_run, base.dry_run),
            fail_on_hazards=_pick(self.fail_on_hazards, base.fail_on_hazards),
            excluded_zones=base.excluded_zones,
            normalized_attributes=base.normalized_attributes,
        )


def _pick(override: bool | None, fallback: bool) -> bool:
    return fallback if override is None else override


class ConfigLoader:
    """Factory helpers for loading `BatchConfig` from YAML files or mappings."""

    _YAML_KEYS = frozenset(
        {
            "patterns",
            "max_concurrency",
            "create_backup",
            "aggressive",
            "dry_run",
            "fail_on_hazards",
            "excluded_zones",
            "normalized_attributes",
        }
    )
    _BOOLEAN_KEYS = ("create_backup", "aggressive", "dry_run", "fail_on_hazards")

    @staticmethod
    def from_yaml(path: Path) -> BatchConfig:
        """Load and validate a batch config from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the payload is not a mapping or holds invalid values.
        """

        raw_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` could not be parsed: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML config `{path}`")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str = "config") -> BatchConfig:
        """Build a validated config from a mapping, filling defaults for absent keys."""

        unknown = sorted(str(key) for key in payload if key not in ConfigLoader._YAML_KEYS)
        if unknown:
            raise ValueError(f"{source_label} has unsupported key(s): {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key in ("patterns", "excluded_zones", "normalized_attributes"):
            if payload.get(key) is not None:
                values[key] = parse_string_list(payload[key], key)
        if payload.get("max_concurrency") is not None:
            values["max_concurrency"] = parse_positive_int(
                payload["max_concurrency"], "max_concurrency"
            )
        for key in ConfigLoader._BOOLEAN_KEYS:
            if payload.get(key) is None:
                continue
            parsed = parse_permissive_boolean(payload[key])
            if parsed is None:
                raise ValueError(
                    f"{source_label}: `{key}` must be a boolean value "
                    "(`true`/`false`, `1`/`0`, `yes`/`no`)."
                )
            values[key] = parsed

        config = BatchConfig(**values)
        config.validate()
        return config
