"""Detector configuration: turn a plain `[tool.coupling-detector]` table into checks."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from coupling_detector.domain.entities import QualifiedName, Rule, RuleType
from coupling_detector.domain.errors import ConfigurationError
from coupling_detector.domain.exclusions import ExclusionSet

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".php"

# Config table name -> rule type
RULE_TABLES: dict[str, RuleType] = {
    "forbidden": RuleType.FORBIDDEN,
    "discouraged": RuleType.DISCOURAGED,
    "only": RuleType.ONLY,
}
EXCLUSIONS_TABLE = "legacy-exclusions"


@dataclass(frozen=True)
class CouplingCheck:
    """Every rule configured for one subject namespace; scanned as one unit."""

    subject: QualifiedName
    rules: tuple[Rule, ...]


@dataclass(frozen=True)
class DetectorConfig:
    """Validated detector settings."""

    checks: tuple[CouplingCheck, ...] = ()
    exclusions: ExclusionSet = field(default_factory=ExclusionSet)
    extension: str = DEFAULT_EXTENSION
    inline_references: bool = False
    max_workers: Optional[int] = None

    @classmethod
    def from_dict(cls, config: dict[str, object]) -> "DetectorConfig":
        """
        Validate and convert a config table.

        Raises:
            ConfigurationError: on any malformed table, value or rule.
        """
        rules_by_subject: dict[QualifiedName, list[Rule]] = {}
        for table_name, rule_type in RULE_TABLES.items():
            for subject, prefixes in _string_list_table(config, table_name).items():
                rule = Rule.create(subject, prefixes, rule_type)
                rules_by_subject.setdefault(rule.subject, []).append(rule)

        checks = tuple(
            CouplingCheck(subject=subject, rules=tuple(rules))
            for subject, rules in rules_by_subject.items()
        )
        exclusions = ExclusionSet.from_mapping(_string_list_table(config, EXCLUSIONS_TABLE))
        for subject in exclusions.entries:
            if subject not in rules_by_subject:
                logger.warning("Legacy exclusions for '%s' match no configured rule.", subject)

        extension = config.get("extension", DEFAULT_EXTENSION)
        if not isinstance(extension, str) or not extension:
            raise ConfigurationError("'extension' must be a non-empty string.")
        if not extension.startswith("."):
            extension = f".{extension}"

        inline_references = config.get("inline-references", False)
        if not isinstance(inline_references, bool):
            raise ConfigurationError("'inline-references' must be a boolean.")

        max_workers = config.get("max-workers")
        if max_workers is not None and (
            not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1
        ):
            raise ConfigurationError("'max-workers' must be a positive integer.")

        return cls(
            checks=checks,
            exclusions=exclusions,
            extension=extension,
            inline_references=inline_references,
            max_workers=max_workers,
        )


def _string_list_table(config: dict[str, object], name: str) -> dict[str, list[str]]:
    """Read a `{namespace: [names...]}` table, validating every entry."""
    raw = config.get(name, {})
    if not isinstance(raw, dict):
        raise ConfigurationError(f"'{name}' must be a table of namespace -> list of names.")
    table: dict[str, list[str]] = {}
    for key, values in raw.items():
        if not isinstance(key, str) or not key.strip():
            raise ConfigurationError(f"'{name}' contains an empty namespace key.")
        if isinstance(values, str) or not isinstance(values, list):
            raise ConfigurationError(f"'{name}.{key}' must be a list of strings.")
        if not all(isinstance(value, str) for value in values):
            raise ConfigurationError(f"'{name}.{key}' must only contain strings.")
        table[key] = list(values)
    return table
