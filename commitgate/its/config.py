from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Pattern, Sequence, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from commitgate.config import get_its_name
from commitgate.validation.types import AssociationPolicy


EnabledMode = Literal["true", "false", "enforced"]
ENFORCING_POLICIES = {AssociationPolicy.MANDATORY, AssociationPolicy.SUGGESTED}


class ItsConfigError(ValueError):
    """Raised when the ITS association configuration cannot be loaded."""


def _normalize_enabled(value: Any) -> Any:
    if value is None or isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip().lower()


def _check_regex(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    try:
        re.compile(cleaned)
    except re.error as exc:
        raise ValueError(f"invalid regular expression `{cleaned}`: {exc}") from exc
    return cleaned


def _normalize_branch_list(value: Sequence[str]) -> List[str]:
    branches = [str(item).strip() for item in value if str(item).strip()]
    for branch in branches:
        if branch.startswith("^"):
            _check_regex(branch)
    return branches


def _parse_policy(value: Any) -> Any:
    if value is None:
        return None
    return AssociationPolicy.parse(value)


class ItsDefaults(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(default_factory=get_its_name)
    enabled: EnabledMode = "false"
    association: AssociationPolicy = AssociationPolicy.OPTIONAL
    issue_pattern: Optional[str] = None
    issue_pattern_group_index: int = Field(default=1, ge=0)
    dummy_issue_pattern: Optional[str] = None
    branches: List[str] = Field(default_factory=list)

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_enabled(cls, value: Any) -> Any:
        return _normalize_enabled(value) or "false"

    @field_validator("association", mode="before")
    @classmethod
    def _parse_association(cls, value: Any) -> Any:
        return _parse_policy(value) or AssociationPolicy.OPTIONAL

    @field_validator("issue_pattern", "dummy_issue_pattern")
    @classmethod
    def _check_patterns(cls, value: Optional[str]) -> Optional[str]:
        return _check_regex(value)

    @field_validator("branches")
    @classmethod
    def _normalize_branches(cls, value: Sequence[str]) -> List[str]:
        return _normalize_branch_list(value)


class RepositoryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: Optional[EnabledMode] = None
    association: Optional[AssociationPolicy] = None
    issue_pattern: Optional[str] = None
    issue_pattern_group_index: Optional[int] = Field(default=None, ge=0)
    dummy_issue_pattern: Optional[str] = None
    branches: Optional[List[str]] = None

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_enabled(cls, value: Any) -> Any:
        return _normalize_enabled(value)

    @field_validator("association", mode="before")
    @classmethod
    def _parse_association(cls, value: Any) -> Any:
        return _parse_policy(value)

    @field_validator("issue_pattern", "dummy_issue_pattern")
    @classmethod
    def _check_patterns(cls, value: Optional[str]) -> Optional[str]:
        return _check_regex(value)

    @field_validator("branches")
    @classmethod
    def _normalize_branches(cls, value: Optional[Sequence[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return _normalize_branch_list(value)


class ItsConfigFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int = 1
    its: ItsDefaults = Field(default_factory=ItsDefaults)
    repositories: Dict[str, RepositoryConfig] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: int) -> int:
        if value != 1:
            raise ValueError("supported ITS config version is 1")
        return value

    @field_validator("repositories")
    @classmethod
    def _validate_repository_names(cls, value: Dict[str, RepositoryConfig]) -> Dict[str, RepositoryConfig]:
        normalized: Dict[str, RepositoryConfig] = {}
        for name, repo in value.items():
            key = str(name).strip()
            if not key:
                raise ValueError("repositories contains an empty repository key")
            normalized[key] = repo
        return normalized


def ref_matches(pattern: str, ref_name: str) -> bool:
    """
    `^...` is a regular expression that must match the whole ref, a trailing
    `/*` matches every ref below that namespace, anything else must equal
    the ref name.
    """
    if pattern.startswith("^"):
        return re.fullmatch(pattern, ref_name) is not None
    if pattern.endswith("/*"):
        return ref_name.startswith(pattern[:-1])
    return ref_name == pattern


@dataclass(frozen=True)
class RepositorySettings:
    """Read-only view of one repository's association settings."""

    repository: str
    enabled: bool
    branches: Tuple[str, ...]
    association: AssociationPolicy
    issue_pattern: Optional[Pattern[str]]
    issue_pattern_group_index: int
    dummy_issue_pattern: Optional[Pattern[str]]
    its_name: str

    def applies_to_ref(self, ref_name: str) -> bool:
        if not self.enabled:
            return False
        if not self.branches:
            return True
        return any(ref_matches(pattern, ref_name) for pattern in self.branches)


def _compile(pattern: Optional[str]) -> Optional[Pattern[str]]:
    return re.compile(pattern) if pattern else None


class ItsConfig:
    """
    Association configuration for every known repository.

    Settings are resolved into frozen snapshots at construction time, so a
    loaded config can be shared by concurrent validation calls.
    """

    def __init__(self, model: Optional[ItsConfigFile] = None):
        self.model = model or ItsConfigFile()
        defaults = self.model.its
        self._default = self._resolve("*", defaults, RepositoryConfig())
        self._settings: Dict[str, RepositorySettings] = {
            name: self._resolve(name, defaults, repo) for name, repo in self.model.repositories.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ItsConfig":
        try:
            return cls(ItsConfigFile.model_validate(dict(data)))
        except ValidationError as exc:
            raise ItsConfigError(str(exc)) from exc

    @classmethod
    def from_file(cls, path: str) -> "ItsConfig":
        return cls.from_dict(_load_yaml_file(path))

    @staticmethod
    def _resolve(name: str, defaults: ItsDefaults, repo: RepositoryConfig) -> RepositorySettings:
        if defaults.enabled == "enforced":
            enabled = True
        else:
            enabled = (repo.enabled or defaults.enabled) in {"true", "enforced"}
        return RepositorySettings(
            repository=name,
            enabled=enabled,
            branches=tuple(repo.branches if repo.branches is not None else defaults.branches),
            association=repo.association or defaults.association,
            issue_pattern=_compile(repo.issue_pattern or defaults.issue_pattern),
            issue_pattern_group_index=(
                repo.issue_pattern_group_index
                if repo.issue_pattern_group_index is not None
                else defaults.issue_pattern_group_index
            ),
            dummy_issue_pattern=_compile(repo.dummy_issue_pattern or defaults.dummy_issue_pattern),
            its_name=defaults.name,
        )

    @property
    def repositories(self) -> List[str]:
        return sorted(self._settings)

    def settings_for(self, repository: str) -> RepositorySettings:
        settings = self._settings.get(repository)
        if settings is not None:
            return settings
        default = self._default
        return RepositorySettings(
            repository=repository,
            enabled=default.enabled,
            branches=default.branches,
            association=default.association,
            issue_pattern=default.issue_pattern,
            issue_pattern_group_index=default.issue_pattern_group_index,
            dummy_issue_pattern=default.dummy_issue_pattern,
            its_name=default.its_name,
        )

    def is_enabled(self, repository: str, ref_name: str) -> bool:
        return self.settings_for(repository).applies_to_ref(ref_name)

    def association_policy(self, repository: str) -> AssociationPolicy:
        return self.settings_for(repository).association

    def issue_pattern(self, repository: str) -> Optional[Pattern[str]]:
        return self.settings_for(repository).issue_pattern

    def dummy_issue_pattern(self, repository: str) -> Optional[Pattern[str]]:
        return self.settings_for(repository).dummy_issue_pattern


@dataclass
class ItsConfigIssue:
    severity: Literal["ERROR", "WARN"]
    code: str
    message: str
    location: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload = {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
        }
        if self.location:
            payload["location"] = self.location
        return payload


def _load_yaml_file(path: str) -> Dict[str, Any]:
    loaded_path = Path(path)
    if not loaded_path.exists():
        raise ItsConfigError(f"file not found: {path}")
    try:
        with loaded_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ItsConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ItsConfigError(f"expected a YAML object at top-level in {path}")
    return data


def validate_its_config(config: ItsConfig) -> List[ItsConfigIssue]:
    issues: List[ItsConfigIssue] = []
    checked = [("its", config.settings_for("*"))]
    checked.extend((f"repositories.{name}", config.settings_for(name)) for name in config.repositories)

    for location, settings in checked:
        if not settings.enabled or settings.association not in ENFORCING_POLICIES:
            continue
        if settings.issue_pattern is None:
            issues.append(
                ItsConfigIssue(
                    severity="WARN",
                    code="ISSUE_PATTERN_MISSING",
                    message=(
                        f"association policy is `{settings.association.value}` but no issue_pattern is defined; "
                        "add an issue_pattern or set association to OPTIONAL."
                    ),
                    location=location,
                )
            )
        elif settings.issue_pattern_group_index > settings.issue_pattern.groups:
            issues.append(
                ItsConfigIssue(
                    severity="WARN",
                    code="ISSUE_PATTERN_GROUP_INDEX_OUT_OF_RANGE",
                    message=(
                        f"issue_pattern_group_index {settings.issue_pattern_group_index} exceeds the "
                        f"{settings.issue_pattern.groups} group(s) of `{settings.issue_pattern.pattern}`; "
                        "the last group will be used."
                    ),
                    location=location,
                )
            )
    return issues


def validate_its_config_file(path: str) -> Dict[str, Any]:
    issues: List[ItsConfigIssue] = []
    try:
        config = ItsConfig.from_file(path)
    except ItsConfigError as exc:
        issues.append(
            ItsConfigIssue(
                severity="ERROR",
                code="CONFIG_INVALID",
                message=str(exc),
                location=path,
            )
        )
    else:
        issues.extend(validate_its_config(config))

    error_count = sum(1 for issue in issues if issue.severity == "ERROR")
    warning_count = sum(1 for issue in issues if issue.severity == "WARN")
    return {
        "ok": error_count == 0,
        "error_count": error_count,
        "warning_count": warning_count,
        "issues": [issue.as_dict() for issue in issues],
    }
