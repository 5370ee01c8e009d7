from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from commitgate.its.config import (
    ItsConfig,
    ItsConfigError,
    ref_matches,
    validate_its_config_file,
)
from commitgate.validation.types import AssociationPolicy


def _write(path: Path, content: str) -> None:
    path.write_text(dedent(content).strip() + "\n", encoding="utf-8")


def test_load_config_resolves_repository_overrides(tmp_path):
    config_path = tmp_path / "commitgate.yaml"
    _write(
        config_path,
        """
        version: 1
        its:
          name: jira
          association: suggested
          issue_pattern: "([A-Z]+-[0-9]+)"
          dummy_issue_pattern: "NO-ISSUE"
        repositories:
          platform/api:
            enabled: true
            association: MANDATORY
            branches: ["refs/heads/main", "refs/heads/release/*"]
          platform/docs:
            enabled: true
            issue_pattern: "DOC#([0-9]+)"
        """,
    )

    config = ItsConfig.from_file(str(config_path))

    api = config.settings_for("platform/api")
    assert api.association == AssociationPolicy.MANDATORY
    assert api.its_name == "jira"
    assert api.issue_pattern.pattern == "([A-Z]+-[0-9]+)"
    assert api.dummy_issue_pattern.pattern == "NO-ISSUE"

    docs = config.settings_for("platform/docs")
    assert docs.association == AssociationPolicy.SUGGESTED
    assert docs.issue_pattern.pattern == "DOC#([0-9]+)"

    assert config.association_policy("platform/api") == AssociationPolicy.MANDATORY
    assert config.issue_pattern("platform/docs").pattern == "DOC#([0-9]+)"
    assert config.dummy_issue_pattern("platform/docs").pattern == "NO-ISSUE"
    assert config.repositories == ["platform/api", "platform/docs"]


def test_is_enabled_honours_branch_patterns():
    config = ItsConfig.from_dict(
        {
            "its": {"enabled": False},
            "repositories": {
                "platform/api": {
                    "enabled": True,
                    "branches": ["refs/heads/main", "refs/heads/release/*", "^refs/heads/stable-[0-9.]+$"],
                },
                "platform/web": {"enabled": True},
                "platform/off": {"enabled": False},
            },
        }
    )

    assert config.is_enabled("platform/api", "refs/heads/main")
    assert config.is_enabled("platform/api", "refs/heads/release/2.1")
    assert config.is_enabled("platform/api", "refs/heads/stable-3.4")
    assert not config.is_enabled("platform/api", "refs/heads/feature/x")
    assert config.is_enabled("platform/web", "refs/heads/anything")
    assert not config.is_enabled("platform/off", "refs/heads/main")
    assert not config.is_enabled("platform/unknown", "refs/heads/main")


def test_enforced_default_overrides_repository_opt_out():
    config = ItsConfig.from_dict(
        {
            "its": {"enabled": "enforced", "association": "MANDATORY"},
            "repositories": {"platform/off": {"enabled": False}},
        }
    )
    assert config.is_enabled("platform/off", "refs/heads/main")
    assert config.is_enabled("platform/unknown", "refs/heads/main")


def test_unlisted_repository_uses_defaults():
    config = ItsConfig.from_dict({"its": {"enabled": True, "association": "SUGGESTED"}})
    settings = config.settings_for("platform/new")
    assert settings.repository == "platform/new"
    assert settings.association == AssociationPolicy.SUGGESTED
    assert settings.issue_pattern is None


def test_empty_config_is_disabled_and_optional():
    config = ItsConfig.from_dict({})
    assert config.association_policy("any") == AssociationPolicy.OPTIONAL
    assert not config.is_enabled("any", "refs/heads/main")


@pytest.mark.parametrize(
    "data",
    [
        {"version": 2},
        {"its": {"association": "STRICT"}},
        {"its": {"issue_pattern": "([A-Z"}},
        {"its": {"unknown_key": True}},
        {"repositories": {"platform/api": {"branches": ["^refs/(heads"]}}},
        {"repositories": {"platform/api": {"enabled": "sometimes"}}},
    ],
)
def test_invalid_config_raises(data):
    with pytest.raises(ItsConfigError):
        ItsConfig.from_dict(data)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ItsConfigError):
        ItsConfig.from_file(str(tmp_path / "missing.yaml"))


def test_non_mapping_yaml_raises(tmp_path):
    config_path = tmp_path / "commitgate.yaml"
    _write(config_path, "- just\n- a list")
    with pytest.raises(ItsConfigError):
        ItsConfig.from_file(str(config_path))


def test_ref_matches():
    assert ref_matches("refs/heads/main", "refs/heads/main")
    assert not ref_matches("refs/heads/main", "refs/heads/main2")
    assert ref_matches("refs/heads/*", "refs/heads/topic")
    assert ref_matches("^refs/heads/v[0-9]+", "refs/heads/v12")
    assert not ref_matches("^refs/heads/v[0-9]+", "refs/tags/v12")
    assert ref_matches("^refs/heads/main", "refs/heads/main")
    assert not ref_matches("^refs/heads/main", "refs/heads/maintenance")
    assert ref_matches("refs/heads/release/*", "refs/heads/release/1.0")
    assert not ref_matches("refs/heads/rel*", "refs/heads/release-x")
    assert ref_matches("refs/heads/rel*", "refs/heads/rel*")


def test_validate_config_file_warns_on_missing_issue_pattern(tmp_path):
    config_path = tmp_path / "commitgate.yaml"
    _write(
        config_path,
        """
        version: 1
        its:
          name: jira
        repositories:
          platform/api:
            enabled: true
            association: MANDATORY
        """,
    )

    report = validate_its_config_file(str(config_path))
    assert report["ok"] is True
    assert report["error_count"] == 0
    assert report["warning_count"] == 1
    assert report["issues"][0]["code"] == "ISSUE_PATTERN_MISSING"
    assert report["issues"][0]["location"] == "repositories.platform/api"


def test_validate_config_file_warns_on_group_index_out_of_range(tmp_path):
    config_path = tmp_path / "commitgate.yaml"
    _write(
        config_path,
        """
        version: 1
        its:
          enabled: true
          association: SUGGESTED
          issue_pattern: "[A-Z]+-[0-9]+"
        """,
    )

    report = validate_its_config_file(str(config_path))
    codes = {issue["code"] for issue in report["issues"]}
    assert codes == {"ISSUE_PATTERN_GROUP_INDEX_OUT_OF_RANGE"}


def test_validate_config_file_reports_invalid_file(tmp_path):
    config_path = tmp_path / "commitgate.yaml"
    _write(config_path, "version: 3")

    report = validate_its_config_file(str(config_path))
    assert report["ok"] is False
    assert report["error_count"] == 1
    assert report["issues"][0]["code"] == "CONFIG_INVALID"
