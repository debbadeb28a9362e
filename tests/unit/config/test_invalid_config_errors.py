from __future__ import annotations

from pathlib import Path

import pytest

from docdrift.config import CliOverrides, load_effective_config


@pytest.mark.parametrize(
    ("toml_text", "field"),
    [
        ('[matching]\nmode = "fuzzy"', "matching.mode"),
        ('[matching]\nreduce_policy = "mean"', "matching.reduce_policy"),
        ("[matching]\nmin_confidence = 1.5", "matching.min_confidence"),
        ("[matching]\nmin_confidence = true", "matching.min_confidence"),
        ('[extract]\nmax_workers = "four"', "extract.max_workers"),
        ("[extract]\nmax_workers = 64", "extract.max_workers"),
        ('[source]\nextension = "go"', "source.extension"),
        ("[source]\nexclude_dirs = [1, 2]", "source.exclude_dirs"),
        ('[docs]\ninclude = "README.md"', "docs.include"),
        ('[docs]\ngodoc = "yes"', "docs.godoc"),
        ('[judge]\nprovider = "claude"', "judge.provider"),
        ('[judge]\nprovider = "openai"', "judge.model"),
        ("[judge]\ntimeout_seconds = 0", "judge.timeout_seconds"),
    ],
)
def test_invalid_field_raises_value_error_naming_field(
    tmp_path: Path, toml_text: str, field: str
) -> None:
    (tmp_path / "docdrift.toml").write_text(toml_text, encoding="utf-8")

    with pytest.raises(ValueError, match=field.replace(".", r"\.")):
        load_effective_config(tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    (tmp_path / "docdrift.toml").write_text('matching = "not-a-table"', encoding="utf-8")

    with pytest.raises(ValueError, match="section 'matching'"):
        load_effective_config(tmp_path)


def test_invalid_override_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.max_workers"):
        load_effective_config(tmp_path, CliOverrides(max_workers=0))
