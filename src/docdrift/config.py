"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "docdrift.toml"
MAX_WORKERS_CAP = 32

DEFAULT_SOURCE_EXTENSION = ".go"
DEFAULT_EXCLUDE_SUFFIXES = ("_test.go", ".pb.go", "_gen.go", "_generated.go")
DEFAULT_EXCLUDE_DIRS = ("vendor", "testdata")
DEFAULT_OLD_REVISION = "HEAD"
DEFAULT_DOC_INCLUDE = ("README.md", "docs/**/*.md")
DEFAULT_DOC_EXCLUDE_GLOBS = ("**/.git/**", "**/node_modules/**", "**/vendor/**")

MATCH_MODES = ("broad", "quick")
REDUCE_POLICIES = ("max", "sum")

JUDGE_PROVIDERS = ("none", "openai", "ollama")
DEFAULT_JUDGE_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "ollama": "http://localhost:11434/v1",
}
DEFAULT_JUDGE_API_KEY_ENV = "DOCDRIFT_API_KEY"
DEFAULT_JUDGE_TIMEOUT_SECONDS = 60.0


@dataclass(slots=True, frozen=True)
class SourceConfig:
    """Which changed files count as target-language source."""

    extension: str
    exclude_suffixes: tuple[str, ...]
    exclude_dirs: tuple[str, ...]
    old_revision: str


@dataclass(slots=True, frozen=True)
class DocsConfig:
    """Documentation discovery settings."""

    include: tuple[str, ...]
    exclude_globs: tuple[str, ...]
    godoc: bool


@dataclass(slots=True, frozen=True)
class MatchingConfig:
    """Relevance matcher selection and downstream filtering."""

    mode: str
    reduce_policy: str
    min_confidence: float


@dataclass(slots=True, frozen=True)
class ExtractConfig:
    """Symbol extraction fan-out."""

    max_workers: int


@dataclass(slots=True, frozen=True)
class JudgeConfig:
    """Semantic judge backend; provider "none" disables it."""

    provider: str
    model: str
    base_url: str
    api_key_env: str
    timeout_seconds: float


@dataclass(slots=True, frozen=True)
class DriftConfig:
    """Fully merged configuration."""

    repo_root: Path
    data_dir: Path
    source: SourceConfig
    docs: DocsConfig
    matching: MatchingConfig
    extract: ExtractConfig
    judge: JudgeConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "repo_root": str(self.repo_root),
            "data_dir": str(self.data_dir),
            "source": {
                "extension": self.source.extension,
                "exclude_suffixes": list(self.source.exclude_suffixes),
                "exclude_dirs": list(self.source.exclude_dirs),
                "old_revision": self.source.old_revision,
            },
            "docs": {
                "include": list(self.docs.include),
                "exclude_globs": list(self.docs.exclude_globs),
                "godoc": self.docs.godoc,
            },
            "matching": {
                "mode": self.matching.mode,
                "reduce_policy": self.matching.reduce_policy,
                "min_confidence": self.matching.min_confidence,
            },
            "extract": {
                "max_workers": self.extract.max_workers,
            },
            "judge": {
                "provider": self.judge.provider,
                "model": self.judge.model,
                "base_url": self.judge.base_url,
                "api_key_env": self.judge.api_key_env,
                "timeout_seconds": self.judge.timeout_seconds,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    docs_include: tuple[str, ...] | None = None
    godoc: bool | None = None
    mode: str | None = None
    min_confidence: float | None = None
    max_workers: int | None = None
    old_revision: str | None = None


def default_config(repo_root: Path) -> DriftConfig:
    """Build default config for a given repository root."""
    resolved_root = repo_root.resolve()
    return DriftConfig(
        repo_root=resolved_root,
        data_dir=resolved_root / ".docdrift",
        source=SourceConfig(
            extension=DEFAULT_SOURCE_EXTENSION,
            exclude_suffixes=DEFAULT_EXCLUDE_SUFFIXES,
            exclude_dirs=DEFAULT_EXCLUDE_DIRS,
            old_revision=DEFAULT_OLD_REVISION,
        ),
        docs=DocsConfig(
            include=DEFAULT_DOC_INCLUDE, exclude_globs=DEFAULT_DOC_EXCLUDE_GLOBS, godoc=False
        ),
        matching=MatchingConfig(mode="broad", reduce_policy="max", min_confidence=0.0),
        extract=ExtractConfig(max_workers=1),
        judge=JudgeConfig(
            provider="none",
            model="",
            base_url="",
            api_key_env=DEFAULT_JUDGE_API_KEY_ENV,
            timeout_seconds=DEFAULT_JUDGE_TIMEOUT_SECONDS,
        ),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional docdrift.toml from repo root."""
    config_path = repo_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_string(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_choice(value: object, name: str, default: str, choices: tuple[str, ...]) -> str:
    chosen = _optional_string(value, name, default)
    if chosen not in choices:
        raise ValueError(f"Config field '{name}' must be one of {', '.join(choices)}.")
    return chosen


def _optional_confidence(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Config field '{name}' must be a number between 0 and 1.")
    if not 0.0 <= float(value) <= 1.0:
        raise ValueError(f"Config field '{name}' must be a number between 0 and 1.")
    return float(value)


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_positive_float(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Config field '{name}' must be a positive number.")
    return float(value)


def _merge_judge(base: JudgeConfig, payload: dict[str, object]) -> JudgeConfig:
    provider = _optional_choice(
        payload.get("provider"), "judge.provider", base.provider, JUDGE_PROVIDERS
    )
    model = _optional_string(payload.get("model"), "judge.model", base.model)
    if provider != "none" and not model:
        raise ValueError("Config field 'judge.model' must be set when a judge provider is chosen.")
    base_url = _optional_string(payload.get("base_url"), "judge.base_url", base.base_url)
    if not base_url:
        base_url = DEFAULT_JUDGE_BASE_URLS.get(provider, "")
    return JudgeConfig(
        provider=provider,
        model=model,
        base_url=base_url,
        api_key_env=_optional_string(
            payload.get("api_key_env"), "judge.api_key_env", base.api_key_env
        ),
        timeout_seconds=_optional_positive_float(
            payload.get("timeout_seconds"), "judge.timeout_seconds", base.timeout_seconds
        ),
    )


def merge_config(
    base: DriftConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> DriftConfig:
    """Merge defaults, repo config, then CLI overrides."""
    source_payload = _get_table(repo_payload, "source")
    docs_payload = _get_table(repo_payload, "docs")
    matching_payload = _get_table(repo_payload, "matching")
    extract_payload = _get_table(repo_payload, "extract")
    judge_payload = _get_table(repo_payload, "judge")

    extension = _optional_string(
        source_payload.get("extension"), "source.extension", base.source.extension
    )
    if not extension.startswith("."):
        raise ValueError("Config field 'source.extension' must start with '.'.")
    exclude_suffixes = base.source.exclude_suffixes
    if "exclude_suffixes" in source_payload:
        exclude_suffixes = _tuple_of_strings(
            source_payload["exclude_suffixes"], "source", "exclude_suffixes"
        )
    exclude_dirs = base.source.exclude_dirs
    if "exclude_dirs" in source_payload:
        exclude_dirs = _tuple_of_strings(source_payload["exclude_dirs"], "source", "exclude_dirs")
    old_revision = _optional_string(
        source_payload.get("old_revision"), "source.old_revision", base.source.old_revision
    )

    include = base.docs.include
    if "include" in docs_payload:
        include = _tuple_of_strings(docs_payload["include"], "docs", "include")
    exclude_globs = base.docs.exclude_globs
    if "exclude_globs" in docs_payload:
        exclude_globs = _tuple_of_strings(docs_payload["exclude_globs"], "docs", "exclude_globs")

    merged = DriftConfig(
        repo_root=base.repo_root,
        data_dir=base.data_dir,
        source=SourceConfig(
            extension=extension,
            exclude_suffixes=exclude_suffixes,
            exclude_dirs=exclude_dirs,
            old_revision=old_revision,
        ),
        docs=DocsConfig(
            include=include,
            exclude_globs=exclude_globs,
            godoc=_optional_bool(docs_payload.get("godoc"), "docs.godoc", base.docs.godoc),
        ),
        matching=MatchingConfig(
            mode=_optional_choice(
                matching_payload.get("mode"), "matching.mode", base.matching.mode, MATCH_MODES
            ),
            reduce_policy=_optional_choice(
                matching_payload.get("reduce_policy"),
                "matching.reduce_policy",
                base.matching.reduce_policy,
                REDUCE_POLICIES,
            ),
            min_confidence=_optional_confidence(
                matching_payload.get("min_confidence"),
                "matching.min_confidence",
                base.matching.min_confidence,
            ),
        ),
        extract=ExtractConfig(
            max_workers=_optional_positive_int_with_cap(
                extract_payload.get("max_workers"),
                "extract.max_workers",
                base.extract.max_workers,
                MAX_WORKERS_CAP,
            )
        ),
        judge=_merge_judge(base.judge, judge_payload),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: DriftConfig, overrides: CliOverrides) -> DriftConfig:
    """Apply startup overrides at highest precedence."""
    source = SourceConfig(
        extension=config.source.extension,
        exclude_suffixes=config.source.exclude_suffixes,
        exclude_dirs=config.source.exclude_dirs,
        old_revision=_optional_string(
            overrides.old_revision, "overrides.old_revision", config.source.old_revision
        ),
    )
    docs = DocsConfig(
        include=overrides.docs_include if overrides.docs_include else config.docs.include,
        exclude_globs=config.docs.exclude_globs,
        godoc=config.docs.godoc if overrides.godoc is None else overrides.godoc,
    )
    matching = MatchingConfig(
        mode=_optional_choice(overrides.mode, "overrides.mode", config.matching.mode, MATCH_MODES),
        reduce_policy=config.matching.reduce_policy,
        min_confidence=_optional_confidence(
            overrides.min_confidence, "overrides.min_confidence", config.matching.min_confidence
        ),
    )
    extract = ExtractConfig(
        max_workers=_optional_positive_int_with_cap(
            overrides.max_workers,
            "overrides.max_workers",
            config.extract.max_workers,
            MAX_WORKERS_CAP,
        )
    )
    data_dir = overrides.data_dir or config.data_dir
    return DriftConfig(
        repo_root=config.repo_root,
        data_dir=data_dir.resolve(),
        source=source,
        docs=docs,
        matching=matching,
        extract=extract,
        judge=config.judge,
    )


def load_effective_config(repo_root: Path, overrides: CliOverrides | None = None) -> DriftConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())
