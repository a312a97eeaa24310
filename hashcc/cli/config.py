"""Configuration loading and validation."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from hashcc.core.walker import compile_exclusions
from hashcc.errors import InvalidGlobPattern
from hashcc.models.records import Algorithm, HashConfig
from hashcc.utils.manifest import ManifestFormat

DEFAULT_CONFIG_PATHS = ["hashcc.yaml", "hashcc.yml", ".hashcc.yaml"]


@dataclass
class HashingConfig:
    """Hashing options."""

    algorithm: str = "sha256"
    exclude: list[str] = field(default_factory=list)
    workers: int | None = None
    follow_symlinks: bool = False
    archives: bool = False
    chunk_size: int = 65536  # 64KB


@dataclass
class VerifyConfig:
    """Manifest verification options."""

    base_dir: Path | None = None
    allow_absolute: bool = False
    manifest_format: str = "csv"


@dataclass
class SecurityConfig:
    """Algorithm policy."""

    allow_weak: bool = False


@dataclass
class OutputConfig:
    """Output options."""

    format: str = "text"
    quiet: bool = False
    progress: bool = False


@dataclass
class LoggingConfig:
    """Logging options."""

    level: str = "ERROR"
    file: Path | None = None
    operations_log: Path | None = None


@dataclass
class Config:
    """Complete application configuration."""

    hashing: HashingConfig = field(default_factory=HashingConfig)
    verify: VerifyConfig = field(default_factory=VerifyConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file.

    Args:
        config_path: Path to YAML config file. Defaults to hashcc.yaml.

    Returns:
        Loaded Config object.
    """
    config = Config()

    # Try default paths if not specified
    if config_path is None:
        for default_path in DEFAULT_CONFIG_PATHS:
            if Path(default_path).exists():
                config_path = Path(default_path)
                break

    if config_path and config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
            config = _parse_config(data)

    return config


def _optional_path(value: Any) -> Path | None:
    return Path(value) if value else None


def _parse_config(data: dict[str, Any]) -> Config:
    """Parse configuration dictionary into Config object.

    Args:
        data: Raw configuration dictionary.

    Returns:
        Config object.
    """
    config = Config()

    if "hashing" in data:
        hashing_data = data["hashing"] or {}
        config.hashing = HashingConfig(
            algorithm=str(hashing_data.get("algorithm", "sha256")).lower(),
            exclude=list(hashing_data.get("exclude") or []),
            workers=hashing_data.get("workers"),
            follow_symlinks=hashing_data.get("follow_symlinks", False),
            archives=hashing_data.get("archives", False),
            chunk_size=hashing_data.get("chunk_size", 65536),
        )

    if "verify" in data:
        verify_data = data["verify"] or {}
        config.verify = VerifyConfig(
            base_dir=_optional_path(verify_data.get("base_dir")),
            allow_absolute=verify_data.get("allow_absolute", False),
            manifest_format=str(verify_data.get("manifest_format", "csv")).lower(),
        )

    if "security" in data:
        security_data = data["security"] or {}
        config.security = SecurityConfig(
            allow_weak=security_data.get("allow_weak", False),
        )

    if "output" in data:
        output_data = data["output"] or {}
        config.output = OutputConfig(
            format=str(output_data.get("format", "text")).lower(),
            quiet=output_data.get("quiet", False),
            progress=output_data.get("progress", False),
        )

    if "logging" in data:
        logging_data = data["logging"] or {}
        config.logging = LoggingConfig(
            level=str(logging_data.get("level", "ERROR")).upper(),
            file=_optional_path(logging_data.get("file")),
            operations_log=_optional_path(logging_data.get("operations_log")),
        )

    return config


def validate_config(config: Config) -> list[str]:
    """Validate configuration, return list of issues.

    Args:
        config: Configuration to validate.

    Returns:
        List of validation issue messages.
    """
    issues = []

    valid_algorithms = {a.value for a in Algorithm}
    if config.hashing.algorithm not in valid_algorithms:
        issues.append(f"Unknown algorithm: {config.hashing.algorithm}")

    workers = config.hashing.workers
    if workers is not None and (not isinstance(workers, int) or workers < 1):
        issues.append("workers must be at least 1")

    if not isinstance(config.hashing.chunk_size, int) or config.hashing.chunk_size <= 0:
        issues.append("chunk_size must be positive")

    try:
        compile_exclusions(config.hashing.exclude)
    except InvalidGlobPattern as e:
        issues.append(str(e))

    valid_formats = {f.value for f in ManifestFormat}
    if config.output.format not in valid_formats:
        issues.append(f"Invalid output format: {config.output.format}")
    if config.verify.manifest_format not in valid_formats:
        issues.append(f"Invalid manifest format: {config.verify.manifest_format}")

    return issues


def build_hash_config(config: Config, **overrides: Any) -> HashConfig:
    """Build the core run configuration from file settings.

    Args:
        config: Loaded configuration.
        **overrides: HashConfig fields to set instead (None values are ignored).

    Returns:
        HashConfig for the core entry points.
    """
    hash_config = HashConfig(
        algorithm=Algorithm(config.hashing.algorithm),
        exclusions=tuple(config.hashing.exclude),
        base_dir=config.verify.base_dir,
        allow_absolute_paths=config.verify.allow_absolute,
        allow_weak_algorithm=config.security.allow_weak,
        follow_symlinks=config.hashing.follow_symlinks,
        workers=config.hashing.workers,
        archives=config.hashing.archives,
        chunk_size=config.hashing.chunk_size,
    )
    return replace(hash_config, **{k: v for k, v in overrides.items() if v is not None})


def create_default_config(path: Path) -> None:
    """Create default configuration file.

    Args:
        path: Path to write config file.
    """
    default_config = """# hashcc configuration
# Command line flags take precedence over these values

hashing:
  # md5 and sha1 also require security.allow_weak
  algorithm: "sha256"
  exclude:
    - "**/*.tmp"
    - "**/.git/**"
  # Worker threads, omit for a CPU-based default
  # workers: 8
  follow_symlinks: false
  # Hash members of .zip, .tar, .tar.gz and .tgz files individually
  archives: false
  chunk_size: 65536

verify:
  # base_dir: "/data"
  allow_absolute: false
  manifest_format: "csv"

security:
  allow_weak: false

output:
  # text, sumfile, csv or json
  format: "text"
  quiet: false
  progress: false

logging:
  level: "ERROR"
  # file: "./logs/hashcc.log"
  # operations_log: "./logs/operations.jsonl"
"""
    with open(path, "w", encoding="utf-8") as f:
        f.write(default_config)
