"""CLI commands using Typer."""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from hashcc.cli.config import (
    Config,
    build_hash_config,
    create_default_config,
    load_config,
    validate_config,
)
from hashcc.cli.output import RichOutput
from hashcc.core.dispatcher import hash_path, hash_stream
from hashcc.core.verifier import compare_file, verify_manifest
from hashcc.errors import (
    InvalidDigestString,
    InvalidGlobPattern,
    ManifestReadError,
    WeakAlgorithmRejected,
)
from hashcc.models.records import Algorithm, DigestRecord, HashConfig, HashRunResult
from hashcc.utils.logging import RunLogger, setup_logging
from hashcc.utils.manifest import ManifestFormat, write_manifest, write_records

app = typer.Typer(
    name="hashcc",
    help=(
        "Generate, compare, and verify file hashes. "
        "A parallel hashing utility supporting MD5, SHA-1, SHA-256, SHA-512, and BLAKE3."
    ),
    add_completion=False,
    no_args_is_help=True,
)
console = Console(emoji=False)
err_console = Console(stderr=True, emoji=False)
output = RichOutput(console, err_console)


@dataclass
class CliState:
    """Options shared by every command."""

    config: Config
    format: ManifestFormat
    quiet: bool
    output_file: Path | None
    allow_weak: bool
    run_logger: RunLogger


def get_config(config_path: Optional[Path]) -> Config:
    """Load and validate configuration.

    Args:
        config_path: Optional path to config file.

    Returns:
        Validated Config object.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    try:
        config = load_config(config_path)
    except (OSError, yaml.YAMLError) as e:
        output.print_error(f"Cannot load config: {config_path}", str(e))
        raise typer.Exit(2)

    issues = validate_config(config)
    if issues:
        for issue in issues:
            output.print_warning(issue)
        output.print_error("Invalid configuration")
        raise typer.Exit(2)

    return config


def _hash_config(state: CliState, **overrides: Any) -> HashConfig:
    """Merge command line overrides into the configured run options."""
    if state.allow_weak:
        overrides["allow_weak_algorithm"] = True
    return build_hash_config(state.config, **overrides)


def _emit_records(records: list[DigestRecord], state: CliState) -> None:
    """Write records to the output file or stdout in the selected format."""
    if state.output_file:
        write_manifest(records, state.output_file, state.format)
        return

    if state.quiet and state.format in (ManifestFormat.TEXT, ManifestFormat.SUMFILE):
        return

    write_records(records, sys.stdout, state.format)
    sys.stdout.flush()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to config file",
    ),
    format: Optional[ManifestFormat] = typer.Option(
        None,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: text, json, csv, sumfile",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress normal output",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Save output to a file",
    ),
    allow_weak: bool = typer.Option(
        False,
        "--allow-weak",
        help="Allow using weak algorithms (md5, sha1)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Write a debug log to this file",
    ),
) -> None:
    """Generate, compare, and verify file hashes."""
    config = get_config(config_path)

    setup_logging(
        level="DEBUG" if verbose else config.logging.level,
        log_file=log_file or config.logging.file,
        verbose=verbose,
    )

    ctx.obj = CliState(
        config=config,
        format=format or ManifestFormat(config.output.format),
        quiet=quiet or config.output.quiet,
        output_file=output_file,
        allow_weak=allow_weak,
        run_logger=RunLogger(config.logging.operations_log),
    )


@app.command()
def generate(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        exists=True,
        help="File or directory to hash. Reads stdin when omitted.",
    ),
    algo: Optional[Algorithm] = typer.Option(
        None,
        "--algo",
        "-a",
        case_sensitive=False,
        help="Digest algorithm (default sha256)",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        "-x",
        help="Exclude files matching a glob, e.g. '**/*.tmp' (repeatable)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-j",
        min=1,
        help="Number of hashing threads",
    ),
    follow_symlinks: bool = typer.Option(
        False,
        "--follow-symlinks",
        help="Follow symbolic links while walking directories",
    ),
    archives: bool = typer.Option(
        False,
        "--archives",
        help="Hash members of zip and tar archives individually",
    ),
    progress: bool = typer.Option(
        False,
        "--progress",
        help="Show a progress bar",
    ),
) -> None:
    """Hash a file, a directory tree, or stdin.

    Also available as gen.
    """
    state: CliState = ctx.obj

    exclusions = tuple(state.config.hashing.exclude) + tuple(exclude or ())
    hash_config = _hash_config(
        state,
        algorithm=algo,
        exclusions=exclusions,
        workers=workers,
        follow_symlinks=True if follow_symlinks else None,
        archives=True if archives else None,
    )

    try:
        if path is None:
            digest = hash_stream(typer.get_binary_stream("stdin"), hash_config)
            typer.echo(digest)
            return

        if progress or state.config.output.progress:
            result = _hash_with_progress(path, hash_config, state)
        else:
            result = hash_path(path, hash_config, operation_logger=state.run_logger)

    except (WeakAlgorithmRejected, InvalidGlobPattern) as e:
        output.print_error(str(e))
        raise typer.Exit(2)

    _emit_records(result.records, state)
    output.print_hash_failures(result.failures)

    if not result.clean:
        raise typer.Exit(1)


def _hash_with_progress(path: Path, hash_config: HashConfig, state: CliState) -> HashRunResult:
    with output.create_progress_bar() as progress:
        task = progress.add_task("Hashing...", total=None)

        def progress_callback(current: int, total: int, message: str) -> None:
            progress.update(task, completed=current, total=total, description=escape(message[-50:]))

        return hash_path(
            path,
            hash_config,
            progress_callback=progress_callback,
            operation_logger=state.run_logger,
        )


@app.command()
def compare(
    ctx: typer.Context,
    input_hash: str = typer.Argument(
        ...,
        metavar="HASH",
        help="Expected digest (hex)",
    ),
    file_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        metavar="FILE",
        help="File to check",
    ),
    algo: Optional[Algorithm] = typer.Option(
        None,
        "--algo",
        "-a",
        case_sensitive=False,
        help="Digest algorithm (default sha256)",
    ),
) -> None:
    """Compare a file to a known hash.

    Also available as cmp.
    """
    state: CliState = ctx.obj
    hash_config = _hash_config(state, algorithm=algo)

    try:
        result = compare_file(input_hash, file_path, hash_config)
    except (WeakAlgorithmRejected, InvalidDigestString) as e:
        output.print_error(str(e))
        raise typer.Exit(2)
    except OSError as e:
        output.print_error(f"Cannot read {file_path}", str(e))
        raise typer.Exit(2)

    if not result.matched or not state.quiet:
        output.print_compare_result(result)

    if not result.matched:
        raise typer.Exit(1)


@app.command()
def verify(
    ctx: typer.Context,
    checksum_file: Path = typer.Argument(
        ...,
        metavar="MANIFEST",
        help="Manifest of path/hash pairs (CSV by default)",
    ),
    algo: Optional[Algorithm] = typer.Option(
        None,
        "--algo",
        "-a",
        case_sensitive=False,
        help="Digest algorithm the manifest was generated with (default sha256)",
    ),
    base_dir: Optional[Path] = typer.Option(
        None,
        "--base-dir",
        help="Resolve relative paths under this directory and reject escapes",
    ),
    allow_absolute: bool = typer.Option(
        False,
        "--allow-absolute",
        help="Allow absolute paths in the manifest",
    ),
    sumfile: bool = typer.Option(
        False,
        "--sumfile",
        help="Manifest is a '<hash>  <path>' sumfile",
    ),
    manifest_format: Optional[ManifestFormat] = typer.Option(
        None,
        "--manifest-format",
        case_sensitive=False,
        help="Manifest format: csv, sumfile, json",
    ),
) -> None:
    """Verify files against a manifest of hashes.

    Also available as ver or check.
    """
    state: CliState = ctx.obj
    hash_config = _hash_config(
        state,
        algorithm=algo,
        base_dir=base_dir,
        allow_absolute_paths=True if allow_absolute else None,
    )

    if sumfile:
        fmt = ManifestFormat.SUMFILE
    else:
        fmt = manifest_format or ManifestFormat(state.config.verify.manifest_format)

    try:
        summary = verify_manifest(
            checksum_file,
            hash_config,
            format=fmt,
            operation_logger=state.run_logger,
        )
    except (WeakAlgorithmRejected, ManifestReadError) as e:
        output.print_error(str(e))
        raise typer.Exit(2)

    for diagnostic in summary.diagnostics:
        output.print_diagnostic(diagnostic, quiet=state.quiet)

    if not state.quiet:
        output.print_verification_summary(summary)

    if not summary.clean:
        raise typer.Exit(summary.exit_code)


@app.command()
def init(
    path: Path = typer.Argument(
        Path("hashcc.yaml"),
        help="Config file to create",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing file",
    ),
) -> None:
    """Write a default configuration file."""
    if path.exists() and not force:
        output.print_error(f"{path} already exists", "Use --force to overwrite it.")
        raise typer.Exit(1)

    create_default_config(path)
    output.print_success(f"Configuration written to {path}")


# Short aliases
app.command("gen", hidden=True)(generate)
app.command("cmp", hidden=True)(compare)
app.command("ver", hidden=True)(verify)
app.command("check", hidden=True)(verify)


if __name__ == "__main__":
    app()
