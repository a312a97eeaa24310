"""Tests for the command line interface."""

import hashlib
import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from hashcc.cli.commands import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every command away from any real hashcc.yaml and reset logging after."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    package_logger = logging.getLogger("hashcc")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield workdir
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class TestGenerate:
    """Tests for the generate command."""

    def test_directory_text(self, sample_tree: Path):
        """Test hashing a directory prints sorted '<hash>  <path>' lines."""
        result = runner.invoke(app, ["generate", str(sample_tree)])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert len(lines) == 7
        paths = [line.split("  ", 1)[1] for line in lines]
        assert paths == sorted(paths)
        readme = sample_tree / "README.md"
        assert f"{sha256_hex(readme.read_bytes())}  {readme}" in lines

    def test_exclude(self, sample_tree: Path):
        """Test repeated --exclude options."""
        result = runner.invoke(
            app, ["generate", "-x", "**/*.tmp", "-x", "**/build/**", str(sample_tree)]
        )

        assert result.exit_code == 0
        assert len(result.stdout.splitlines()) == 5
        assert "cache.tmp" not in result.stdout

    def test_json_format(self, hello_file: Path, hello_sha256: str):
        """Test --format json."""
        result = runner.invoke(app, ["--format", "json", "generate", str(hello_file)])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [{"path": str(hello_file), "hash": hello_sha256}]

    def test_output_file(self, sample_tree: Path, tmp_path: Path):
        """Test --output writes the manifest to a file."""
        out = tmp_path / "manifest.csv"
        result = runner.invoke(
            app, ["--format", "csv", "--output", str(out), "generate", str(sample_tree)]
        )

        assert result.exit_code == 0
        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "path,hash"
        assert len(lines) == 8

    def test_stdin(self, hello_sha256: str):
        """Test hashing stdin when no path is given."""
        result = runner.invoke(app, ["generate"], input=b"hello")

        assert result.exit_code == 0
        assert result.stdout.strip() == hello_sha256

    def test_algorithm(self, hello_file: Path):
        """Test --algo selects the digest."""
        result = runner.invoke(app, ["generate", "--algo", "sha512", str(hello_file)])

        assert result.exit_code == 0
        assert result.stdout.split()[0] == hashlib.sha512(b"hello").hexdigest()

    def test_weak_algorithm_rejected(self, hello_file: Path):
        """Test weak algorithms exit 2 without --allow-weak."""
        result = runner.invoke(app, ["generate", "--algo", "md5", str(hello_file)])

        assert result.exit_code == 2
        assert "--allow-weak" in result.output

    def test_weak_algorithm_allowed(self, hello_file: Path):
        """Test --allow-weak enables MD5."""
        result = runner.invoke(
            app, ["--allow-weak", "generate", "--algo", "md5", str(hello_file)]
        )

        assert result.exit_code == 0
        assert result.stdout.split()[0] == hashlib.md5(b"hello").hexdigest()

    def test_invalid_glob(self, sample_tree: Path):
        """Test a malformed exclusion exits 2."""
        result = runner.invoke(app, ["generate", "-x", "[oops", str(sample_tree)])

        assert result.exit_code == 2
        assert "invalid glob pattern" in result.output

    def test_quiet(self, hello_file: Path):
        """Test --quiet suppresses text output."""
        result = runner.invoke(app, ["--quiet", "generate", str(hello_file)])

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_alias(self, hello_file: Path, hello_sha256: str):
        """Test the gen alias."""
        result = runner.invoke(app, ["gen", str(hello_file)])

        assert result.exit_code == 0
        assert hello_sha256 in result.stdout


class TestCompare:
    """Tests for the compare command."""

    def test_match(self, hello_file: Path, hello_sha256: str):
        """Test a matching hash exits 0."""
        result = runner.invoke(app, ["compare", hello_sha256, str(hello_file)])

        assert result.exit_code == 0
        assert "Hash matches!" in result.output

    def test_mismatch(self, hello_file: Path):
        """Test a different hash exits 1."""
        result = runner.invoke(app, ["compare", "0" * 64, str(hello_file)])

        assert result.exit_code == 1
        assert "Hash does not match." in result.output

    def test_malformed_hash(self, hello_file: Path):
        """Test a malformed hash exits 2."""
        result = runner.invoke(app, ["compare", "abc", str(hello_file)])

        assert result.exit_code == 2
        assert "Invalid 256-bit hash: expected 64 hex chars" in result.output

    def test_weak_rejected(self, hello_file: Path):
        """Test compare applies the weak gate."""
        digest = hashlib.sha1(b"hello").hexdigest()
        result = runner.invoke(app, ["compare", "--algo", "sha1", digest, str(hello_file)])

        assert result.exit_code == 2

    def test_alias(self, hello_file: Path, hello_sha256: str):
        """Test the cmp alias."""
        result = runner.invoke(app, ["cmp", hello_sha256, str(hello_file)])
        assert result.exit_code == 0


class TestVerify:
    """Tests for the verify command."""

    def test_mixed_outcomes(self, tmp_path: Path, verify_dir: Path):
        """Test one OK, one FAILED and one MISSING exits 1 with a summary."""
        manifest = tmp_path / "SUMS"
        manifest.write_text(
            f"{sha256_hex((verify_dir / 'good.txt').read_bytes())}  good.txt\n"
            f"{sha256_hex(b'original')}  bad.txt\n"
            f"{sha256_hex(b'gone')}  missing.txt\n",
            encoding="utf-8",
        )

        result = runner.invoke(
            app, ["verify", "--sumfile", "--base-dir", str(verify_dir), str(manifest)]
        )

        assert result.exit_code == 1
        assert "Summary: OK=1 FAILED=1 MISSING=1 INVALID_PATH=0 ERROR=0" in result.output

    def test_clean_csv(self, tmp_path: Path, verify_dir: Path):
        """Test a manifest produced by generate verifies cleanly."""
        manifest = tmp_path / "manifest.csv"
        generated = runner.invoke(
            app, ["--format", "csv", "--output", str(manifest), "generate", str(verify_dir)]
        )
        assert generated.exit_code == 0

        result = runner.invoke(app, ["verify", "--allow-absolute", str(manifest)])

        assert result.exit_code == 0
        assert "Summary: OK=2 FAILED=0 MISSING=0 INVALID_PATH=0 ERROR=0" in result.output

    def test_traversal(self, tmp_path: Path, verify_dir: Path):
        """Test escaping paths are reported as invalid."""
        manifest = tmp_path / "SUMS"
        manifest.write_text(f"{'0' * 64}  ../../etc/passwd\n", encoding="utf-8")

        result = runner.invoke(
            app, ["verify", "--sumfile", "--base-dir", str(verify_dir), str(manifest)]
        )

        assert result.exit_code == 1
        assert "INVALID_PATH=1" in result.output

    def test_missing_manifest(self, tmp_path: Path):
        """Test an unreadable manifest exits 2."""
        result = runner.invoke(app, ["verify", str(tmp_path / "missing.csv")])

        assert result.exit_code == 2
        assert "cannot read manifest" in result.output

    def test_weak_rejected(self, tmp_path: Path):
        """Test verify applies the weak gate."""
        manifest = tmp_path / "SUMS"
        manifest.write_text("", encoding="utf-8")

        result = runner.invoke(app, ["verify", "--algo", "md5", "--sumfile", str(manifest)])

        assert result.exit_code == 2

    def test_check_alias(self, tmp_path: Path, verify_dir: Path):
        """Test the check alias."""
        manifest = tmp_path / "SUMS"
        manifest.write_text(
            f"{sha256_hex((verify_dir / 'good.txt').read_bytes())}  good.txt\n",
            encoding="utf-8",
        )

        result = runner.invoke(
            app,
            ["check", "--manifest-format", "sumfile", "--base-dir", str(verify_dir), str(manifest)],
        )

        assert result.exit_code == 0

    def test_colon_path_printed_verbatim(self, tmp_path: Path, verify_dir: Path):
        """Test file names with emoji shortcodes are not rewritten."""
        manifest = tmp_path / "SUMS"
        manifest.write_text(f"{'0' * 64}  my:cd:file.txt\n", encoding="utf-8")

        result = runner.invoke(
            app, ["verify", "--sumfile", "--base-dir", str(verify_dir), str(manifest)]
        )

        assert result.exit_code == 1
        assert "my:cd:file.txt" in result.output
        assert "\U0001f4bf" not in result.output


class TestHelp:
    """Tests for command help."""

    @pytest.mark.parametrize(
        "command,alias",
        [("generate", "gen"), ("compare", "cmp"), ("verify", "ver or check")],
    )
    def test_aliases_listed(self, command: str, alias: str):
        """Test each command's help names its short aliases."""
        result = runner.invoke(app, [command, "--help"])

        assert result.exit_code == 0
        assert f"Also available as {alias}" in result.output


class TestConfigAndInit:
    """Tests for init and config handling."""

    def test_init(self, isolated_cwd: Path):
        """Test init writes a config and refuses to overwrite it."""
        path = isolated_cwd / "hashcc.yaml"

        first = runner.invoke(app, ["init", str(path)])
        assert first.exit_code == 0
        assert path.exists()

        second = runner.invoke(app, ["init", str(path)])
        assert second.exit_code == 1

        forced = runner.invoke(app, ["init", "--force", str(path)])
        assert forced.exit_code == 0

    def test_config_algorithm_used(self, isolated_cwd: Path, hello_file: Path):
        """Test the configured algorithm applies when --algo is omitted."""
        (isolated_cwd / "hashcc.yaml").write_text(
            "hashing:\n  algorithm: sha512\n", encoding="utf-8"
        )

        result = runner.invoke(app, ["generate", str(hello_file)])

        assert result.exit_code == 0
        assert result.stdout.split()[0] == hashlib.sha512(b"hello").hexdigest()

    def test_invalid_config(self, isolated_cwd: Path, hello_file: Path):
        """Test an invalid config file exits 2."""
        (isolated_cwd / "hashcc.yaml").write_text(
            "hashing:\n  algorithm: crc32\n", encoding="utf-8"
        )

        result = runner.invoke(app, ["generate", str(hello_file)])

        assert result.exit_code == 2
        assert "Unknown algorithm: crc32" in result.output
