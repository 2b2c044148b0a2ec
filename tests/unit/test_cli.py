"""Unit tests for the CLI commands and runner."""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from scuba import __version__
from scuba.audit.crawler import CrawlerError
from scuba.audit.input.link_collector import SeedLoadError
from scuba.audit.models.audit import AuditRecord, Report
from scuba.cli.config import CLIConfiguration
from scuba.cli.main import app
from scuba.cli.runner import CLIRunner, ExitCode


SEED = "https://www.example.com/"


@pytest.fixture
def cli():
    return CliRunner()


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run commands where no config file can be auto-discovered."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_runner(isolated_cwd):
    """Replace the browser-backed runner and logging setup."""
    with patch("scuba.cli.main.CLIRunner") as runner_cls, \
         patch("scuba.cli.main.configure_logging") as logging_setup:
        runner_cls.return_value.run = AsyncMock(return_value=ExitCode.SUCCESS)
        runner_cls.logging_setup = logging_setup
        yield runner_cls


class TestCommands:
    """Tests for the Typer commands."""

    def test_version(self, cli):
        result = cli.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_run_requires_seed(self, cli, mock_runner):
        result = cli.invoke(app, ["run"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        mock_runner.assert_not_called()

    def test_run_rejects_invalid_seed(self, cli, mock_runner):
        result = cli.invoke(app, ["run", "ftp://example.com/"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        mock_runner.assert_not_called()

    def test_run_success(self, cli, mock_runner):
        result = cli.invoke(app, ["run", SEED])

        assert result.exit_code == ExitCode.SUCCESS
        seed, config = mock_runner.call_args.args
        assert seed == SEED
        assert isinstance(config, CLIConfiguration)
        mock_runner.logging_setup.assert_called_once_with(verbose=False, quiet=False)

    @pytest.mark.parametrize("code", [ExitCode.PAGE_FAILURES, ExitCode.SEED_UNREACHABLE, ExitCode.RUNTIME_ERROR])
    def test_run_exit_code_passthrough(self, cli, mock_runner, code):
        mock_runner.return_value.run = AsyncMock(return_value=code)

        result = cli.invoke(app, ["run", SEED])

        assert result.exit_code == code

    def test_run_flags_become_overrides(self, cli, mock_runner, isolated_cwd):
        out = isolated_cwd / "report.json"
        result = cli.invoke(app, [
            "run", SEED,
            "--origin", "https://www.example.com",
            "--origin", "https://shop.example.com",
            "--special", "/checkout",
            "--max-pages", "25",
            "--seed-timeout", "90",
            "--timeout", "15",
            "--idle-timeout", "2.5",
            "--settle", "0",
            "--format", "json",
            "--out", str(out),
            "--headful",
            "--verbose",
        ])

        assert result.exit_code == 0, result.output
        config = mock_runner.call_args.args[1]
        assert config.crawl.allowed_origins == ["https://www.example.com", "https://shop.example.com"]
        assert config.crawl.special_layout_paths == ["/checkout"]
        assert config.crawl.max_pages == 25
        assert config.crawl.seed_timeout_ms == 90000
        assert config.crawl.navigation_timeout_ms == 15000
        assert config.crawl.idle_timeout_ms == 2500
        assert config.crawl.settle_delay_ms == 0
        assert config.output.format == "json"
        assert config.output.output_file == out
        assert config.browser.headful is True
        assert config.loaded_from[-1] == "CLI flags"

    def test_run_with_config_file(self, cli, mock_runner, isolated_cwd):
        path = isolated_cwd / "site.yaml"
        path.write_text("crawl:\n  special_layout_paths: ['/lp/']\n  max_pages: 10\n")

        result = cli.invoke(app, ["run", SEED, "--config", str(path), "--max-pages", "3"])

        assert result.exit_code == 0
        config = mock_runner.call_args.args[1]
        assert config.crawl.special_layout_paths == ["/lp/"]
        assert config.crawl.max_pages == 3

    def test_run_missing_config_file(self, cli, mock_runner, isolated_cwd):
        result = cli.invoke(app, ["run", SEED, "--config", str(isolated_cwd / "missing.yaml")])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        mock_runner.assert_not_called()

    def test_run_invalid_option_value(self, cli, mock_runner):
        result = cli.invoke(app, ["run", SEED, "--format", "xml"])

        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_run_conflicting_verbosity(self, cli, mock_runner):
        result = cli.invoke(app, ["run", SEED, "--verbose", "--quiet"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        mock_runner.assert_not_called()

    def test_print_config(self, cli, mock_runner):
        result = cli.invoke(app, ["run", "--print-config", "--max-pages", "4"])

        assert result.exit_code == 0
        assert "# Effective Configuration" in result.output
        assert "max_pages: 4" in result.output
        mock_runner.assert_not_called()

    def test_validate_config_valid(self, cli, isolated_cwd):
        path = isolated_cwd / "scuba.json"
        path.write_text(json.dumps({"crawl": {"brand_selectors": [".navbar-brand img"]}}))

        result = cli.invoke(app, ["validate-config", str(path)])

        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_validate_config_invalid(self, cli, isolated_cwd):
        path = isolated_cwd / "bad.yaml"
        path.write_text("crawl:\n  seed_timeout_ms: -1\n")

        result = cli.invoke(app, ["validate-config", str(path)])

        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_validate_config_missing(self, cli, isolated_cwd):
        result = cli.invoke(app, ["validate-config", str(isolated_cwd / "none.yaml")])

        assert result.exit_code == ExitCode.CONFIG_ERROR


def _fake_browser_factory():
    """Factory whose session yields a placeholder page without a browser."""
    factory = MagicMock()

    @asynccontextmanager
    async def session():
        yield MagicMock()

    factory.session = session
    return factory


def _report(*records):
    report = Report(seed_url=SEED)
    for record in records:
        report.add_record(record)
    report.close()
    return report


class TestCLIRunner:
    """Tests for CLIRunner exit code mapping."""

    @pytest.fixture
    def config(self):
        return CLIConfiguration(output={"quiet": True})

    @pytest.mark.asyncio
    async def test_all_pass(self, config):
        runner = CLIRunner(SEED, config)
        with patch.object(runner, "_run_audit", AsyncMock(return_value=_report(AuditRecord(url=SEED)))):
            assert await runner.run() == ExitCode.SUCCESS

    @pytest.mark.asyncio
    async def test_page_failure(self, config):
        failing = AuditRecord(url=SEED + "contact", issues=["Status 500"])
        runner = CLIRunner(SEED, config)
        with patch.object(runner, "_run_audit", AsyncMock(return_value=_report(AuditRecord(url=SEED), failing))):
            assert await runner.run() == ExitCode.PAGE_FAILURES

    @pytest.mark.asyncio
    async def test_advisory_only_passes(self, config):
        record = AuditRecord(url=SEED, issues=["Missing H1", "Missing Meta Desc"])
        runner = CLIRunner(SEED, config)
        with patch.object(runner, "_run_audit", AsyncMock(return_value=_report(record))):
            assert await runner.run() == ExitCode.SUCCESS

    @pytest.mark.asyncio
    async def test_seed_unreachable(self, config, capsys):
        runner = CLIRunner(SEED, config)
        error = SeedLoadError(SEED, "returned 503", status=503)
        with patch.object(runner, "_run_audit", AsyncMock(side_effect=error)):
            assert await runner.run() == ExitCode.SEED_UNREACHABLE

        assert "returned 503" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_crawler_error(self, config):
        runner = CLIRunner(SEED, config)
        with patch.object(runner, "_run_audit", AsyncMock(side_effect=CrawlerError("bad seed"))):
            assert await runner.run() == ExitCode.CONFIG_ERROR

    @pytest.mark.asyncio
    async def test_unexpected_error(self, config):
        runner = CLIRunner(SEED, config)
        with patch.object(runner, "_run_audit", AsyncMock(side_effect=RuntimeError("browser crashed"))):
            assert await runner.run() == ExitCode.RUNTIME_ERROR

    @pytest.mark.asyncio
    async def test_full_run_with_fake_browser(self, driver_factory, example_site, capsys, tmp_path):
        """Browser factory is stubbed; orchestration and rendering are real."""
        out = tmp_path / "report.txt"
        config = CLIConfiguration(crawl={"settle_delay_ms": 0}, output={"output_file": out})
        fake_driver = driver_factory(example_site)

        with patch("scuba.cli.runner.create_browser_factory", return_value=_fake_browser_factory()) as create, \
             patch("scuba.cli.runner.PlaywrightPageDriver", return_value=fake_driver):
            exit_code = await CLIRunner(SEED, config).run()

        assert exit_code == ExitCode.SUCCESS
        assert create.call_args.kwargs["headless"] is True

        stdout = capsys.readouterr().out
        # Rows are streamed live when the table goes to a file
        assert "✅  /  none" in stdout
        assert "✅  /about  none" in stdout
        assert f"Report written to {out}" in stdout

        written = out.read_text(encoding="utf-8")
        assert "2 pages: 2 passed, 0 failed" in written

    @pytest.mark.asyncio
    async def test_verbose_run_prints_stats(self, driver_factory, example_site, capsys):
        config = CLIConfiguration(crawl={"settle_delay_ms": 0}, output={"verbose": True})

        with patch("scuba.cli.runner.create_browser_factory", return_value=_fake_browser_factory()), \
             patch("scuba.cli.runner.PlaywrightPageDriver", return_value=driver_factory(example_site)):
            runner = CLIRunner(SEED, config)
            exit_code = await runner.run()

        assert exit_code == ExitCode.SUCCESS
        assert runner.stats.urls_visited == 2

        stdout = capsys.readouterr().out
        assert "📋 PAGE DETAILS" in stdout
        assert "📊 CRAWL STATISTICS" in stdout
        assert "Urls visited: 2" in stdout
