"""Unit tests for the command line entry point."""

import io

import pytest
import yaml
from loguru import logger as _logger

from conftest import PYRAX_URL, pyrax_record
from page2atom import config as config_module
from page2atom.cli import EXIT_CONFIG_ERROR, EXIT_FEED_FAILED, EXIT_OK, build_parser, main
from page2atom.core.pipeline import FeedPipeline


@pytest.fixture(autouse=True)
def isolated_run(monkeypatch, tmp_path):
    """Reset global config and logging around each run."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)
    yield
    _logger.remove()


@pytest.fixture
def feeds_file(tmp_path):
    """Feeds file with the pyrax feed writing under tmp_path."""
    path = tmp_path / "feeds.yaml"
    path.write_text(
        yaml.safe_dump({"feeds": [pyrax_record(file=str(tmp_path / "pyrax.atom"))]}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def pipeline(page_server, fetcher_config, now):
    return FeedPipeline(
        fetcher=page_server.fetcher(fetcher_config),
        clock=lambda: now,
        preview_stream=io.StringIO(),
    )


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test that unset flags defer to the configuration."""
        args = build_parser().parse_args([])

        assert args.dry_run is None
        assert args.fail_fast is None
        assert args.feeds is None

    def test_flags(self):
        """Test flag parsing."""
        args = build_parser().parse_args(["--dry-run", "--fail-fast", "--feeds", "f.yaml", "--log-level", "DEBUG"])

        assert args.dry_run is True
        assert args.fail_fast is True
        assert args.feeds == "f.yaml"
        assert args.log_level == "DEBUG"


class TestMain:
    """Tests for main."""

    def test_generates_feeds(self, feeds_file, pipeline, page_server, pyrax_page, tmp_path):
        """Test a successful run."""
        page_server.serve(PYRAX_URL, pyrax_page)

        assert main(["--feeds", str(feeds_file)], pipeline=pipeline) == EXIT_OK
        assert (tmp_path / "pyrax.atom").is_file()

    def test_dry_run_writes_nothing(self, feeds_file, pipeline, page_server, pyrax_page, tmp_path):
        """Test that --dry-run previews instead of writing."""
        page_server.serve(PYRAX_URL, pyrax_page)

        assert main(["--feeds", str(feeds_file), "--dry-run"], pipeline=pipeline) == EXIT_OK
        assert not (tmp_path / "pyrax.atom").exists()
        assert "2013.06.20 - Version 1.4.6" in pipeline.preview_stream.getvalue()

    def test_dry_run_from_environment(self, feeds_file, pipeline, page_server, pyrax_page, tmp_path, monkeypatch):
        """Test that the configured dry_run applies without the flag."""
        monkeypatch.setenv("PAGE2ATOM_DRY_RUN", "true")
        page_server.serve(PYRAX_URL, pyrax_page)

        assert main(["--feeds", str(feeds_file)], pipeline=pipeline) == EXIT_OK
        assert not (tmp_path / "pyrax.atom").exists()

    def test_failed_feed_exit_code(self, feeds_file, pipeline):
        """Test that a failing feed gives a non-zero exit code."""
        assert main(["--feeds", str(feeds_file)], pipeline=pipeline) == EXIT_FEED_FAILED

    def test_missing_feeds_file(self, tmp_path, pipeline):
        """Test that a missing feeds file is a configuration error."""
        assert main(["--feeds", str(tmp_path / "missing.yaml")], pipeline=pipeline) == EXIT_CONFIG_ERROR

    def test_invalid_feed_definition(self, tmp_path, pipeline):
        """Test that a bad pattern is rejected before anything runs."""
        path = tmp_path / "feeds.yaml"
        path.write_text(
            yaml.safe_dump({"feeds": [pyrax_record(**{"entry.pattern": "<h3>(unclosed"})]}),
            encoding="utf-8",
        )

        assert main(["--feeds", str(path)], pipeline=pipeline) == EXIT_CONFIG_ERROR

    def test_missing_config_file(self, tmp_path, capsys):
        """Test that an explicit missing config file is reported."""
        assert main(["--config", str(tmp_path / "missing.yaml")]) == EXIT_CONFIG_ERROR
        assert "Configuration file not found" in capsys.readouterr().err

    def test_config_file_sets_feeds_file(self, feeds_file, pipeline, page_server, pyrax_page, tmp_path):
        """Test that feeds_file is read from the config file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.safe_dump({"feeds_file": str(feeds_file), "logging": {"console_enabled": False}}),
            encoding="utf-8",
        )
        page_server.serve(PYRAX_URL, pyrax_page)

        assert main(["--config", str(config_path)], pipeline=pipeline) == EXIT_OK
        assert (tmp_path / "pyrax.atom").is_file()
