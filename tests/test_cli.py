"""
Tests for the command line entry point

The PocketBase client is mocked; generation and formatting run for real
against a temporary directory.
"""

import logging
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

import pytest

from pb_model_generator.cli import build_parser, create_output_directory, main, run
from pb_model_generator.exceptions import AuthenticationError, OutputWriteError

from factories import blog_collections, blog_mappings


CONFIG_TEMPLATE = """\
pocketbase:
  hosting:
    domain: 'http://127.0.0.1:8090'
    email: 'admin@example.com'
    password: 'secret'
  output_directory: '{output}'
  expansion_collection: '_pb_expansions'
"""


class TestBuildParser(TestCase):

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.config == "./pocketbase.yaml"
        assert args.output_dir is None
        assert args.verbose is False
        assert args.no_color is False
        assert args.no_format is False

    def test_flags(self):
        args = build_parser().parse_args(["-c", "pb.yaml", "-o", "out", "-v", "--no-color", "--no-format"])
        assert args.config == "pb.yaml"
        assert args.output_dir == "out"
        assert args.verbose is True
        assert args.no_color is True
        assert args.no_format is True

    def test_help_shows_example_config(self):
        assert "pocketbase:" in build_parser().format_help()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "pocketbase.yaml"
    path.write_text(CONFIG_TEMPLATE.format(output=tmp_path / "models"), encoding="utf-8")
    return path


@pytest.fixture
def mock_client():
    with patch("pb_model_generator.cli.PocketBaseClient") as client_cls:
        client = client_cls.return_value
        client.fetch_collections.return_value = blog_collections()
        client.fetch_expansion_mappings.return_value = blog_mappings()
        yield client_cls


def test_run_generates_models(config_path: Path, tmp_path: Path, mock_client):
    args = build_parser().parse_args(["-c", str(config_path)])

    assert run(args) == 0

    models_dir = tmp_path / "models"
    assert (models_dir / "__init__.py").is_file()
    assert (models_dir / "post_data.py").is_file()
    mock_client.assert_called_once_with("http://127.0.0.1:8090", timeout=30)
    client = mock_client.return_value
    client.authenticate.assert_called_once_with("admin@example.com", "secret")
    client.fetch_expansion_mappings.assert_called_once_with("_pb_expansions")


def test_run_formats_output_with_black(config_path: Path, tmp_path: Path, mock_client):
    args = build_parser().parse_args(["-c", str(config_path)])

    with patch("pb_model_generator.cli.format_generated_models", return_value=[]) as formatter:
        assert run(args) == 0

    formatter.assert_called_once()
    models_dir = (tmp_path / "models").resolve()
    formatted = [Path(p) for p in formatter.call_args.args[0]]
    assert [p.name for p in formatted] == [
        "user_data.py", "post_data.py", "category_data.py", "geo_point_data.py", "__init__.py",
    ]
    assert all(p.parent == models_dir for p in formatted)


def test_run_does_not_format_foreign_files(config_path: Path, tmp_path: Path, mock_client):
    models_dir = tmp_path / "models"
    models_dir.mkdir()
    (models_dir / "helpers.py").write_text("x=[1,2,\n3]\n", encoding="utf-8")
    args = build_parser().parse_args(["-c", str(config_path)])

    assert run(args) == 0

    assert (models_dir / "helpers.py").read_text(encoding="utf-8") == "x=[1,2,\n3]\n"


def test_run_skips_formatting(config_path: Path, mock_client):
    args = build_parser().parse_args(["-c", str(config_path), "--no-format"])

    with patch("pb_model_generator.cli.format_generated_models") as formatter:
        assert run(args) == 0

    formatter.assert_not_called()


def test_output_dir_flag_overrides_config(config_path: Path, tmp_path: Path, mock_client):
    target = tmp_path / "nested" / "pkg"
    args = build_parser().parse_args(["-c", str(config_path), "-o", str(target), "--no-format"])

    assert run(args) == 0
    assert (target / "user_data.py").is_file()


def test_authentication_failure_exits_with_error(config_path: Path, tmp_path: Path, mock_client, caplog):
    mock_client.return_value.authenticate.side_effect = AuthenticationError("Authentication failed (400)")
    args = build_parser().parse_args(["-c", str(config_path)])

    with caplog.at_level(logging.ERROR):
        assert run(args) == 1

    assert "AuthenticationError" in caplog.text
    assert not (tmp_path / "models").exists()


def test_missing_config_exits_with_error(tmp_path: Path):
    args = build_parser().parse_args(["-c", str(tmp_path / "nope.yaml")])
    assert run(args) == 1


def test_unexpected_error_exits_with_error(config_path: Path, mock_client, caplog):
    mock_client.return_value.fetch_collections.side_effect = RuntimeError("boom")
    args = build_parser().parse_args(["-c", str(config_path)])

    with caplog.at_level(logging.ERROR):
        assert run(args) == 1

    assert "unexpected error" in caplog.text


def test_main_exits_with_run_result(config_path: Path, mock_client):
    with patch("pb_model_generator.cli.setup_colored_logging") as setup_logging:
        with pytest.raises(SystemExit) as excinfo:
            main(["-c", str(config_path), "--no-color", "--no-format"])

    assert excinfo.value.code == 0
    setup_logging.assert_called_once_with(level=logging.INFO, use_colors=False)


def test_create_output_directory_failure(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(OutputWriteError):
        create_output_directory(blocker / "models")
