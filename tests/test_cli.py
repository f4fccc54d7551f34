import json
import logging
import sys
from pathlib import Path

from typer.testing import CliRunner

from html2md_tree.cli import app

runner = CliRunner()

PAGE = (
    "<html><body><h1>Welcome</h1>"
    "<p>This documentation site explains how to configure the service and where "
    "to find the <a href=\"/api/index.html\">API reference</a> for each release.</p>"
    "</body></html>"
)


def make_source(tmp_path: Path) -> Path:
    source = tmp_path / "html"
    (source / "section").mkdir(parents=True)
    (source / "section" / "welcome.html").write_text(PAGE, encoding="utf-8")
    (source / "readme.txt").write_text("ignored", encoding="utf-8")
    return source


def test_help_exits_zero() -> None:
    result = runner.invoke(app, ["-h"])
    assert result.exit_code == 0
    assert "--use-markitdown" in result.output


def test_convert_tree_with_domain(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    source = make_source(tmp_path)
    target = tmp_path / "md"
    result = runner.invoke(app, ["-s", str(source), "-t", str(target), "-d", "example.com"])
    assert result.exit_code == 0, result.output
    markdown = (target / "section" / "welcome.md").read_text(encoding="utf-8")
    assert "example.com/api/index.html" in markdown
    assert not (target / "readme.txt").exists()


def test_missing_source_exits_with_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["--source", str(tmp_path / "nope"), "--target", str(tmp_path / "md")])
    assert result.exit_code == 1
    assert "Conversion failed" in result.output


def test_markitdown_strategy_from_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    source = make_source(tmp_path)
    script = tmp_path / "tool.py"
    script.write_text(
        "import sys\nsys.stdout.write('converted by tool: ' + open(sys.argv[1]).read())\n",
        encoding="utf-8",
    )
    config = tmp_path / "config.toml"
    config.write_text(
        f"[converter]\nmarkitdown_command = {json.dumps([sys.executable, str(script)])}\n",
        encoding="utf-8",
    )
    target = tmp_path / "md"
    result = runner.invoke(
        app, ["-s", str(source), "-t", str(target), "-m", "--config", str(config), "-d", ""]
    )
    assert result.exit_code == 0, result.output
    output = (target / "section" / "welcome.md").read_text(encoding="utf-8")
    assert output.startswith("converted by tool: ")
    assert 'href="/api/index.html"' in output


def test_fail_on_error_sets_exit_status(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    source = make_source(tmp_path)
    log_file = tmp_path / "run.jsonl"
    args = [
        "-s", str(source),
        "-t", str(tmp_path / "md"),
        "-m",
        "--fail-on-error",
        "--log-file", str(log_file),
    ]
    config = tmp_path / "config.toml"
    config.write_text('[converter]\nmarkitdown_command = ["html2md-tree-missing-tool"]\n', encoding="utf-8")
    result = runner.invoke(app, [*args, "--config", str(config)])
    assert result.exit_code == 1
    entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
    assert entry["status"] == "failure"
    assert entry["error_code"] == "TOOL_NOT_FOUND"
    assert entry["relative"] == "section/welcome.html"


def test_show_config_prints_effective_settings(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["-s", "site", "-d", "docs.example.com", "-m", "--show-config"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["converter"]["source_dir"] == "site"
    assert payload["converter"]["domain"] == "docs.example.com"
    assert payload["converter"]["use_markitdown"] is True
    assert not (tmp_path / "markdown_files").exists()


def test_readability_logger_routed_through_rich(tmp_path: Path, monkeypatch) -> None:
    from rich.logging import RichHandler

    monkeypatch.chdir(tmp_path)
    source = make_source(tmp_path)
    result = runner.invoke(app, ["-s", str(source), "-t", str(tmp_path / "md")])
    assert result.exit_code == 0, result.output
    readability_logger = logging.getLogger("readability")
    assert readability_logger.level == logging.CRITICAL
    assert any(isinstance(h, RichHandler) for h in readability_logger.handlers)

    result = runner.invoke(app, ["-s", str(source), "-t", str(tmp_path / "md"), "-v"])
    assert result.exit_code == 0, result.output
    assert readability_logger.level == logging.DEBUG
