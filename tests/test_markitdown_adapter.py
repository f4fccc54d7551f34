import sys
from pathlib import Path

import pytest

from html2md_tree.adapters.markitdown import MarkitdownAdapter
from html2md_tree.errors import ConversionError
from html2md_tree.models import ConversionOptions

FAKE_TOOL = """
import sys
from pathlib import Path

text = Path(sys.argv[1]).read_text(encoding="utf-8")
if "FAIL" in text:
    sys.stdout.write("partial output")
    sys.stderr.write("cannot convert")
    sys.exit(3)
sys.stdout.write("# converted\\n\\n" + text)
"""


@pytest.fixture
def fake_tool(tmp_path: Path) -> tuple[str, ...]:
    script = tmp_path / "fake_markitdown.py"
    script.write_text(FAKE_TOOL, encoding="utf-8")
    return (sys.executable, str(script))


def make_tree(tmp_path: Path, html: str) -> tuple[Path, Path]:
    source_dir = tmp_path / "html"
    source_dir.mkdir()
    source = source_dir / "page.html"
    source.write_text(html, encoding="utf-8")
    return source, tmp_path / "md" / "page.md"


def test_tool_output_written_to_target(tmp_path: Path, fake_tool) -> None:
    source, target = make_tree(tmp_path, '<a href="/docs/page">docs</a>')
    options = ConversionOptions(source_dir=source.parent, target_dir=target.parent)
    response = MarkitdownAdapter(fake_tool).convert_file(source, target, options)
    assert response.output_path == target
    content = target.read_text(encoding="utf-8")
    assert content.startswith("# converted")
    assert 'href="/docs/page"' in content


def test_domain_rewrites_through_temporary_sibling(tmp_path: Path, fake_tool) -> None:
    source, target = make_tree(tmp_path, '<a href="/docs/page">docs</a>')
    options = ConversionOptions(
        source_dir=source.parent, target_dir=target.parent, domain="example.com"
    )
    MarkitdownAdapter(fake_tool).convert_file(source, target, options)
    assert "example.com/docs/page" in target.read_text(encoding="utf-8")
    assert [p.name for p in source.parent.iterdir()] == ["page.html"]
    assert source.read_text(encoding="utf-8") == '<a href="/docs/page">docs</a>'


def test_tool_failure_leaves_no_output(tmp_path: Path, fake_tool) -> None:
    source, target = make_tree(tmp_path, "<p>FAIL</p>")
    options = ConversionOptions(
        source_dir=source.parent, target_dir=target.parent, domain="example.com"
    )
    with pytest.raises(ConversionError) as exc:
        MarkitdownAdapter(fake_tool).convert_file(source, target, options)
    assert exc.value.code == "TOOL_FAILED"
    assert "cannot convert" in str(exc.value)
    assert not target.exists()
    assert list(target.parent.iterdir()) == []
    assert [p.name for p in source.parent.iterdir()] == ["page.html"]


def test_missing_tool_reports_not_found(tmp_path: Path) -> None:
    source, target = make_tree(tmp_path, "<p>x</p>")
    options = ConversionOptions(source_dir=source.parent, target_dir=target.parent)
    adapter = MarkitdownAdapter(("html2md-tree-missing-tool",))
    with pytest.raises(ConversionError) as exc:
        adapter.convert_file(source, target, options)
    assert exc.value.code == "TOOL_NOT_FOUND"
    assert not target.exists()


def test_empty_command_rejected() -> None:
    with pytest.raises(ValueError):
        MarkitdownAdapter(())
