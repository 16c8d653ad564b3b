from pathlib import Path

import pytest

from chatify.settings import ToolSpec
from chatify.tools import get_tool
from tests.stub_project import StubProject


@pytest.mark.asyncio
async def test_apply_patch_tool_success(tmp_path: Path):
    (tmp_path / "f.txt").write_text("pre\nold\npost\n", encoding="utf-8")
    (tmp_path / "gone.txt").write_text("remove me", encoding="utf-8")

    patch_text = """*** Begin Patch
*** Update File: f.txt
@@
 pre
-old
+new
 post
*** Add File: new.txt
+hello
*** Delete File: gone.txt
*** End Patch"""

    ToolClass = get_tool("apply_patch")
    assert ToolClass is not None, "apply_patch tool should be registered"
    tool = ToolClass(StubProject(tmp_path))

    resp = await tool.run(ToolSpec(name="apply_patch"), {"text": patch_text})

    assert resp is not None
    assert resp.type.value == "text"
    assert resp.text == "Added: new.txt\nModified: f.txt\nDeleted: gone.txt"
    assert (tmp_path / "f.txt").read_text(encoding="utf-8") == "pre\nnew\npost\n"
    assert (tmp_path / "new.txt").read_text(encoding="utf-8") == "hello"
    assert not (tmp_path / "gone.txt").exists()


@pytest.mark.asyncio
async def test_apply_patch_tool_reports_partial_failure(tmp_path: Path):
    patch_text = "\n".join(
        [
            "*** Begin Patch",
            "*** Add File: a.txt",
            "+a",
            "*** Update File: missing.txt",
            "@@",
            "-x",
            "+y",
            "*** End Patch",
        ]
    )
    tool = get_tool("apply_patch")(StubProject(tmp_path))
    resp = await tool.run(ToolSpec(name="apply_patch"), {"text": patch_text})

    assert resp.text.startswith("Patch application failed: File not found: missing.txt")
    assert "Added: a.txt" in resp.text
    assert (tmp_path / "a.txt").exists()


@pytest.mark.asyncio
async def test_apply_patch_tool_parse_error(tmp_path: Path):
    tool = get_tool("apply_patch")(StubProject(tmp_path))
    resp = await tool.run(ToolSpec(name="apply_patch"), {"text": "*** Add File: x\n+y"})
    assert resp.text == (
        "Patch application failed: Invalid patch format: missing Begin/End markers\n"
        "No changes were applied."
    )


@pytest.mark.asyncio
async def test_apply_patch_tool_requires_text(tmp_path: Path):
    tool = get_tool("apply_patch")(StubProject(tmp_path))
    with pytest.raises(ValueError):
        await tool.run(ToolSpec(name="apply_patch"), {"text": "  "})


@pytest.mark.asyncio
async def test_apply_patch_tool_reports_path_escape_after_partial_apply(tmp_path: Path):
    base = tmp_path / "proj"
    base.mkdir()
    patch_text = "\n".join(
        [
            "*** Begin Patch",
            "*** Add File: ok.txt",
            "+ok",
            "*** Add File: ../evil.txt",
            "+evil",
            "*** End Patch",
        ]
    )
    tool = get_tool("apply_patch")(StubProject(base))
    resp = await tool.run(ToolSpec(name="apply_patch"), {"text": patch_text})

    assert resp.text.startswith("Patch application failed: Cannot apply changes to ../evil.txt:")
    assert "remain on disk" in resp.text
    assert "Added: ok.txt" in resp.text
    assert (base / "ok.txt").read_text(encoding="utf-8") == "ok"
    assert not (tmp_path / "evil.txt").exists()
