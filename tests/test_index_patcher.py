"""Tests for the managed-block index patcher."""
import tempfile
from pathlib import Path

import pytest

from crmgen.generators.scaffold.errors import ArtifactWriteError, IndexFormatError
from crmgen.generators.scaffold.index_patcher import IndexDocument, register, unregister
from crmgen.generators.scaffold.render import render_routes_index

TASK_IMPORT = "from routes.task_routes import router as task_router"
TASK_ROUTER = "'task': task_router,"


def _index(temp_dir: str, content: str = None) -> Path:
    path = Path(temp_dir) / "routes" / "__init__.py"
    path.parent.mkdir(parents=True)
    path.write_text(content if content is not None else render_routes_index(), encoding="utf-8")
    return path


def test_register_adds_tagged_lines():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir)
        assert register(path, "task", TASK_IMPORT, TASK_ROUTER) is True

        content = path.read_text(encoding="utf-8")
        assert f"{TASK_IMPORT}  # model: task" in content
        assert f"    {TASK_ROUTER}  # model: task" in content
        compile(content, str(path), "exec")


def test_register_is_idempotent():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir)
        register(path, "task", TASK_IMPORT, TASK_ROUTER)
        once = path.read_text(encoding="utf-8")

        assert register(path, "task", TASK_IMPORT, TASK_ROUTER) is False
        assert path.read_text(encoding="utf-8") == once
        assert once.count(TASK_IMPORT) == 1


def test_entries_keep_registration_order():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir)
        for name in ("zebra", "apple", "mango"):
            register(path, name, f"from routes.{name}_routes import router as {name}_router", f"'{name}': {name}_router,")
        document = IndexDocument.parse(path.read_text(encoding="utf-8"))
        assert document.block("imports").names() == ["zebra", "apple", "mango"]


def test_unregister_restores_original_text():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir)
        original = path.read_text(encoding="utf-8")
        register(path, "task", TASK_IMPORT, TASK_ROUTER)

        assert unregister(path, "task") is True
        assert path.read_text(encoding="utf-8") == original


def test_unregister_leaves_other_models():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir)
        register(path, "task", TASK_IMPORT, TASK_ROUTER)
        register(path, "note", "from routes.note_routes import router as note_router", "'note': note_router,")

        unregister(path, "task")
        content = path.read_text(encoding="utf-8")
        assert "task_router" not in content
        assert "'note': note_router,  # model: note" in content


def test_unregister_missing_is_noop():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir)
        assert unregister(path, "ghost") is False
        assert unregister(Path(temp_dir) / "missing.py", "task") is False


def test_text_outside_blocks_is_preserved():
    """Hand edits outside the managed blocks survive register and unregister."""
    custom = (
        "# custom header\n"
        "import os\n"
        "# <generated:imports>\n"
        "# </generated:imports>\n"
        "\n"
        "EXTRA = os.sep\n"
        "ROUTERS = {\n"
        "    # <generated:registrations>\n"
        "    # </generated:registrations>\n"
        "}\n"
    )
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir, custom)
        register(path, "task", TASK_IMPORT, TASK_ROUTER)
        content = path.read_text(encoding="utf-8")
        assert content.startswith("# custom header\nimport os\n")
        assert "EXTRA = os.sep" in content
        unregister(path, "task")
        assert path.read_text(encoding="utf-8") == custom


def test_register_missing_file_raises():
    with tempfile.TemporaryDirectory() as temp_dir:
        with pytest.raises(ArtifactWriteError):
            register(Path(temp_dir) / "routes" / "__init__.py", "task", TASK_IMPORT)


def test_unterminated_block_is_rejected():
    with pytest.raises(IndexFormatError):
        IndexDocument.parse("# <generated:imports>\nfrom x import y  # model: x\n")


def test_missing_block_is_rejected():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = _index(temp_dir, "ROUTERS = {}\n")
        with pytest.raises(IndexFormatError):
            register(path, "task", TASK_IMPORT, TASK_ROUTER)
