from pathlib import Path

from NoteMark.config import Settings
from NoteMark.model import Plain
from NoteMark.utils import ensure_notes_directory, load_note, resolve_output_path, save_note


def test_ensure_notes_directory_creates_main_note(tmp_path: Path):
    settings = Settings(notes_root=str(tmp_path / "notes"))
    main_path = ensure_notes_directory(settings)
    assert main_path == tmp_path / "notes" / "main.md"
    assert main_path.read_text(encoding="utf-8") == ""

    main_path.write_text("keep me", encoding="utf-8")
    ensure_notes_directory(settings)
    assert main_path.read_text(encoding="utf-8") == "keep me"


def test_missing_note_loads_empty(tmp_path: Path, caplog):
    document = load_note(tmp_path / "missing.md", Settings(notes_root=str(tmp_path)))
    assert len(document.blocks) == 1
    assert document.blocks[0].kind == Plain()
    assert "Could not read" in caplog.text


def test_save_and_load_note(tmp_path: Path):
    settings = Settings(notes_root=str(tmp_path))
    path = tmp_path / "main.md"
    path.write_text("# Notes\n- *one*\n\n\n", encoding="utf-8")
    document = load_note(path, settings)
    assert save_note(path, document)
    assert path.read_text(encoding="utf-8") == "# Notes\n- *one*"


def test_save_note_reports_failure(tmp_path: Path):
    document = load_note(tmp_path / "missing.md")
    assert not save_note(tmp_path / "no-such-dir" / "main.md", document)


def test_resolve_output_path(tmp_path: Path):
    source = tmp_path / "note.md"
    assert resolve_output_path(source, None, suffix=".docx") == tmp_path / "note.docx"
    assert resolve_output_path(source, str(tmp_path)) == tmp_path / "note.md"
    assert resolve_output_path(source, "x.docx") == Path("x.docx")
