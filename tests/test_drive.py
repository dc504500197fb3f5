from pathlib import Path

from ptm.domain import Workspace
from ptm import drive
from ptm.schema import SchemaError

import pytest


def test_save_and_load(tmp_path: Path) -> None:
    workspace = Workspace(name="Demo")
    workspace.create_node("App")
    file = tmp_path / "ptm.yaml"
    drive.save(workspace, file)
    restored = drive.load(file)
    assert restored.to_dict() == workspace.to_dict()


def test_failed_save_leaves_no_temp_file(tmp_path: Path, monkeypatch) -> None:
    def boom(self):
        raise OSError("disk full")

    monkeypatch.setattr(Workspace, "to_yaml", boom)
    file = tmp_path / "ptm.yaml"
    with pytest.raises(OSError):
        drive.save(Workspace(name="Demo"), file)
    assert list(tmp_path.iterdir()) == []


def test_load_rejects_invalid_document(tmp_path: Path) -> None:
    file = tmp_path / "ptm.yaml"
    file.write_text("- a\n- b\n")
    with pytest.raises(SchemaError):
        drive.load(file)
