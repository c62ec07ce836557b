import json
import os

import pytest

from videotomp3.config import LocalStorage, load_config
from videotomp3.folders import STORAGE_KEY, OutputDirectoryManager

from conftest import FakeRunner


def test_persisted_folder_is_restored(storage, output_dir):
    OutputDirectoryManager(storage).set_directory(output_dir)

    reloaded = LocalStorage(path=storage.path)
    manager = OutputDirectoryManager(reloaded)

    assert manager.load() == output_dir
    assert manager.directory == output_dir


def test_deleted_folder_is_forgotten_on_load(storage, output_dir):
    OutputDirectoryManager(storage).set_directory(output_dir)
    os.rmdir(output_dir)

    manager = OutputDirectoryManager(LocalStorage(path=storage.path))

    assert manager.load() == ""
    assert manager.directory == ""
    assert STORAGE_KEY not in load_config(storage.path)


def test_clearing_removes_key_and_resets_picker(storage, output_dir):
    manager = OutputDirectoryManager(storage)
    manager.set_directory(output_dir)

    assert manager.set_directory("") == ""
    assert manager.reset_key == 1
    assert storage.get_item(STORAGE_KEY) is None


def test_missing_folder_is_rejected(storage, output_dir, tmp_path):
    manager = OutputDirectoryManager(storage)
    manager.set_directory(output_dir)

    assert manager.set_directory(str(tmp_path / "gone")) == ""
    assert manager.directory == ""
    assert manager.reset_key == 1
    assert STORAGE_KEY not in load_config(storage.path)


def test_existing_folder_does_not_reset_picker(storage, output_dir):
    manager = OutputDirectoryManager(storage)
    manager.set_directory(output_dir)

    assert manager.reset_key == 0
    assert load_config(storage.path)[STORAGE_KEY] == output_dir


def test_folder_removed_after_selection_heals_on_read(storage, output_dir):
    manager = OutputDirectoryManager(storage)
    manager.set_directory(output_dir)
    os.rmdir(output_dir)

    assert manager.directory == ""
    assert manager.reset_key == 1
    assert storage.get_item(STORAGE_KEY) is None


def test_load_without_saved_folder(storage):
    manager = OutputDirectoryManager(storage)
    assert manager.load() == ""
    assert manager.reset_key == 0


@pytest.mark.parametrize("saved", [["/music"], {"a": 1}, 3])
def test_saved_folder_of_wrong_type_is_forgotten(tmp_path, saved):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({STORAGE_KEY: saved}), encoding="utf-8")

    manager = OutputDirectoryManager(LocalStorage(path=path))

    assert manager.load() == ""
    assert STORAGE_KEY not in load_config(path)


def test_wrong_type_in_live_storage_is_dropped(storage):
    storage.data[STORAGE_KEY] = {"a": 1}
    manager = OutputDirectoryManager(storage)

    assert manager.load() == ""
    assert storage.get_item(STORAGE_KEY) is None


def test_form_opens_with_wrongly_typed_saved_folder(tmp_path, notifier):
    from videotomp3.controller import FormController
    from videotomp3.locator import ExecutableLocator

    path = tmp_path / "config.json"
    path.write_text(json.dumps({STORAGE_KEY: {"a": 1}}), encoding="utf-8")

    form = FormController(
        LocalStorage(path=path),
        notifier=notifier,
        locator=ExecutableLocator(exists=lambda p: False, runner=FakeRunner()),
    )

    assert form.output_dir == ""
