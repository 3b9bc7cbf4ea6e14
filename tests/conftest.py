import os
from datetime import datetime, timedelta

import pytest

from core.backup_manager import SaveBackupCore

SAVE_ID = "76561198000000001"


class FakeClock:
    def __init__(self, start=datetime(2024, 3, 1, 20, 15)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def save_root(tmp_path):
    root = tmp_path / "EldenRing"
    save = root / SAVE_ID
    save.mkdir(parents=True)
    (save / "ER0000.sl2").write_text("slot data v1", encoding="utf-8")
    (save / "steam_autocloud.vdf").write_text("cloud", encoding="utf-8")
    return root


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def core(save_root, clock):
    return SaveBackupCore(str(save_root), clock=clock)


@pytest.fixture
def unreadable_save_root(save_root, monkeypatch):
    real_scandir = os.scandir

    def scandir(path="."):
        if os.fspath(path) == str(save_root):
            raise PermissionError(13, "Permission denied", str(save_root))
        return real_scandir(path)

    monkeypatch.setattr("core.paths.os.scandir", scandir)
    return save_root
