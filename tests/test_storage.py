from __future__ import annotations

from pathlib import Path

from diabot.storage import AdminStore


def test_add_and_list_admin_channels(tmp_path: Path) -> None:
    store = AdminStore(tmp_path / "nested" / "diabot.sqlite3")
    store.add_admin_channel("1", "300")
    store.add_admin_channel("1", "100")
    store.add_admin_channel("2", "200")

    assert store.list_admin_channels("1") == ["300", "100"]
    assert store.list_admin_channels("2") == ["200"]
    assert store.list_admin_channels("3") == []


def test_add_is_idempotent(tmp_path: Path) -> None:
    store = AdminStore(tmp_path / "diabot.sqlite3")
    store.add_admin_channel("1", "100")
    store.add_admin_channel("1", "100")
    assert store.list_admin_channels("1") == ["100"]


def test_remove_admin_channel(tmp_path: Path) -> None:
    store = AdminStore(tmp_path / "diabot.sqlite3")
    store.add_admin_channel("1", "100")

    assert store.is_admin_channel("1", "100")
    assert store.remove_admin_channel("1", "100") is True
    assert store.remove_admin_channel("1", "100") is False
    assert not store.is_admin_channel("1", "100")


def test_channels_are_scoped_by_guild(tmp_path: Path) -> None:
    store = AdminStore(tmp_path / "diabot.sqlite3")
    store.add_admin_channel("1", "100")
    assert not store.is_admin_channel("2", "100")
    assert store.remove_admin_channel("2", "100") is False


def test_data_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "diabot.sqlite3"
    AdminStore(db).add_admin_channel("1", "100")
    assert AdminStore(db).list_admin_channels("1") == ["100"]
