"""
tests/test_config.py — YAML Configuration Loader & Client Storage
===================================================================
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from enqoy.client.storage import LocalStorage
from enqoy.config import DEFAULT_API_URL, EnqoyConfig, load_config


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_minimal_file_uses_defaults(self, tmp_path):
        path = _write(tmp_path, 'community_name: "Enqoy"\nmain_city: "Cairo"\n')
        with patch.dict(os.environ, {"ENQOY_API_URL": ""}):
            cfg = load_config(path)
        assert cfg.main_city == "Cairo"
        assert cfg.api_url == DEFAULT_API_URL
        assert cfg.autosave_debounce_ms == 2000
        assert cfg.search_debounce_ms == 500
        assert cfg.include_fun_facts_step is True
        assert cfg.default_group_size == 6

    def test_overrides(self, tmp_path):
        path = _write(
            tmp_path,
            "community_name: X\nmain_city: Y\napi_url: http://api.example/api/\n"
            "include_fun_facts_step: false\nminimum_age: 21\ndefault_group_size: 8\n",
        )
        with patch.dict(os.environ, {"ENQOY_API_URL": ""}):
            cfg = load_config(path)
        assert cfg.api_url == "http://api.example/api"
        assert cfg.include_fun_facts_step is False
        assert cfg.minimum_age == 21
        assert cfg.default_group_size == 8

    def test_env_wins_for_api_url(self, tmp_path):
        path = _write(tmp_path, "community_name: X\nmain_city: Y\napi_url: http://yaml/api\n")
        with patch.dict(os.environ, {"ENQOY_API_URL": "https://env.example/api/"}):
            assert load_config(path).api_url == "https://env.example/api"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.yaml.example"):
            load_config(tmp_path / "nope.yaml")

    def test_missing_required_key(self, tmp_path):
        path = _write(tmp_path, "community_name: X\n")
        with pytest.raises(KeyError):
            load_config(path)

    def test_frozen(self):
        cfg = EnqoyConfig()
        with pytest.raises(AttributeError):
            cfg.main_city = "Elsewhere"  # type: ignore[misc]


class TestLocalStorage:
    def test_memory_store(self):
        store = LocalStorage()
        store.set_item("auth_token", "abc")
        assert store.get_item("auth_token") == "abc"
        assert "auth_token" in store
        store.remove_item("auth_token")
        assert store.get_item("auth_token") is None

    def test_json_helpers(self):
        store = LocalStorage()
        store.set_json("user", {"id": "u1", "roles": ["member"]})
        assert store.get_json("user") == {"id": "u1", "roles": ["member"]}

    def test_bad_json_dropped(self):
        store = LocalStorage()
        store.set_item("user", "{not json")
        assert store.get_json("user") is None
        assert "user" not in store

    def test_file_backed_persists(self, tmp_path):
        path = tmp_path / "state" / "storage.json"
        LocalStorage(path).set_item("auth_token", "tok")
        assert LocalStorage(path).get_item("auth_token") == "tok"

    def test_clear(self, tmp_path):
        path = tmp_path / "storage.json"
        store = LocalStorage(path)
        store.set_item("a", "1")
        store.clear()
        assert LocalStorage(path).get_item("a") is None

    def test_unreadable_file_ignored(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("garbage", encoding="utf-8")
        assert LocalStorage(path).get_item("anything") is None
