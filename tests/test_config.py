"""
Tests for settings and the JSON save store.
"""
import random

import pytest

from shaft_miner.config import Settings, get_settings
from shaft_miner.gameplay.game import Game
from shaft_miner.gameplay.grid import WorldGrid
from shaft_miner.storage import SaveStore


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self, monkeypatch):
        """Defaults apply with no environment overrides."""
        monkeypatch.delenv("SHAFT_MINER_TICK_RATE_HZ", raising=False)
        settings = Settings(_env_file=None)
        assert settings.tick_rate_hz == 60
        assert settings.world_seed is None
        assert settings.autosave_interval_seconds == 30

    def test_env_override(self, monkeypatch):
        """SHAFT_MINER_* variables override defaults."""
        monkeypatch.setenv("SHAFT_MINER_TICK_RATE_HZ", "30")
        monkeypatch.setenv("SHAFT_MINER_WORLD_SEED", "1234")
        settings = Settings(_env_file=None)
        assert settings.tick_rate_hz == 30
        assert settings.world_seed == 1234

    def test_get_settings_cached(self):
        """get_settings returns one shared instance."""
        assert get_settings() is get_settings()


class TestSaveStore:
    """Tests for the keyed JSON store."""

    def test_put_get_delete(self, tmp_path):
        """Values round-trip by key."""
        store = SaveStore(tmp_path / "saves.json")
        assert store.get("a") is None
        store.put("a", {"x": 1})
        store.put("b", {"y": 2})
        assert store.get("a") == {"x": 1}
        assert store.keys() == ["a", "b"]
        assert store.delete("a")
        assert not store.delete("a")
        assert store.keys() == ["b"]

    def test_persists_game(self, tmp_path):
        """A saved game loads into another Game."""
        world = WorldGrid(width=6, surface_row=1, shaft_left=1, shaft_width=4, shaft_depth=5)
        game = Game(world=world, rng=random.Random(3))
        game.player.gold = 9
        store = SaveStore(tmp_path / "nested" / "saves.json")
        store.put("slot", game.save_state())

        other = Game(world=WorldGrid(width=6, surface_row=1, shaft_left=1, shaft_width=4, shaft_depth=5))
        other.load_state(SaveStore(tmp_path / "nested" / "saves.json").get("slot"))
        assert other.player.gold == 9

    def test_rejects_non_table(self, tmp_path):
        """A file that is not a JSON object is refused."""
        path = tmp_path / "saves.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            SaveStore(path).get("slot")
