"""
Tests for EnvManager (.env loading and ${VAR} substitution)
"""

import pytest

from stocksaga.core.env import EnvManager


@pytest.fixture
def env(tmp_path):
    return EnvManager(project_root=tmp_path, auto_load=False)


class TestEnvManager:
    def test_load_missing_env_file(self, env):
        assert env.load() is False

    def test_load_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("STOCKSAGA_TEST_VALUE", raising=False)
        (tmp_path / ".env").write_text("STOCKSAGA_TEST_VALUE=from-dotenv\n")

        env = EnvManager(project_root=tmp_path, auto_load=False)
        assert env.load() is True
        assert env.get("STOCKSAGA_TEST_VALUE") == "from-dotenv"
        monkeypatch.delenv("STOCKSAGA_TEST_VALUE")

    def test_get_required(self, env, monkeypatch):
        monkeypatch.delenv("STOCKSAGA_MISSING", raising=False)
        with pytest.raises(ValueError, match="STOCKSAGA_MISSING"):
            env.get("STOCKSAGA_MISSING", required=True)

    @pytest.mark.parametrize(
        "raw,expected", [("true", True), ("1", True), ("off", False), ("garbage", True)]
    )
    def test_get_bool(self, env, monkeypatch, raw, expected):
        monkeypatch.setenv("STOCKSAGA_FLAG", raw)
        assert env.get_bool("STOCKSAGA_FLAG", default=True) is expected

    def test_get_float_invalid_falls_back(self, env, monkeypatch):
        monkeypatch.setenv("STOCKSAGA_NUM", "abc")
        assert env.get_float("STOCKSAGA_NUM", 2.5) == 2.5

    def test_substitute(self, env, monkeypatch):
        monkeypatch.setenv("STOCKSAGA_HOST", "cache")
        monkeypatch.delenv("STOCKSAGA_PORT", raising=False)

        assert env.substitute("redis://${STOCKSAGA_HOST}:${STOCKSAGA_PORT:-6379}") == (
            "redis://cache:6379"
        )

    def test_substitute_required(self, env, monkeypatch):
        monkeypatch.delenv("STOCKSAGA_NEEDED", raising=False)
        with pytest.raises(ValueError, match="set me"):
            env.substitute("${STOCKSAGA_NEEDED:?set me}")

    def test_substitute_dict(self, env, monkeypatch):
        monkeypatch.setenv("STOCKSAGA_HOST", "cache")
        data = {"store": {"url": "${STOCKSAGA_HOST}"}, "list": ["${STOCKSAGA_HOST}", 1], "n": 2}

        assert env.substitute_dict(data) == {
            "store": {"url": "cache"},
            "list": ["cache", 1],
            "n": 2,
        }
