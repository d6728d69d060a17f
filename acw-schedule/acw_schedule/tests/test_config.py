import pytest

from acw_schedule.config import RuntimeConfig, load_env, runtime_config

ENV_VARS = (
    "ACW_BASE_URL",
    "ACW_TIMEOUT_S",
    "ACW_DIRECTORY_TTL_S",
    "ACW_SCHEDULE_TTL_CURRENT_S",
    "ACW_SCHEDULE_TTL_PAST_S",
    "ACW_BATCH_LIMIT",
    "ACW_HISTORY_LIMIT",
    "ACW_TIMEZONE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so teardown also removes anything load_env wrote
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_missing_base_url(monkeypatch):
    with pytest.raises(ValueError, match="ACW_BASE_URL"):
        runtime_config()


def test_defaults(monkeypatch):
    monkeypatch.setenv("ACW_BASE_URL", "https://backend.test/exec")
    cfg = runtime_config()
    assert cfg == RuntimeConfig(base_url="https://backend.test/exec")
    assert cfg.tz.key == "America/New_York"
    assert cfg.schedule_ttl(0) == 60
    assert cfg.schedule_ttl(1) == 300
    assert cfg.schedule_ttl(-1) == 300


def test_overrides(monkeypatch):
    monkeypatch.setenv("ACW_BASE_URL", " https://backend.test/exec ")
    monkeypatch.setenv("ACW_TIMEOUT_S", "5")
    monkeypatch.setenv("ACW_BATCH_LIMIT", "8")
    monkeypatch.setenv("ACW_HISTORY_LIMIT", "2")
    monkeypatch.setenv("ACW_TIMEZONE", "Europe/Madrid")
    cfg = runtime_config()
    assert cfg.base_url == "https://backend.test/exec"
    assert cfg.timeout_s == 5.0
    assert cfg.batch_limit == 8
    assert cfg.history_limit == 2
    assert cfg.timezone == "Europe/Madrid"


@pytest.mark.parametrize(
    "name,value",
    [("ACW_TIMEOUT_S", "soon"), ("ACW_BATCH_LIMIT", "0"), ("ACW_HISTORY_LIMIT", "-2")],
)
def test_invalid_numbers(monkeypatch, name, value):
    monkeypatch.setenv("ACW_BASE_URL", "https://backend.test/exec")
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        runtime_config()


def test_load_env_reads_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("ACW_BASE_URL=https://from-file.test/exec\n", encoding="utf-8")
    load_env(env_file)
    assert runtime_config().base_url == "https://from-file.test/exec"
