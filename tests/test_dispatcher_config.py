from pathlib import Path

import pytest

from eventhub import DispatcherConfig, EventManager, load_config


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_come_from_embedded_yaml():
    config = load_config(environ={})

    assert config.max_depth == 20
    assert config.preallocate == 64
    assert config.raise_errors is False
    assert config.log_level == "WARNING"


def test_dataclass_defaults_match_documented_values():
    config = DispatcherConfig()
    assert config.max_depth == 20
    assert config.raise_errors is False
    assert EventManager().config == config


def test_user_file_overrides_defaults(tmp_path: Path):
    path = _write(tmp_path / "events.yaml", "max_depth: 5\nraise_errors: true\n")

    config = load_config(path, environ={})

    assert config.max_depth == 5
    assert config.raise_errors is True
    assert config.preallocate == 64


def test_config_file_from_environment(tmp_path: Path):
    path = _write(tmp_path / "events.yaml", "preallocate: 2\n")

    config = load_config(environ={"EVENTHUB_CONFIG": str(path)})

    assert config.preallocate == 2


def test_env_vars_override_file(tmp_path: Path):
    path = _write(tmp_path / "events.yaml", "max_depth: 5\nlog_level: info\n")
    env = {"EVENTHUB_MAX_DEPTH": "7", "EVENTHUB_RAISE_ERRORS": "yes"}

    config = load_config(path, environ=env)

    assert config.max_depth == 7
    assert config.raise_errors is True
    assert config.log_level == "INFO"


def test_missing_file_logs_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    caplog.clear()
    with caplog.at_level("WARNING"):
        config = load_config(tmp_path / "nope.yaml", environ={})

    assert config.max_depth == 20
    assert any("not found" in rec.message for rec in caplog.records)


def test_unknown_keys_are_ignored_with_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    path = _write(tmp_path / "events.yaml", "max_depth: 4\ncolour: blue\n")

    caplog.clear()
    with caplog.at_level("WARNING"):
        config = load_config(path, environ={})

    assert config.max_depth == 4
    assert any("colour" in rec.message for rec in caplog.records)


@pytest.mark.parametrize(
    "env",
    [
        {"EVENTHUB_MAX_DEPTH": "deep"},
        {"EVENTHUB_PREALLOCATE": "-1"},
        {"EVENTHUB_RAISE_ERRORS": "maybe"},
        {"EVENTHUB_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_config(environ=env)


def test_non_mapping_file_rejected(tmp_path: Path):
    path = _write(tmp_path / "events.yaml", "- 1\n- 2\n")

    with pytest.raises(ValueError):
        load_config(path, environ={})


def test_config_drives_manager(tmp_path: Path):
    path = _write(tmp_path / "events.yaml", "max_depth: 2\npreallocate: 3\n")
    manager = EventManager(load_config(path, environ={}))
    calls = []

    def recurse() -> None:
        calls.append(1)
        manager.send("loop")

    manager.add("loop", recurse)
    manager.send("loop")

    assert len(calls) == 2
    assert manager.pool.created == 3
