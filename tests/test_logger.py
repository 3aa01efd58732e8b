import logger as app_logger
from logger import ENV_LOG_LEVEL, configure, get_logger, log_path_for, resolve_level


def test_env_file_level_is_honoured(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{ENV_LOG_LEVEL}=debug\n", encoding="utf-8")
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    assert resolve_level(env_file=str(env_file)) == "DEBUG"


def test_environment_beats_env_file(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{ENV_LOG_LEVEL}=debug\n", encoding="utf-8")
    monkeypatch.setenv(ENV_LOG_LEVEL, "error")
    assert resolve_level(env_file=str(env_file)) == "ERROR"
    assert resolve_level("info", env_file=str(env_file)) == "INFO"


def test_forced_configure_moves_file_sink(tmp_path) -> None:
    target = log_path_for(str(tmp_path / "data"))
    try:
        configure(log_path=target, level="WARNING", force=True)
        get_logger().warning("log file moved")
        get_logger().complete()
        assert target.exists()
        configure(log_path=tmp_path / "ignored.log")
        assert not (tmp_path / "ignored.log").exists()
    finally:
        app_logger.configure(force=True)
