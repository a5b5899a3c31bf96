from pathlib import Path

from config import TaskCheckerConfig


def test_log_file_follows_data_dir_override(monkeypatch, tmp_path):
    monkeypatch.delenv("TASKCHECKER_LOG_FILE", raising=False)
    monkeypatch.setenv("TASKCHECKER_DATA_DIR", str(tmp_path / "default"))
    config = TaskCheckerConfig()

    assert config.log_file_for() == tmp_path / "default" / "taskchecker.log"
    assert config.log_file_for(tmp_path / "other") == tmp_path / "other" / "taskchecker.log"


def test_explicit_log_file_wins_over_data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("TASKCHECKER_LOG_FILE", str(tmp_path / "app.log"))
    config = TaskCheckerConfig()

    assert config.log_file_for(tmp_path / "other") == Path(tmp_path / "app.log")
