import os
from pathlib import Path
from dotenv import load_dotenv

env_path = Path.cwd() / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)


class TaskCheckerConfig:
    def __init__(self) -> None:
        self.DATA_DIR = Path(
            os.getenv("TASKCHECKER_DATA_DIR", "~/.local/share/taskchecker")
        ).expanduser()
        self.LOG_FILE = Path(
            os.getenv("TASKCHECKER_LOG_FILE", str(self.DATA_DIR / "taskchecker.log"))
        ).expanduser()
        self.LOG_LEVEL = os.getenv("TASKCHECKER_LOG_LEVEL", "INFO").upper()
        self.NOTIFY_TIMEOUT = float(os.getenv("TASKCHECKER_NOTIFY_TIMEOUT", "5"))
        self.EXPORT_DIR = Path(
            os.getenv("TASKCHECKER_EXPORT_DIR", str(Path.cwd()))
        ).expanduser()

    def log_file_for(self, data_dir=None) -> Path:
        """The log path; follows a data dir override unless TASKCHECKER_LOG_FILE is set."""
        if data_dir is None or os.getenv("TASKCHECKER_LOG_FILE"):
            return self.LOG_FILE
        return Path(data_dir).expanduser() / "taskchecker.log"


config = TaskCheckerConfig()
