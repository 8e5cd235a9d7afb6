# reviewtui/core/config.py
import os, json
import logging
from dataclasses import dataclass, asdict

DEFAULT_PATH = os.path.join(os.path.expanduser("~"), ".reviewtui.json")
DEFAULT_DATA_DIR = os.path.join(os.path.expanduser("~"), ".local", "share", "reviewtui")

DB_FILENAME = "reviewtui.db"
LOG_FILENAME = "reviewtui.log"


def config_path() -> str:
    return os.environ.get("REVIEWTUI_CONFIG") or DEFAULT_PATH


@dataclass
class Config:
    data_dir: str = DEFAULT_DATA_DIR
    tick_fps: float = 30.0
    log_level: str = "INFO"
    last_repo_path: str | None = None

    @staticmethod
    def load(path: str | None = None) -> "Config":
        path = path or config_path()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            data = {}
        if not isinstance(data, dict):
            data = {}
        try:
            tick_fps = float(data.get("tick_fps", 30.0))
        except (TypeError, ValueError):
            tick_fps = 30.0
        return Config(
            data_dir=os.path.expanduser(str(data.get("data_dir") or DEFAULT_DATA_DIR)),
            tick_fps=tick_fps if tick_fps >= 0 else 30.0,
            log_level=str(data.get("log_level", "INFO")).upper(),
            last_repo_path=data.get("last_repo_path"),
        )

    def save(self, path: str | None = None) -> None:
        path = path or config_path()
        data = asdict(self)
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @property
    def db_path(self) -> str:
        return os.path.join(self.data_dir, DB_FILENAME)

    @property
    def log_path(self) -> str:
        return os.path.join(self.data_dir, LOG_FILENAME)

    def ensure_data_dir(self) -> str:
        os.makedirs(self.data_dir, exist_ok=True)
        return self.data_dir


def setup_logging(cfg: Config) -> None:
    """Send application logging to the log file; the terminal belongs to the UI."""
    level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
        filename=cfg.log_path,
        filemode='a',
        force=True,
    )
