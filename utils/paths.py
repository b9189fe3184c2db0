from pathlib import Path

from platformdirs import user_data_dir, user_log_dir

APP_NAME = "PoeWatchCache"
APP_VENDOR = "PoeWatch"

DATA_DIR = Path(user_data_dir(APP_NAME, APP_VENDOR))
LOG_DIR = Path(user_log_dir(APP_NAME, APP_VENDOR))
CONFIG_PATH = DATA_DIR / "config.yaml"
