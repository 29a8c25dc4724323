from __future__ import annotations

import logging

from dotenv import load_dotenv

from workout_tracker.application import create_app
from workout_tracker.core.config import AppConfig
from workout_tracker.core.logging import setup_logging

load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
LOGGER = logging.getLogger(__name__)

app = create_app(APP_CONFIG)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("web_api:app", host="127.0.0.1", port=8000)
