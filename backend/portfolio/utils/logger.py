import logging
import os
import sys
from typing import Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Attach a stdout handler to the named logger once."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(level or getattr(logging, LOG_LEVEL, logging.INFO))

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

    return logger

app_logger = setup_logger("app")
analytics_logger = setup_logger("analytics")
chat_logger = setup_logger("chat")
auth_logger = setup_logger("auth")
