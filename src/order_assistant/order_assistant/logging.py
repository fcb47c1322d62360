"""Loguru logging configuration.

Call setup_logging() once at application startup to configure sinks.
All other modules simply do `from loguru import logger` and log normally;
every record is tagged with the chat id the process is serving, so the
shared log file can be filtered per conversation.
"""

import sys
from pathlib import Path

from loguru import logger

# Log directory at project root
LOG_DIR = Path(__file__).resolve().parents[3] / "logs"
LOG_FILE = "order_assistant.log"

NO_CHAT = "-"

STDERR_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[chat_id]}</magenta> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | chat={extra[chat_id]} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(level: str = "DEBUG", chat_id: str = NO_CHAT, log_dir: Path = LOG_DIR) -> None:
    """Configure loguru with stderr and rotating file sinks.

    Replies go to stdout, so logs stay on stderr and in the log file.

    Args:
        level: Minimum log level (default DEBUG).
        chat_id: Conversation id stamped on every record.
        log_dir: Directory for the rotating log file.
    """
    logger.remove()
    logger.configure(extra={"chat_id": chat_id})

    logger.add(sys.stderr, level=level, format=STDERR_FORMAT)

    # Rotate every 3 hours, delete after 1 day
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / LOG_FILE,
        level=level,
        rotation="3 hours",
        retention="1 day",
        format=FILE_FORMAT,
    )
