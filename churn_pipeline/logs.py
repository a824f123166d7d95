import os
import sys

from loguru import logger

_CONFIGURED = False


def setup_logging(log_dir: str = "logs", level: str = "INFO", rotation: str = "1 day", retention: str = "30 days"):
    """
    Configure the global loguru logger once: a console sink plus a dated
    file sink under log_dir. Later calls are no-ops.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return logger

    os.makedirs(log_dir, exist_ok=True)
    logger.remove()
    logger.add(sys.stderr, level=level, format="{time:HH:mm:ss} | {level: <7} | {message}")
    logger.add(
        sink=os.path.join(log_dir, "{time:YYYY-MM-DD}.log"),
        rotation=rotation,
        retention=retention,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}",
    )
    _CONFIGURED = True
    logger.info("Logger initialized (dir={}, level={})", log_dir, level)
    return logger
