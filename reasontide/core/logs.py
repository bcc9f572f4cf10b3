from .defaults import DEFAULT_LOGS_PATH

from typing import Optional, Union
from pathlib import Path
from loguru import logger
import sys

def setup_logging(log_dir :Optional[Union[str, Path]]=None, level :str="INFO"):
    """Routes loguru to stderr and a rotated file; stdout belongs to the stdio transport."""
    logs_dir = Path(log_dir) if log_dir else DEFAULT_LOGS_PATH
    logs_dir.mkdir(exist_ok=True, parents=True)

    logger.remove()

    # Console output
    logger.add(sys.stderr, level=level)

    # File output (DEBUG and above, rotated daily, kept for 5 days)
    logger.add(
        logs_dir / "reasontide_{time:YYYY-MM-DD}.log",
        level="DEBUG",
        rotation="00:00",
        retention="5 days",
        enqueue=True,
        backtrace=True,
        diagnose=True,
        compression="zip",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"
    )
    return logger
