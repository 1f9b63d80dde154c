"""Loguru sinks for evolution runs: a console sink and a rotating run log."""

from datetime import datetime, timezone
import os
import sys

from loguru import logger

_PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"
_COLOR_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<level>{message}</level>"
)


def setup_logger(
    log_dir: str = "logs",
    level: str = "INFO",
    rotation: str = "50 MB",
    retention: str = "30 days",
    enable_colors: bool = True,
    run_name: str = "evolution",
) -> str:
    """
    Replace all loguru sinks with a console sink and a per-run file sink.

    Engine and operator messages carry their own ``[Component]`` prefix, so
    the sinks only add time and level.

    Args:
        log_dir: Directory for run logs (created if missing)
        level: Minimum level for both sinks
        rotation: File rotation policy (e.g., "50 MB", "1 day")
        retention: How long rotated files are kept
        enable_colors: Colorize the console sink when stderr is a terminal
        run_name: Prefix of the log file name

    Returns:
        Path to the run log file
    """
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"{run_name}_{timestamp}.log")

    logger.remove()

    colorize = enable_colors and sys.stderr.isatty()
    logger.add(
        sys.stderr,
        level=level,
        format=_COLOR_FORMAT if colorize else _PLAIN_FORMAT,
        colorize=colorize,
    )
    logger.add(
        log_file,
        level=level,
        format=_PLAIN_FORMAT,
        rotation=rotation,
        retention=retention,
        compression="zip",
        encoding="utf-8",
    )

    logger.debug("[Logger] Run log at {} (level {})", log_file, level)
    return log_file
