"""Shared CLI helpers: console, logger, output paths."""

from pathlib import Path

from rich.console import Console

from uid_ops.config import OUTPUT_DIR
from uid_ops.utils.logger import get_logger

console = Console()
logger = get_logger("uid_ops.cli")


def ensure_output_dirs() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    logger.debug("filesystem.ensure_output_dirs", output_dir=str(OUTPUT_DIR))


def default_export_path(filename: str) -> Path:
    ensure_output_dirs()
    return OUTPUT_DIR / filename
