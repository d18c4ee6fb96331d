import logging

# Global project logger (can be tuned via logging_config)
logger = logging.getLogger("catalog_stats")


def log_section(title: str) -> None:
    """
    Log a top-level section header.
    """
    logger.info("=== %s ===", title)


def log_info(message: str) -> None:
    logger.info("%s", message)


def log_step(message: str) -> None:
    """
    Action step / ongoing work.
    """
    logger.info("→ %s", message)


def log_success(message: str) -> None:
    logger.info("✅ %s", message)


def log_warning(message: str) -> None:
    """
    Warning / non-fatal problem, e.g. a result discarded after a key change.
    """
    logger.warning("⚠️ %s", message)


def log_error(message: str) -> None:
    """
    Error surfaced to the caller of a page or aggregation call.
    """
    logger.error("❌ %s", message)


def log_progress(
    current: int,
    total: int,
    prefix: str = "",
) -> None:
    """
    Simple progress logging.

    Example:
      log_progress(2, 3, prefix="Library pages")
      -> "Library pages 2/3 (66.7%)"
    """
    if total <= 0:
        total = 1

    fraction = max(0.0, min(1.0, current / total))
    percent = fraction * 100

    if prefix:
        logger.info("%s %d/%d (%.1f%%)", prefix, current, total, percent)
    else:
        logger.info("%d/%d (%.1f%%)", current, total, percent)
