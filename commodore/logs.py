"""
Logging setup helper.

commodore logs through the standard logging module (one logger per module,
under the "commodore" namespace) and never configures handlers by itself.
Applications that want readable console output can call configure_logging().
"""
import logging

from rich.logging import RichHandler

from .faults import console


def configure_logging(level=logging.INFO, /, *, rich_tracebacks=True, capture_warnings=True):
    """
    Attach a rich console handler to the "commodore" logger.

    Parameters
    - level: logging level of the "commodore" logger
    - rich_tracebacks: render exception tracebacks with rich
    - capture_warnings: route warnings (EmptyPrefixWarning, ...) through logging

    Returns
    - the "commodore" logger. Calling this again replaces the handler it added.
    """
    logger = logging.getLogger("commodore")
    for handler in list(logger.handlers):
        if getattr(handler, "_commodore", False):
            logger.removeHandler(handler)
    handler = RichHandler(console=console, rich_tracebacks=rich_tracebacks, show_path=False)
    handler._commodore = True
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logging.captureWarnings(capture_warnings)
    return logger


__all__ = (
    "configure_logging",
)
