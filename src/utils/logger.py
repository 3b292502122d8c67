import logging

from rich.logging import RichHandler

from utils.config import get_settings


class PaddedNameFormatter(logging.Formatter):
    """Pads logger names to the widest seen so far, keeping messages aligned."""

    name_width = 16

    def format(self, record):
        PaddedNameFormatter.name_width = max(
            PaddedNameFormatter.name_width, len(record.name)
        )
        record.name = record.name.ljust(PaddedNameFormatter.name_width)
        return super().format(record)


def _resolve_level() -> int:
    settings = get_settings()
    if settings.debug:
        return logging.DEBUG
    return logging.getLevelName(settings.log_level.upper())


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger writing through a RichHandler.

    Handlers are attached once per logger name.
    """
    if name is None:
        name = "storefront"
    logger = logging.getLogger(name)
    level = _resolve_level()
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(PaddedNameFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' ready.")

    return logger
