"""Logging helpers.

promhealth logs through the standard library under the ``promhealth``
namespace. The library only installs a NullHandler; applications decide
where records go.
"""

import logging

ROOT_LOGGER_NAME = "promhealth"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the promhealth namespace.

    Args:
        name: Usually ``__name__``. Names outside the namespace are nested
            under it.

    Returns:
        A standard library Logger.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_exception(message: str, **attributes: str | int | float | bool) -> None:
    """Log the exception currently being handled at ERROR, with traceback.

    Args:
        message: The log message
        **attributes: Additional structured fields, passed as ``extra``
    """
    get_logger(ROOT_LOGGER_NAME).error(message, exc_info=True, extra=attributes)


def configure_logging(level: str = "WARNING") -> None:
    """Send promhealth records to stderr at the given level (CLI use)."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
