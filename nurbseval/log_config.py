import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> | {message}"


def enable_logging(level="DEBUG", sink=sys.stderr):
    """
    Enable the log messages emitted by the package.

    The package logger is disabled on import so that applications using the library
    do not receive messages they did not ask for. This function switches it on and
    attaches a sink that only receives records from the package.

    Parameters
    ----------
    level : str or int
        Minimum severity forwarded to the sink.
    sink : file-like, path or callable
        Destination of the log records, see `loguru.logger.add`.

    Returns
    -------
    handler_id : int
        Identifier of the added sink, to be passed to `disable_logging` or `logger.remove`.
    """
    logger.enable("nurbseval")
    return logger.add(sink, format=LOG_FORMAT, level=level, filter="nurbseval")


def disable_logging(handler_id=None):
    """Silence the package logger and optionally remove the sink added by `enable_logging`."""
    if handler_id is not None:
        logger.remove(handler_id)
    logger.disable("nurbseval")
