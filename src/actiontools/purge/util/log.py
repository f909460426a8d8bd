import logging
import sys

DEFAULT_FORMAT = '%(asctime)s %(levelname)-5s %(name)s - %(message)s'
ROOT_LOGGER = 'actiontools.purge'

_QUIET_LOGGERS = ('aiohttp',)


def configure(level='info', *, stream=None, fmt=DEFAULT_FORMAT) -> logging.Logger:
    """
    Install a stream handler on the package logger. Repeated calls replace the handler instead of adding another one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(logger.handlers):
        if getattr(handler, '_purge_handler', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    handler._purge_handler = True
    logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
