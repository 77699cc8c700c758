# -- Logging Configuration -- #

'''
Console logging setup for the sphCanvas command-line tools.

Library modules only create module-level loggers; handlers are
attached here, by the entry points.
'''

from __future__ import annotations

import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setupLogging(level: str = 'WARNING', name: str = 'sphCanvas') -> logging.Logger:
    '''
    Attach a console handler to the package logger.

    Calling it again only changes the level; no second handler is
    added.

    Parameters:
    -----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    name : str
        Logger to configure

    Returns:
    --------
    logging.Logger : Configured logger
    '''
    logger = logging.getLogger(name)
    logLevel = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(logLevel)

    if not any(getattr(h, '_sphCanvasHandler', False) for h in logger.handlers):
        consoleHandler = logging.StreamHandler()
        consoleHandler.setFormatter(logging.Formatter(LOG_FORMAT))
        consoleHandler._sphCanvasHandler = True
        logger.addHandler(consoleHandler)

    for handler in logger.handlers:
        handler.setLevel(logLevel)

    return logger
