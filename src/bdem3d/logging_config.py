"""
Log output of a bdem3d run.

Fracture events are INFO records of bdem3d.bondmanager, kernel diagnostics
are WARNING/ERROR records of bdem3d.diagnostics.
"""
import logging
import sys
from typing import Optional

CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Send the records of the 'bdem3d' logger to stdout and, optionally, to
    log_file (overwritten). Calling it again replaces the previous handlers.
    """
    logger = logging.getLogger("bdem3d")
    logger.setLevel(level)
    for handler in [h for h in logger.handlers if getattr(h, "_bdem3d", False)]:
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(logging.Formatter(CONSOLE_FORMAT))
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
        handlers[1].setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%H:%M:%S'))
    for handler in handlers:
        handler._bdem3d = True
        logger.addHandler(handler)
    return logger
