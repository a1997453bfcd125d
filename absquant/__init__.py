import logging
import warnings


def _simple_warning_format(message, category, filename, lineno, file=None, line=None):
    return f"{message}"


warnings.formatwarning = _simple_warning_format

logging.captureWarnings(True)

__version__ = "0.1.0"
