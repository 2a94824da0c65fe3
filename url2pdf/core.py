"""
FILE DESCRIPTION: Foundational module for global configuration and logging.
KEY FUNCTIONS/CLASSES: setup_logger, resolve_log_level, CompanyFormatter, logger
"""

import logging
import os
import sys
from datetime import datetime, timezone

from dotenv import find_dotenv, load_dotenv

# === CONFIGURATION SECTION ===

# .env is looked up from the working directory, not from the installed package
load_dotenv(find_dotenv(usecwd=True))

# Output directory used when --out is not given (resolved to an absolute path at startup)
DEFAULT_OUT = os.getenv("URL2PDF_OUT", "./out")

# Navigation timeout per URL (milliseconds)
DEFAULT_TIMEOUT = int(os.getenv("URL2PDF_TIMEOUT", 3 * 60 * 1000))

# Browser launch
HEADLESS = os.getenv("URL2PDF_HEADLESS", "true").lower() == "true"
CHROMIUM_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]
USER_AGENT = os.getenv("URL2PDF_USER_AGENT") or None

# Page load / PDF export
WAIT_UNTIL = "networkidle"
EMULATED_MEDIA = "screen"
PDF_FORMAT = os.getenv("URL2PDF_PDF_FORMAT", "A4")
PRINT_BACKGROUND = True


# === LOGGING SECTION ===

# Between DEBUG and INFO: per-URL progress lines shown with a single -v
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

# Above every real level: nothing gets through
MUTED = logging.CRITICAL + 10


class CompanyFormatter(logging.Formatter):
    """
    FLOW: Receives a log record -> Extracts timestamp -> Formats as
    [ Tue Jan 06 05:32:41 AM UTC 2026 ] -> Prepends level and context -> Returns final string.
    """
    def format(self, record):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = dt.strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, 'context', record.name)
        message = f"[ {timestamp} ] : {record.levelname} : {context} : {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logger(name="url2pdf", log_file=None, level=logging.INFO):
    """
    FLOW: Initializes/Retrieves logger -> Applies level ->
    Attaches Console handler once and a File handler per distinct log_file.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    formatter = CompanyFormatter()

    if not any(getattr(h, '_url2pdf_console', False) for h in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler._url2pdf_console = True
        logger.addHandler(console_handler)

    if log_file:
        log_path = os.path.abspath(log_file)
        attached = {
            getattr(h, 'baseFilename', None)
            for h in logger.handlers
            if isinstance(h, logging.FileHandler)
        }
        if log_path not in attached:
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def resolve_log_level(verbose=0, silent=0, mute=False):
    """
    Maps the -v / -s / -m counters onto a logging level.

    Any -s cancels every -v. The print level is then verbose - silent:
    2+ DEBUG, 1 VERBOSE, 0 INFO, -1 and -2 WARNING, -3 ERROR, below that
    (or --mute) nothing at all.
    """
    if mute:
        return MUTED
    if silent >= 1:
        verbose = 0
    print_level = verbose - silent

    if print_level >= 2:
        return logging.DEBUG
    if print_level == 1:
        return VERBOSE
    if print_level == 0:
        return logging.INFO
    if print_level >= -2:
        return logging.WARNING
    if print_level == -3:
        return logging.ERROR
    return MUTED


# Global logger instance
logger = setup_logger()
