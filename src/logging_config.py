"""
Logging configuration for the Site Schedule API
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


def setup_logging(log_level: Union[int, str] = logging.INFO, log_file: Optional[str] = None):
    """
    Set up logging configuration for the application.

    Logs go to stdout; a file handler is added when *log_file* is given.
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )

    # Set specific log levels for noisy libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
