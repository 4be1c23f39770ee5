# Copyright 2025 Ant Group Co., Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Logging configuration for sigbridge.

sigbridge is a library, so its loggers are silent by default (NullHandler).
Applications that want to see registry activity opt in explicitly.

Example usage:
    >>> import sigbridge
    >>> sigbridge.setup_logging(level="DEBUG")
    >>> sigbridge.setup_logging(level="INFO", filename="signals.log", stream=False)
"""

import logging
import sys
from typing import Any, Literal

SIGBRIDGE_LOGGER_NAME = "sigbridge"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    format: str | None = None,
    date_format: str | None = None,
    filename: str | None = None,
    stream: Any = None,
    force: bool = False,
    propagate: bool = False,
) -> None:
    """
    Configure the ``sigbridge`` logger.

    Args:
        level: Log level name. Default is INFO.
        format: Custom log format string. If None, uses the default format.
        date_format: Custom date format string. If None, uses the default.
        filename: If provided, also log to this file.
        stream: Stream to log to. Defaults to sys.stderr; pass False to skip
                stream output entirely.
        force: If True, remove existing handlers before adding new ones.
        propagate: If True, let records reach the application's loggers.
    """
    logger = logging.getLogger(SIGBRIDGE_LOGGER_NAME)

    log_level = getattr(logging, level.upper())
    logger.setLevel(log_level)

    # A lone NullHandler is just the library-mode placeholder.
    if propagate and not force:
        if len(logger.handlers) == 1 and isinstance(
            logger.handlers[0], logging.NullHandler
        ):
            force = True

    if force:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

    logger.propagate = propagate

    if propagate and not filename and stream is None:
        return

    formatter = logging.Formatter(
        format or DEFAULT_FORMAT, datefmt=date_format or DEFAULT_DATE_FORMAT
    )

    if stream is not False:
        if stream is None:
            stream = sys.stderr
        stream_handler = logging.StreamHandler(stream)
        stream_handler.setLevel(log_level)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def disable_logging() -> None:
    """Drop all sigbridge handlers and fall back to a NullHandler."""
    logger = logging.getLogger(SIGBRIDGE_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the ``sigbridge`` hierarchy.

    Args:
        name: Module name, typically ``__name__`` of the caller.

    Example:
        >>> get_logger("sigbridge.registry").name
        'sigbridge.registry'
        >>> get_logger("host").name
        'sigbridge.host'
    """
    if name != SIGBRIDGE_LOGGER_NAME and not name.startswith(
        SIGBRIDGE_LOGGER_NAME + "."
    ):
        name = f"{SIGBRIDGE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


# Library mode until the application calls setup_logging().
_root_logger = logging.getLogger(SIGBRIDGE_LOGGER_NAME)
if not _root_logger.handlers:
    _root_logger.addHandler(logging.NullHandler())
    _root_logger.propagate = False
