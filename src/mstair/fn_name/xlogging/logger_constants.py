# File: src/mstair/fn_name/xlogging/logger_constants.py

import logging


K_QUALIFIED_NAME = "qualifiedName"  # LogRecord attribute holding the emitting function's name
K_COLOR = "color"  # Optional LogRecord attribute overriding the level color
RE_PATH_BACKSLASH = r"\\(?=\w{2,})"

TRACE = logging.DEBUG - 1  # (9) LOG.trace() will not output at DEBUG level
SUPPRESS = -1  # Custom level for logs that will never be shown e.g., for internal use only

MODULE_SCOPE_NAME = "<module>"  # qualifiedName of records emitted outside any function


_logging_constants_initialized = False


def initialize_logger_constants() -> None:
    """Register the custom level names with `logging` once per process."""
    global _logging_constants_initialized
    if _logging_constants_initialized:
        return
    _logging_constants_initialized = True
    for key, value in {
        "TRACE": TRACE,
        "SUPPRESS": SUPPRESS,
    }.items():
        if key not in logging.getLevelNamesMapping():
            logging.addLevelName(value, key)


# End of file: src/mstair/fn_name/xlogging/logger_constants.py
