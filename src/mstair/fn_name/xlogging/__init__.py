"""
package: mstair.fn_name.xlogging
"""

# <AUTOGEN_INIT>
from mstair.fn_name.xlogging import (
    core_logger,
    frame_analyzer,
    logger_constants,
    logger_factory,
    logger_formatter,
    logger_util,
)


__all__ = [
    "core_logger",
    "frame_analyzer",
    "logger_constants",
    "logger_factory",
    "logger_formatter",
    "logger_util",
]
# </AUTOGEN_INIT>
