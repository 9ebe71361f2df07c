"""
package: mstair.fn_name.base
"""

# <AUTOGEN_INIT>
from mstair.fn_name.base import (
    caller_frame,
    config,
    fs_helpers,
)


__all__ = [
    "caller_frame",
    "config",
    "fs_helpers",
]
# </AUTOGEN_INIT>
