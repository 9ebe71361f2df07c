"""
package: mstair.fn_name
"""

# <AUTOGEN_INIT>
from mstair.fn_name import (
    base,
    extractor,
    generics,
    markers,
    reflection,
    xlogging,
)
from mstair.fn_name.extractor import (
    InvocationContextError,
    QualifiedNameError,
    enclosing_name,
    instantiated,
    trim_enclosing_path,
    uninstantiated,
)
from mstair.fn_name.reflection import (
    type_name,
    type_name_of_val,
)
from mstair.fn_name.xlogging.logger_factory import create_logger


__all__ = [
    "InvocationContextError",
    "QualifiedNameError",
    "base",
    "create_logger",
    "enclosing_name",
    "extractor",
    "generics",
    "instantiated",
    "markers",
    "reflection",
    "trim_enclosing_path",
    "type_name",
    "type_name_of_val",
    "uninstantiated",
    "xlogging",
]
# </AUTOGEN_INIT>

__version__ = "0.1.0"
