"""
Utility functions and helpers.
"""

from .psi import (
    PsiDecodeError,
    PsiError,
    PsiMetrics,
    PsiReading,
    PsiUnavailableError,
    parse_psi,
    read_psi,
)
from .sysfs import SysfsParseError, read_attribute, read_attribute_int

__all__ = [
    "parse_psi",
    "read_psi",
    "PsiMetrics",
    "PsiReading",
    "PsiError",
    "PsiDecodeError",
    "PsiUnavailableError",
    "read_attribute",
    "read_attribute_int",
    "SysfsParseError",
]
