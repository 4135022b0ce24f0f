"""
Bounded readers for sysfs attribute files.

sysfs attributes are tiny text files. Reads are capped so a misbehaving
driver (or a regular file placed where an attribute is expected) cannot
make the reporter slurp arbitrary amounts of data.
"""

from pathlib import Path

# Default cap for a single attribute
SYSFS_MAX_SIZE = 64


class SysfsParseError(ValueError):
    """An attribute exists but its content is not what was expected."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


def read_attribute(path: Path, max_size: int = SYSFS_MAX_SIZE) -> str:
    """
    Read a sysfs attribute as stripped text.

    Raises:
        FileNotFoundError: If the attribute does not exist
        OSError: If the attribute cannot be read
        SysfsParseError: If it is larger than max_size or not text
    """
    with open(path, "rb") as f:
        data = f.read(max_size + 1)

    if len(data) > max_size:
        raise SysfsParseError(path, f"content exceeds {max_size} bytes")

    try:
        return data.decode("utf-8").strip().rstrip("\x00")
    except UnicodeDecodeError:
        raise SysfsParseError(path, "content is not text") from None


def read_attribute_int(path: Path, max_size: int = SYSFS_MAX_SIZE) -> int:
    """
    Read a sysfs attribute holding a decimal integer.

    Raises:
        FileNotFoundError: If the attribute does not exist
        OSError: If the attribute cannot be read
        SysfsParseError: If the content is oversized or not an integer
    """
    text = read_attribute(path, max_size)
    try:
        return int(text, 10)
    except ValueError:
        raise SysfsParseError(path, f"not an integer: {text!r}") from None
