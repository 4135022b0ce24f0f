"""
Parser for /proc/pressure/{cpu,memory,io} (pressure stall information).

File format (one line per stall category):

    some avg10=0.00 avg60=0.00 avg300=0.00 total=0
    full avg10=0.00 avg60=0.00 avg300=0.00 total=0

avg* are rolling percentages, total is the cumulative stall time in
microseconds since boot. The "full" line is missing for cpu on older
kernels, and the whole directory is absent when PSI is compiled out.
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..const import PSI_DIR

# Upper bound for a pressure file; real files are ~110 bytes
PSI_MAX_SIZE = 4096

PSI_CATEGORIES = ("some", "full")

# Field order inside a category line
PSI_FIELDS = ("avg10", "avg60", "avg300", "total")

# total is an unsigned 64-bit counter
PSI_TOTAL_MAX = 2**64 - 1


class PsiError(Exception):
    """Base class for pressure stall read failures."""


class PsiUnavailableError(PsiError):
    """The pressure file does not exist or cannot be read."""


class PsiDecodeError(PsiError):
    """The pressure file content is malformed."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class PsiMetrics:
    """Values of one stall category line."""

    avg10: float = 0.0
    avg60: float = 0.0
    avg300: float = 0.0
    total: int = 0  # microseconds


@dataclass(frozen=True)
class PsiReading:
    """
    Decoded pressure file.

    A category whose line was not present stays None.
    """

    some: PsiMetrics | None = None
    full: PsiMetrics | None = None

    def categories(self) -> Iterator[tuple[str, PsiMetrics]]:
        """Yield (category, metrics) for every category that was present."""
        if self.some is not None:
            yield "some", self.some
        if self.full is not None:
            yield "full", self.full

    @property
    def complete(self) -> bool:
        return self.some is not None and self.full is not None


def _iter_fields(line: str, lineno: int) -> Iterator[tuple[str, str]]:
    """Split the ``key=value`` tokens that follow the category word."""
    tokens = line.split()
    for token in tokens[1:]:
        key, sep, value = token.partition("=")
        if not sep or not key or not value:
            raise PsiDecodeError(f"malformed field {token!r}", lineno)
        yield key, value


def _parse_category_line(line: str, lineno: int) -> PsiMetrics:
    fields = list(_iter_fields(line, lineno))
    if len(fields) < len(PSI_FIELDS):
        raise PsiDecodeError(
            f"expected {len(PSI_FIELDS)} fields, got {len(fields)}", lineno
        )

    values: dict[str, float | int] = {}
    for expected, (key, token) in zip(PSI_FIELDS, fields):
        if key != expected:
            raise PsiDecodeError(f"expected field {expected!r}, got {key!r}", lineno)
        # int() and float() accept "1_000", float() also "nan" and "inf"
        if "_" in token:
            raise PsiDecodeError(f"cannot parse {key}={token!r}", lineno)
        try:
            values[key] = int(token, 10) if key == "total" else float(token)
        except ValueError:
            raise PsiDecodeError(f"cannot parse {key}={token!r}", lineno) from None
        if key != "total" and not math.isfinite(values[key]):
            raise PsiDecodeError(f"non-finite {key}={token!r}", lineno)

    if not 0 <= values["total"] <= PSI_TOTAL_MAX:
        raise PsiDecodeError(f"total {values['total']} out of range", lineno)

    return PsiMetrics(
        avg10=values["avg10"],
        avg60=values["avg60"],
        avg300=values["avg300"],
        total=values["total"],
    )


def parse_psi(content: str) -> PsiReading:
    """
    Decode the content of a pressure file.

    The first character of each line selects its category: 's' for
    "some", 'f' for "full". Blank lines are skipped.

    Args:
        content: Raw text of a /proc/pressure/<kind> file

    Returns:
        PsiReading with the categories that were present

    Raises:
        PsiDecodeError: On an unknown category, a repeated category,
            a missing or unparsable field, or when no line was found
    """
    parsed: dict[str, PsiMetrics] = {}

    for lineno, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue

        match line[0]:
            case "s":
                category = "some"
            case "f":
                category = "full"
            case _:
                raise PsiDecodeError(f"unknown pressure category {line.split()[0]!r}", lineno)

        if category in parsed:
            raise PsiDecodeError(f"duplicate {category!r} line", lineno)
        parsed[category] = _parse_category_line(line, lineno)

    if not parsed:
        raise PsiDecodeError("no pressure lines found")

    return PsiReading(some=parsed.get("some"), full=parsed.get("full"))


def psi_path(kind: str, root: str | Path = PSI_DIR) -> Path:
    return Path(root) / kind


def read_psi(kind: str, root: str | Path = PSI_DIR) -> PsiReading:
    """
    Read and decode /proc/pressure/<kind>.

    Args:
        kind: Pressure kind (cpu, memory, io)
        root: Directory holding the pressure files

    Raises:
        PsiUnavailableError: If the file is missing or unreadable
        PsiDecodeError: If the content is malformed
    """
    path = psi_path(kind, root)
    try:
        with open(path, "rb") as f:
            data = f.read(PSI_MAX_SIZE + 1)
    except OSError as e:
        raise PsiUnavailableError(f"cannot read {path}: {e.strerror or e}") from e

    if len(data) > PSI_MAX_SIZE:
        raise PsiDecodeError(f"{path} is larger than {PSI_MAX_SIZE} bytes")

    try:
        content = data.decode("ascii")
    except UnicodeDecodeError:
        raise PsiDecodeError(f"{path} is not ASCII text") from None

    return parse_psi(content)
