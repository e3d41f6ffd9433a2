"""Release identifier parsing and ordering.

This module parses ``major.minor.patch[-tag]`` identifiers and orders them.
An untagged release outranks a pre-release tag on the same major.minor.patch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import functools
import re

from core.constants import MAX_VERSION_SEGMENTS
from core.errors import MalformedVersion
from core.ordering import absent_greatest, comparing, lexicographic

_NUMERIC_SEGMENT = re.compile(r"[0-9]+")


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class VersionId:
    """Immutable release identifier.

    Attributes:
        major: Major release number.
        minor: Minor release number.
        patch: Patch release number.
        tag: Optional pre-release tag such as ``SNAPSHOT``.
        text: Original text the identifier was parsed from.
    """

    major: int
    minor: int = 0
    patch: int = 0
    tag: str | None = None
    text: str = field(default="", compare=False)

    @classmethod
    def parse(cls, raw_value: str) -> "VersionId":
        """Parse a release identifier.

        Args:
            raw_value: Text such as ``1.0.0``, ``1.0.0-SNAPSHOT`` or ``1.0.0.RC1``.

        Returns:
            Parsed identifier.

        Raises:
            MalformedVersion: If there are more than four segments, a numeric
                segment is not numeric, or the tag is given twice.
        """
        segments = raw_value.strip().split(".")
        if len(segments) > MAX_VERSION_SEGMENTS:
            raise MalformedVersion(
                f"Version '{raw_value}' has {len(segments)} segments; "
                f"at most {MAX_VERSION_SEGMENTS} are allowed."
            )
        tag: str | None = None
        if len(segments) >= 3 and "-" in segments[2]:
            segments[2], tag = segments[2].split("-", 1)
            if not tag:
                raise MalformedVersion(f"Version '{raw_value}' has an empty tag.")
        if len(segments) == MAX_VERSION_SEGMENTS:
            if tag is not None:
                raise MalformedVersion(
                    f"Version '{raw_value}' declares a tag both after '-' and as a fourth segment."
                )
            tag = segments.pop()
            if not tag:
                raise MalformedVersion(f"Version '{raw_value}' has an empty tag.")
        numbers = [_parse_number(raw_value, segment) for segment in segments]
        numbers.extend([0] * (3 - len(numbers)))
        return cls(
            major=numbers[0],
            minor=numbers[1],
            patch=numbers[2],
            tag=tag,
            text=raw_value.strip(),
        )

    def compare_full(self, other: "VersionId") -> int:
        """Compare major, minor, patch, then tag; a missing tag ranks highest."""
        return _FULL_ORDER(self, other)

    def compare_major_minor(self, other: "VersionId") -> int:
        """Compare only major and minor, ignoring patch level and tag."""
        return _MAJOR_MINOR_ORDER(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionId):
            return NotImplemented
        return self.compare_full(other) == 0

    def __lt__(self, other: "VersionId") -> bool:
        if not isinstance(other, VersionId):
            return NotImplemented
        return self.compare_full(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.tag))

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.tag}" if self.tag else base


def _parse_number(raw_value: str, segment: str) -> int:
    if not _NUMERIC_SEGMENT.fullmatch(segment):
        raise MalformedVersion(
            f"Version '{raw_value}' has non-numeric segment '{segment}'."
        )
    return int(segment)


_MAJOR_MINOR_ORDER = lexicographic(
    comparing(lambda version: version.major),
    comparing(lambda version: version.minor),
)
_FULL_ORDER = lexicographic(
    _MAJOR_MINOR_ORDER,
    comparing(lambda version: version.patch),
    comparing(lambda version: version.tag, absent_greatest()),
)
