"""Version parsing and version requirement matching.

This module handles:
- Parsing dotted numeric version strings into comparable values
- Parsing requirement strings such as '~> 6.0' or '>= 5.1, < 6'
- Checking whether a version satisfies every clause of a requirement

Versions compare component-wise with trailing zeros implied, so '5.0'
and '5.0.0' sort as equal.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

VERSION_PATTERN = re.compile(r"^[0-9]+(?:\.[0-9]+)*$")

CLAUSE_PATTERN = re.compile(r"^(~>|>=|<=|!=|=|>|<)?\s*([0-9]+(?:\.[0-9]+)*)$")

DEFAULT_REQUIREMENT = ">= 0"


class MalformedConstraint(Exception):
    """Raised when a requirement string cannot be parsed."""

    def __init__(self, message: str, code: str = "malformed_constraint") -> None:
        """Initialize MalformedConstraint.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class Version:
    """A dotted numeric version as written.

    Attributes:
        text: The literal version string.
        parts: Integer components in order of significance.
    """

    text: str
    parts: tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a dotted numeric version string.

        Raises:
            ValueError: If the string is not a dotted numeric version.
        """
        text = text.strip()
        if not VERSION_PATTERN.match(text):
            raise ValueError(f"Invalid version string: {text!r}")
        return cls(text=text, parts=tuple(int(p) for p in text.split(".")))

    @property
    def sort_key(self) -> tuple[int, ...]:
        """Components with trailing zeros removed."""
        parts = list(self.parts)
        while parts and parts[-1] == 0:
            parts.pop()
        return tuple(parts)

    def __str__(self) -> str:
        return self.text


def compare_versions(a: Version, b: Version) -> int:
    """Compare two versions component-wise.

    Returns:
        Negative if a < b, zero if equal, positive if a > b.
    """
    ka, kb = a.sort_key, b.sort_key
    return (ka > kb) - (ka < kb)


def pessimistic_upper_bound(target: Version) -> tuple[int, ...]:
    """Return the exclusive upper bound for '~> target'.

    The last written segment is dropped (unless it is the only one) and
    the new last segment is incremented: 5.0 -> 6, 5.0.1 -> 5.1, 5 -> 6.
    """
    parts = list(target.parts)
    if len(parts) > 1:
        parts.pop()
    parts[-1] += 1
    return Version(text=".".join(map(str, parts)), parts=tuple(parts)).sort_key


def _satisfies_pessimistic(candidate: Version, target: Version) -> bool:
    if compare_versions(candidate, target) < 0:
        return False
    return candidate.sort_key < pessimistic_upper_bound(target)


_OPERATORS: dict[str, Callable[[Version, Version], bool]] = {
    "=": lambda c, t: compare_versions(c, t) == 0,
    "!=": lambda c, t: compare_versions(c, t) != 0,
    ">": lambda c, t: compare_versions(c, t) > 0,
    "<": lambda c, t: compare_versions(c, t) < 0,
    ">=": lambda c, t: compare_versions(c, t) >= 0,
    "<=": lambda c, t: compare_versions(c, t) <= 0,
    "~>": _satisfies_pessimistic,
}


@dataclass(frozen=True)
class Clause:
    """A single (operator, version) requirement clause."""

    operator: str
    target: Version

    def satisfied_by(self, version: Version) -> bool:
        """Check the clause against a candidate version."""
        return _OPERATORS[self.operator](version, self.target)

    def __str__(self) -> str:
        return f"{self.operator} {self.target}"


@dataclass(frozen=True)
class VersionRequirement:
    """A conjunction of version clauses.

    Attributes:
        clauses: Clauses in the order they were written.
    """

    clauses: tuple[Clause, ...]

    @classmethod
    def parse(cls, constraint: str | None = None) -> VersionRequirement:
        """Parse a requirement string.

        Clauses are separated by commas. A clause without an operator means
        an exact match. An empty or missing string means '>= 0'.

        Args:
            constraint: Requirement string, e.g. '~> 6.0' or '>= 5, != 5.3'.

        Returns:
            Parsed VersionRequirement.

        Raises:
            MalformedConstraint: If any clause cannot be parsed.
        """
        if constraint is None or not constraint.strip():
            constraint = DEFAULT_REQUIREMENT

        clauses = []
        for raw in constraint.split(","):
            match = CLAUSE_PATTERN.match(raw.strip())
            if match is None:
                raise MalformedConstraint(
                    f"Illformed requirement clause {raw.strip()!r} in {constraint!r}"
                )
            operator, target = match.groups()
            clauses.append(Clause(operator or "=", Version.parse(target)))
        return cls(clauses=tuple(clauses))

    def satisfied_by(self, version: Version) -> bool:
        """Check whether a version satisfies every clause."""
        return all(clause.satisfied_by(version) for clause in self.clauses)

    def __str__(self) -> str:
        return ", ".join(str(c) for c in self.clauses)


__all__ = [
    "DEFAULT_REQUIREMENT",
    "Clause",
    "MalformedConstraint",
    "Version",
    "VersionRequirement",
    "compare_versions",
    "pessimistic_upper_bound",
]
