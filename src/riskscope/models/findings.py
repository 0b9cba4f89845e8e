"""Finding and insight entities.

This module contains the input and output units of the analysis engine:
- Ecosystem: Package ecosystem a dependency was declared in
- Dependency: Single third-party dependency
- Issue: Issue-tracker entry reported against a dependency
- Finding: A dependency plus the issues discovered about it
- Insight: Analysis text attached to one candidate finding
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Ecosystem(Enum):
    """Package ecosystem of a dependency manifest."""

    RUST = "rust"
    NODE = "node"
    PYTHON = "python"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Ecosystem":
        """Parse an ecosystem tag, tolerating common aliases.

        Args:
            value: Ecosystem tag (e.g., "rust", "npm", "pypi")

        Returns:
            Matching Ecosystem, UNKNOWN when the tag is not recognized
        """
        aliases = {
            "cargo": cls.RUST,
            "crates": cls.RUST,
            "npm": cls.NODE,
            "javascript": cls.NODE,
            "pypi": cls.PYTHON,
            "pip": cls.PYTHON,
        }
        tag = str(value or "").strip().lower()
        if tag in aliases:
            return aliases[tag]
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Dependency:
    """Single third-party dependency with version information.

    Attributes:
        name: Package name
        version: Version specifier as declared in the manifest ("*" if unpinned)
        ecosystem: Package ecosystem
    """

    name: str
    version: str = "*"
    ecosystem: Ecosystem = Ecosystem.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "version": self.version,
            "ecosystem": self.ecosystem.value,
        }


@dataclass(frozen=True)
class Issue:
    """Issue-tracker entry found for a dependency.

    Attributes:
        state: Issue state as reported by the tracker (e.g., "open", "closed")
        title: Issue title
        url: Link to the issue if available
    """

    state: str
    title: str
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"state": self.state, "title": self.title, "url": self.url}


@dataclass(frozen=True)
class Finding:
    """A dependency plus the issues discovered about it.

    Findings are produced by the upstream issue search and never mutated here.
    """

    dependency: Dependency
    issues: tuple[Issue, ...] = field(default_factory=tuple)

    @property
    def has_issues(self) -> bool:
        """Return True if at least one issue was reported."""
        return len(self.issues) > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dependency": self.dependency.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        """Create a Finding from its JSON representation.

        Args:
            data: Dictionary with "dependency" and "issues" keys

        Returns:
            Finding instance

        Raises:
            ValueError: If the entry is not shaped like a finding or the
                dependency name is missing
        """
        if not isinstance(data, dict):
            raise ValueError(f"Finding must be an object, got {type(data).__name__}")

        dep_data = data.get("dependency") or {}
        if not isinstance(dep_data, dict):
            raise ValueError(f"Finding dependency must be an object, got {type(dep_data).__name__}")

        issue_data = data.get("issues") or []
        if not isinstance(issue_data, list) or not all(isinstance(i, dict) for i in issue_data):
            raise ValueError("Finding issues must be a list of objects")

        name = str(dep_data.get("name", "")).strip()
        if not name:
            raise ValueError("Finding dependency requires a name")

        dependency = Dependency(
            name=name,
            version=str(dep_data.get("version") or "*"),
            ecosystem=Ecosystem.parse(dep_data.get("ecosystem")),
        )
        issues = tuple(
            Issue(
                state=str(item.get("state", "unknown")),
                title=str(item.get("title", "")),
                url=item.get("url"),
            )
            for item in issue_data
        )
        return cls(dependency=dependency, issues=issues)


@dataclass(frozen=True)
class Insight:
    """Risk analysis attached to one candidate finding.

    Attributes:
        dependency_name: Name of the analyzed dependency
        version: Version of the analyzed dependency
        analysis: Backend-produced text, or the placeholder when the batch failed
        failed: True if analysis is the placeholder text
    """

    dependency_name: str
    version: str
    analysis: str
    failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dependency_name": self.dependency_name,
            "version": self.version,
            "analysis": self.analysis,
            "failed": self.failed,
        }
