"""Project directory validation.

A target directory is usable when it does not exist yet or holds nothing
but editor/VCS metadata, logs and docs.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

# Entries that never conflict with a freshly copied template
SAFE_NAMES = frozenset({
    ".DS_Store",
    ".git",
    ".gitattributes",
    ".gitignore",
    ".gitlab-ci.yml",
    ".hg",
    ".hgcheck",
    ".hgignore",
    ".idea",
    ".npmignore",
    ".travis.yml",
    ".yarn",
    ".yarnrc.yml",
    "docs",
    "LICENSE",
    "README",
    "README.md",
    "mkdocs.yml",
    "Thumbs.db",
})

SAFE_PATTERNS = (
    re.compile(r"\.iml$"),
    re.compile(r"^npm-debug\.log"),
    re.compile(r"^yarn-debug\.log"),
    re.compile(r"^yarn-error\.log"),
)


@dataclass
class DirectoryVerdict:
    """Result of checking a candidate project directory."""
    is_valid: bool
    conflicts: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid


def is_safe_entry(name: str) -> bool:
    """Check whether a directory entry may coexist with a new project."""
    if name in SAFE_NAMES:
        return True
    return any(pattern.search(name) for pattern in SAFE_PATTERNS)


def validate_directory(path: Union[str, Path]) -> DirectoryVerdict:
    """Check whether `path` can receive a new project.

    Args:
        path: Candidate project directory

    Returns:
        DirectoryVerdict listing the conflicting entries in sorted order
    """
    target = Path(path)
    if not target.exists():
        return DirectoryVerdict(is_valid=True)
    if not target.is_dir():
        return DirectoryVerdict(is_valid=False, conflicts=[target.name])

    conflicts = sorted(
        entry.name for entry in target.iterdir()
        if not is_safe_entry(entry.name)
    )
    return DirectoryVerdict(is_valid=not conflicts, conflicts=conflicts)
