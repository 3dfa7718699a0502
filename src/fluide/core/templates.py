"""Template catalogue and template identifier resolution.

Identifiers without a namespace separator name first-party templates and
resolve against the first-party template repository. Anything containing "/" is a
third-party GitHub locator and is used verbatim:

    starter                 -> fluide-dev/fluide/examples/starter
    acct/repo#dev           -> acct/repo#dev
    acct/repo/themes/dark   -> acct/repo/themes/dark
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from fluide.core.config import CreateSettings

NAMESPACE_SEPARATOR = "/"
REF_SEPARATOR = "#"


@dataclass(frozen=True)
class TemplateInfo:
    """A first-party template offered by the template prompt."""
    name: str
    title: str
    description: str


TEMPLATES: Tuple[TemplateInfo, ...] = (
    TemplateInfo("starter", "Starter theme", "Sections, snippets and a Vite pipeline (recommended)"),
    TemplateInfo("minimal", "Minimal theme", "Bare layout with a single entry point"),
    TemplateInfo("tailwind", "Tailwind theme", "Starter theme styled with Tailwind CSS"),
)


def get_available_templates() -> Dict[str, TemplateInfo]:
    """Get first-party templates keyed by name."""
    return {t.name: t for t in TEMPLATES}


@dataclass(frozen=True)
class TemplateReference:
    """Parsed template location."""
    owner: str
    repo: str
    subpath: str = ""
    ref: Optional[str] = None
    is_third_party: bool = False

    @property
    def locator(self) -> str:
        """Locator in the form owner/repo/subpath#ref."""
        parts: List[str] = [self.owner, self.repo]
        if self.subpath:
            parts.append(self.subpath)
        locator = NAMESPACE_SEPARATOR.join(parts)
        if self.ref:
            locator += f"{REF_SEPARATOR}{self.ref}"
        return locator

    @property
    def has_ref(self) -> bool:
        return bool(self.ref)


def is_third_party(identifier: str) -> bool:
    return NAMESPACE_SEPARATOR in identifier


def parse_locator(locator: str, is_third_party: bool = True) -> TemplateReference:
    """Split a locator string into its parts.

    Raises:
        ValueError: If the locator does not name at least owner/repo
    """
    path, _, ref = locator.partition(REF_SEPARATOR)
    segments = [s for s in path.strip().split(NAMESPACE_SEPARATOR) if s]
    if len(segments) < 2:
        raise ValueError(f"Invalid template locator: {locator!r} (expected owner/repo)")
    return TemplateReference(
        owner=segments[0],
        repo=segments[1],
        subpath=NAMESPACE_SEPARATOR.join(segments[2:]),
        ref=ref or None,
        is_third_party=is_third_party,
    )


def resolve_template(
    identifier: str,
    ref: Optional[str] = None,
    settings: Optional[CreateSettings] = None,
) -> TemplateReference:
    """Turn a template identifier and optional ref into a TemplateReference.

    An explicit `ref` (from --commit) replaces any ref embedded in a
    third-party identifier.

    Args:
        identifier: First-party template name or third-party locator
        ref: Branch, tag or commit to fetch
        settings: Creation settings (defaults used when omitted)

    Returns:
        The resolved, immutable TemplateReference
    """
    settings = settings or CreateSettings()
    identifier = identifier.strip()

    if is_third_party(identifier):
        reference = parse_locator(identifier, is_third_party=True)
    else:
        reference = parse_locator(
            f"{settings.template_repo}{NAMESPACE_SEPARATOR}{identifier}",
            is_third_party=False,
        )

    if ref:
        reference = replace(reference, ref=ref)
    return reference
