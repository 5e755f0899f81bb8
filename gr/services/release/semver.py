from __future__ import annotations

import re
from dataclasses import dataclass

from gr.core.result import Err, Ok, Result
from gr.services.release.errors import ReleaseError


_TAG_RE = re.compile(
    r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def maintenance_branch(self) -> str:
        return f"v{self.major}.{self.minor}.x"

    @property
    def is_minor_release(self) -> bool:
        """True for ``vX.Y.0`` tags, which open a new maintenance line."""
        return self.patch == 0 and self.prerelease is None


def parse_tag(tag: str) -> SemVer | None:
    m = _TAG_RE.match(tag)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def validate_tag(tag: str) -> Result[SemVer, ReleaseError]:
    version = parse_tag(tag)
    if version is None:
        return Err(
            ReleaseError(
                kind="invalid_tag",
                message=f"invalid tag: {tag}",
                hint="expected vMAJOR.MINOR.PATCH, e.g. v1.16.2",
            )
        )
    return Ok(version)


def maintenance_branch(tag: str) -> str | None:
    """``v1.16.2`` -> ``v1.16.x``; None when the tag does not parse."""
    version = parse_tag(tag)
    return version.maintenance_branch if version else None


def release_line_prefix(tag: str) -> str:
    """``v1.16.2`` -> ``v1.16.``, used to pick the predecessor release."""
    parts = tag.split(".")
    if len(parts) < 2:
        return tag
    return ".".join(parts[:2]) + "."
