"""Schema definitions for snapshot transfer.

Defines the import unit tree and the import options/report dataclasses.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Union


class UnitKind(str, Enum):
    """Kind of an import unit."""
    MAIN_CONFIG = "main_config"
    CERTIFICATES = "certificates"
    SERVER_PROFILE = "server_profile"
    ACCOUNT_PROFILE = "account_profile"
    # containers
    SERVER_PROFILES = "server_profiles"
    ACCOUNT_PROFILES = "account_profiles"

    @property
    def is_container(self) -> bool:
        return self in (UnitKind.SERVER_PROFILES, UnitKind.ACCOUNT_PROFILES)


@dataclass(frozen=True)
class UnitIdentity:
    """Structured reference to one piece of configuration state."""
    kind: UnitKind
    profile_name: Optional[str] = None
    type_id: Optional[str] = None
    template_name: Optional[str] = None

    def __str__(self) -> str:
        parts = [
            p for p in (self.profile_name, self.type_id, self.template_name)
            if p is not None
        ]
        return ":".join(parts) if parts else self.kind.value


@dataclass
class LeafUnit:
    """Unit that carries data to apply."""
    label: str
    identity: UnitIdentity
    payload: Any = None
    active: bool = False

    @property
    def kind(self) -> UnitKind:
        return self.identity.kind


@dataclass
class ContainerUnit:
    """Organizational parent; never applied itself."""
    label: str
    kind: UnitKind
    children: list[LeafUnit] = field(default_factory=list)
    active: bool = False


ImportUnit = Union[LeafUnit, ContainerUnit]


def walk_units(units: Iterable[ImportUnit]) -> Iterator[ImportUnit]:
    """Depth-first iteration over a unit tree (parents before children)."""
    for unit in units:
        yield unit
        if isinstance(unit, ContainerUnit):
            yield from walk_units(unit.children)


def iter_leaves(units: Iterable[ImportUnit]) -> Iterator[LeafUnit]:
    for unit in walk_units(units):
        if isinstance(unit, LeafUnit):
            yield unit


def find_unit(
    units: Iterable[ImportUnit],
    identity: UnitIdentity,
) -> Optional[LeafUnit]:
    """Find the leaf with the given identity."""
    for leaf in iter_leaves(units):
        if leaf.identity == identity:
            return leaf
    return None


def activate_all(units: Iterable[ImportUnit], active: bool = True) -> None:
    """Set the activation flag on every node, containers included."""
    for unit in walk_units(units):
        unit.active = active


def activate(
    units: Iterable[ImportUnit],
    identities: Iterable[UnitIdentity],
) -> int:
    """
    Activate the leaves whose identity is listed.

    Returns:
        Number of leaves activated
    """
    wanted = set(identities)
    count = 0
    for leaf in iter_leaves(units):
        if leaf.identity in wanted:
            leaf.active = True
            count += 1
    return count


# --- Import Options / Results ---

@dataclass
class ImportOptions:
    """Options for an import run."""
    dry_run: bool = False
    user: Optional[str] = None
    audit_context: str = ""


@dataclass
class ImportReport:
    """Outcome of an import run."""
    dry_run: bool = False
    applied: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: int = 0

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "dry_run": self.dry_run,
            "applied": self.applied,
            "failed": self.failed,
            "skipped": self.skipped,
        }
