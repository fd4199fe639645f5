"""
GoBGP enum handling: table types, address families and session states.

The daemon's API stubs advertise enum tables as name -> value maps
(e.g. "SAFI_UNICAST" -> 1). Everything here works on those names so the
exporter doesn't care which API revision generated the stubs.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, Optional


class TableType(Enum):
    """RIB scopes the exporter knows how to query."""

    GLOBAL = "GLOBAL"
    LOCAL = "LOCAL"


class SessionState(IntEnum):
    UNKNOWN = 0
    IDLE = 1
    CONNECT = 2
    ACTIVE = 3
    OPENSENT = 4
    OPENCONFIRM = 5
    ESTABLISHED = 6


class AdminState(IntEnum):
    UP = 0
    DOWN = 1
    PFX_CT = 2


# Prefixes used by the enum value names in the GoBGP protos
_TABLE_PREFIX = "TABLE_TYPE_"
_AFI_PREFIX = "AFI_"
_SAFI_PREFIX = "SAFI_"

# Friendlier spellings for the label; anything else is just lower-cased
_AFI_LABELS = {"IP": "ipv4", "IP6": "ipv6"}


def _strip(name: str, prefix: str) -> str:
    name = name.strip().upper().replace("-", "_")
    if name.startswith(prefix):
        name = name[len(prefix):]
    return name


def table_type_key(name: str) -> str:
    return _strip(name, _TABLE_PREFIX)


def safi_key(name: str) -> str:
    return _strip(name, _SAFI_PREFIX)


def afi_key(name: str) -> str:
    return _strip(name, _AFI_PREFIX)


def resolve_table_type(name: str) -> Optional[TableType]:
    """Map a daemon table-type name to a supported variant.

    Returns None for anything other than GLOBAL or LOCAL (ADJ_IN, VRF, and
    whatever future API revisions add). Callers skip those.
    """
    key = table_type_key(name)
    for variant in TableType:
        if variant.value == key:
            return variant
    return None


def family_label(afi_name: str, safi_name: str) -> str:
    """Label value for an AFI/SAFI pair, e.g. ("AFI_IP", "SAFI_UNICAST") -> "ipv4-unicast"."""
    afi = afi_key(afi_name)
    afi = _AFI_LABELS.get(afi, afi.lower())
    safi = safi_key(safi_name).lower()
    return f"{afi}-{safi}".replace("_", "-")


def parse_name_set(value: Optional[Iterable[str] | str], key=str.upper) -> FrozenSet[str]:
    """Turn a comma-separated string (or an iterable of names) into a set of keys."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    return frozenset(key(item) for item in value if item and item.strip())


def is_established(session_state: int) -> bool:
    return session_state == SessionState.ESTABLISHED
