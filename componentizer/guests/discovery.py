"""Locate guest crates and order them for building."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Sequence

from ..models import Guest


def discover_guests(
    guests_dir: Path,
    name_map: Mapping[str, str] | None = None,
    priority: Sequence[str] | None = None,
) -> List[Guest]:
    """Return the guest crates under ``guests_dir`` in build order.

    Only directories count as guests, so stray files such as a README are
    skipped. ``name_map`` renames a guest's cargo package when it differs from
    the directory name. ``priority`` orders guests by position; names that are
    not listed share index 0, the ``*`` slot, which lets entries after ``*``
    (``function`` by default) build last. The sort is stable, so guests of
    equal priority keep their alphabetical order.
    """
    name_map = name_map or {}
    order = list(priority or [])

    guests = [
        Guest.from_path(path, name_map.get(path.name))
        for path in sorted(guests_dir.iterdir())
        if path.is_dir()
    ]

    def _rank(guest: Guest) -> int:
        try:
            return order.index(guest.name)
        except ValueError:
            return 0

    return sorted(guests, key=_rank)


__all__ = ["discover_guests"]
