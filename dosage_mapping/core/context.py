"""
Mapping Context

Per-call context handed to a mapping function. It carries the target path and
owns the writes of the call, so the function never touches the composition
directly.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from dosage_mapping.models.flat_composition import SCALAR_TYPES, FlatComposition

logger = logging.getLogger(__name__)


@dataclass
class MappingContext:
    """
    Target path plus the writes of one mapping call.

    With ``atomic`` set, writes are staged and only reach the composition on
    ``commit()``. Without it they are written through immediately and stay
    in the composition even if the call fails afterwards.
    """

    code: str
    path: str
    composition: FlatComposition
    openehr_type: str | None = None
    atomic: bool = True
    written: list[tuple[str, Any]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    _staged: list[tuple[str, Any]] = field(default_factory=list, repr=False)

    def sub_path(self, suffix: str) -> str:
        """Target path extended by a structural or facet suffix."""
        return f"{self.path}{suffix}"

    def set_value(self, path: str, value: Any) -> bool:
        """
        Record a write of ``value`` at ``path``.

        Returns:
            False if the value is not a scalar and was dropped
        """
        if not isinstance(value, SCALAR_TYPES):
            logger.debug(
                f"Dropping unsupported value of type {type(value).__name__} "
                f"at path {path}"
            )
            return False

        if self.atomic:
            self._staged.append((path, value))
            return True

        stored = self.composition.set_value(path, value)
        if stored:
            self.written.append((path, value))
        return stored

    def skip(self, field_name: str) -> None:
        """Note a present sub-field that could not be mapped."""
        self.skipped.append(field_name)

    @property
    def pending(self) -> list[tuple[str, Any]]:
        """Writes staged but not yet committed."""
        return list(self._staged)

    def commit(self) -> list[tuple[str, Any]]:
        """Apply staged writes to the composition, in order."""
        for path, value in self._staged:
            if self.composition.set_value(path, value):
                self.written.append((path, value))
        self._staged.clear()
        return list(self.written)

    def discard(self) -> None:
        """Drop staged writes; write-through entries are left in place."""
        if self._staged:
            logger.debug(
                f"Discarding {len(self._staged)} staged write(s) for {self.path}"
            )
        self._staged.clear()
