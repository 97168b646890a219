"""Flat openEHR composition used as the output sink of the mapping functions."""

import json
import logging
from collections.abc import Iterator, MutableMapping
from decimal import Decimal
from io import StringIO
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, bool, int, float, Decimal)


class FlatComposition:
    """
    Path-keyed view over a flat openEHR composition.

    Keys are archetype paths such as ``medication/dosierung/frequenz|unit``;
    values are scalars. Writing an existing path overwrites it. Values that
    are not scalars are dropped.
    """

    def __init__(self, data: MutableMapping[str, Any] | None = None):
        self._data: MutableMapping[str, Any] = data if data is not None else {}

        self._yaml = YAML()
        self._yaml.default_flow_style = False
        self._yaml.allow_unicode = True
        self._yaml.width = 4096

    @classmethod
    def wrap(
        cls, sink: "FlatComposition | MutableMapping[str, Any]"
    ) -> "FlatComposition":
        """Return ``sink`` itself or a composition writing through to it."""
        if isinstance(sink, FlatComposition):
            return sink
        return cls(sink)

    def set_value(self, path: str, value: Any) -> bool:
        """
        Store a scalar under ``path``.

        Args:
            path: Archetype path used verbatim as key
            value: A string, number or boolean

        Returns:
            True if the value was stored, False if it was dropped
        """
        if not isinstance(value, SCALAR_TYPES):
            logger.debug(
                f"Dropping unsupported value of type {type(value).__name__} "
                f"at path {path}"
            )
            return False

        self._data[path] = value
        return True

    def get(self, path: str, default: Any = None) -> Any:
        return self._data.get(path, default)

    def __contains__(self, path: object) -> bool:
        return path in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the composition as a plain dict."""
        return dict(self._data)

    # ===== SERIALIZATION METHODS =====

    def _serialisable(self) -> dict[str, Any]:
        return {
            path: float(value) if isinstance(value, Decimal) else value
            for path, value in self._data.items()
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Converts the composition to FLAT JSON."""
        return json.dumps(self._serialisable(), indent=indent, ensure_ascii=False)

    def to_yaml(self) -> str:
        """Converts the composition to YAML."""
        stream = StringIO()
        self._yaml.dump(self._serialisable(), stream)
        return stream.getvalue()

    def save(self, file_path: str | Path) -> str:
        """
        Saves the composition, choosing the format from the file suffix.

        Args:
            file_path: Target file (.json, .yaml or .yml)

        Returns:
            The serialized content that was written

        Raises:
            ValueError: If the suffix is not supported
        """
        path = Path(file_path)
        suffix = path.suffix.lower()
        if suffix == ".json":
            content = self.to_json()
        elif suffix in {".yaml", ".yml"}:
            content = self.to_yaml()
        else:
            raise ValueError(
                f"Unsupported output extension '{path.suffix}'. "
                "Supported: .json, .yaml, .yml"
            )

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Flat composition saved to: {path}")
        return content
