"""Loader for mapping request documents (local YAML / JSON files)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from ruamel.yaml import YAML

from ..core.exceptions import RequestLoadError
from ..models.fhir import SourceKind, SourceValue, parse_source_value

logger = logging.getLogger(__name__)

_YAML_EXTS: Final[set[str]] = {".yaml", ".yml"}
_JSON_EXTS: Final[set[str]] = {".json"}

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2


class MappingRequest(BaseModel):
    """One call of a mapping function, as written in a request document."""

    code: str = Field(..., description="Mapping function identifier.")
    path: str = Field(..., description="Target archetype path.")
    value_type: SourceKind = Field(
        ..., description="Kind of FHIR value held in `value`."
    )
    value: dict[str, Any] = Field(..., description="FHIR JSON of the value.")
    openehr_type: str | None = Field(
        None,
        alias="openEhrType",
        description="openEHR RM type hint of the target element.",
    )

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    def source_value(self) -> SourceValue:
        """The validated FHIR value (raises SourceValueError)."""
        return parse_source_value(self.value_type, self.value)


class FileLoader:
    """Read a request document from disk and return its mapping requests."""

    supported_exts: set[str] = _YAML_EXTS | _JSON_EXTS

    @staticmethod
    def load_raw(path: str | Path) -> Any:
        file_path = Path(path)

        # validation
        if not file_path.exists():
            logger.error("File not found: %s", file_path)
            raise RequestLoadError(f"File not found: {file_path}")

        if file_path.suffix.lower() not in FileLoader.supported_exts:
            raise RequestLoadError(
                f"Unsupported extension '{file_path.suffix}'. "
                f"Supported: {', '.join(sorted(FileLoader.supported_exts))}"
            )

        raw_text = file_path.read_text(encoding="utf-8")

        # parse
        try:
            if file_path.suffix.lower() in _YAML_EXTS:
                return _yaml_parser.load(raw_text)
            return json.loads(raw_text)
        except Exception as exc:
            raise RequestLoadError(f"Cannot parse {file_path.name}: {exc}") from exc

    @staticmethod
    def load(path: str | Path) -> list[MappingRequest]:
        """
        Load the mapping requests of a document.

        The document is either a single request object or a mapping with a
        ``mappings`` list of request objects.

        Raises:
            RequestLoadError: If the file cannot be read or a request is invalid
        """
        data = FileLoader.load_raw(path)

        if not isinstance(data, dict):
            raise RequestLoadError("Top-level object must be a mapping")

        entries = data["mappings"] if "mappings" in data else [data]
        if not isinstance(entries, list):
            raise RequestLoadError("'mappings' must be a list of requests")

        requests: list[MappingRequest] = []
        for index, entry in enumerate(entries):
            try:
                requests.append(MappingRequest.model_validate(entry))
            except ValidationError as exc:
                raise RequestLoadError(
                    f"Invalid mapping request #{index + 1}: {exc}"
                ) from exc

        logger.debug("Request document loaded (%d request(s))", len(requests))
        return requests

    @staticmethod
    def load_composition(path: str | Path) -> dict[str, Any]:
        """Load an existing flat composition to continue writing into."""
        data = FileLoader.load_raw(path)
        if not isinstance(data, dict):
            raise RequestLoadError("A flat composition must be a mapping")
        return dict(data)
