"""Registry file loading.

The registry is one YAML document with `components`, `landscapes` and
`teams` lists. Loading validates it into a RegistryDocument and rejects
duplicate ids within each list.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.registry.models import RegistryDocument

logger = logging.getLogger(__name__)


class RegistryLoadError(Exception):
    """Raised when the registry file cannot be parsed or validated.

    Attributes:
        message: Human-readable error description
        path: Path to the registry file
    """

    def __init__(self, message: str, path: Path) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} ({path})")


def load_registry(path: str | Path) -> RegistryDocument:
    """Read and validate a registry file.

    An empty file yields an empty registry.

    Raises:
        FileNotFoundError: If the file doesn't exist
        RegistryLoadError: On YAML syntax errors, schema violations or
            duplicate ids
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Registry file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise RegistryLoadError(f"YAML syntax error: {e}", path) from e

    if data is None:
        logger.warning("Registry file %s is empty", path)
        data = {}
    if not isinstance(data, dict):
        raise RegistryLoadError("Registry root must be a mapping", path)

    try:
        document = RegistryDocument.model_validate(data)
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise RegistryLoadError(f"Validation failed: {'; '.join(messages)}", path) from e

    for kind, ids in (
        ("component", (c.id for c in document.components)),
        ("landscape", (lnd.id for lnd in document.landscapes)),
        ("team", (t.id for t in document.teams)),
    ):
        duplicates = _duplicates(ids)
        if duplicates:
            raise RegistryLoadError(f"Duplicate {kind} ids: {', '.join(duplicates)}", path)

    logger.debug("Parsed registry file %s", path)
    return document


def _duplicates(ids: Iterable[str]) -> list[str]:
    return sorted(item for item, count in Counter(ids).items() if count > 1)
