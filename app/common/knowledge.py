"""Knowledge document loader.

The food/diet knowledge document is read once, validated against
``KNOWLEDGE_SCHEMA`` and cached for the life of the process. Callers that
change the file on disk (tests, release tooling) pass ``force_reload=True``
or call :func:`reset_cache`.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
from pathlib import Path
from threading import Lock
from typing import Any

from jsonschema import Draft7Validator

from config.settings import KnowledgeSettings

from .exceptions import KnowledgeBaseError
from .knowledge_schema import KNOWLEDGE_SCHEMA

KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR = "FOOD_KNOWLEDGE_ALLOW_VERSION_MISMATCH"

logger = logging.getLogger(__name__)


class KnowledgeValidationError(KnowledgeBaseError):
    """Raised when the knowledge document fails schema validation."""


_FILENAME_SEMVER_RE = re.compile(r"_v(\d+)[._](\d+)\.json$")
_VERSION_SEMVER_RE = re.compile(r"^v?(\d+)\.(\d+)")


def _mismatch_allowed() -> bool:
    flag = os.environ.get(KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR, "")
    return flag.strip().lower() in {"1", "true", "yes"}


def _major_minor(pattern: re.Pattern[str], text: object) -> tuple[int, int] | None:
    if not isinstance(text, str):
        return None
    found = pattern.search(text.strip())
    return (int(found.group(1)), int(found.group(2))) if found else None


def validate_filename_semver(document: dict[str, Any], target: Path) -> None:
    """Require ``food_knowledge_vX_Y.json`` to carry ``"version": "X.Y"``.

    Files without a version suffix, or documents without a parsable version,
    are not checked.
    """
    if _mismatch_allowed():
        return
    from_name = _major_minor(_FILENAME_SEMVER_RE, target.name)
    from_doc = _major_minor(_VERSION_SEMVER_RE, document.get("version"))
    if from_name is None or from_doc is None or from_name == from_doc:
        return
    raise KnowledgeBaseError(
        f"{target.name}: filename version v{from_name[0]}_{from_name[1]} does not match "
        f"document version {document.get('version')!r}; "
        f"set {KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR}=1 to load it anyway",
        path=str(target),
    )


_cache: dict[str, Any] | None = None
_knowledge_path: Path | None = None
_checksum: str | None = None
_version: str | None = None
_lock = Lock()
_validator = Draft7Validator(KNOWLEDGE_SCHEMA)


def get_knowledge(path: str | Path | None = None, *, force_reload: bool = False) -> dict[str, Any]:
    """Return the parsed knowledge document, loading it on first use."""

    target = _resolve_path(path)
    with _lock:
        if force_reload or _cache is None or _knowledge_path != target:
            _refresh_cache(target)
    return _cache if isinstance(_cache, dict) else {}


def reset_cache() -> None:
    """Clear the cached knowledge data forcing a reload on next access."""

    global _cache, _knowledge_path, _checksum, _version
    with _lock:
        _cache = None
        _knowledge_path = None
        _checksum = None
        _version = None


def knowledge_version() -> str | None:
    """Return the semantic version of the loaded knowledge file."""

    get_knowledge()
    return _version


def knowledge_hash() -> str | None:
    """Return the SHA256 hash of the current knowledge file contents."""

    get_knowledge()
    return _checksum


def validate_document(document: Any) -> None:
    """Raise :class:`KnowledgeValidationError` for the first schema violation."""
    errors = sorted(_validator.iter_errors(document), key=lambda err: list(err.absolute_path))
    if not errors:
        return
    error = errors[0]
    path = "/".join(str(part) for part in error.absolute_path) or "<root>"
    raise KnowledgeValidationError(f"{path}: {error.message}")


def _resolve_path(override: str | Path | None) -> Path:
    if override:
        return Path(override).expanduser().resolve()
    return KnowledgeSettings().food_kb_path


def _refresh_cache(target: Path) -> None:
    if not target.is_file():
        raise KnowledgeBaseError(f"KB file not found: {target}", path=str(target))
    raw = target.read_bytes()
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise KnowledgeBaseError(f"Invalid JSON in KB file: {exc}", path=str(target)) from exc
    validate_document(data)
    validate_filename_semver(data, target)
    global _cache, _knowledge_path, _checksum, _version
    _cache = data
    _knowledge_path = target
    _checksum = hashlib.sha256(raw).hexdigest()
    _version = data.get("version")
    logger.debug("Loaded food knowledge %s from %s", _version, target)
