"""Deterministic cache keys and paths.

Keys have the form ``template:filename`` or ``template:filename:digest``,
where ``digest`` is the sha256 of the parameters serialized as JSON with
sorted keys. ``:`` is outside both the template and filename character
sets, so a key always splits back into its three segments.
"""

import hashlib
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from imagecache.shared.constants import HASH_PREFIX_LENGTH, KEY_SEPARATOR

type Params = Mapping[str, Any] | BaseModel | None


def canonicalize_params(params: Params) -> str:
    """Serialize parameters so that insertion order and ``None`` values don't matter."""
    if params is None:
        return "{}"
    if isinstance(params, BaseModel):
        payload = params.model_dump(exclude_none=True)
    else:
        payload = {key: value for key, value in params.items() if value is not None}
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def params_digest(params: Params) -> str | None:
    canonical = canonicalize_params(params)
    if canonical == "{}":
        return None
    return hashlib.sha256(canonical.encode()).hexdigest()


def compute_key(template: str, filename: str, params: Params = None) -> str:
    digest = params_digest(params)
    if digest is None:
        return KEY_SEPARATOR.join((template, filename))
    return KEY_SEPARATOR.join((template, filename, digest))


def split_key(key: str) -> tuple[str, str, str | None]:
    """Inverse of ``compute_key``."""
    parts = key.split(KEY_SEPARATOR)
    if len(parts) == 2:
        return parts[0], parts[1], None
    if len(parts) == 3:
        return parts[0], parts[1], parts[2]
    raise ValueError(f"Malformed cache key: {key}")


def compute_path(cache_root: Path, template: str, filename: str, params: Params = None) -> Path:
    """Where the artifact for ``(template, filename, params)`` lives.

    Parameterized artifacts get a two level fan-out taken from the parameter
    digest: ``cache_root/template/ab/cdef.../filename``.
    """
    base = cache_root / template
    digest = params_digest(params)
    if digest is not None:
        base = base / digest[:HASH_PREFIX_LENGTH] / digest[HASH_PREFIX_LENGTH:]
    return base / filename
