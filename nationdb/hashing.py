"""
nationdb.hashing — Deterministic fingerprints for catalog builds.

Provides per-nation hashes and a catalog-level fingerprint so that two
builds of the catalog can be compared without diffing the data.

Design contract:
    - compute_nation_hash() is deterministic for identical records.
    - compute_catalog_fingerprint() is deterministic for identical
      per-nation hashes, independent of catalog order.
    - Hash inputs are canonical JSON text (sorted keys, no whitespace),
      inspectable for debugging.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any


def canonical_json(record: Mapping[str, Any]) -> str:
    """Serialize a record to canonical JSON text.

    Keys are sorted at every level, separators carry no whitespace and
    non-ASCII characters are kept verbatim (UTF-8 on hashing).
    """
    return json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_nation_hash(record: Mapping[str, Any]) -> str:
    """Compute SHA-256 hex digest of one nation record (camelCase wire shape)."""
    return hashlib.sha256(canonical_json(record).encode("utf-8")).hexdigest()


def compute_catalog_fingerprint(nation_hashes: Mapping[str, str]) -> str:
    """Compute the catalog fingerprint from all per-nation hashes.

    Args:
        nation_hashes: {nation_code: hex_hash}

    Returns:
        SHA-256 hex digest over "CODE=hash" lines in alphabetical code order.
    """
    if not nation_hashes:
        raise ValueError("nation_hashes is empty")

    parts = [f"{code}={nation_hashes[code]}" for code in sorted(nation_hashes)]
    hash_input = "\n".join(parts) + "\n"
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()
