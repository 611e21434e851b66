"""
Module 05B - Artifact IO
File: io.py

Purpose: Read allow-lists and write/read tree dumps and proof files.

Every read or write opens the file, finishes the whole transfer and
closes it. Failures surface as DumpIOException naming the path; there is
no retry.
"""

from __future__ import annotations

import csv
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from core.merkle.standard_tree import StandardMerkleTree
from core.schemas.dump import TreeDump
from core.schemas.errors import DumpIOException, LeafValidationException
from core.schemas.proof import LeafProof, MultiProofPayload


logger = logging.getLogger(__name__)


@dataclass
class AllowlistFile:
    """Leaf values read from an allow-list file."""
    values: list[list[Any]]
    leaf_encoding: Optional[list[str]] = None
    path: Optional[str] = None


def dump_json(obj: Any, *, indent: int | None = None) -> str:
    """Serialize a dump, proof or plain object to JSON."""
    if isinstance(obj, TreeDump):
        data = obj.to_json_dict()
    elif hasattr(obj, "model_dump"):
        data = obj.model_dump(mode="json")
    elif hasattr(obj, "to_dict"):
        data = obj.to_dict()
    else:
        data = obj
    return json.dumps(data, indent=indent)


def _write_text(path: Path, content: str) -> Path:
    """Write a file in one step, replacing any previous version."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as e:
        raise DumpIOException(f"Cannot write {path}: {e.strerror or e}", path=str(path)) from e
    return path


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise DumpIOException(f"File not found: {path}", path=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise DumpIOException(f"Cannot read {path}: {e}", path=str(path)) from e


def _read_json(path: Path) -> Any:
    text = _read_text(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DumpIOException(
            f"Invalid JSON in {path}: {e.msg} (line {e.lineno})",
            path=str(path),
        ) from e


# =============================================================================
# Tree dumps
# =============================================================================

def save_dump(tree: StandardMerkleTree | TreeDump, path: str | Path) -> Path:
    """
    Write a tree dump as JSON.

    Returns:
        The written path
    """
    dump = tree.dump() if isinstance(tree, StandardMerkleTree) else tree
    out = _write_text(Path(path), dump_json(dump))
    logger.info(f"Wrote tree dump ({len(dump.values)} values) to {out}")
    return out


def load_dump(path: str | Path) -> dict[str, Any]:
    """
    Read a tree dump document.

    Raises:
        DumpIOException: If the file is missing, unreadable or not JSON
    """
    path = Path(path)
    data = _read_json(path)
    if not isinstance(data, dict):
        raise DumpIOException(f"Tree dump {path} is not a JSON object", path=str(path))
    return data


def load_tree(path: str | Path) -> StandardMerkleTree:
    """
    Read and reconstruct a tree.

    Raises:
        DumpIOException: If the file cannot be read
        FormatVersionException: If the dump format is not supported
        InvalidTreeException: If the dump is malformed
    """
    tree = StandardMerkleTree.load(load_dump(path))
    logger.debug(f"Loaded tree {tree.root} from {path}")
    return tree


# =============================================================================
# Proofs
# =============================================================================

def save_proof(
    proof: LeafProof | MultiProofPayload | Sequence[str],
    path: str | Path,
) -> Path:
    """
    Write a proof file.

    A single-leaf proof is written as a bare JSON list of 0x-hex digests,
    which is what on-chain callers pass to MerkleProof.verify. A
    multiproof is written as an object.
    """
    if isinstance(proof, LeafProof):
        content = dump_json(proof.proof)
    elif isinstance(proof, MultiProofPayload):
        content = dump_json(proof)
    else:
        content = dump_json(list(proof))
    out = _write_text(Path(path), content)
    logger.debug(f"Wrote proof to {out}")
    return out


def load_proof(path: str | Path) -> list[str]:
    """
    Read a single-leaf proof file.

    Accepts a bare list of digests or an object with a "proof" list.
    """
    path = Path(path)
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("proof")
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        raise DumpIOException(f"Proof file {path} does not hold a list of hex digests", path=str(path))
    return data


# =============================================================================
# Allow-lists
# =============================================================================

def _as_leaf(item: Any) -> list[Any]:
    if isinstance(item, (list, tuple)):
        return list(item)
    return [item]


def _parse_json_allowlist(path: Path) -> AllowlistFile:
    data = _read_json(path)
    leaf_encoding = None

    if isinstance(data, dict):
        leaf_encoding = data.get("leafEncoding") or data.get("leaf_encoding")
        data = data.get("values")

    if not isinstance(data, list):
        raise LeafValidationException(
            f"Allow-list {path} must be a JSON list of leaves",
            field_path="leaves",
            details={"path": str(path)},
        )
    return AllowlistFile(
        values=[_as_leaf(item) for item in data],
        leaf_encoding=list(leaf_encoding) if leaf_encoding else None,
        path=str(path),
    )


def _parse_csv_allowlist(path: Path) -> AllowlistFile:
    text = _read_text(path)
    values = []
    for row in csv.reader(text.splitlines()):
        cells = [cell.strip() for cell in row]
        if not any(cells) or cells[0].startswith("#"):
            continue
        values.append(cells)
    return AllowlistFile(values=values, path=str(path))


def _parse_text_allowlist(path: Path) -> AllowlistFile:
    text = _read_text(path)
    values = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            values.append([line])
    return AllowlistFile(values=values, path=str(path))


def load_allowlist(path: str | Path) -> AllowlistFile:
    """
    Read leaf values from an allow-list file.

    Formats (by extension):
    - .json: a list of leaves (each a list, or a scalar for single-field
      encodings), or {"leafEncoding": [...], "values": [...]}
    - .csv: one leaf per row; blank rows and rows starting with # skipped
    - anything else: one address per line; # starts a comment

    Raises:
        DumpIOException: If the file cannot be read
        LeafValidationException: If a JSON allow-list has the wrong shape
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        allowlist = _parse_json_allowlist(path)
    elif suffix == ".csv":
        allowlist = _parse_csv_allowlist(path)
    else:
        allowlist = _parse_text_allowlist(path)

    logger.debug(f"Read {len(allowlist.values)} leaves from {path}")
    return allowlist
