"""
Module 01 - Schemas & Errors
File: dump.py

Purpose: Serializable snapshot of a built tree.

The JSON shape is the one OpenZeppelin's StandardMerkleTree.dump() writes,
so dumps can be exchanged with JavaScript tooling:

    {
      "format": "standard-v1",
      "leafEncoding": ["address"],
      "tree": ["0x...", ...],
      "values": [{"value": ["0x..."], "treeIndex": 4}, ...]
    }
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .versioning import DUMP_FORMAT


class DumpValue(BaseModel):
    """One stored leaf value and the tree node that holds its hash."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    value: list[Any] = Field(
        ...,
        description="Normalized leaf field values",
    )
    tree_index: int = Field(
        ...,
        alias="treeIndex",
        ge=0,
        description="Index of the leaf hash in the tree array",
    )


class TreeDump(BaseModel):
    """
    Versioned tree snapshot.

    The format string is not constrained here so that an unknown format
    surfaces as a FormatVersionException at load time rather than as a
    generic schema error.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    format: str = Field(
        default=DUMP_FORMAT,
        description="Tree shape/hashing format identifier",
    )
    leaf_encoding: list[str] = Field(
        ...,
        alias="leafEncoding",
        min_length=1,
        description="ABI type tags of each leaf field",
    )
    tree: list[str] = Field(
        ...,
        min_length=1,
        description="0x-hex node digests, root first",
    )
    values: list[DumpValue] = Field(
        ...,
        min_length=1,
        description="Leaf values in original input order",
    )

    @field_validator("tree")
    @classmethod
    def _nodes_are_hex_digests(cls, nodes: list[str]) -> list[str]:
        for i, node in enumerate(nodes):
            if not (isinstance(node, str) and node.startswith("0x") and len(node) == 66):
                raise ValueError(f"tree[{i}] is not a 0x-prefixed 32-byte hex digest")
            try:
                bytes.fromhex(node[2:])
            except ValueError:
                raise ValueError(f"tree[{i}] contains invalid hex characters") from None
        return [node.lower() for node in nodes]

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used on disk."""
        return self.model_dump(mode="json", by_alias=True)
