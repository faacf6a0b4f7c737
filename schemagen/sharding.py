"""Deterministic partitioning of base paths into batches."""

from __future__ import annotations

from typing import List, Optional, Sequence, TypeVar

from .config import InvalidShardSpec

T = TypeVar("T")


def chunk(items: Sequence[T], count: int) -> List[List[T]]:
    """Split ``items`` into ``count`` contiguous chunks whose sizes differ by at most one.

    The first ``len(items) % count`` chunks carry the extra element. Chunks may
    be empty when there are fewer items than chunks.
    """
    if count < 1:
        raise InvalidShardSpec(f"batch count must be at least 1, got {count}")
    size, remainder = divmod(len(items), count)
    chunks: List[List[T]] = []
    start = 0
    for index in range(count):
        end = start + size + (1 if index < remainder else 0)
        chunks.append(list(items[start:end]))
        start = end
    return chunks


def partition(
    items: Sequence[T],
    shard_count: Optional[int] = None,
    shard_index: Optional[int] = None,
) -> List[T]:
    """Return the shard selected by ``shard_index`` or every item when unsharded."""
    if shard_count is None and shard_index is None:
        return list(items)
    if shard_count is None or shard_index is None:
        raise InvalidShardSpec("batch count and batch index must be provided together")
    if shard_count < 1:
        raise InvalidShardSpec(f"batch count must be at least 1, got {shard_count}")
    if not 0 <= shard_index < shard_count:
        raise InvalidShardSpec(
            f"batch index {shard_index} is out of range for batch count {shard_count}"
        )
    return chunk(items, shard_count)[shard_index]


__all__ = ["chunk", "partition"]
