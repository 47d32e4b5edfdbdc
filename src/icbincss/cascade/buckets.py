"""The bucket index: per-(selector, layer, scope, descriptor) property sets.

Each targeting rule is its own named operation:

* ``add_property`` / ``set_property`` address one exact bucket key.
* ``delete_property`` addresses the most recently touched bucket for a
  selector + layer, whatever its scope or descriptor.
* ``drop`` addresses every bucket for a selector + layer.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from icbincss.cascade.responsive import Descriptor


@dataclass(frozen=True)
class BucketKey:
    selector: str
    layer: str | None = None
    scope_root: str | None = None
    scope_limit: str | None = None
    descriptor: Descriptor | None = None


@dataclass
class StyleProperty:
    """One property row inside a bucket.

    ``value`` is stored unexpanded; token references and the spacing macro
    are resolved at emission using ``spacing_mode``.
    """

    name: str
    value: str
    row_id: str
    sequence: int
    spacing_mode: str | None = None
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass
class Bucket:
    key: BucketKey
    properties: dict[str, StyleProperty] = field(default_factory=dict)
    touched: int = 0


class BucketIndex:
    """Ordered collection of buckets, in creation order."""

    def __init__(self) -> None:
        self._buckets: dict[BucketKey, Bucket] = {}
        self._clock = 0

    def __iter__(self) -> Iterator[Bucket]:
        return iter(list(self._buckets.values()))

    def __len__(self) -> int:
        return len(self._buckets)

    def get(self, key: BucketKey) -> Bucket | None:
        return self._buckets.get(key)

    def _tick(self, bucket: Bucket) -> None:
        self._clock += 1
        bucket.touched = self._clock

    def _ensure(self, key: BucketKey) -> Bucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = Bucket(key=key)
            self._buckets[key] = bucket
        self._tick(bucket)
        return bucket

    # ---- exact-key writes ----

    def touch(self, key: BucketKey) -> bool:
        """Mark an existing bucket as most recently used."""
        bucket = self._buckets.get(key)
        if bucket is None:
            return False
        self._tick(bucket)
        return True

    def add_property(self, key: BucketKey, prop: StyleProperty) -> bool:
        """First writer wins: only appends when the name is absent."""
        bucket = self._ensure(key)
        if prop.name in bucket.properties:
            return False
        bucket.properties[prop.name] = prop
        return True

    def set_property(self, key: BucketKey, prop: StyleProperty) -> None:
        """Last writer wins: overwrite in place, or append."""
        bucket = self._ensure(key)
        existing = bucket.properties.get(prop.name)
        if existing is None:
            bucket.properties[prop.name] = prop
            return
        existing.value = prop.value
        existing.spacing_mode = prop.spacing_mode
        existing.origin_file = prop.origin_file
        existing.migration_id = prop.migration_id

    # ---- selector + layer targeting ----

    def most_recent(self, selector: str, layer: str | None) -> Bucket | None:
        candidates = [
            b for b in self._buckets.values()
            if b.key.selector == selector and b.key.layer == layer
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda b: b.touched)

    def delete_property(self, selector: str, layer: str | None, name: str | None) -> bool:
        """Remove *name* (or every property) from the most recent bucket.

        A bucket left without properties is removed.
        """
        bucket = self.most_recent(selector, layer)
        if bucket is None:
            return False
        if name is None:
            bucket.properties.clear()
        elif bucket.properties.pop(name, None) is None:
            return False
        if not bucket.properties:
            del self._buckets[bucket.key]
        return True

    def drop(self, selector: str, layer: str | None) -> int:
        """Remove every bucket for selector + layer; returns how many."""
        doomed = [
            k for k in self._buckets
            if k.selector == selector and k.layer == layer
        ]
        for key in doomed:
            del self._buckets[key]
        return len(doomed)

    # ---- bookkeeping ----

    def next_sequence(self) -> int:
        sequences = [
            p.sequence for b in self._buckets.values() for p in b.properties.values()
        ]
        return max(sequences, default=0) + 1

    def restore(self, bucket: Bucket) -> None:
        """Re-insert a bucket loaded from the store, keeping its recency."""
        self._buckets[bucket.key] = bucket
        self._clock = max(self._clock, bucket.touched)
