"""Tests for the bucket index targeting operations."""

from icbincss.cascade.buckets import BucketIndex, BucketKey, StyleProperty
from icbincss.cascade.responsive import Descriptor

MEDIA = Descriptor(kind="media", min="600px")


def _prop(name: str, value: str, sequence: int = 1) -> StyleProperty:
    return StyleProperty(name=name, value=value, row_id=f"row-{sequence}", sequence=sequence)


def _values(index: BucketIndex, key: BucketKey) -> dict[str, str]:
    bucket = index.get(key)
    assert bucket is not None
    return {name: p.value for name, p in bucket.properties.items()}


class TestExactKeyWrites:
    def test_add_is_first_writer_wins(self):
        index = BucketIndex()
        key = BucketKey("card")
        assert index.add_property(key, _prop("color", "red", 1)) is True
        assert index.add_property(key, _prop("color", "blue", 2)) is False
        assert _values(index, key) == {"color": "red"}

    def test_set_overwrites_in_place(self):
        index = BucketIndex()
        key = BucketKey("card")
        index.set_property(key, _prop("color", "red", 1))
        index.set_property(key, _prop("margin", "0", 2))
        index.set_property(key, _prop("color", "blue", 3))
        assert list(_values(index, key).items()) == [("color", "blue"), ("margin", "0")]
        assert index.get(key).properties["color"].sequence == 1

    def test_touch_unknown_bucket(self):
        assert BucketIndex().touch(BucketKey("nope")) is False

    def test_next_sequence(self):
        index = BucketIndex()
        assert index.next_sequence() == 1
        index.set_property(BucketKey("a"), _prop("color", "red", 7))
        assert index.next_sequence() == 8


class TestSelectorLayerTargeting:
    def test_delete_hits_most_recent_bucket(self):
        index = BucketIndex()
        base, wide = BucketKey("card"), BucketKey("card", descriptor=MEDIA)
        index.set_property(base, _prop("color", "red", 1))
        index.set_property(wide, _prop("color", "blue", 2))
        assert index.delete_property("card", None, "color") is True
        assert index.get(wide) is None
        assert _values(index, base) == {"color": "red"}

    def test_touch_changes_delete_target(self):
        index = BucketIndex()
        base, wide = BucketKey("card"), BucketKey("card", descriptor=MEDIA)
        index.set_property(base, _prop("color", "red", 1))
        index.set_property(wide, _prop("color", "blue", 2))
        index.touch(base)
        index.delete_property("card", None, "color")
        assert index.get(base) is None
        assert _values(index, wide) == {"color": "blue"}

    def test_delete_keeps_siblings(self):
        index = BucketIndex()
        key = BucketKey("card")
        index.set_property(key, _prop("color", "red", 1))
        index.set_property(key, _prop("margin", "0", 2))
        index.delete_property("card", None, "color")
        assert _values(index, key) == {"margin": "0"}

    def test_delete_without_name_clears_bucket(self):
        index = BucketIndex()
        index.set_property(BucketKey("card"), _prop("color", "red"))
        assert index.delete_property("card", None, None) is True
        assert len(index) == 0

    def test_delete_respects_layer(self):
        index = BucketIndex()
        index.set_property(BucketKey("card", layer="base"), _prop("color", "red"))
        assert index.delete_property("card", None, "color") is False
        assert len(index) == 1

    def test_drop_removes_every_descriptor(self):
        index = BucketIndex()
        index.set_property(BucketKey("card"), _prop("color", "red", 1))
        index.set_property(BucketKey("card", descriptor=MEDIA), _prop("color", "blue", 2))
        index.set_property(BucketKey("card", scope_root="page"), _prop("color", "green", 3))
        index.set_property(BucketKey("card", layer="base"), _prop("color", "black", 4))
        assert index.drop("card", None) == 3
        assert [b.key.layer for b in index] == ["base"]
