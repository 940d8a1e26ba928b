import pickle

import numpy as np
import pytest

from optengine import KV


def test_insertion_order_is_display_order():
    kv = KV().set("b", 1).set("a", 2).set("c", 3)
    assert list(kv) == ["b", "a", "c"]
    assert kv.keys() == ["b", "a", "c"]


def test_set_existing_key_keeps_position():
    kv = KV().set("a", 1).set("b", 2).set("a", 10)
    assert list(kv.items()) == [("a", 10), ("b", 2)]


def test_non_string_key_rejected():
    with pytest.raises(TypeError):
        KV().set(1, "value")


def test_from_pairs_and_dict_constructor():
    kv = KV.from_pairs(("x", 1.0), ("y", "two"))
    assert kv.to_dict() == {"x": 1.0, "y": "two"}
    assert KV({"x": 1.0, "y": "two"}).keys() == kv.keys()


def test_merge_returns_new_kv_and_later_wins():
    base = KV().set("iter", 1).set("cost", 4.0)
    extra = KV().set("cost", 2.0).set("alpha", 0.5)

    merged = base.merge(extra)

    assert merged.keys() == ["iter", "cost", "alpha"]
    assert merged["cost"] == 2.0
    assert base["cost"] == 4.0
    assert "alpha" not in base
    assert base.merge(None).to_dict() == base.to_dict()


def test_accessors():
    kv = KV().set("vec", np.array([1.0, 2.0]))
    assert "vec" in kv
    assert len(kv) == 1
    assert kv.get("missing") is None
    assert kv.get("missing", 3) == 3
    np.testing.assert_array_equal(kv["vec"], [1.0, 2.0])
    with pytest.raises(KeyError):
        kv["missing"]


def test_repr_lists_entries():
    assert repr(KV().set("a", 1)) == "KV(a=1)"


def test_pickle_roundtrip_keeps_order():
    kv = KV().set("z", 1).set("a", 2)
    restored = pickle.loads(pickle.dumps(kv))
    assert list(restored.items()) == [("z", 1), ("a", 2)]
