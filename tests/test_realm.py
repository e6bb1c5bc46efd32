import pytest

from pyharden.harden import is_hardened
from pyharden.model import iArray, iFunction, undefined


def test_default_prototype_links(realm):
    obj = realm.new_object()
    arr = realm.new_array([1])
    fn = realm.new_function(lambda this: 1)
    assert obj.get_prototype_of() is realm.object_prototype
    assert arr.get_prototype_of() is realm.array_prototype
    assert fn.get_prototype_of() is realm.function_prototype
    assert realm.function_prototype.get_prototype_of() is realm.object_prototype
    assert realm.array_prototype.get_prototype_of() is realm.object_prototype
    assert realm.object_prototype.get_prototype_of() is None
    assert realm.new_object(proto=None).get_prototype_of() is None


def test_constructors_are_linked_both_ways(realm):
    g = realm.global_object
    for name, proto in (
        ("Object", realm.object_prototype),
        ("Array", realm.array_prototype),
        ("Function", realm.function_prototype),
    ):
        ctor = g[name]
        assert isinstance(ctor, iFunction)
        assert ctor["prototype"] is proto
        assert proto["constructor"] is ctor
    assert g["globalThis"] is g
    assert g.keys() == []


def test_inherited_methods(realm):
    obj = realm.new_object({"x": 1})
    assert obj["hasOwnProperty"].call(obj, "x") is True
    assert obj["hasOwnProperty"].call(obj, "hasOwnProperty") is False
    assert obj["toString"].call(obj) == "[object Object]"
    assert realm.object_prototype["toString"].call(realm.global_object) == "[object global]"
    assert realm.object_prototype["toString"].call(None) == "[object Null]"

    fn = realm.new_function(lambda this, a: a + 1, name="inc", length=1)
    assert fn["call"].call(fn, undefined, 1) == 2
    assert fn["toString"].call(fn) == "function inc() { [native code] }"


def test_proto_accessor(realm):
    base = realm.new_object({"kind": "base"})
    obj = realm.new_object()
    assert obj["__proto__"] is realm.object_prototype
    obj["__proto__"] = base
    assert obj.get_prototype_of() is base
    assert obj["kind"] == "base"
    obj["__proto__"] = 5
    assert obj.get_prototype_of() is base


def test_array_methods(realm):
    arr = realm.new_array([1, 2])
    assert arr["push"].call(arr, 3, 4) == 4
    assert arr["pop"].call(arr) == 4
    assert arr["join"].call(arr, "-") == "1-2-3"
    doubled = arr["map"].call(arr, realm.new_function(lambda this, x, i, a: x * 2))
    assert doubled.to_list() == [2, 4, 6]
    assert doubled.get_prototype_of() is realm.array_prototype
    values = arr[realm.symbols["iterator"]]
    assert values["name"] == "values"
    assert list(values.call(arr)) == [1, 2, 3]
    assert realm.new_array()["pop"].call(realm.new_array()) is undefined


def test_static_object_methods(realm):
    Object = realm.global_object["Object"]
    obj = realm.new_object({"a": 1, "b": 2})
    assert Object["keys"].call(Object, obj).to_list() == ["a", "b"]
    assert Object["getPrototypeOf"].call(Object, obj) is realm.object_prototype
    assert Object["isFrozen"].call(Object, obj) is False
    assert Object["freeze"].call(Object, obj) is obj
    assert Object["isFrozen"].call(Object, obj) is True
    assert Object["isFrozen"].call(Object, 1) is True
    # Object.freeze is shallow and does not harden
    assert not is_hardened(obj)
    assert Object.call(undefined) is not Object.call(undefined)
    with pytest.raises(TypeError):
        Object.call(undefined, 1)

    Array = realm.global_object["Array"]
    assert Array["isArray"].call(Array, Array.call(undefined, 1, 2)) is True
    with pytest.raises(TypeError, match="not supported"):
        realm.global_object["Function"].call(undefined, "return 1")


def test_global_harden(realm):
    harden = realm.global_object["harden"]
    obj = realm.new_object({"inner": realm.new_object()})
    assert harden.call(undefined, obj) is obj
    assert is_hardened(obj["inner"])
    assert harden.call(undefined, 3) == 3


def test_from_python_and_back(realm):
    data = {"name": "x", "tags": ["a", "b"], "nested": {"n": None, "t": (1, 2.5)}}
    obj = realm.from_python(data)
    assert isinstance(obj["tags"], iArray)
    assert obj["nested"]["t"].get_prototype_of() is realm.array_prototype
    assert realm.to_python(obj) == {"name": "x", "tags": ["a", "b"], "nested": {"n": None, "t": [1, 2.5]}}


def test_from_python_preserves_cycles(realm):
    data = {"items": []}
    data["self"] = data
    data["items"].append(data)
    obj = realm.from_python(data)
    assert obj["self"] is obj
    assert obj["items"][0] is obj

    back = realm.to_python(obj)
    assert back["self"] is back
    assert back["items"][0] is back


def test_from_python_rejects_unknown(realm):
    with pytest.raises(TypeError):
        realm.from_python({"s": {1, 2}})


@pytest.mark.parametrize(
    "sep, expected",
    [(undefined, "1,,3"), (",", "1,,3"), ("", "13"), (0, "1003"), (None, "1None3")]
)
def test_array_join_separator(realm, sep, expected):
    arr = realm.new_array([1, None, 3])
    assert arr["join"].call(arr, sep) == expected
