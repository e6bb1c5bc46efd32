from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from .harden import harden
from .model import (
    AccessorProperty, DataProperty,
    iArray, iFunction, iObject, iSymbol,
    is_primitive, undefined,
)

_DEFAULT = object()


class Realm:
    """
    A set of intrinsics (default prototypes, constructors, well-known symbols)
    and a global object through which they are reachable.
    """

    def __init__(self) -> None:
        self.object_prototype = iObject(proto=None)
        self.function_prototype = iFunction(
            lambda this, *args: undefined, name="", length=0, proto=self.object_prototype
        )
        self.array_prototype = iArray([], proto=self.object_prototype)
        self.symbols: Dict[str, iSymbol] = {
            "iterator": iSymbol("Symbol.iterator"),
            "toStringTag": iSymbol("Symbol.toStringTag"),
        }
        self.global_object = iObject(proto=self.object_prototype)
        load_intrinsics(self)

    def new_object(self, props: Optional[Dict[Any, Any]] = None, proto: Any = _DEFAULT) -> iObject:
        obj = iObject(proto=self.object_prototype if proto is _DEFAULT else proto)
        for key, val in (props or {}).items():
            obj.define_property(key, DataProperty(val))
        return obj

    def new_array(self, items: Iterable[Any] = ()) -> iArray:
        return iArray(items, proto=self.array_prototype)

    def new_function(self, fn, name: str = "", length: int = 0, constructor: bool = False) -> iFunction:
        func = iFunction(fn, name=name, length=length, proto=self.function_prototype)
        if constructor:
            _link_prototype(func, self.new_object(), writable=True)
        return func

    def from_python(self, val: Any, _memo: Optional[Dict[int, iObject]] = None) -> Any:
        """Convert nested dicts, lists and tuples into entities of this realm."""
        memo = {} if _memo is None else _memo
        if id(val) in memo:
            return memo[id(val)]

        match val:
            case iObject():
                return val
            case dict():
                obj = self.new_object()
                memo[id(val)] = obj
                for key, item in val.items():
                    obj.define_property(key, DataProperty(self.from_python(item, memo)))
                return obj
            case list() | tuple():
                arr = self.new_array()
                memo[id(val)] = arr
                for item in val:
                    arr.push(self.from_python(item, memo))
                return arr
        if is_primitive(val):
            return val
        raise TypeError(f"cannot convert {type(val).__name__} to an entity")

    def to_python(self, val: Any, _memo: Optional[Dict[int, Any]] = None) -> Any:
        """Convert arrays to lists and records to dicts of their enumerable string keys."""
        memo = {} if _memo is None else _memo
        if id(val) in memo:
            return memo[id(val)]

        match val:
            case iFunction():
                return val
            case iArray():
                out = []
                memo[id(val)] = out
                out.extend(self.to_python(item, memo) for item in val.to_list())
                return out
            case iObject():
                res: Dict[str, Any] = {}
                memo[id(val)] = res
                for key in val.keys():
                    res[key] = self.to_python(val.get(key), memo)
                return res
        return val


def _method(realm: Realm, target: iObject, key: Any, fn, length: int, name: Optional[str] = None) -> None:
    if name is None:
        name = key if isinstance(key, str) else f"[{key.description}]"
    func = realm.new_function(fn, name=name, length=length)
    target.define_property(key, DataProperty(func, enumerable=False))


def _link_prototype(ctor: iFunction, proto: iObject, writable: bool = False) -> None:
    ctor.define_property(
        "prototype", DataProperty(proto, writable=writable, enumerable=False, configurable=False)
    )
    proto.define_property("constructor", DataProperty(ctor, enumerable=False))


def _require_object(val: Any, what: str) -> iObject:
    if not isinstance(val, iObject):
        raise TypeError(f"{what} called on non-object {val!r}")
    return val


def __obj_to_string(realm: Realm, this: Any) -> str:
    if this is undefined:
        return "[object Undefined]"
    if this is None:
        return "[object Null]"
    if not isinstance(this, iObject):
        return f"[object {type(this).__name__}]"
    tag = this.get(realm.symbols["toStringTag"])
    return f"[object {tag if isinstance(tag, str) else this.class_name()}]"


def __proto_getter(this: Any) -> Any:
    return _require_object(this, "__proto__ getter").get_prototype_of()


def __proto_setter(this: Any, proto: Any) -> Any:
    if isinstance(proto, iObject) or proto is None:
        _require_object(this, "__proto__ setter").set_prototype_of(proto)
    return undefined


def register_object_methods(realm: Realm) -> None:
    proto = realm.object_prototype
    _method(realm, proto, "hasOwnProperty",
            lambda this, key: _require_object(this, "hasOwnProperty").has_own_property(key), 1)
    _method(realm, proto, "toString", lambda this: __obj_to_string(realm, this), 0)
    _method(realm, proto, "valueOf", lambda this: this, 0)
    proto.define_property("__proto__", AccessorProperty(
        get=realm.new_function(__proto_getter, name="get __proto__"),
        set=realm.new_function(__proto_setter, name="set __proto__", length=1),
        enumerable=False,
    ))


def __array_pop(this: Any) -> Any:
    arr = _require_object(this, "pop")
    n = len(arr)
    if n == 0:
        return undefined
    val = arr.get(n - 1)
    arr.set("length", n - 1)
    return val


def __array_join(this: Any, sep: Any = ",") -> str:
    arr = _require_object(this, "join")
    if sep is undefined:
        sep = ","
    elif not isinstance(sep, str):
        sep = str(sep)
    return sep.join("" if x is None or x is undefined else str(x) for x in arr.to_list())


def register_array_methods(realm: Realm) -> None:
    proto = realm.array_prototype
    _method(realm, proto, "push", lambda this, *items: _require_object(this, "push").push(*items), 1)
    _method(realm, proto, "pop", __array_pop, 0)
    _method(realm, proto, "join", __array_join, 1)
    _method(realm, proto, "map", lambda this, fn: realm.new_array(
        fn.call(undefined, x, i, this) for i, x in enumerate(this.to_list())
    ), 1)
    # host iterator over the current elements
    _method(realm, proto, realm.symbols["iterator"], lambda this: iter(this.to_list()), 0, name="values")


def register_function_methods(realm: Realm) -> None:
    proto = realm.function_prototype
    _method(realm, proto, "call", lambda this, this_arg=undefined, *args: this.call(this_arg, *args), 1)
    _method(realm, proto, "toString",
            lambda this: f"function {this.get('name')}() {{ [native code] }}", 0)


def register_constructors(realm: Realm) -> None:
    def object_ctor(this, val=undefined):
        if val is undefined or val is None:
            return realm.new_object()
        if isinstance(val, iObject):
            return val
        raise TypeError("primitive wrapper objects are not supported")

    def object_is_frozen(this, val):
        return True if is_primitive(val) else val.is_frozen()

    def object_freeze(this, val):
        if isinstance(val, iObject):
            val.freeze()
        return val

    def function_ctor(this, *args):
        raise TypeError("dynamic function construction is not supported")

    object_ = realm.new_function(object_ctor, name="Object", length=1)
    _link_prototype(object_, realm.object_prototype)
    _method(realm, object_, "keys", lambda this, o: realm.new_array(_require_object(o, "keys").keys()), 1)
    _method(realm, object_, "freeze", object_freeze, 1)
    _method(realm, object_, "isFrozen", object_is_frozen, 1)
    _method(realm, object_, "getPrototypeOf",
            lambda this, o: _require_object(o, "getPrototypeOf").get_prototype_of(), 1)
    _method(realm, object_, "getOwnPropertyNames", lambda this, o: realm.new_array(
        k for k in _require_object(o, "getOwnPropertyNames").own_keys() if isinstance(k, str)
    ), 1)

    array_ = realm.new_function(lambda this, *items: realm.new_array(items), name="Array", length=1)
    _link_prototype(array_, realm.array_prototype)
    _method(realm, array_, "isArray", lambda this, o: isinstance(o, iArray), 1)

    function_ = realm.new_function(function_ctor, name="Function", length=1)
    _link_prototype(function_, realm.function_prototype)

    g = realm.global_object
    for ctor in (object_, array_, function_):
        g.define_property(ctor.get("name"), DataProperty(ctor, enumerable=False))


def load_intrinsics(realm: Realm) -> None:
    register_object_methods(realm)
    register_array_methods(realm)
    register_function_methods(realm)
    register_constructors(realm)

    g = realm.global_object
    g.define_property("globalThis", DataProperty(g, enumerable=False))
    g.define_property(realm.symbols["toStringTag"], DataProperty("global", writable=False, enumerable=False))
    _method(realm, g, "harden", lambda this, val: harden(val), 1)
