#! /usr/bin/env python3

from __future__ import annotations
from dataclasses import dataclass, replace
from math import copysign
from typing import Any, Callable, Dict, List, Optional, Union


class ImmutabilityError(TypeError):
    pass


class iUndefined:
    _instance: Optional["iUndefined"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


undefined = iUndefined()


class iSymbol:
    """A primitive compared by identity, usable as a property key."""

    def __init__(self, description: str = "") -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Symbol({self.description})"


PRIMITIVE_TYPES = (type(None), iUndefined, bool, int, float, str, iSymbol)

PropertyKey = Union[str, iSymbol]


def is_primitive(val: Any) -> bool:
    return isinstance(val, PRIMITIVE_TYPES)


def typeof(val: Any) -> str:
    match val:
        case None:
            return "object"
        case iUndefined():
            return "undefined"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case iSymbol():
            return "symbol"
        case iObject():
            return val.typeof()
    return f"host:{type(val).__name__}"


def same_value(a: Any, b: Any) -> bool:
    if isinstance(a, float) and isinstance(b, float):
        if a != a and b != b:
            return True
        if a == 0 and b == 0:
            return copysign(1.0, a) == copysign(1.0, b)
    if is_primitive(a) and is_primitive(b):
        return typeof(a) == typeof(b) and a == b
    return a is b


def to_key(key: Any) -> PropertyKey:
    match key:
        case bool():
            return "true" if key else "false"
        case int():
            return str(key)
        case str() | iSymbol():
            return key
    raise TypeError(f"invalid property key: {key!r}")


def is_array_index(key: PropertyKey) -> bool:
    if not isinstance(key, str) or not key.isascii() or not key.isdigit():
        return False
    if len(key) > 1 and key.startswith("0"):
        return False
    return int(key) < 2**32 - 1


@dataclass
class DataProperty:
    value: Any = undefined
    writable: bool = True
    enumerable: bool = True
    configurable: bool = True


@dataclass
class AccessorProperty:
    get: Optional["iFunction"] = None
    set: Optional["iFunction"] = None
    enumerable: bool = True
    configurable: bool = True


Descriptor = Union[DataProperty, AccessorProperty]


class iObject:
    """
    Ordinary record: own properties keyed by string or symbol, a prototype
    link and an extensibility flag. Mutations that the current integrity
    level forbids raise ImmutabilityError.
    """

    def __init__(self, proto: Optional["iObject"] = None) -> None:
        self._props: Dict[PropertyKey, Descriptor] = {}
        self._proto = proto
        self._extensible = True

    def typeof(self) -> str:
        return "object"

    def class_name(self) -> str:
        return "Object"

    # ------------- reflection -------------
    def own_keys(self) -> List[PropertyKey]:
        indices = sorted((k for k in self._props if is_array_index(k)), key=int)
        strings = [k for k in self._props if isinstance(k, str) and not is_array_index(k)]
        symbols = [k for k in self._props if isinstance(k, iSymbol)]
        return indices + strings + symbols

    def get_own_property(self, key: Any) -> Optional[Descriptor]:
        desc = self._props.get(to_key(key))
        if desc is None:
            return None
        return replace(desc)

    def own_property_descriptors(self) -> Dict[PropertyKey, Descriptor]:
        return {k: replace(self._props[k]) for k in self.own_keys()}

    def has_own_property(self, key: Any) -> bool:
        return self.get_own_property(key) is not None

    def keys(self) -> List[str]:
        return [
            k for k in self.own_keys()
            if isinstance(k, str) and self._props[k].enumerable
        ]

    def define_property(self, key: Any, desc: Descriptor) -> None:
        key = to_key(key)
        current = self._props.get(key)
        if current is None:
            if not self._extensible:
                raise ImmutabilityError(f"cannot define property {key!r}, object is not extensible")
        elif not current.configurable:
            self._check_redefine(key, current, desc)
        self._props[key] = replace(desc)

    def _check_redefine(self, key: PropertyKey, current: Descriptor, desc: Descriptor) -> None:
        # a non-configurable property may only lose writability or take a new
        # value while still writable
        error = ImmutabilityError(f"cannot redefine non-configurable property {key!r}")
        if desc.configurable or desc.enumerable != current.enumerable:
            raise error
        if type(desc) is not type(current):
            raise error
        if isinstance(current, DataProperty):
            if not current.writable:
                if desc.writable or not same_value(desc.value, current.value):
                    raise error
        elif desc.get is not current.get or desc.set is not current.set:
            raise error

    def delete(self, key: Any) -> bool:
        key = to_key(key)
        desc = self._props.get(key)
        if desc is None:
            return True
        if not desc.configurable:
            raise ImmutabilityError(f"cannot delete non-configurable property {key!r}")
        del self._props[key]
        return True

    # ------------- prototype -------------
    def get_prototype_of(self) -> Optional["iObject"]:
        return self._proto

    def set_prototype_of(self, proto: Optional["iObject"]) -> None:
        if proto is self._proto:
            return
        if proto is not None and not isinstance(proto, iObject):
            raise TypeError(f"prototype must be an object or None, got {proto!r}")
        if not self._extensible:
            raise ImmutabilityError("cannot change the prototype of a non-extensible object")
        p = proto
        while p is not None:
            if p is self:
                raise TypeError("cyclic prototype chain")
            p = p.get_prototype_of()
        self._proto = proto

    # ------------- property access -------------
    def has(self, key: Any) -> bool:
        obj: Optional[iObject] = self
        while obj is not None:
            if obj.has_own_property(key):
                return True
            obj = obj.get_prototype_of()
        return False

    def _lookup(self, key: PropertyKey) -> Optional[Descriptor]:
        obj: Optional[iObject] = self
        while obj is not None:
            desc = obj.get_own_property(key)
            if desc is not None:
                return desc
            obj = obj.get_prototype_of()
        return None

    def get(self, key: Any, receiver: Optional["iObject"] = None) -> Any:
        desc = self._lookup(to_key(key))
        if desc is None:
            return undefined
        if isinstance(desc, DataProperty):
            return desc.value
        if desc.get is None:
            return undefined
        return desc.get.call(self if receiver is None else receiver)

    def set(self, key: Any, value: Any, receiver: Optional["iObject"] = None) -> None:
        key = to_key(key)
        receiver = self if receiver is None else receiver
        desc = self._lookup(key)

        if isinstance(desc, AccessorProperty):
            if desc.set is None:
                raise ImmutabilityError(f"cannot set property {key!r} which has only a getter")
            desc.set.call(receiver, value)
            return

        if desc is not None and not desc.writable:
            raise ImmutabilityError(f"cannot assign to read only property {key!r}")

        own = receiver.get_own_property(key)
        match own:
            case None:
                receiver.define_property(key, DataProperty(value))
            case DataProperty():
                receiver.define_property(key, replace(own, value=value))
            case AccessorProperty():
                raise ImmutabilityError(f"cannot assign over accessor property {key!r}")

    # ------------- integrity -------------
    def is_extensible(self) -> bool:
        return self._extensible

    def prevent_extensions(self) -> None:
        self._extensible = False

    def freeze(self) -> None:
        self.prevent_extensions()
        for key in self.own_keys():
            desc = self._props[key]
            if isinstance(desc, DataProperty):
                self._props[key] = replace(desc, writable=False, configurable=False)
            else:
                self._props[key] = replace(desc, configurable=False)

    def is_frozen(self) -> bool:
        if self.is_extensible():
            return False
        for desc in self.own_property_descriptors().values():
            if desc.configurable:
                return False
            if isinstance(desc, DataProperty) and desc.writable:
                return False
        return True

    # ------------- python sugar -------------
    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Any) -> None:
        self.delete(key)

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self):
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"[{self.typeof()}] {self.class_name()} {self.own_keys()!r}"


class iArray(iObject):
    def __init__(self, items: Any = (), proto: Optional[iObject] = None) -> None:
        super().__init__(proto)
        items = list(items)
        for i, item in enumerate(items):
            self._props[str(i)] = DataProperty(item)
        self._props["length"] = DataProperty(len(items), enumerable=False, configurable=False)

    def class_name(self) -> str:
        return "Array"

    def define_property(self, key: Any, desc: Descriptor) -> None:
        key = to_key(key)
        if key == "length":
            self._set_length(desc)
            return
        if not is_array_index(key):
            super().define_property(key, desc)
            return

        index = int(key)
        length = self._props["length"]
        if index >= length.value and not length.writable:
            raise ImmutabilityError(f"cannot add index {index}, array length is read only")
        super().define_property(key, desc)
        if index >= length.value:
            self._props["length"] = replace(length, value=index + 1)

    def _set_length(self, desc: Descriptor) -> None:
        if not isinstance(desc, DataProperty):
            raise TypeError("array length must be a data property")
        new_len = desc.value
        if isinstance(new_len, bool) or not isinstance(new_len, int) or new_len < 0:
            raise ValueError(f"invalid array length: {new_len!r}")

        current = self._props["length"]
        self._check_redefine("length", current, desc)
        trailing = sorted(
            (int(k) for k in self._props if is_array_index(k) and int(k) >= new_len),
            reverse=True,
        )
        for index in trailing:
            if not self._props[str(index)].configurable:
                # elements above the blocking index stay deleted
                self._props["length"] = replace(desc, value=index + 1)
                raise ImmutabilityError(f"cannot delete non-configurable array element {index}")
            del self._props[str(index)]
        self._props["length"] = replace(desc)

    def __len__(self) -> int:
        return self._props["length"].value

    def __iter__(self):
        return iter(self.to_list())

    def push(self, *values: Any) -> int:
        for val in values:
            self.set(len(self), val)
        return len(self)

    def to_list(self) -> List[Any]:
        return [self.get(i) for i in range(len(self))]


class iFunction(iObject):
    """Callable record wrapping a host callable invoked as fn(this, *args)."""

    def __init__(
        self,
        fn: Callable[..., Any],
        name: str = "",
        length: int = 0,
        proto: Optional[iObject] = None,
    ) -> None:
        super().__init__(proto)
        self.fn = fn
        self._props["length"] = DataProperty(length, writable=False, enumerable=False)
        self._props["name"] = DataProperty(name, writable=False, enumerable=False)

    def typeof(self) -> str:
        return "function"

    def class_name(self) -> str:
        return "Function"

    def call(self, this: Any, *args: Any) -> Any:
        return self.fn(this, *args)

    def __repr__(self) -> str:
        return f"[{self.typeof()}] {self._props['name'].value or '<anonymous>'}"
