from typing import Any, Dict, List

from .harden import is_hardened
from .model import (
    AccessorProperty, DataProperty, Descriptor, PropertyKey,
    iObject, iSymbol, iUndefined,
)


def _reachable(root: Any) -> List[iObject]:
    # same edges deep_freeze follows, without touching anything
    out: List[iObject] = []
    seen = set()

    def visit(val: Any) -> None:
        if isinstance(val, iObject) and id(val) not in seen:
            seen.add(id(val))
            out.append(val)

    visit(root)
    i = 0
    while i < len(out):
        obj = out[i]
        i += 1
        for desc in obj.own_property_descriptors().values():
            if isinstance(desc, DataProperty):
                visit(desc.value)
            else:
                visit(desc.get)
                visit(desc.set)
        visit(obj.get_prototype_of())
    return out


def _val_str(val: Any, refs: Dict[int, int]) -> str:
    match val:
        case iObject():
            return f"@{refs[id(val)]:04d}"
        case None:
            return "null"
        case iUndefined():
            return "undefined"
        case bool():
            return "true" if val else "false"
        case str():
            return repr(val)
    return repr(val)


def _key_str(key: PropertyKey) -> str:
    if isinstance(key, iSymbol):
        return f"[{key!r}]"
    if key.isidentifier() or key.isdigit():
        return key
    return repr(key)


def _flags(desc: Descriptor) -> str:
    w = "w" if isinstance(desc, DataProperty) and desc.writable else "-"
    e = "e" if desc.enumerable else "-"
    c = "c" if desc.configurable else "-"
    return w + e + c


def _state(obj: iObject) -> str:
    if obj.is_frozen():
        state = "frozen"
    elif obj.is_extensible():
        state = "extensible"
    else:
        state = "non-extensible"
    if is_hardened(obj):
        state += ",hardened"
    return state


def describe(root: Any) -> str:
    entities = _reachable(root)
    if not entities:
        return _val_str(root, {})

    refs = {id(obj): i for i, obj in enumerate(entities)}
    lines = []
    for i, obj in enumerate(entities):
        proto = _val_str(obj.get_prototype_of(), refs)
        lines.append(f"@{i:04d}: {obj.class_name():<10} {_state(obj):<26} proto={proto}")
        for key, desc in obj.own_property_descriptors().items():
            k = _key_str(key)
            match desc:
                case DataProperty():
                    lines.append(f"    {k:<20} {_flags(desc)} {_val_str(desc.value, refs)}")
                case AccessorProperty():
                    get = _val_str(desc.get, refs)
                    set_ = _val_str(desc.set, refs)
                    lines.append(f"    {k:<20} {_flags(desc)} get={get} set={set_}")
    return "\n".join(lines)


def print_graph(root: Any) -> None:
    print(describe(root))
