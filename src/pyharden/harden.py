from __future__ import annotations
import logging
import weakref
from typing import Any, Callable, List, Optional, Set

from .model import DataProperty, iObject, is_primitive, typeof

logger = logging.getLogger(__name__)

# Entities that are deeply frozen. Entries are only ever added.
_frozen: "weakref.WeakSet[iObject]" = weakref.WeakSet()

_freeze_hook: Optional[Callable[[iObject], None]] = None


class UnexpectedKind(TypeError):
    pass


def set_freeze_hook(hook: Optional[Callable[[iObject], None]]) -> None:
    """Install a callable invoked with every entity right after it is frozen."""
    global _freeze_hook
    _freeze_hook = hook


def is_hardened(val: Any) -> bool:
    if is_primitive(val):
        return False
    return val in _frozen


def deep_freeze(node: Any) -> None:
    """
    Freeze `node` and every entity transitively reachable from it through
    own properties (string and symbol keyed, enumerable or not), accessor
    getters and setters, and prototype links.

    Each entity is frozen at most once per process. Calling this again on an
    already hardened root is a no-op. Any error raised while enumerating or
    freezing propagates and leaves the graph partially frozen.
    """
    if is_hardened(node):
        return

    # entities we are attempting to freeze, in discovery order
    queue: List[iObject] = []
    queued: Set[int] = set()

    def enqueue(val: Any) -> None:
        if is_primitive(val):
            return
        kind = typeof(val)
        if kind not in ("object", "function"):
            raise UnexpectedKind(f"Unexpected typeof: {kind}")
        if val in _frozen or id(val) in queued:
            return
        queued.add(id(val))
        queue.append(val)

    def do_freeze(obj: iObject) -> None:
        for desc in obj.own_property_descriptors().values():
            if isinstance(desc, DataProperty):
                enqueue(desc.value)
            else:
                enqueue(desc.get)
                enqueue(desc.set)
        obj.freeze()
        _frozen.add(obj)
        if _freeze_hook is not None:
            _freeze_hook(obj)

    enqueue(node)

    # the queue grows while it is drained; keep going until it stops growing
    n_frozen = 0
    i = 0
    while i < len(queue):
        obj = queue[i]
        i += 1
        if obj in _frozen:
            # frozen meanwhile by a re-entrant call
            continue
        do_freeze(obj)
        n_frozen += 1
        enqueue(obj.get_prototype_of())

    logger.debug("deep_freeze: froze %d of %d discovered entities", n_frozen, len(queue))


def harden(val: Any) -> Any:
    deep_freeze(val)
    return val
