import pytest

from pyharden.harden import set_freeze_hook
from pyharden.literal import build_literal
from pyharden.realm import Realm


@pytest.fixture
def realm():
    return Realm()


@pytest.fixture
def build(realm):
    """
    build(src) -> entity graph
    Builds `src` in literal notation inside the test's fresh realm.
    """
    def _build(src: str):
        return build_literal(realm, src)
    return _build


@pytest.fixture
def freeze_counts():
    """
    Maps id(entity) -> number of times deep_freeze froze it during the test.
    """
    counts = {}

    def _hook(obj):
        counts[id(obj)] = counts.get(id(obj), 0) + 1

    set_freeze_hook(_hook)
    yield counts
    set_freeze_hook(None)
