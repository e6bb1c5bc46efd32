from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Tuple, Union

from lark import Lark, Tree, Token

from .model import DataProperty, PropertyKey, undefined
from .realm import Realm


GRAMMAR = (Path(__file__).parent / "literal.lark").read_text(encoding="utf-8")
PARSER = Lark(GRAMMAR, parser="lalr", start="start")


class LiteralError(Exception): pass


class LiteralBuilder:
    """Turns a parsed literal into records, arrays and primitives of a realm."""

    def __init__(self, realm: Realm):
        self.realm = realm

    # ------------- entry -------------
    def build(self, tree: Tree) -> Any:
        return self._gen(tree)

    # ------------- dispatch -------------
    def _gen(self, node: Union[Tree, Token]) -> Any:
        if not isinstance(node, Tree):
            raise LiteralError(f"Unknown node {node!r}")

        fn = getattr(self, f"gen_{node.data}", None)

        if not fn:
            raise LiteralError(f"No builder for {node.data}")

        return fn(node.children)

    # ------------- containers -------------
    def gen_object(self, children):
        obj = self.realm.new_object()
        for pair in children:
            key, val = self._gen(pair)
            # own data properties, later duplicates win
            obj.define_property(key, DataProperty(val))
        return obj

    def gen_pair(self, children) -> Tuple[PropertyKey, Any]:
        return self._gen(children[0]), self._gen(children[1])

    def gen_array(self, children):
        return self.realm.new_array([self._gen(c) for c in children])

    # ------------- keys -------------
    def gen_name_key(self, children) -> str:
        return str(children[0])

    def gen_string_key(self, children) -> str:
        return _unquote(children[0])

    def gen_index_key(self, children) -> str:
        return str(int(children[0]))

    # ------------- scalars -------------
    def gen_string(self, children) -> str:
        return _unquote(children[0])

    def gen_number(self, children) -> Union[int, float]:
        text = str(children[0])
        if any(c in text for c in ".eE"):
            return float(text)
        return int(text)

    def gen_true(self, children):
        return True

    def gen_false(self, children):
        return False

    def gen_null(self, children):
        return None

    def gen_undefined(self, children):
        return undefined


def _unquote(tok: Token) -> str:
    try:
        return json.loads(str(tok))
    except ValueError as exc:
        raise LiteralError(f"bad string literal {str(tok)!r}") from exc


def parse_literal(src: str) -> Tree:
    return PARSER.parse(src)


def build_literal(realm: Realm, src: str) -> Any:
    return LiteralBuilder(realm).build(parse_literal(src))
