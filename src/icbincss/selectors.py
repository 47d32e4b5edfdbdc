"""Selector algebra: resolve definition trees to CSS and (de)serialise them."""

from __future__ import annotations

import json
from typing import Any, Callable

from icbincss.model.selector import (
    And,
    Attr,
    Child,
    Class,
    Descendant,
    Element,
    Id,
    Join,
    JoinType,
    Or,
    Pseudo,
    PseudoElement,
    Ref,
    SelectorDef,
)

RefLookup = Callable[[str], "SelectorDef | None"]

_JOIN_SEPARATORS = {
    JoinType.AND: "",
    JoinType.DESC: " ",
    JoinType.CHILD: " > ",
    JoinType.ADJ: " + ",
    JoinType.SIB: " ~ ",
}


def _no_refs(name: str) -> SelectorDef | None:
    return None


def resolve_selector(definition: SelectorDef, lookup: RefLookup | None = None) -> str:
    """Resolve *definition* to a CSS selector string.

    Unresolved references fall back to a class selector named after the
    reference. Reference cycles resolve the same way once a name repeats.
    """
    return _resolve(definition, lookup or _no_refs, frozenset())


def _resolve(definition: SelectorDef, lookup: RefLookup, seen: frozenset[str]) -> str:
    if isinstance(definition, Element):
        return definition.value
    if isinstance(definition, Class):
        return f".{definition.value}"
    if isinstance(definition, Id):
        return f"#{definition.value}"
    if isinstance(definition, Pseudo):
        return f":{definition.value}"
    if isinstance(definition, PseudoElement):
        return f"::{definition.value}"
    if isinstance(definition, Attr):
        if definition.value is None:
            return f"[{definition.name}]"
        op = definition.operator or "="
        flag = f" {definition.flag}" if definition.flag else ""
        return f'[{definition.name}{op}"{definition.value}"{flag}]'
    if isinstance(definition, Ref):
        target = lookup(definition.name) if definition.name not in seen else None
        if target is None:
            return f".{definition.name}"
        return _resolve(target, lookup, seen | {definition.name})
    if isinstance(definition, And):
        return "".join(_resolve(p, lookup, seen) for p in definition.parts)
    if isinstance(definition, Or):
        return ", ".join(_resolve(p, lookup, seen) for p in definition.parts)
    if isinstance(definition, Child):
        return f"{_resolve(definition.parent, lookup, seen)} > {_resolve(definition.child, lookup, seen)}"
    if isinstance(definition, Descendant):
        return (
            f"{_resolve(definition.ancestor, lookup, seen)} "
            f"{_resolve(definition.descendant, lookup, seen)}"
        )
    if isinstance(definition, Join):
        sep = _JOIN_SEPARATORS[definition.join_type]
        return f"{_resolve(definition.left, lookup, seen)}{sep}{_resolve(definition.right, lookup, seen)}"
    raise TypeError(f"Unknown selector definition: {definition!r}")


# ---------------------------------------------------------------------------
# JSON codec (selectors.def_json)
# ---------------------------------------------------------------------------

_SIMPLE = {
    "Element": Element,
    "Class": Class,
    "Id": Id,
    "Pseudo": Pseudo,
    "PseudoElement": PseudoElement,
}


def selector_to_dict(definition: SelectorDef) -> dict[str, Any]:
    if isinstance(definition, (Element, Class, Id, Pseudo, PseudoElement)):
        return {"kind": type(definition).__name__, "value": definition.value}
    if isinstance(definition, Attr):
        data: dict[str, Any] = {"kind": "Attr", "name": definition.name}
        for key in ("value", "operator", "flag"):
            if getattr(definition, key) is not None:
                data[key] = getattr(definition, key)
        return data
    if isinstance(definition, Ref):
        return {"kind": "Ref", "name": definition.name}
    if isinstance(definition, (And, Or)):
        return {
            "kind": type(definition).__name__,
            "selectors": [selector_to_dict(p) for p in definition.parts],
        }
    if isinstance(definition, Child):
        return {
            "kind": "Child",
            "parent": selector_to_dict(definition.parent),
            "child": selector_to_dict(definition.child),
        }
    if isinstance(definition, Descendant):
        return {
            "kind": "Descendant",
            "ancestor": selector_to_dict(definition.ancestor),
            "descendant": selector_to_dict(definition.descendant),
        }
    if isinstance(definition, Join):
        return {
            "kind": "Join",
            "joinType": definition.join_type.value,
            "left": selector_to_dict(definition.left),
            "right": selector_to_dict(definition.right),
        }
    raise TypeError(f"Unknown selector definition: {definition!r}")


def selector_from_dict(data: dict[str, Any]) -> SelectorDef:
    kind = data.get("kind")
    if kind in _SIMPLE:
        return _SIMPLE[kind](data["value"])
    if kind == "Attr":
        return Attr(
            name=data["name"],
            value=data.get("value"),
            operator=data.get("operator"),
            flag=data.get("flag"),
        )
    if kind == "Ref":
        return Ref(data["name"])
    if kind == "And":
        return And(tuple(selector_from_dict(p) for p in data["selectors"]))
    if kind == "Or":
        return Or(tuple(selector_from_dict(p) for p in data["selectors"]))
    if kind == "Child":
        return Child(selector_from_dict(data["parent"]), selector_from_dict(data["child"]))
    if kind == "Descendant":
        return Descendant(
            selector_from_dict(data["ancestor"]), selector_from_dict(data["descendant"])
        )
    if kind == "Join":
        return Join(
            JoinType(data["joinType"]),
            selector_from_dict(data["left"]),
            selector_from_dict(data["right"]),
        )
    raise ValueError(f"Unknown selector kind: {kind!r}")


def selector_to_json(definition: SelectorDef) -> str:
    return json.dumps(selector_to_dict(definition))


def selector_from_json(raw: str) -> SelectorDef:
    return selector_from_dict(json.loads(raw))
