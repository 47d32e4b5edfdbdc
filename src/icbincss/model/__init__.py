"""ICBINCSS model layer -- public type re-exports."""

from icbincss.model import ast
from icbincss.model.condition import (
    AllOf,
    AnyOf,
    Condition,
    ContainerQuery,
    ContainerStyle,
    MediaFeature,
    Supports,
    WidthRange,
)
from icbincss.model.diagnostic import Diagnostic, Severity
from icbincss.model.selector import JoinType, SelectorDef

__all__ = [
    # statements
    "ast",
    # conditions
    "Condition",
    "WidthRange",
    "MediaFeature",
    "ContainerQuery",
    "ContainerStyle",
    "Supports",
    "AllOf",
    "AnyOf",
    # selectors
    "JoinType",
    "SelectorDef",
    # diagnostic
    "Severity",
    "Diagnostic",
]
