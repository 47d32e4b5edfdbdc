"""Stylesheet planning and CSS emission."""

from icbincss.stylesheet.emitter import render
from icbincss.stylesheet.model import (
    AtRuleBlock,
    CssImport,
    RuleDeclaration,
    StyleRule,
    Stylesheet,
)
from icbincss.stylesheet.plan import build_stylesheet

__all__ = [
    "AtRuleBlock",
    "CssImport",
    "RuleDeclaration",
    "StyleRule",
    "Stylesheet",
    "build_stylesheet",
    "render",
]
