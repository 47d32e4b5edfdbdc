"""Turn a :class:`CascadeState` into a :class:`Stylesheet` plan.

Selector names are resolved to CSS here, against the final selector table,
and values are expanded (token references, spacing macro) with the
compiler configuration.
"""

from __future__ import annotations

from icbincss.cascade.state import CascadeState, RuleBlockEntry
from icbincss.cascade.values import (
    css_property,
    expand_spacing,
    substitute_tokens,
    token_var_name,
)
from icbincss.config import CompilerConfig
from icbincss.model.ast import Declaration, ImportKind
from icbincss.model.selector import Ref
from icbincss.selectors import resolve_selector
from icbincss.stylesheet.model import (
    AtRuleBlock,
    CssImport,
    RuleDeclaration,
    StyleRule,
    Stylesheet,
)


def selector_css(state: CascadeState, name: str) -> str:
    """Resolve a selector name; unknown names become class selectors."""
    return resolve_selector(Ref(name), state.selector_definition)


def layer_order(state: CascadeState, config: CompilerConfig) -> tuple[str, ...]:
    """Declared layers (config defaults first), then extras by first use."""
    order: list[str] = []
    for name in (*config.default_layer_order, *state.layers.declared):
        if name not in order:
            order.append(name)
    for bucket in state.buckets:
        layer = bucket.key.layer
        if layer is not None and layer not in order:
            order.append(layer)
    return tuple(order)


def _declarations(
    decls: tuple[Declaration, ...], config: CompilerConfig
) -> tuple[RuleDeclaration, ...]:
    return tuple(
        RuleDeclaration(
            name=css_property(d.name),
            value=substitute_tokens(d.value, config.token_var_prefix),
        )
        for d in decls
    )


def _feature_blocks(entry: RuleBlockEntry, config: CompilerConfig) -> tuple[AtRuleBlock, ...]:
    grouped: dict[str, list[RuleDeclaration]] = {}
    for decl in entry.declarations:
        block, sep, feature = decl.name.partition("_")
        if not sep or not feature:
            continue
        grouped.setdefault(block, []).append(
            RuleDeclaration(feature, substitute_tokens(decl.value, config.token_var_prefix))
        )
    return tuple(AtRuleBlock(f"@{block}", tuple(decls)) for block, decls in grouped.items())


def _preamble(state: CascadeState, config: CompilerConfig) -> list[AtRuleBlock]:
    blocks: list[AtRuleBlock] = []
    prefix = config.token_var_prefix

    for prop in state.properties.values():
        decls = []
        if prop.syntax:
            decls.append(RuleDeclaration("syntax", substitute_tokens(prop.syntax, prefix)))
        if prop.inherits:
            decls.append(RuleDeclaration("inherits", prop.inherits))
        if prop.initial_value:
            decls.append(
                RuleDeclaration("initial-value", substitute_tokens(prop.initial_value, prefix))
            )
        blocks.append(AtRuleBlock(f"@property {prop.name}", tuple(decls)))

    for face in state.font_faces.values():
        body = tuple(d for d in face.declarations if d.name != "font_family")
        blocks.append(
            AtRuleBlock(
                "@font-face",
                (RuleDeclaration("font-family", f'"{face.family}"'), *_declarations(body, config)),
            )
        )

    for page in state.pages.values():
        header = f"@page {page.key}" if page.key else "@page"
        blocks.append(AtRuleBlock(header, _declarations(page.declarations, config)))

    for counter in state.counter_styles.values():
        blocks.append(
            AtRuleBlock(f"@counter-style {counter.key}", _declarations(counter.declarations, config))
        )

    for ffv in state.font_feature_values.values():
        blocks.append(
            AtRuleBlock(f'@font-feature-values "{ffv.key}"', children=_feature_blocks(ffv, config))
        )

    for palette in state.font_palette_values.values():
        blocks.append(
            AtRuleBlock(
                f"@font-palette-values {palette.key}", _declarations(palette.declarations, config)
            )
        )

    if state.starting_styles:
        children = tuple(
            AtRuleBlock(selector_css(state, entry.key), _declarations(entry.declarations, config))
            for entry in state.starting_styles.values()
        )
        blocks.append(AtRuleBlock("@starting-style", children=children))
    return blocks


def _rules(state: CascadeState, config: CompilerConfig) -> list[StyleRule]:
    rules: list[StyleRule] = []
    prefix = config.token_var_prefix
    for bucket in state.buckets:
        if not bucket.properties:
            continue
        key = bucket.key
        decls = tuple(
            RuleDeclaration(
                name=css_property(p.name),
                value=expand_spacing(
                    substitute_tokens(p.value, prefix),
                    config.forced_spacing_mode or p.spacing_mode,
                ),
                origin_file=p.origin_file,
            )
            for p in bucket.properties.values()
        )
        rules.append(
            StyleRule(
                selector=selector_css(state, key.selector),
                declarations=decls,
                selector_name=key.selector,
                layer=key.layer,
                scope_root=selector_css(state, key.scope_root) if key.scope_root else None,
                scope_limit=selector_css(state, key.scope_limit) if key.scope_limit else None,
                descriptor=key.descriptor,
            )
        )
    return rules


def build_stylesheet(state: CascadeState, config: CompilerConfig | None = None) -> Stylesheet:
    config = config or CompilerConfig()
    prefix = config.token_var_prefix
    return Stylesheet(
        imports=tuple(
            CssImport(path=i.path, media=i.media)
            for i in state.imports
            if i.kind is ImportKind.CSS
        ),
        root=tuple(
            RuleDeclaration(token_var_name(t.name, prefix), substitute_tokens(t.value, prefix))
            for t in state.live_tokens()
        ),
        preamble=tuple(_preamble(state, config)),
        rules=tuple(_rules(state, config)),
        layer_order=layer_order(state, config),
        keyframes=tuple(
            AtRuleBlock(
                f"@keyframes {kf.name}",
                children=tuple(
                    AtRuleBlock(frame.offset, _declarations(frame.declarations, config))
                    for frame in kf.frames
                ),
            )
            for kf in state.keyframes.values()
        ),
        raw=tuple(r.css for r in state.raw if r.css),
    )
