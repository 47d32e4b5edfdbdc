"""Tests for stylesheet planning and CSS emission."""

import pytest

from icbincss.cascade.builder import build_state
from icbincss.compiler import compile_source, compile_state
from icbincss.config import CompilerConfig
from icbincss.errors import CompositionError
from icbincss.parser import parse_source


def css(source: str, config: CompilerConfig | None = None) -> str:
    return compile_source(source, config)


# ---------------------------------------------------------------------------
# Plain rules, tokens, selectors
# ---------------------------------------------------------------------------


class TestRules:
    def test_empty_state(self):
        assert css("") == ""

    def test_single_rule(self):
        assert css("CREATE STYLE SELECTOR card (color = red);") == ".card {\n  color: red;\n}\n"

    def test_rules_are_separated_by_blank_line(self):
        out = css("CREATE STYLE SELECTOR a (color = red); CREATE STYLE SELECTOR b (color = blue);")
        assert out == ".a {\n  color: red;\n}\n\n.b {\n  color: blue;\n}\n"

    def test_property_names_are_hyphenated(self):
        out = css("CREATE STYLE SELECTOR card (background_color = red, border-radius = 4px);")
        assert out == ".card {\n  background-color: red;\n  border-radius: 4px;\n}\n"

    def test_hyphen_and_underscore_are_the_same_property(self):
        out = css(
            "CREATE STYLE SELECTOR card (font-size = 1rem);"
            "ALTER STYLE SELECTOR card SET font_size = 2rem;"
        )
        assert out == ".card {\n  font-size: 2rem;\n}\n"

    def test_named_selector_resolves(self):
        out = css(
            "CREATE SELECTOR btn AS AND(E('button'), C('primary'));"
            "CREATE STYLE SELECTOR btn (color = white);"
        )
        assert out == "button.primary {\n  color: white;\n}\n"

    def test_selector_defined_later_still_resolves(self):
        out = css("CREATE STYLE SELECTOR nav (margin = 0); CREATE SELECTOR nav AS E('nav');")
        assert out == "nav {\n  margin: 0;\n}\n"

    def test_dropped_selector_still_resolves(self):
        out = css(
            "CREATE SELECTOR card AS C('panel');"
            "CREATE STYLE SELECTOR card (color = red);"
            "DROP SELECTOR card;"
        )
        assert out == ".panel {\n  color: red;\n}\n"

    def test_tokens_emit_root_block(self):
        out = css(
            "CREATE TOKEN 'brand/500' VALUE #2266ee;"
            "CREATE STYLE SELECTOR btn (color = token('brand/500'));"
        )
        assert out == (
            ":root {\n  --brand-500: #2266ee;\n}\n\n"
            ".btn {\n  color: var(--brand-500);\n}\n"
        )

    def test_token_prefix(self):
        out = css(
            "CREATE TOKEN 'ink' VALUE #111; CREATE STYLE SELECTOR p (color = token('ink'));",
            CompilerConfig(token_var_prefix="ds-"),
        )
        assert "--ds-ink: #111;" in out
        assert "color: var(--ds-ink);" in out

    def test_token_inside_larger_value(self):
        out = css("CREATE STYLE SELECTOR card (border = 1px solid token('line'));")
        assert "border: 1px solid var(--line);" in out

    def test_dropped_token_is_not_emitted(self):
        assert css("CREATE TOKEN 'a' VALUE 1px; DROP TOKEN 'a';") == ""


# ---------------------------------------------------------------------------
# Write semantics
# ---------------------------------------------------------------------------


class TestWriteSemantics:
    def test_add_does_not_overwrite_but_set_does(self):
        out = css(
            "CREATE STYLE SELECTOR s (color = red);"
            "ALTER STYLE SELECTOR s ADD color = blue;"
            "ALTER STYLE SELECTOR s SET color = green;"
        )
        assert out == ".s {\n  color: green;\n}\n"

    def test_add_appends_new_property(self):
        out = css("CREATE STYLE SELECTOR s (color = red); ALTER STYLE SELECTOR s ADD margin = 0;")
        assert out == ".s {\n  color: red;\n  margin: 0;\n}\n"

    def test_delete_one_property_keeps_siblings(self):
        out = css(
            "CREATE STYLE SELECTOR s (color = red, margin = 0);"
            "DELETE FROM style_props WHERE selector = s AND prop = 'color';"
        )
        assert out == ".s {\n  margin: 0;\n}\n"

    def test_delete_targets_most_recent_bucket(self):
        out = css(
            "CREATE STYLE SELECTOR card (color = red);"
            "ALTER STYLE SELECTOR card WHERE width >= 600px SET color = blue;"
            "DELETE FROM style_props WHERE selector = card AND prop = 'color';"
        )
        assert out == ".card {\n  color: red;\n}\n"

    def test_drop_removes_every_bucket(self):
        out = css(
            "CREATE STYLE SELECTOR card (color = red);"
            "ALTER STYLE SELECTOR card WHERE width >= 600px SET color = blue;"
            "DROP STYLE SELECTOR card;"
        )
        assert out == ""

    def test_insert_and_update_aliases(self):
        out = css(
            "INSERT INTO style_props (selector, prop, value) VALUES (card, 'margin', 0);"
            "UPDATE style_props SET margin = 4px WHERE selector = card;"
        )
        assert out == ".card {\n  margin: 4px;\n}\n"


# ---------------------------------------------------------------------------
# Responsive wrappers
# ---------------------------------------------------------------------------


class TestResponsive:
    def test_media_block(self):
        out = css("CREATE STYLE SELECTOR card (color = #333) WHERE width BETWEEN 768px AND INF;")
        assert out == "@media (min-width: 768px) {\n  .card {\n    color: #333;\n  }\n\n}\n"

    def test_media_range_and_feature(self):
        out = css(
            "ALTER STYLE SELECTOR card WHERE width BETWEEN 600px AND 900px "
            "AND orientation = landscape SET color = red;"
        )
        assert out.startswith(
            "@media (min-width: 600px) and (max-width: 900px) and (orientation: landscape) {\n"
        )

    def test_or_emits_one_block_per_branch(self):
        out = css(
            "ALTER STYLE SELECTOR card WHERE width <= 480px OR width >= 1200px SET color = red;"
        )
        assert out == (
            "@media (max-width: 480px) {\n  .card {\n    color: red;\n  }\n\n}\n\n"
            "@media (min-width: 1200px) {\n  .card {\n    color: red;\n  }\n\n}\n"
        )

    def test_supports_around_container(self):
        out = css(
            "CREATE STYLE SELECTOR grid (display = grid) "
            "WHERE supports(display: grid) AND container main > 600px;"
        )
        assert out == (
            "@supports (display: grid) {\n"
            "  @container main (min-width: 600px) {\n"
            "    .grid {\n      display: grid;\n    }\n\n"
            "  }\n\n"
            "}\n"
        )

    def test_inline_container(self):
        out = css("ALTER STYLE SELECTOR card WHERE container main inline < 900px SET gap = 0;")
        assert out.startswith("@container main (max-inline-size: 900px) {\n")

    def test_container_style_query(self):
        out = css("ALTER STYLE SELECTOR card WHERE container card style(--compact: 1) SET gap = 0;")
        assert out.startswith("@container card style(--compact: 1) {\n")

    def test_supports_only(self):
        out = css("ALTER STYLE SELECTOR card WHERE supports(display: grid) SET display = grid;")
        assert out.startswith("@supports (display: grid) {\n  .card {\n")

    def test_media_and_container_rejected(self):
        with pytest.raises(CompositionError):
            css("ALTER STYLE SELECTOR card WHERE width >= 1px AND container main > 1px SET gap = 0;")


# ---------------------------------------------------------------------------
# Layers and scope
# ---------------------------------------------------------------------------


class TestLayersAndScope:
    def test_layer_block_has_unindented_rules(self):
        out = css("SET LAYER = base; CREATE STYLE SELECTOR card (color = red);")
        assert out == "@layer base {\n.card {\n  color: red;\n}\n\n}\n"

    def test_declared_order_wins_over_use_order(self):
        out = css(
            "CREATE LAYERS (base, components);"
            "SET LAYER = components; CREATE STYLE SELECTOR btn (color = red);"
            "SET LAYER = base; CREATE STYLE SELECTOR card (color = blue);"
        )
        assert out.index("@layer base") < out.index("@layer components")

    def test_undeclared_layers_follow_first_use(self):
        out = css(
            "SET LAYER = zeta; CREATE STYLE SELECTOR a (color = red);"
            "SET LAYER = alpha; CREATE STYLE SELECTOR b (color = red);"
        )
        assert out.index("@layer zeta") < out.index("@layer alpha")

    def test_config_default_layers_come_first(self):
        out = css(
            "SET LAYER = components; CREATE STYLE SELECTOR a (color = red);"
            "SET LAYER = reset; CREATE STYLE SELECTOR b (color = red);",
            CompilerConfig(default_layer_order=("reset",)),
        )
        assert out.index("@layer reset") < out.index("@layer components")

    def test_empty_layers_are_skipped(self):
        assert css("CREATE LAYERS (base, components);") == ""

    def test_unlayered_rules_precede_layers(self):
        # Layers reset per file, so the unlayered rule is written second.
        state = build_state(parse_source("SET LAYER = base; CREATE STYLE SELECTOR a (color = red);"))
        state = build_state(parse_source("CREATE STYLE SELECTOR b (color = blue);"), state=state)
        out = compile_state(state)
        assert out.index(".b {") < out.index("@layer base")

    def test_scope_with_limit(self):
        out = css("CREATE STYLE SELECTOR header SCOPED TO card LIMIT footer (color = red);")
        assert out == "@scope (.card) to (.footer) {\n  .header {\n    color: red;\n  }\n}\n"

    def test_wrapper_inside_scope_nests(self):
        out = css("CREATE STYLE SELECTOR header SCOPED TO card (color = red) WHERE width >= 600px;")
        assert out == (
            "@scope (.card) {\n"
            "  @media (min-width: 600px) {\n"
            "    .header {\n      color: red;\n    }\n"
            "  }\n"
            "}\n"
        )


# ---------------------------------------------------------------------------
# Spacing macro
# ---------------------------------------------------------------------------


class TestSpacing:
    @pytest.mark.parametrize(
        "mode,size",
        [("thin_spread", "4px"), ("medium_spread", "12px"), ("thick_smear", "24px")],
    )
    def test_recorded_mode(self, mode, size):
        out = css(f"SET BUTTER = '{mode}'; CREATE STYLE SELECTOR card (padding = BUTTER());")
        assert out == f".card {{\n  padding: {size};\n}}\n"

    def test_default_size(self):
        out = css("CREATE STYLE SELECTOR card (padding = BUTTER() BUTTER());")
        assert "padding: 8px 8px;" in out

    def test_forced_mode_overrides_recorded(self):
        out = css(
            "SET BUTTER = 'thin_spread'; CREATE STYLE SELECTOR card (padding = BUTTER());",
            CompilerConfig(forced_spacing_mode="thick_smear"),
        )
        assert "padding: 24px;" in out


# ---------------------------------------------------------------------------
# At-rules, imports, raw
# ---------------------------------------------------------------------------


class TestAtRules:
    def test_property(self):
        out = css("CREATE PROPERTY '--angle' (inherits = false, initial_value = 0deg);")
        assert out == "@property --angle {\n  inherits: false;\n  initial-value: 0deg;\n}\n"

    def test_font_face_family_first(self):
        out = css("CREATE FONT_FACE FAMILY 'Inter' (src = url(inter.woff2), font_weight = 400);")
        assert out == (
            '@font-face {\n  font-family: "Inter";\n  src: url(inter.woff2);\n'
            "  font-weight: 400;\n}\n"
        )

    def test_page(self):
        assert css("CREATE PAGE ':first' (margin = 1in);") == "@page :first {\n  margin: 1in;\n}\n"
        assert css("CREATE PAGE (margin = 2cm);") == "@page {\n  margin: 2cm;\n}\n"

    def test_counter_style(self):
        out = css("CREATE COUNTER_STYLE thumbs (system = cyclic);")
        assert out == "@counter-style thumbs {\n  system: cyclic;\n}\n"

    def test_font_feature_values(self):
        out = css("CREATE FONT_FEATURE_VALUES 'Font One' (styleset_nice = 12, swash_fancy = 1);")
        assert out == (
            '@font-feature-values "Font One" {\n'
            "  @styleset {\n    nice: 12;\n  }\n"
            "  @swash {\n    fancy: 1;\n  }\n"
            "}\n"
        )

    def test_font_palette_values(self):
        out = css("CREATE FONT_PALETTE_VALUES '--brand' (font_family = Bixa);")
        assert out == "@font-palette-values --brand {\n  font-family: Bixa;\n}\n"

    def test_starting_style(self):
        out = css("CREATE STARTING_STYLE SELECTOR dialog (opacity = 0);")
        assert out == "@starting-style {\n  .dialog {\n    opacity: 0;\n  }\n}\n"

    def test_keyframes(self):
        out = css("CREATE KEYFRAMES fade (from (opacity = 0), to (opacity = 1));")
        assert out == (
            "@keyframes fade {\n"
            "  from {\n    opacity: 0;\n  }\n"
            "  to {\n    opacity: 1;\n  }\n"
            "}\n"
        )

    def test_dropped_at_rules_are_not_emitted(self):
        out = css(
            "CREATE KEYFRAMES fade (from (opacity = 0)); DROP KEYFRAMES fade;"
            "CREATE COUNTER_STYLE x (system = cyclic); DROP COUNTER_STYLE x;"
            "CREATE STARTING_STYLE SELECTOR d (opacity = 0); DROP STARTING_STYLE SELECTOR d;"
        )
        assert out == ""

    def test_css_import(self):
        assert css("IMPORT CSS 'print.css' MEDIA print;") == "@import url('print.css') print;\n"

    def test_sql_import_is_not_emitted(self):
        assert css("IMPORT 'tokens.sql';") == ""

    def test_raw_is_verbatim(self):
        assert css("RAW '.x { color: red; }';") == ".x { color: red; }\n"


class TestSectionOrder:
    def test_fixed_section_order(self):
        out = css(
            """
            RAW '.raw { x: y; }';
            CREATE KEYFRAMES spin (from (opacity = 0), to (opacity = 1));
            CREATE PAGE (margin = 1cm);
            CREATE STYLE SELECTOR plain (color = red);
            CREATE TOKEN 'ink' VALUE #111;
            IMPORT CSS 'reset.css';
            SET LAYER = base;
            CREATE STYLE SELECTOR layered (color = blue);
            """
        )
        markers = ["@import", ":root", "@page", ".plain", "@layer base", "@keyframes spin", ".raw"]
        positions = [out.index(m) for m in markers]
        assert positions == sorted(positions)
