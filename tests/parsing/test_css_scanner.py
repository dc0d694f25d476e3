"""Tests for the brace-driven stylesheet scanner."""

from __future__ import annotations

from findref.parsing.css import at_rule_name, mask_css_comments, parse_stylesheet


def test_rules_and_declarations_keep_relative_offsets() -> None:
    source = ".a { color: red; margin: 0 }\n.b{padding:1px}"

    sheet = parse_stylesheet(source)

    assert [rule.selector_text for rule in sheet.rules] == [".a", ".b"]
    first, second = sheet.rules
    assert [declaration.property for declaration in first.declarations] == ["color", "margin"]
    assert first.declarations[0].offset == source.index("color")
    assert first.declarations[1].value == "0"
    assert second.offset == source.index(".b")
    assert second.declarations[0].offset == source.index("padding")


def test_comments_are_masked_without_moving_offsets() -> None:
    source = "/* .fake { color: red; } */\n.real { color: blue; }"

    masked = mask_css_comments(source)
    sheet = parse_stylesheet(source)

    assert len(masked) == len(source)
    assert [rule.selector_text for rule in sheet.rules] == [".real"]
    assert sheet.rules[0].offset == source.index(".real")


def test_skipped_at_rules_produce_no_rules() -> None:
    source = (
        "@keyframes spin { from { transform: rotate(0deg); } to { transform: rotate(360deg); } }\n"
        "@font-face { font-family: X; src: url(x.woff); }\n"
        "@-webkit-keyframes pulse { 0% { opacity: 0; } }\n"
        ".box { animation: spin 1s; }"
    )

    sheet = parse_stylesheet(source)

    assert [rule.selector_text for rule in sheet.rules] == [".box"]


def test_conditional_at_rules_nest_rules_under_a_context() -> None:
    source = "@media (max-width: 600px) { .a { color: red; } }\n.a { color: blue; }"

    sheet = parse_stylesheet(source)

    assert [(rule.selector_text, rule.context) for rule in sheet.rules] == [
        (".a", "@media (max-width: 600px)"),
        (".a", ""),
    ]


def test_nested_rules_remember_their_parent() -> None:
    sheet = parse_stylesheet(":global(.theme) { .inner { color: red; } }")

    outer, inner = sheet.rules
    assert inner.parent is outer
    assert inner.ancestors() == [outer]
    assert outer.declarations == []


def test_bodiless_at_rules_become_statements() -> None:
    sheet = parse_stylesheet("@import 'reset.css';\n@charset \"utf-8\";\n.a { color: red; }")

    assert [statement.name for statement in sheet.statements] == ["import", "charset"]
    assert sheet.statements[0].prelude == "@import 'reset.css'"


def test_important_flag_and_custom_properties() -> None:
    sheet = parse_stylesheet(".a { --Accent: red; COLOR: blue !important; }")

    declarations = sheet.rules[0].declarations
    assert [declaration.property for declaration in declarations] == ["--Accent", "color"]
    assert declarations[1].important is True
    assert declarations[0].important is False


def test_unterminated_block_runs_to_the_end() -> None:
    sheet = parse_stylesheet(".a { color: red;")

    assert [rule.selector_text for rule in sheet.rules] == [".a"]
    assert [declaration.property for declaration in sheet.rules[0].declarations] == ["color"]


def test_at_rule_name_strips_vendor_prefixes() -> None:
    assert at_rule_name("@-webkit-keyframes spin") == "keyframes"
    assert at_rule_name("@MEDIA screen") == "media"
    assert at_rule_name("not an at-rule") == ""


def test_nesting_depth_is_not_limited_by_the_call_stack() -> None:
    sheet = parse_stylesheet("a{" * 3000 + "color: red;" + "}" * 3000 + ".after{margin:0}")

    assert len(sheet.rules) == 3001
    assert sheet.rules[-2].declarations[0].property == "color"
    assert sheet.rules[-2].parent is sheet.rules[-3]
    assert sheet.rules[-1].selector_text == ".after"
    assert sheet.rules[-1].parent is None
