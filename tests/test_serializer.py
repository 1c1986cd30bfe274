"""Tests for htmlranges.serializer module."""
from __future__ import annotations

from htmlranges.dom import has_tag_name, query
from htmlranges.nodes import append_child, create_comment, create_element, create_text_node
from htmlranges.serializer import VOID_TAG_NAMES, serialize, serialize_outer
from htmlranges.tree_builder import parse_html


class TestSerialize:
    def test_includes_injected_structure(self) -> None:
        assert serialize(parse_html("<p>x</p>")) == (
            "<html><head></head><body><p>x</p></body></html>"
        )

    def test_inner_and_outer(self) -> None:
        ast = parse_html("<div id=a><b>x</b> y</div>")
        div = query(ast, has_tag_name("div"))
        assert div is not None
        assert serialize(div) == "<b>x</b> y"
        assert serialize_outer(div) == '<div id="a"><b>x</b> y</div>'

    def test_escapes_text_and_attributes(self) -> None:
        ast = parse_html('<p title="a &amp; b">x &lt; y &gt; z</p>')
        p = query(ast, has_tag_name("p"))
        assert p is not None
        assert serialize_outer(p) == '<p title="a &amp; b">x &lt; y &gt; z</p>'

    def test_attribute_with_double_quote(self) -> None:
        ast = parse_html("<p title='say \"hi\"'></p>")
        p = query(ast, has_tag_name("p"))
        assert p is not None
        assert serialize_outer(p) == "<p title='say \"hi\"'></p>"

    def test_empty_attribute(self) -> None:
        ast = parse_html("<input disabled>")
        field = query(ast, has_tag_name("input"))
        assert field is not None
        assert serialize_outer(field) == '<input disabled="">'

    def test_raw_text_is_not_escaped(self) -> None:
        ast = parse_html("<style>a > b { color: red }</style>")
        style = query(ast, has_tag_name("style"))
        assert style is not None
        assert serialize(style) == "a > b { color: red }"

    def test_void_elements_have_no_end_tag(self) -> None:
        assert {"br", "img", "input", "meta", "link"} <= VOID_TAG_NAMES
        ast = parse_html("<p>a<br>b</p>")
        p = query(ast, has_tag_name("p"))
        assert p is not None
        assert serialize(p) == "a<br>b"

    def test_implied_end_tags_are_written(self) -> None:
        ast = parse_html("<ul><li>a<li>b</ul>")
        ul = query(ast, has_tag_name("ul"))
        assert ul is not None
        assert serialize(ul) == "<li>a</li><li>b</li>"

    def test_comment_and_doctype(self) -> None:
        ast = parse_html("<!DOCTYPE html><!-- hi -->")
        assert serialize(ast).startswith("<!DOCTYPE html><!-- hi -->")

    def test_hand_built_tree(self) -> None:
        div = create_element("DIV", {"class": "x"})
        append_child(div, create_text_node("1 & 2"))
        append_child(div, create_comment("note"))
        assert serialize_outer(div) == '<div class="x">1 &amp; 2<!--note--></div>'

    def test_no_break_space_is_escaped(self) -> None:
        ast = parse_html('<p title="a&nbsp;b">a&nbsp;b</p>')
        p = query(ast, has_tag_name("p"))
        assert p is not None
        assert p.child_nodes[0].value == "a\xa0b"
        assert serialize_outer(p) == '<p title="a&nbsp;b">a&nbsp;b</p>'

    def test_no_break_space_in_raw_text(self) -> None:
        style = create_element("style")
        append_child(style, create_text_node("a\xa0b"))
        assert serialize(style) == "a\xa0b"

    def test_deep_tree(self) -> None:
        depth = 1500
        ast = parse_html("<div>" * depth + "x")
        body = query(ast, has_tag_name("body"))
        assert body is not None
        assert serialize(body) == "<div>" * depth + "x" + "</div>" * depth
