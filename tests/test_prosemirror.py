"""Tests for ProseMirror notes rendering."""

import json

import pytest

from granola_localcache.prosemirror import prosemirror_to_plain_text


def _text(value: str) -> dict:
    return {"type": "text", "text": value}


def _para(*children: dict) -> dict:
    return {"type": "paragraph", "content": list(children)}


def _item(*children: dict) -> dict:
    return {"type": "listItem", "content": list(children)}


def _doc(*children: dict) -> dict:
    return {"type": "doc", "content": list(children)}


class TestProsemirrorToPlainText:
    def test_simple_paragraph(self):
        assert prosemirror_to_plain_text(_doc(_para(_text("Hello world")))) == "Hello world"

    def test_heading_and_paragraph(self):
        doc = _doc(
            {"type": "heading", "attrs": {"level": 3}, "content": [_text("Title")]},
            _para(_text("Body text")),
        )
        assert prosemirror_to_plain_text(doc) == "Title\nBody text"

    def test_multiple_paragraphs(self):
        doc = _doc(_para(_text("Para 1")), _para(_text("Para 2")))
        assert prosemirror_to_plain_text(doc) == "Para 1\nPara 2"

    def test_hard_break(self):
        doc = _doc(_para(_text("Line 1"), {"type": "hardBreak"}, _text("Line 2")))
        assert prosemirror_to_plain_text(doc) == "Line 1\nLine 2"

    def test_bullet_list(self):
        doc = _doc(
            {
                "type": "bulletList",
                "content": [_item(_para(_text("First"))), _item(_para(_text("Second")))],
            }
        )
        assert prosemirror_to_plain_text(doc) == "- First\n- Second"

    def test_ordered_list_renders_as_bullets(self):
        doc = _doc(
            {
                "type": "orderedList",
                "attrs": {"start": 1},
                "content": [_item(_para(_text("Step 1"))), _item(_para(_text("Step 2")))],
            }
        )
        assert prosemirror_to_plain_text(doc) == "- Step 1\n- Step 2"

    def test_nested_list_indents(self):
        inner = {"type": "bulletList", "content": [_item(_para(_text("Inner")))]}
        doc = _doc({"type": "bulletList", "content": [_item(_para(_text("Outer")), inner)]})
        assert prosemirror_to_plain_text(doc) == "- Outer\n  - Inner"

    def test_unknown_node_types_recurse(self):
        doc = _doc({"type": "customBlock", "content": [_para(_text("Nested in unknown"))]})
        assert prosemirror_to_plain_text(doc) == "Nested in unknown"

    def test_accepts_json_text(self):
        raw = json.dumps(_doc(_para(_text("From JSON"))))
        assert prosemirror_to_plain_text(raw) == "From JSON"

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            {},
            _doc(),
            "{invalid",
            ["not", "a", "node"],
            {"type": "doc", "content": "not a list"},
        ],
    )
    def test_empty_or_malformed_input(self, raw):
        assert prosemirror_to_plain_text(raw) == ""
