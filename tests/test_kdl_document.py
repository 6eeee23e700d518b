"""Tests for nirisettings.kdl_document — parsing and value formatting."""

from __future__ import annotations

import pytest

from nirisettings.errors import ParseError
from nirisettings.kdl_document import format_name, format_value, parse, quote


class TestParseNodes:
    def test_args_props_children(self) -> None:
        doc = parse('output "eDP-1" { scale 1.5; position x=10 y=-20; }')
        (node,) = doc.nodes
        assert node.name == "output"
        assert node.args == ["eDP-1"]
        assert node.get("scale").args == [1.5]
        assert node.get("position").props == {"x": 10, "y": -20}

    def test_value_reads_child_then_property(self) -> None:
        doc = parse("focus-ring width=7\nborder { width 3; }")
        assert doc.nodes[0].value("width") == 7
        assert doc.nodes[1].value("width") == 3

    def test_last_child_wins(self) -> None:
        (node,) = parse("layout {\n    gaps 4\n    gaps 8\n}").nodes
        assert node.get("gaps").args == [8]
        assert len(node.get_all("gaps")) == 2

    def test_keywords_with_and_without_hash(self) -> None:
        (node,) = parse("n true #false null #null #true").nodes
        assert node.args == [True, False, None, None, True]

    def test_numbers(self) -> None:
        (node,) = parse("n 0xff 0o17 0b101 1_000 -2.5 1e-05").nodes
        assert node.args == [255, 15, 5, 1000, -2.5, 1e-05]

    def test_raw_strings(self) -> None:
        (node,) = parse('n r"C:\\path" r#"say "hi""# #"x"#').nodes
        assert node.args == ["C:\\path", 'say "hi"', "x"]

    def test_escapes(self) -> None:
        (node,) = parse(r'n "a\tb\"c\u{41}"').nodes
        assert node.args == ['a\tb"cA']

    def test_type_annotations_ignored(self) -> None:
        (node,) = parse("(t)n (u8)5 key=(f64)2.0").nodes
        assert node.name == "n"
        assert node.args == [5]
        assert node.props == {"key": 2.0}

    def test_line_continuation(self) -> None:
        (node,) = parse("spawn-at-startup \"a\" \\\n    \"b\"").nodes
        assert node.args == ["a", "b"]

    def test_semicolon_separated(self) -> None:
        doc = parse("a; b; c")
        assert doc.names() == ["a", "b", "c"]

    def test_bind_style_names(self) -> None:
        (node,) = parse("binds { Mod+Shift+Slash { show-hotkey-overlay; } }").nodes
        assert node.children[0].name == "Mod+Shift+Slash"


class TestComments:
    def test_line_and_nested_block_comments(self) -> None:
        doc = parse("// top\na /* one /* two */ still */ 1\n// end\n")
        assert doc.names() == ["a"]
        assert doc.nodes[0].args == [1]

    def test_slashdash_node_entry_and_children(self) -> None:
        doc = parse('/-gone 1\nkept /-"arg" 2 /-{ child; }')
        assert doc.names() == ["kept"]
        assert doc.nodes[0].args == [2]
        assert doc.nodes[0].children is None

    def test_slashdash_property_becomes_annotation(self) -> None:
        (node,) = parse('workspace "web" /-id=4 /-name="Web"').nodes
        assert node.props == {}
        assert node.annotations == {"id": 4, "name": "Web"}


class TestSourceSpans:
    def test_raw_is_verbatim(self) -> None:
        text = 'keep "x" {\n    // inner\n    child  1\n}\nother'
        doc = parse(text)
        assert doc.nodes[0].raw == 'keep "x" {\n    // inner\n    child  1\n}'

    def test_leading_holds_comments_above(self) -> None:
        doc = parse("a\n\n// about b\nb\n")
        assert "// about b" in doc.nodes[1].leading

    def test_slashdashed_node_kept_in_next_leading(self) -> None:
        doc = parse("a\n/-old 1\nb\n")
        assert "/-old 1" in doc.nodes[1].leading

    def test_same_line_comment_stays_with_node(self) -> None:
        doc = parse("custom { } // note\nlayout { gaps 4; }\nplain; // after semicolon\nbare\n")
        assert doc.nodes[0].raw == "custom { }"
        assert doc.nodes[0].comment == "// note"
        assert "note" not in doc.nodes[1].leading
        assert doc.nodes[1].comment == ""
        assert doc.nodes[2].comment == "// after semicolon"
        assert "semicolon" not in doc.nodes[3].leading

    def test_trailing_comment(self) -> None:
        doc = parse("a\n// bye\n")
        assert "// bye" in doc.trailing

    def test_line_numbers(self) -> None:
        doc = parse("a\n\nb\n  c")
        assert [n.line for n in doc.nodes] == [1, 3, 4]


class TestParseErrors:
    @pytest.mark.parametrize(
        "text",
        [
            "a {",
            "a }",
            'a "unterminated',
            "a /* never closed",
            "a 12abc",
            "a { b } c",
        ],
    )
    def test_malformed(self, text: str) -> None:
        with pytest.raises(ParseError):
            parse(text)

    def test_out_of_range_escape(self) -> None:
        with pytest.raises(ParseError):
            parse('a "\\u{110000}"')

    def test_position_in_message(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse("ok\nbad {")
        assert excinfo.value.line == 2
        assert "line 2" in str(excinfo.value)


class TestFormatting:
    def test_quote_escapes(self) -> None:
        assert quote('a"b\\c\n') == '"a\\"b\\\\c\\n"'

    def test_format_value(self) -> None:
        assert format_value(True) == "true"
        assert format_value(None) == "null"
        assert format_value(0.5) == "0.5"
        assert format_value(3) == "3"
        assert format_value("x") == '"x"'

    def test_format_name(self) -> None:
        assert format_name("Mod+T") == "Mod+T"
        assert format_name("my node") == '"my node"'
        assert format_name("true") == '"true"'
        assert format_name("1abc") == '"1abc"'

    def test_formatted_values_parse_back(self) -> None:
        values = ["with \"quotes\"", 1.25, -7, False, None]
        (node,) = parse("n " + " ".join(format_value(v) for v in values)).nodes
        assert node.args == values
