"""Tests for the markup-to-layout Translator."""

import pytest

from fb2term.errors import StreamError, StyleStackMismatch
from fb2term.layout import Translator
from fb2term.markup import EndTag, Eof, StartTag, Text
from fb2term.models import LayoutOptions, PositionKey
from tests.conftest import TEST_STYLE_MAP, fb2


ORNAMENT_40 = " " * 17 + "* * *"

PROSE = (
    "It was the best of times, it was the worst of times, it was the age of wisdom, "
    "it was the age of foolishness, it was the epoch of belief, it was the epoch of "
    "incredulity, it was the season of Light, it was the season of Darkness."
)


def contents(translator):
    return [line.content for line in translator.lines]


class TestBlocks:
    """Paragraphs, sections, titles, verses and quotes."""

    def test_strong_markers_wrap_text(self, layout):
        translator = layout(fb2("<p><strong>x</strong></p>"))
        assert contents(translator) == ["<b>x</b>"]
        assert translator.buffer.styles == []

    def test_paragraph_indent_after_first(self, layout):
        translator = layout(fb2("<section><p>First para.</p><p>Second para.</p></section>"))
        assert contents(translator) == ["First para.", "    Second para.", "", ORNAMENT_40, ""]
        assert [line.position for line in translator.lines] == [
            PositionKey(1, 1),
            PositionKey(2, 1),
            None,
            None,
            None,
        ]

    def test_title_is_uppercased_and_styled(self, layout):
        translator = layout(
            fb2("<section><title><p>Chapter one</p></title><p>It began.</p><p>Then more.</p></section>")
        )
        assert contents(translator) == [
            "<t>CHAPTER ONE</t>",
            "",
            "It began.",
            "    Then more.",
            "",
            ORNAMENT_40,
            "",
        ]

    def test_emphasis_spanning_lines(self, layout):
        translator = layout(fb2("<p><emphasis>alpha beta gamma</emphasis></p>"), width=10)
        assert contents(translator) == ["<i>alpha beta</i>", "<i>gamma</i>"]

    def test_mixed_inline_spacing(self, layout):
        translator = layout(fb2("<p>Say <emphasis>hello</emphasis>, friend.</p>"))
        assert contents(translator) == ["Say <i>hello</i>, friend."]
        assert translator.lines[0].width == len("Say hello, friend.")

    def test_verse_lines(self, layout):
        translator = layout(fb2("<poem><stanza><v>Line one</v><v>Line two</v></stanza></poem>"))
        assert contents(translator) == ["        Line one", "        Line two", ""]

    def test_epigraph_is_right_aligned_with_prefix(self, layout):
        translator = layout(
            fb2(
                "<section><epigraph><p>Short words</p><text-author>Someone</text-author></epigraph>"
                "<p>Body.</p></section>"
            ),
            width=30,
        )
        lines = contents(translator)
        assert lines[0] == "  | " + " " * 15 + "Short words"
        assert lines[1] == "  | " + " " * 17 + "— Someone"
        assert lines[2] == ""
        assert lines[3] == "    Body."
        assert all(line.width <= 30 for line in translator.lines)

    def test_cite_keeps_left_alignment(self, layout):
        translator = layout(fb2("<cite><p>Quoted.</p></cite><p>After.</p>"), width=30)
        assert contents(translator) == ["  | Quoted.", "", "    After."]

    def test_custom_options(self, layout):
        options = LayoutOptions(paragraph_indent=2, quote_prefix="> ", ornament="~")
        translator = layout(
            fb2("<section><p>a</p><p>b</p><cite><p>c</p></cite></section>"),
            width=21,
            options=options,
        )
        assert contents(translator) == ["a", "  b", ">   c", "", " " * 10 + "~", ""]

    def test_word_fitting_a_line_is_not_split_after_indent(self, layout):
        translator = layout(fb2("<section><p>first</p><p>" + "x" * 18 + "</p></section>"), width=20)
        assert contents(translator) == ["first", "x" * 18, "", " " * 7 + "* * *", ""]
        assert translator.lines[1].position == PositionKey(2, 0)

    def test_author_word_fitting_a_line_stays_whole(self, layout):
        translator = layout(
            fb2("<section><p>a</p><epigraph><text-author>" + "y" * 15 + "</text-author></epigraph></section>"),
            width=20,
        )
        assert contents(translator) == ["a", "  | " + " " + "y" * 15, "", " " * 7 + "* * *", ""]

    def test_style_opened_before_a_break_has_no_empty_pair(self, layout):
        translator = layout(fb2("<p>alpha <emphasis>beta</emphasis></p>"), width=6)
        assert contents(translator) == ["alpha", "<i>beta</i>"]

    def test_empty_line_marker(self, layout):
        translator = layout(fb2("<p>One</p><empty-line/><p>Two</p>"))
        assert contents(translator) == ["One", "", "    Two"]

    def test_skipped_regions_do_not_count(self, layout):
        xml = (
            "<FictionBook><description><title-info><book-title>Secret</book-title></title-info>"
            "</description><body><p>Visible</p></body><binary id='c'>AAAA</binary></FictionBook>"
        )
        translator = layout(xml)
        assert contents(translator) == ["Visible"]
        assert translator.lines[0].position == PositionKey(1, 0)

    def test_unrecognized_tags_are_recorded(self, layout):
        translator = layout(fb2('<p>See <a href="#n1">[1]</a> here</p>'))
        assert contents(translator) == ["See [1] here"]
        assert translator.unrecognized_tags["a"] == 1
        assert translator.unrecognized_tags["body"] == 1


class TestBatching:
    """Bounded cranks and end of stream."""

    def test_crank_stops_at_budget(self, translator_for):
        translator = translator_for(fb2("".join(f"<p>Paragraph {n}.</p>" for n in range(5))))
        assert translator.crank(2) == 2
        assert len(translator.lines) == 2
        assert not translator.at_eof
        assert translator.request_lines(100) == 3
        assert translator.at_eof
        assert translator.crank(10) == 0

    def test_small_chunks_give_same_layout(self, layout):
        xml = fb2(f"<section><p>{PROSE}</p><p><strong>{PROSE}</strong></p></section>")
        whole = layout(xml, width=33)
        chunked = layout(xml, width=33, chunk_size=7)
        assert whole.lines == chunked.lines

    def test_layout_is_deterministic(self, layout):
        xml = fb2(f"<section><title><p>One</p></title><p>{PROSE}</p></section>")
        assert layout(xml, width=27).lines == layout(xml, width=27).lines


class TestInvariants:
    """Width bound and position ordering over realistic text."""

    @pytest.mark.parametrize("width", [20, 33, 47, 80])
    def test_width_and_positions(self, layout, width):
        table = {"foolishness": {4, 7}, "incredulity": {2, 5, 7}, "Darkness": {4}, "wisdom": {3}}
        xml = fb2(
            f"<section><title><p>A tale</p></title><epigraph><p>{PROSE}</p></epigraph>"
            f"<p>{PROSE}</p><p><emphasis>{PROSE}</emphasis> and {PROSE}</p>"
            f"<poem><stanza><v>{PROSE}</v></stanza></poem>{'z' * 95}</section>"
        )
        translator = layout(xml, width=width, table=table)
        positions = []
        for line in translator.lines:
            assert line.width <= width
            assert len(TEST_STYLE_MAP.strip(line.content)) == line.width
            if line.position is not None:
                positions.append(line.position)
        assert positions == sorted(positions)
        assert translator.buffer.styles == []


class TestErrors:
    """Malformed streams are fatal."""

    def test_unmatched_end_tag(self):
        translator = Translator([StartTag("p"), EndTag("emphasis")], width=40)
        with pytest.raises(StyleStackMismatch):
            translator.crank(1)

    def test_open_style_at_eof(self):
        translator = Translator([StartTag("p"), StartTag("strong"), Text("x"), Eof()], width=40)
        with pytest.raises(StyleStackMismatch):
            translator.crank(5)

    def test_stream_error_propagates(self, translator_for):
        translator = translator_for("<FictionBook><body><p>oops</body></FictionBook>")
        with pytest.raises(StreamError) as excinfo:
            translator.crank(5)
        assert excinfo.value.line == 1

    def test_events_without_eof_finish_cleanly(self):
        translator = Translator([StartTag("p"), Text("done"), EndTag("p")], width=40)
        assert translator.crank(5) == 1
        assert translator.at_eof
