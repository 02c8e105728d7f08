"""
Tests for command parsing.
"""

import pytest

from remote_agent.protocol.actions import (
    Autocomplete,
    Batch,
    Click,
    Drag,
    Gesture,
    GestureKind,
    HoldClick,
    KeyEvent,
    KeyPress,
    Move,
    MouseButton,
    Point,
    Scroll,
    ScrollTo,
    Shortcut,
    TypeText,
)
from remote_agent.protocol.errors import (
    ArgumentError,
    BadArgumentCount,
    BadCoordinateCount,
    BadCoordinates,
    BadNumber,
    MalformedCommand,
    ParseError,
    UnknownAction,
    UnknownGesture,
    UnknownKey,
)
from remote_agent.protocol.keys import KeyCode
from remote_agent.protocol.parser import ACTION_TAGS, expand_batch, parse, split_command


class TestSplit:
    """Tests for the action/argument split."""

    def test_first_colon_only(self):
        """Test that later colons stay in the argument."""
        assert split_command("type:a:b:c") == ("type", "a:b:c")

    def test_missing_separator(self):
        """Test that a command without ':' is malformed."""
        with pytest.raises(MalformedCommand):
            parse("click")

    def test_end_is_not_part_of_the_grammar(self):
        """Test that the bare session sentinel is rejected by the parser."""
        with pytest.raises(MalformedCommand):
            parse("END")
        with pytest.raises(UnknownAction):
            parse("END:now")

    def test_trailing_newline_stripped(self):
        """Test that a line terminator is not part of the argument."""
        assert parse("type:hi\r\n") == TypeText("hi")


class TestTags:
    """Tests for tag matching."""

    def test_unknown_action(self):
        """Test that unknown tags are rejected."""
        with pytest.raises(UnknownAction) as exc_info:
            parse("teleport:1,2")
        assert exc_info.value.tag == "teleport"

    def test_tags_are_case_sensitive(self):
        """Test that Multi-click and click are distinct and exact."""
        assert "Multi-click" in ACTION_TAGS
        with pytest.raises(UnknownAction):
            parse("multi-click:1,2,3")
        with pytest.raises(UnknownAction):
            parse("Click:1,2")

    def test_empty_argument(self):
        """Test that an empty argument is rejected for every tag."""
        for tag in ACTION_TAGS:
            with pytest.raises(BadArgumentCount):
                parse(f"{tag}:")


class TestKeyCommands:
    """Tests for key-down, key-up and press."""

    def test_key_down_up(self):
        """Test key transitions."""
        assert parse("key-down:shift") == KeyEvent(KeyCode.SHIFT_LEFT, down=True)
        assert parse("key-up:Shift") == KeyEvent(KeyCode.SHIFT_LEFT, down=False)

    def test_press(self):
        """Test a full key press."""
        assert parse("press:return") == KeyPress(KeyCode.RETURN)

    def test_unknown_key(self):
        """Test an unknown key name."""
        with pytest.raises(UnknownKey) as exc_info:
            parse("press:hyper")
        assert exc_info.value.token == "hyper"


class TestTextCommands:
    """Tests for type and autocomplete-text."""

    def test_type_keeps_colons(self):
        """Test that typed text is never re-split."""
        assert parse("type:http://example.com") == TypeText("http://example.com")

    def test_autocomplete_first_comma(self):
        """Test that only the first comma separates prefix and full text."""
        action = parse("autocomplete-text:hel,hello, world")
        assert action == Autocomplete("hel", "hello, world")
        assert action.suffix == "lo, world"

    def test_autocomplete_needs_comma(self):
        """Test that a missing comma is a field count error."""
        with pytest.raises(BadArgumentCount):
            parse("autocomplete-text:hello")


class TestPointerCommands:
    """Tests for the click, move, scroll and drag families."""

    def test_click(self):
        """Test a single left click."""
        assert parse("click:100,200") == Click(Point(100, 200), MouseButton.LEFT, 1)

    def test_click_variants(self):
        """Test double and right clicks."""
        assert parse("double-click:1,2") == Click(Point(1, 2), MouseButton.LEFT, 2)
        assert parse("right-click:1.5,-2") == Click(Point(1.5, -2), MouseButton.RIGHT, 1)

    def test_multi_click(self):
        """Test a click with an explicit count."""
        assert parse("Multi-click:100,200,3") == Click(Point(100, 200), MouseButton.LEFT, 3)

    @pytest.mark.parametrize("argument", ["100,200,0", "100,200,-1", "100,200,2.5", "100,200,x"])
    def test_multi_click_bad_count(self, argument):
        """Test that the count must be a positive integer."""
        with pytest.raises(BadNumber):
            parse(f"Multi-click:{argument}")

    def test_multi_click_field_count(self):
        """Test a Multi-click with too few fields."""
        with pytest.raises(BadArgumentCount):
            parse("Multi-click:100,200")

    def test_click_not_a_number(self):
        """Test that a non-numeric coordinate is a number error."""
        with pytest.raises(BadNumber) as exc_info:
            parse("click:abc")
        assert isinstance(exc_info.value, BadCoordinates)
        assert exc_info.value.tag == "click"

    def test_click_wrong_field_count(self):
        """Test coordinate payloads with the wrong number of fields."""
        with pytest.raises(BadCoordinateCount):
            parse("click:1")
        with pytest.raises(BadArgumentCount):
            parse("click:1,2,3")

    def test_non_finite_rejected(self):
        """Test that nan and inf are not coordinates."""
        with pytest.raises(BadNumber):
            parse("move:nan,1")
        with pytest.raises(BadNumber):
            parse("scroll:inf")
        with pytest.raises(BadNumber):
            parse("scroll:1e999")

    def test_plain_decimals_only(self):
        """Test that numbers outside plain decimal notation are rejected."""
        for raw in ["click:1_000,2", "click: 1,2", "move:1,2 ", "scroll:0x10", "scroll:١٢", "drag:0,0,1__0,1"]:
            with pytest.raises(BadNumber):
                parse(raw)
        for raw in ["Multi-click:1,2,1_0", "Multi-click:1,2, 3", "Multi-click:1,2,2.0"]:
            with pytest.raises(BadNumber):
                parse(raw)

    def test_decimal_forms(self):
        """Test the accepted decimal spellings."""
        assert parse("move:+1.,.5") == Move(Point(1.0, 0.5))
        assert parse("scroll:-1.5e2") == Scroll(-150.0)

    def test_points_not_clamped(self):
        """Test that out-of-range points pass through."""
        assert parse("move:-50,99999") == Move(Point(-50, 99999))

    def test_scroll(self):
        """Test signed scroll deltas."""
        assert parse("scroll:-120") == Scroll(-120)
        assert parse("scroll:3") == Scroll(3)

    def test_scroll_to(self):
        """Test scroll-to."""
        assert parse("scroll-to:10,20") == ScrollTo(Point(10, 20))

    def test_drag(self):
        """Test a drag between two points."""
        assert parse("drag:0,0,100,50") == Drag(Point(0, 0), Point(100, 50))

    def test_hold_click(self):
        """Test a click with a held modifier."""
        assert parse("hold-click:10,20,command") == HoldClick(Point(10, 20), KeyCode.COMMAND_LEFT)

    def test_hold_click_unknown_modifier(self):
        """Test that an unknown modifier fails at parse time."""
        with pytest.raises(UnknownKey):
            parse("hold-click:10,20,hyper")


class TestShortcut:
    """Tests for shortcut parsing."""

    def test_order_preserved(self):
        """Test that keys keep their listed order."""
        assert parse("shortcut:command+c") == Shortcut((KeyCode.COMMAND_LEFT, KeyCode.C))
        assert parse("shortcut:shift+command+z") == Shortcut(
            (KeyCode.SHIFT_LEFT, KeyCode.COMMAND_LEFT, KeyCode.Z)
        )

    def test_repeats_kept(self):
        """Test that repeated keys are not collapsed."""
        assert parse("shortcut:a+a") == Shortcut((KeyCode.A, KeyCode.A))

    def test_names_offending_token(self):
        """Test that the whole shortcut fails on one unknown key."""
        with pytest.raises(UnknownKey) as exc_info:
            parse("shortcut:command+hyper+c")
        assert exc_info.value.token == "hyper"
        assert exc_info.value.tag == "shortcut"


class TestGestures:
    """Tests for touchpad and special_gesture_mac."""

    def test_touchpad(self):
        """Test touchpad gestures."""
        assert parse("touchpad:swipe left") == Gesture(GestureKind.SWIPE_LEFT)
        assert parse("touchpad:zoom in") == Gesture(GestureKind.ZOOM_IN)

    def test_window_gestures(self):
        """Test window actions."""
        assert parse("special_gesture_mac:minimize_window") == Gesture(GestureKind.MINIMIZE_WINDOW)

    def test_unknown_gesture(self):
        """Test an unknown gesture value."""
        with pytest.raises(UnknownGesture):
            parse("touchpad:pinch")

    def test_gesture_under_wrong_tag(self):
        """Test that each tag only accepts its own gestures."""
        with pytest.raises(UnknownGesture):
            parse("touchpad:close_window")
        with pytest.raises(UnknownGesture):
            parse("special_gesture_mac:swipe up")


class TestBatch:
    """Tests for batch parsing."""

    def test_batch(self):
        """Test that sub-commands are kept in order."""
        assert parse("batch:click:1,1;type:hi") == Batch(("click:1,1", "type:hi"))

    def test_empty_segments_skipped(self):
        """Test that empty segments are ignored."""
        assert parse("batch:press:a;;press:b;") == Batch(("press:a", "press:b"))

    def test_only_separators(self):
        """Test a batch with no sub-commands."""
        with pytest.raises(BadArgumentCount):
            parse("batch:;;")

    def test_expand_batch(self):
        """Test that sub-commands parse independently."""
        expanded = expand_batch(parse("batch:click:1,1;bogus:1;type:hi"))
        assert expanded[0] == ("click:1,1", Click(Point(1, 1)))
        assert expanded[1][0] == "bogus:1"
        assert isinstance(expanded[1][1], UnknownAction)
        assert expanded[2] == ("type:hi", TypeText("hi"))

    def test_nested_batch(self):
        """Test that a nested batch is parsed as a sub-sequence."""
        expanded = expand_batch(parse("batch:press:a;batch:press:b"))
        assert expanded[1] == ("batch:press:b", Batch(("press:b",)))


class TestErrorTaxonomy:
    """Tests for the exception hierarchy."""

    def test_field_errors_carry_tag_and_field(self):
        """Test that field errors identify tag and field."""
        with pytest.raises(ArgumentError) as exc_info:
            parse("drag:0,0,x,1")
        assert exc_info.value.tag == "drag"
        assert exc_info.value.field == "x2"

    def test_all_are_parse_errors(self):
        """Test that every parse failure is a ParseError."""
        for raw in ["nope", "x:1", "press:hyper", "click:a", "touchpad:pinch", "scroll:"]:
            with pytest.raises(ParseError):
                parse(raw)
