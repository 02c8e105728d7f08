"""
Tests for the key symbol table.
"""

import pytest

from remote_agent.protocol.errors import UnknownKey
from remote_agent.protocol.keys import (
    ALIASES,
    CANONICAL_NAMES,
    KeyCode,
    SYMBOLS,
    _build_table,
    is_special,
    lookup,
    name_for,
    resolve,
)


class TestLookup:
    """Tests for name -> KeyCode lookup."""

    def test_case_insensitive(self):
        """Test that lookup ignores case."""
        assert lookup("SHIFT") == lookup("shift") == lookup("Shift")
        assert lookup("a") == lookup("A") == KeyCode.A

    def test_idempotent_for_every_symbol(self):
        """Test that every known name resolves the same way twice and in upper case."""
        for name, code in SYMBOLS.items():
            assert lookup(name) == code
            assert lookup(name) == lookup(name)
            assert lookup(name.upper()) == code

    def test_sideless_modifiers_resolve_left(self):
        """Test that modifiers without a side resolve to the left key."""
        assert lookup("shift") == KeyCode.SHIFT_LEFT
        assert lookup("ctrl") == KeyCode.CONTROL_LEFT
        assert lookup("control") == KeyCode.CONTROL_LEFT
        assert lookup("option") == KeyCode.OPTION_LEFT
        assert lookup("alt") == KeyCode.OPTION_LEFT
        assert lookup("command") == KeyCode.COMMAND_LEFT
        assert lookup("cmd") == KeyCode.COMMAND_LEFT

    def test_sided_modifiers(self):
        """Test that explicit sides are honoured."""
        assert lookup("shiftright") == KeyCode.SHIFT_RIGHT
        assert lookup("Shift (Right)") == KeyCode.SHIFT_RIGHT
        assert lookup("commandright") == KeyCode.COMMAND_RIGHT

    def test_coverage(self):
        """Test the families of keys the table must cover."""
        for n in range(1, 21):
            assert lookup(f"f{n}") == KeyCode[f"F{n}"]
        for d in "0123456789":
            assert lookup(d) == KeyCode[f"DIGIT_{d}"]
            assert lookup(f"keypad {d}") == KeyCode[f"KEYPAD_{d}"]
        assert lookup("caps lock") == KeyCode.CAPS_LOCK
        assert lookup("fn") == KeyCode.FN
        assert lookup("enter") == KeyCode.RETURN
        assert lookup("page down") == KeyCode.PAGE_DOWN

    def test_unknown_is_none(self):
        """Test that unknown names are a lookup failure, not a default."""
        assert lookup("hyper") is None
        assert lookup("") is None


class TestResolve:
    """Tests for resolve()."""

    def test_resolve_known(self):
        """Test resolving a known name."""
        assert resolve("return") == KeyCode.RETURN

    def test_resolve_unknown_names_token(self):
        """Test that UnknownKey carries the offending token and tag."""
        with pytest.raises(UnknownKey) as exc_info:
            resolve("hyper", "press")
        assert exc_info.value.token == "hyper"
        assert exc_info.value.tag == "press"


class TestInverse:
    """Tests for KeyCode -> name."""

    def test_every_code_has_a_name(self):
        """Test that the inverse table is total."""
        for code in KeyCode:
            assert name_for(code)

    def test_round_trip(self):
        """Test that a canonical name looks up to the code it came from."""
        for code in KeyCode:
            assert lookup(name_for(code)) == code

    def test_special(self):
        """Test printable vs special classification."""
        assert not is_special(KeyCode.A)
        assert not is_special(KeyCode.COMMA)
        assert is_special(KeyCode.RETURN)
        assert is_special(KeyCode.SHIFT_LEFT)


class TestTableBuild:
    """Tests for the collision check."""

    def test_aliases_are_lower_case(self):
        """Test that aliases are stored lower-case."""
        assert all(alias == alias.lower() for alias in ALIASES)

    def test_no_collisions(self):
        """Test that canonical names and aliases never disagree."""
        table = _build_table(
            [(name, code) for code, name in CANONICAL_NAMES.items()] + list(ALIASES.items())
        )
        assert table == SYMBOLS

    def test_collision_raises(self):
        """Test that two codes under one name are rejected."""
        with pytest.raises(ValueError):
            _build_table([("x", KeyCode.X), ("X", KeyCode.A)])
