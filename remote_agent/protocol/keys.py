"""
Key symbol table.

Maps human-readable key names to ``KeyCode`` values and back. The same table
is used to decode inbound commands and to encode observed input for
telemetry, so both directions always agree on what a name means.

Lookup is case-insensitive. Names that do not say which side of the keyboard
a modifier sits on (``shift``, ``ctrl``, ``option``, ``command`` and their
aliases) resolve to the LEFT key.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Dict, Iterable, Optional, Tuple

from remote_agent.protocol.errors import UnknownKey


class KeyCode(IntEnum):
    """
    Platform-neutral key identifier.

    Values follow the macOS virtual key numbering; backends treat them as
    opaque and translate to their own key names.
    """
    A = 0
    S = 1
    D = 2
    F = 3
    H = 4
    G = 5
    Z = 6
    X = 7
    C = 8
    V = 9
    SECTION = 10
    B = 11
    Q = 12
    W = 13
    E = 14
    R = 15
    Y = 16
    T = 17
    DIGIT_1 = 18
    DIGIT_2 = 19
    DIGIT_3 = 20
    DIGIT_4 = 21
    DIGIT_6 = 22
    DIGIT_5 = 23
    EQUAL = 24
    DIGIT_9 = 25
    DIGIT_7 = 26
    MINUS = 27
    DIGIT_8 = 28
    DIGIT_0 = 29
    RIGHT_BRACKET = 30
    O = 31
    U = 32
    LEFT_BRACKET = 33
    I = 34
    P = 35
    RETURN = 36
    L = 37
    J = 38
    QUOTE = 39
    K = 40
    SEMICOLON = 41
    BACKSLASH = 42
    COMMA = 43
    SLASH = 44
    N = 45
    M = 46
    PERIOD = 47
    TAB = 48
    SPACE = 49
    GRAVE = 50
    DELETE = 51
    ESCAPE = 53
    COMMAND_RIGHT = 54
    COMMAND_LEFT = 55
    SHIFT_LEFT = 56
    CAPS_LOCK = 57
    OPTION_LEFT = 58
    CONTROL_LEFT = 59
    SHIFT_RIGHT = 60
    OPTION_RIGHT = 61
    CONTROL_RIGHT = 62
    FN = 63
    F17 = 64
    KEYPAD_DECIMAL = 65
    KEYPAD_MULTIPLY = 67
    KEYPAD_PLUS = 69
    KEYPAD_CLEAR = 71
    KEYPAD_DIVIDE = 75
    KEYPAD_ENTER = 76
    KEYPAD_MINUS = 78
    F18 = 79
    F19 = 80
    KEYPAD_EQUALS = 81
    KEYPAD_0 = 82
    KEYPAD_1 = 83
    KEYPAD_2 = 84
    KEYPAD_3 = 85
    KEYPAD_4 = 86
    KEYPAD_5 = 87
    KEYPAD_6 = 88
    KEYPAD_7 = 89
    F20 = 90
    KEYPAD_8 = 91
    KEYPAD_9 = 92
    F5 = 96
    F6 = 97
    F7 = 98
    F3 = 99
    F8 = 100
    F9 = 101
    F11 = 103
    F13 = 105
    F16 = 106
    F14 = 107
    F10 = 109
    F12 = 111
    F15 = 113
    HELP = 114
    HOME = 115
    PAGE_UP = 116
    FORWARD_DELETE = 117
    F4 = 118
    END = 119
    F2 = 120
    PAGE_DOWN = 121
    F1 = 122
    LEFT_ARROW = 123
    RIGHT_ARROW = 124
    DOWN_ARROW = 125
    UP_ARROW = 126


# Canonical display names, also used as telemetry key names.
CANONICAL_NAMES: Dict[KeyCode, str] = {
    **{KeyCode[letter]: letter for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ"},
    **{KeyCode[f"DIGIT_{d}"]: d for d in "0123456789"},
    KeyCode.EQUAL: "=",
    KeyCode.MINUS: "-",
    KeyCode.LEFT_BRACKET: "[",
    KeyCode.RIGHT_BRACKET: "]",
    KeyCode.QUOTE: "'",
    KeyCode.SEMICOLON: ";",
    KeyCode.BACKSLASH: "\\",
    KeyCode.COMMA: ",",
    KeyCode.PERIOD: ".",
    KeyCode.SLASH: "/",
    KeyCode.GRAVE: "`",
    KeyCode.SECTION: "§",
    **{KeyCode[f"F{n}"]: f"F{n}" for n in range(1, 21)},
    KeyCode.LEFT_ARROW: "Left Arrow",
    KeyCode.RIGHT_ARROW: "Right Arrow",
    KeyCode.DOWN_ARROW: "Down Arrow",
    KeyCode.UP_ARROW: "Up Arrow",
    KeyCode.HOME: "Home",
    KeyCode.END: "End",
    KeyCode.PAGE_UP: "Page Up",
    KeyCode.PAGE_DOWN: "Page Down",
    KeyCode.DELETE: "Delete",
    KeyCode.FORWARD_DELETE: "Forward Delete",
    KeyCode.RETURN: "Return",
    KeyCode.TAB: "Tab",
    KeyCode.SPACE: "Space",
    KeyCode.ESCAPE: "Escape",
    KeyCode.HELP: "Help",
    KeyCode.KEYPAD_DECIMAL: "Keypad Decimal",
    KeyCode.KEYPAD_MULTIPLY: "Keypad Multiply",
    KeyCode.KEYPAD_PLUS: "Keypad Plus",
    KeyCode.KEYPAD_CLEAR: "Keypad Clear",
    KeyCode.KEYPAD_DIVIDE: "Keypad Divide",
    KeyCode.KEYPAD_ENTER: "Keypad Enter",
    KeyCode.KEYPAD_MINUS: "Keypad Minus",
    KeyCode.KEYPAD_EQUALS: "Keypad Equals",
    **{KeyCode[f"KEYPAD_{d}"]: f"Keypad {d}" for d in "0123456789"},
    KeyCode.SHIFT_LEFT: "Shift (Left)",
    KeyCode.SHIFT_RIGHT: "Shift (Right)",
    KeyCode.CONTROL_LEFT: "Control (Left)",
    KeyCode.CONTROL_RIGHT: "Control (Right)",
    KeyCode.OPTION_LEFT: "Option (Left)",
    KeyCode.OPTION_RIGHT: "Option (Right)",
    KeyCode.COMMAND_LEFT: "Command (Left)",
    KeyCode.COMMAND_RIGHT: "Command (Right)",
    KeyCode.FN: "Fn",
    KeyCode.CAPS_LOCK: "Caps Lock",
}

# Extra spellings accepted on input. Lower-case only.
ALIASES: Dict[str, KeyCode] = {
    "enter": KeyCode.RETURN,
    "backspace": KeyCode.DELETE,
    "forwarddelete": KeyCode.FORWARD_DELETE,
    "del": KeyCode.FORWARD_DELETE,
    "esc": KeyCode.ESCAPE,
    "left": KeyCode.LEFT_ARROW,
    "right": KeyCode.RIGHT_ARROW,
    "up": KeyCode.UP_ARROW,
    "down": KeyCode.DOWN_ARROW,
    "pageup": KeyCode.PAGE_UP,
    "pagedown": KeyCode.PAGE_DOWN,
    "capslock": KeyCode.CAPS_LOCK,
    "function": KeyCode.FN,
    "minus": KeyCode.MINUS,
    "equal": KeyCode.EQUAL,
    "comma": KeyCode.COMMA,
    "period": KeyCode.PERIOD,
    "slash": KeyCode.SLASH,
    "backslash": KeyCode.BACKSLASH,
    "semicolon": KeyCode.SEMICOLON,
    "quote": KeyCode.QUOTE,
    "grave": KeyCode.GRAVE,
    "section": KeyCode.SECTION,
    # Side-less modifiers resolve to the left key.
    "shift": KeyCode.SHIFT_LEFT,
    "shiftleft": KeyCode.SHIFT_LEFT,
    "shiftright": KeyCode.SHIFT_RIGHT,
    "ctrl": KeyCode.CONTROL_LEFT,
    "control": KeyCode.CONTROL_LEFT,
    "ctrlleft": KeyCode.CONTROL_LEFT,
    "ctrlright": KeyCode.CONTROL_RIGHT,
    "option": KeyCode.OPTION_LEFT,
    "alt": KeyCode.OPTION_LEFT,
    "optionleft": KeyCode.OPTION_LEFT,
    "altleft": KeyCode.OPTION_LEFT,
    "optionright": KeyCode.OPTION_RIGHT,
    "altright": KeyCode.OPTION_RIGHT,
    "command": KeyCode.COMMAND_LEFT,
    "cmd": KeyCode.COMMAND_LEFT,
    "meta": KeyCode.COMMAND_LEFT,
    "commandleft": KeyCode.COMMAND_LEFT,
    "commandright": KeyCode.COMMAND_RIGHT,
    "cmdright": KeyCode.COMMAND_RIGHT,
}

MODIFIERS = frozenset({
    KeyCode.SHIFT_LEFT, KeyCode.SHIFT_RIGHT,
    KeyCode.CONTROL_LEFT, KeyCode.CONTROL_RIGHT,
    KeyCode.OPTION_LEFT, KeyCode.OPTION_RIGHT,
    KeyCode.COMMAND_LEFT, KeyCode.COMMAND_RIGHT,
    KeyCode.FN, KeyCode.CAPS_LOCK,
})

# Keys that produce a printable character; everything else is "special".
PRINTABLE = frozenset(
    code for code, name in CANONICAL_NAMES.items() if len(name) == 1
)


def _build_table(entries: Iterable[Tuple[str, KeyCode]]) -> Dict[str, KeyCode]:
    table: Dict[str, KeyCode] = {}
    for name, code in entries:
        key = name.lower()
        existing = table.get(key)
        if existing is not None and existing != code:
            raise ValueError(
                f"Key name {key!r} maps to both {existing.name} and {code.name}"
            )
        table[key] = code
    return table


SYMBOLS: Dict[str, KeyCode] = _build_table(
    [(name, code) for code, name in CANONICAL_NAMES.items()]
    + list(ALIASES.items())
)


def lookup(name: str) -> Optional[KeyCode]:
    """Return the KeyCode for ``name`` (case-insensitive), or None."""
    return SYMBOLS.get(name.lower())


def resolve(name: str, tag: Optional[str] = None) -> KeyCode:
    """
    Return the KeyCode for ``name``.

    Raises:
        UnknownKey: if the name is not in the table
    """
    code = lookup(name)
    if code is None:
        raise UnknownKey(name, tag)
    return code


def name_for(code: KeyCode) -> str:
    """Canonical name for a key code."""
    return CANONICAL_NAMES[KeyCode(code)]


def is_special(code: KeyCode) -> bool:
    """True for keys that do not produce a printable character."""
    return code not in PRINTABLE
