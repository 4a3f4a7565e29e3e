"""Key names to Input.dispatchKeyEvent parameters."""

from typing import Dict, List, Tuple

# name -> (key, code, windowsVirtualKeyCode, text)
SPECIAL_KEYS: Dict[str, Tuple[str, str, int, str]] = {
    "enter": ("Enter", "Enter", 13, "\r"),
    "tab": ("Tab", "Tab", 9, ""),
    "escape": ("Escape", "Escape", 27, ""),
    "esc": ("Escape", "Escape", 27, ""),
    "backspace": ("Backspace", "Backspace", 8, ""),
    "delete": ("Delete", "Delete", 46, ""),
    "arrowup": ("ArrowUp", "ArrowUp", 38, ""),
    "arrowdown": ("ArrowDown", "ArrowDown", 40, ""),
    "arrowleft": ("ArrowLeft", "ArrowLeft", 37, ""),
    "arrowright": ("ArrowRight", "ArrowRight", 39, ""),
    "home": ("Home", "Home", 36, ""),
    "end": ("End", "End", 35, ""),
    "pageup": ("PageUp", "PageUp", 33, ""),
    "pagedown": ("PageDown", "PageDown", 34, ""),
    "space": (" ", "Space", 32, " "),
}


def key_events(name: str) -> List[dict]:
    """keyDown + keyUp params for a named key or a single character.

    Unknown multi-character names are passed through as the DOM `key`
    value, which is enough for pages listening on keydown.
    """
    special = SPECIAL_KEYS.get(name.lower())
    if special:
        key, code, vk, text = special
        down = {
            "type": "keyDown",
            "key": key,
            "code": code,
            "windowsVirtualKeyCode": vk,
            "nativeVirtualKeyCode": vk,
        }
        if text:
            down["text"] = text
        up = {
            "type": "keyUp",
            "key": key,
            "code": code,
            "windowsVirtualKeyCode": vk,
            "nativeVirtualKeyCode": vk,
        }
        return [down, up]

    if len(name) == 1:
        return char_events(name)

    return [{"type": "keyDown", "key": name}, {"type": "keyUp", "key": name}]


def char_events(char: str) -> List[dict]:
    """Events that insert one character into the focused element."""
    if char == "\n":
        return key_events("enter")
    return [
        {"type": "keyDown", "key": char, "text": char, "unmodifiedText": char},
        {"type": "keyUp", "key": char},
    ]
