"""Path parameter converters.

``{id:int}`` in a route path selects the ``int`` converter: its pattern
decides what the trie accepts, its type converts the captured text.
"""

import re

# converter name -> (segment pattern, python type)
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured segment to the converter's type.

    Raises ``KeyError`` for an unknown converter name.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)


def format_param(value: object, param_type: str) -> str:
    """Render a value for a path segment, checking it against the converter.

    Raises ``ValueError`` if the rendered text would not match the route.
    """
    pattern, _ = CONVERTERS[param_type]
    text = str(value)
    if not re.fullmatch(pattern, text):
        msg = f"{text!r} is not a valid {param_type!r} path parameter"
        raise ValueError(msg)
    return text
