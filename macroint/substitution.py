"""The macro scanner: finds, resolves and splices macros in a string.

This module provides the core interpolation of macroint. The expression is
scanned once from left to right, character by character, instead of using a
regular expression, so that macros can be nested (a macro key built from
other macros), characters can be escaped with a backslash, and the result of
a macro can itself contain macros which are scanned again.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

ESCAPE = '\\'


@dataclass
class FoundModifier:
    """A modifier found in a macro: its name and optional parameter text."""

    name: str
    params: Optional[str] = None


@dataclass
class MacroFrame:
    """State of one (possibly nested) macro while it is being scanned.

    ``start`` is the index of the macro-begin symbol, ``part_start`` the
    index where the part currently being read begins. ``key`` stays None
    until the first part (the macro key) is complete.
    """

    start: int
    part_start: int
    key: Optional[str] = None
    modifiers: List[FoundModifier] = field(default_factory=list)

    def append_part(self, expression: str, index: int, symbol_length: int, param_separator: str):
        """Close the part ending at ``index`` and start the next one after the symbol."""
        part = expression[self.part_start:index].strip()
        if self.key is None:
            self.key = part
        elif part:
            name, found, params = part.partition(param_separator)
            self.modifiers.append(
                FoundModifier(name.strip(), params.strip() if found else None)
            )
        self.part_start = index + symbol_length


def longest_match(expression: str, index: int, *symbols: str) -> Optional[str]:
    """Return the longest of ``symbols`` found at ``index``, or None.

    Examples:
        >>> longest_match("x|}", 1, "|", "|}"), longest_match("x", 0, "|") is None
        ('|}', True)
    """
    found = None
    for symbol in symbols:
        if expression.startswith(symbol, index) and (found is None or len(symbol) > len(found)):
            found = symbol
    return found


def stringify(value: Any, undefined_marker: str) -> str:
    """Convert a macro value for insertion into surrounding text.

    Examples:
        >>> stringify(None, '<undefined>'), stringify(42, ''), stringify('x', '')
        ('<undefined>', '42', 'x')
    """
    if value is None:
        return undefined_marker
    if isinstance(value, str):
        return value
    return str(value)


def interpolate(macro_int, expression: str) -> Any:
    """Resolve every macro in ``expression``.

    If the whole expression is exactly one macro its value is returned with
    its type preserved; otherwise every macro value is converted to text and
    inserted in place of the macro.

    Args:
        macro_int: The ``MacroInt`` providing repositories, modifiers,
            symbols and error bookkeeping
        expression: The text to interpolate

    Returns:
        The interpolated text, or the raw value of a whole-expression macro

    Examples:
        >>> from macroint import MacroInt
        >>> mi = MacroInt({'ab': 'X', 'n': 7})
        >>> interpolate(mi, "${${'a'}${'b'}}")
        'X'
        >>> interpolate(mi, '${n}'), interpolate(mi, '[${n}]')
        (7, '[7]')
        >>> interpolate(mi, '\\\\${n} ${n')
        '${n} ${n'
    """
    macro_int._complete_expression = expression
    macro_int._current_expression = None

    symbols = macro_int.symbols
    begin = symbols.macro_begin
    end = symbols.macro_end
    separator = symbols.modifier_separator
    param_separator = symbols.modifier_param_separator

    stack: List[MacroFrame] = []
    frame: Optional[MacroFrame] = None
    index = 0

    try:
        while index < len(expression):
            char = expression[index]
            # the longer symbol wins when separator and end share a prefix
            closing = longest_match(expression, index, separator, end) if frame is not None else None

            if char == ESCAPE:
                # drop the escape character; the loop increment skips the escaped one
                expression = expression[:index] + expression[index + 1:]

            elif closing == separator:
                frame.append_part(expression, index, len(separator), param_separator)
                index += len(separator) - 1

            elif expression.startswith(begin, index):
                if frame is not None:
                    stack.append(frame)
                frame = MacroFrame(start=index, part_start=index + len(begin))
                index = frame.part_start - 1

            elif closing == end:
                frame.append_part(expression, index, len(end), param_separator)
                macro_end = frame.part_start

                macro_int._current_expression = expression[frame.start:macro_end]
                macro_int._is_one_macro = macro_int._current_expression == expression
                macro_int._has_constant = False

                value = macro_int.get_value(frame.key)
                value = macro_int.exec_modifiers(frame.modifiers, value)

                if value is None and not macro_int.allow_undefined:
                    # keep the macro text
                    macro_int.add_error("macro-value is undefined.")
                    index = macro_end - 1
                elif macro_int._is_one_macro:
                    return value
                else:
                    text = stringify(value, symbols.undefined_marker)
                    expression = expression[:frame.start] + text + expression[macro_end:]
                    # scan the inserted text again if it contains a macro
                    if begin in text:
                        index = frame.start - 1
                    else:
                        index = frame.start + len(text) - 1

                frame = stack.pop() if stack else None

            index += 1
    finally:
        macro_int._current_expression = None

    return expression
