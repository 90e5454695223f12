"""Symbol table: the literal delimiters that make up the macro syntax.

A ``MacroSymbols`` value is copied into every ``MacroInt`` at construction
time, so changing ``DEFAULT_SYMBOLS`` (or passing other ``defaults``) only
affects interpolators created afterwards.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Union

from macroint.util import MacroIntError


class InvalidSymbolError(MacroIntError, ValueError):
    """Raised when a symbol override is unknown, empty or not a string."""
    pass


# camelCase names used by other implementations of the same syntax
_ALIASES = {
    'macroBegin': 'macro_begin',
    'macroEnd': 'macro_end',
    'modifierSeparator': 'modifier_separator',
    'modifierParamSeparator': 'modifier_param_separator',
    'propertyPathIndicator': 'property_path_indicator',
    'siblingsTemplateKey': 'siblings_template_key',
    'resultForUndefinedValues': 'undefined_marker',
}


@dataclass
class MacroSymbols:
    """Delimiters used to recognize the parts of a macro.

    Examples:
        >>> symbols = MacroSymbols()
        >>> symbols.macro_begin, symbols.macro_end
        ('${', '}')
        >>> MacroSymbols().overlay({'macroBegin': '{{', 'macro_end': '}}'}).macro_begin
        '{{'
    """

    macro_begin: str = '${'
    macro_end: str = '}'
    modifier_separator: str = '|'
    modifier_param_separator: str = ':'
    property_path_indicator: str = '^'
    siblings_template_key: str = '$template'
    undefined_marker: str = '$$-undefined-$$'

    def overlay(
        self,
        overrides: Union['MacroSymbols', Mapping[str, Any], None] = None
    ) -> 'MacroSymbols':
        """Return a copy of these symbols with ``overrides`` applied.

        Args:
            overrides: Another ``MacroSymbols`` or a mapping of field names
                (snake_case or the camelCase aliases) to new symbol strings

        Returns:
            New ``MacroSymbols`` instance

        Raises:
            InvalidSymbolError: If a name is unknown or a value is not a
                non-empty string
        """
        if overrides is None:
            return replace(self)
        if isinstance(overrides, MacroSymbols):
            overrides = overrides.as_dict()

        known = {f.name for f in fields(self)}
        changes: Dict[str, str] = {}
        for name, value in overrides.items():
            field_name = _ALIASES.get(name, name)
            if field_name not in known:
                raise InvalidSymbolError(f"Unknown macro symbol: {name!r}")
            if not isinstance(value, str) or not value:
                raise InvalidSymbolError(
                    f"Macro symbol {name!r} must be a non-empty string, got {value!r}"
                )
            changes[field_name] = value
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, str]:
        """Return the symbols as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_SYMBOLS = MacroSymbols()
