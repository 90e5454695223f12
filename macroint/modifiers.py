"""Modifiers: named post-processing steps applied to a macro's value.

A modifier is registered under one or more case-insensitive aliases and
called as ``callback(macro_int, value, params)``, where ``params`` is the
text after the modifier-parameter separator (or None). The return value
becomes the macro's new value and is passed to the next modifier.

Pre-defined modifiers:

    mandatory / -m               record an error if the value is undefined
    default / -d:<key>           replace an undefined value by <key>'s value
    upper / -u, lower / -l       change the case of text values
    emptyArray / -ea             [] for undefined, [value] otherwise
    toNumber / toNum / -tn[:<n>] convert to a number, <n> on failure
    toBoolean / toBool / -tb     "false", "0" and "" are False

Examples:
    >>> from macroint import MacroInt
    >>> mi = MacroInt({'name': 'MacroInt', 'foo': 'Bar'})
    >>> mi.resolve('${name | upper}')
    'MACROINT'
    >>> mi.resolve("${xxx | default: 'unknown'}")
    'unknown'
    >>> mi.resolve("${foo1 | -d:foo | -d:'not found' | lower}")
    'bar'
"""

import logging
import math
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Union
from collections.abc import Mapping

from macroint.util import MacroIntError

logger = logging.getLogger(__name__)

ModifierCallback = Callable[[Any, Any, Optional[str]], Any]


class ModifierRegistrationError(MacroIntError):
    """Raised when a modifier alias is already registered."""
    pass


def _as_names(names: Union[str, Iterable[str]]) -> list:
    return [names] if isinstance(names, str) else list(names)


class ModifierRegistry(Mapping):
    """Case-insensitive mapping of modifier aliases to callbacks.

    Examples:
        >>> registry = ModifierRegistry()
        >>> registry.register(['Reverse', '-r'], lambda mi, value, params: value[::-1])
        ModifierRegistry(['reverse', '-r'])
        >>> registry['REVERSE'](None, 'olleH', None)
        'Hello'
        >>> registry.unregister(['reverse', '-r', 'unknown'])
        True
        >>> registry.unregister('reverse')
        False
    """

    def __init__(self, modifiers: Optional[Dict[str, ModifierCallback]] = None):
        self._modifiers: Dict[str, ModifierCallback] = {}
        for name, callback in (modifiers or {}).items():
            self.register(name, callback)

    def __getitem__(self, name: str) -> ModifierCallback:
        return self._modifiers[name.lower()]

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._modifiers

    def __iter__(self) -> Iterator[str]:
        return iter(self._modifiers)

    def __len__(self) -> int:
        return len(self._modifiers)

    def __repr__(self) -> str:
        return f"ModifierRegistry({list(self._modifiers)!r})"

    def register(
        self,
        names: Union[str, Iterable[str]],
        callback: ModifierCallback
    ) -> 'ModifierRegistry':
        """Register ``callback`` under every alias in ``names``.

        Aliases are registered one after the other, so the aliases before a
        conflicting one remain registered when the error is raised.

        Args:
            names: A single alias or an iterable of aliases
            callback: Called as ``callback(macro_int, value, params)``

        Returns:
            The registry itself (chainable)

        Raises:
            TypeError: If callback is not callable
            ModifierRegistrationError: If an alias is already registered
        """
        words = _as_names(names)
        if not callable(callback):
            raise TypeError("Invalid callback-parameter. Callback must be a function.")

        for word in words:
            key = word.lower()
            if key in self._modifiers:
                raise ModifierRegistrationError(
                    f'Error in Modifiers.register("{",".join(words)}"). '
                    f'The name "{key}" is already registered.'
                )
            self._modifiers[key] = callback
        logger.debug("Registered modifier %s", words)
        return self

    def unregister(self, names: Union[str, Iterable[str]]) -> bool:
        """Remove every alias in ``names``; unknown aliases are ignored.

        To remove a modifier completely every alias it was registered with
        has to be removed.

        Returns:
            True if at least one alias was removed
        """
        removed = False
        for word in _as_names(names):
            if self._modifiers.pop(word.lower(), None) is not None:
                removed = True
        if removed:
            logger.debug("Unregistered modifier %s", names)
        return removed

    def copy(self) -> 'ModifierRegistry':
        """Return an independent registry with the same aliases."""
        registry = ModifierRegistry()
        registry._modifiers = dict(self._modifiers)
        return registry


# ---------------------------------------------------------------------------
# Pre-defined modifiers


def mandatory(macro_int, value, params=None):
    """Record an error if ``value`` is undefined; the value is returned as is."""
    if value is None:
        macro_int.add_error("Undefined result for mandatory expression.")
    return value


def default(macro_int, value, params=None):
    """Replace an undefined value by the value of the ``params`` macro-key.

    The key is always resolved so that a constant followed by another
    default is noticed even when the value is already defined.
    """
    default_value = macro_int.get_value(params)
    if value is None:
        if default_value is None and params and macro_int.report_skipped_defaults:
            macro_int.add_error(f'Unresolved default "{params}" for modifier default.')
        value = default_value
    return value


def upper(macro_int, value, params=None):
    """Upper-case text values; other values pass through.

    Examples:
        >>> upper(None, 'abc'), upper(None, 1)
        ('ABC', 1)
    """
    return value.upper() if isinstance(value, str) else value


def lower(macro_int, value, params=None):
    """Lower-case text values; other values pass through."""
    return value.lower() if isinstance(value, str) else value


def empty_array(macro_int, value, params=None):
    """Wrap ``value`` in a list, or return ``[]`` if it is undefined.

    Only valid when the macro is the whole expression, since a list can't be
    inserted into text. Otherwise an error is recorded and ``value`` is
    returned unchanged.
    """
    if macro_int.is_one_macro():
        return [] if value is None else [value]
    macro_int.add_error(
        "'emptyArray'-Modifier can only be used if the whole expression is a macro."
    )
    return value


def to_number(value: Any) -> Optional[Union[int, float]]:
    """Convert ``value`` to an int or float, or return None.

    Examples:
        >>> to_number('123'), to_number(' 1.5 '), to_number(''), to_number(True)
        (123, 1.5, 0, 1)
        >>> to_number('x123') is None, to_number('nan') is None
        (True, True)
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def to_number_modifier(macro_int, value, params=None):
    """Convert ``value`` to a number.

    If that fails the literal ``params`` text is converted instead. If that
    fails too (or there is no parameter) an error is recorded and 0 returned.
    """
    number = to_number(value)
    if number is None and params is not None:
        number = to_number(params)
    if number is None:
        macro_int.add_error(
            f'modifier toNumber: Unable to convert the macro-value "{value}" to a number.'
        )
        return 0
    return number


def to_boolean(macro_int, value, params=None):
    """Convert ``value`` to a bool.

    Text is False for ``""``, ``"0"`` and any casing of ``"false"``; other
    values use Python truthiness.

    Examples:
        >>> to_boolean(None, 'False'), to_boolean(None, 'no'), to_boolean(None, 0)
        (False, True, False)
    """
    if isinstance(value, str):
        return value.lower() != 'false' and value != '0' and bool(value)
    return bool(value)


BUILTIN_MODIFIERS = [
    (['mandatory', '-m'], mandatory),
    (['default', '-d'], default),
    (['upper', '-u'], upper),
    (['lower', '-l'], lower),
    (['emptyArray', '-ea'], empty_array),
    (['toNumber', 'toNum', '-tn'], to_number_modifier),
    (['toBoolean', 'toBool', '-tb'], to_boolean),
]


def builtin_registry() -> ModifierRegistry:
    """Return a new registry holding only the pre-defined modifiers."""
    registry = ModifierRegistry()
    for names, callback in BUILTIN_MODIFIERS:
        registry.register(names, callback)
    return registry


# Shared by all MacroInt instances that don't get their own registry
default_registry = builtin_registry()


def register_modifier(
    names: Union[str, Iterable[str]],
    callback: ModifierCallback
) -> ModifierRegistry:
    """Register a modifier in the shared ``default_registry``.

    Examples:
        >>> from macroint import MacroInt
        >>> _ = register_modifier(['reverse', '-r'], lambda mi, value, params: value[::-1])
        >>> MacroInt({'macro': 'Hello'}).resolve('${macro | -r}')
        'olleH'
        >>> unregister_modifier(['reverse', '-r'])
        True
    """
    return default_registry.register(names, callback)


def unregister_modifier(names: Union[str, Iterable[str]]) -> bool:
    """Remove aliases from the shared ``default_registry``."""
    return default_registry.unregister(names)
