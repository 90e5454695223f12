"""Core class of macroint: the MacroInt interpolator.

This module implements the pattern ``result = MacroInt(repositories).resolve(expression)``
where ``expression`` is a string or a dict/list structure containing
``${...}`` macros.

A macro is made of a macro-key and optional modifiers:

    ${key | modifier | modifier: parameter}

The macro-key is one of:

1. A key that is searched in the repositories (dotted keys walk into nested
   mappings). If no repository has the key the value is undefined (None).
2. A string enclosed in one of the delimiters ``"``, ``'`` or `````. Its
   content is returned as is, which is useful for defaults.
3. The property-path indicator ``^`` followed by an integer. It returns a
   key of the property path leading to the value being resolved.

Errors found while resolving are collected in ``MacroInt.errors``. By
default they are raised together as one ``ResolveError`` at the end of
``resolve``; with ``throw_errors=False`` the caller checks ``errors`` itself
and the list keeps growing until it is cleared.

A ``MacroInt`` instance resolves one expression at a time. Modifier and
repository callbacks run synchronously inside ``resolve`` and may call
``get_value`` on the instance, but two ``resolve`` calls must not run
interleaved on the same instance.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from macroint.modifiers import (
    ModifierCallback,
    ModifierRegistry,
    default_registry,
)
from macroint.paths import InvalidPathError, PropertyPath
from macroint.repositories import Repository, find_value
from macroint.substitution import FoundModifier, interpolate
from macroint.symbols import DEFAULT_SYMBOLS, MacroSymbols
from macroint.traversal import OptionsError, TreeWalker, validate_options
from macroint.util import MacroIntError, is_container

logger = logging.getLogger(__name__)

QUOTES = ('"', "'", '`')


class ResolveError(MacroIntError):
    """Raised at the end of ``resolve`` when errors were recorded.

    Attributes:
        errors: The recorded error messages
    """

    def __init__(self, message: str, errors: Iterable[str] = ()):
        super().__init__(message)
        self.errors = list(errors)


class MacroInt:
    """Interpolate macros in strings, dict values and list elements.

    Examples:
        >>> mi = MacroInt({'what': 'Universe', 'number': 42, 'bar': '12345'})
        >>> mi.resolve('Hello ${what}! The answer is ${number}.')
        'Hello Universe! The answer is 42.'
        >>> mi.resolve('${number}')
        42
        >>> config = {'child': {'baz': "${bar | default: '-1' | toNumber}"}}
        >>> mi.resolve(config)
        {'child': {'baz': 12345}}
    """

    def __init__(
        self,
        repositories: Union[Repository, List[Repository], None] = None,
        *,
        throw_errors: bool = True,
        allow_undefined: bool = True,
        symbols: Union[MacroSymbols, Mapping[str, str], None] = None,
        defaults: Optional[MacroSymbols] = None,
        registry: Optional[ModifierRegistry] = None,
        report_skipped_defaults: Optional[bool] = None
    ):
        """Initialize a MacroInt.

        Args:
            repositories: A repository or a list of repositories
            throw_errors: If True, raise a ``ResolveError`` at the end of
                ``resolve`` when errors were recorded
            allow_undefined: If False, an undefined macro value is an error
                and the macro is left in the text
            symbols: Symbols overriding some or all of ``defaults``
            defaults: Base symbols (``DEFAULT_SYMBOLS`` if not given)
            registry: Modifier registry (the shared ``default_registry`` if
                not given)
            report_skipped_defaults: If True, a ``default`` modifier whose key
                can't be resolved records an error. None means "only when
                ``throw_errors`` is False".
        """
        self._repositories: List[Repository] = []
        if repositories is not None:
            self.register_repository(repositories)

        self.symbols = (defaults or DEFAULT_SYMBOLS).overlay(symbols)
        self.modifiers = default_registry if registry is None else registry
        self.throw_errors = bool(throw_errors)
        self.allow_undefined = bool(allow_undefined)
        self._report_skipped_defaults = report_skipped_defaults

        self.errors: List[str] = []

        self._complete_expression: Optional[str] = None
        self._current_expression: Optional[str] = None
        self._is_one_macro = False
        self._has_constant = False
        self._property_path = PropertyPath()

    @property
    def property_path(self) -> PropertyPath:
        """Keys from the root of the resolved structure to the current value."""
        return self._property_path

    @property_path.setter
    def property_path(self, parts: Iterable[Any]):
        self._property_path = PropertyPath(parts)

    @property
    def report_skipped_defaults(self) -> bool:
        if self._report_skipped_defaults is None:
            return not self.throw_errors
        return self._report_skipped_defaults

    @property
    def repositories(self) -> List[Repository]:
        return list(self._repositories)

    def _interpolate(self, expression: str) -> Any:
        return interpolate(self, expression)

    def exec_modifiers(self, found_modifiers: Iterable[FoundModifier], value: Any) -> Any:
        """Apply the modifiers found in a macro to ``value``, in order."""
        for found in found_modifiers:
            callback = self.modifiers.get(found.name)
            if callback is None:
                self.add_error(f'Unknown modifier "{found.name}"')
            else:
                value = callback(self, value, found.params)
        return value

    def resolve(self, expression: Any, options: Optional[Mapping[str, Any]] = None) -> Any:
        """Interpolate the macros in ``expression``.

        Strings are interpolated and the result returned. Dicts and lists are
        resolved in place and returned; other values are returned unchanged.

        Args:
            expression: String with macros or a dict/list structure
            options: Only for dicts/lists. ``exclude``: property names that
                are skipped at any level. ``include``: list of
                ``{'path': ..., 'property': ...}``; only ``property`` is
                processed in the container at the dotted ``path``.

        Returns:
            The resolved string or value, or the given dict/list

        Raises:
            OptionsError: If options are given with a string or contain
                unknown names
            ResolveError: If ``throw_errors`` is True and errors were recorded
        """
        if self.throw_errors:
            del self.errors[:]

        if is_container(expression):
            walker = TreeWalker(self, **validate_options(options))
            walker.walk(expression)
        elif isinstance(expression, str):
            if options is not None:
                raise OptionsError("resolve: options are only valid with object-parameters.")
            expression = self._interpolate(expression)

        if self.errors:
            logger.debug("Resolved with %d error(s)", len(self.errors))
            if self.throw_errors:
                raise ResolveError(self.format_errors(), self.errors)
        return expression

    def get_value(self, macro_key: Optional[str]) -> Any:
        """Return the value for ``macro_key``.

        The key can be a quoted string constant, a property-path reference
        or a key that is searched in the repositories. Used by the scanner
        and by modifiers such as ``default``.

        Examples:
            >>> mi = MacroInt([{'x': 123}, lambda key, mi: 987 if key == 'a' else None])
            >>> mi.get_value('x'), mi.get_value('a'), mi.get_value("'x'")
            (123, 987, 'x')
            >>> mi.get_value('aa') is None
            True
        """
        if not isinstance(macro_key, str):
            return macro_key

        if self._has_constant:
            self.add_error("Unused modifier-value after constant value.", macro_key)

        if macro_key and macro_key[0] in QUOTES and macro_key[-1] == macro_key[0]:
            self._has_constant = True
            return macro_key[1:-1]

        indicator = self.symbols.property_path_indicator
        if macro_key.startswith(indicator):
            self._has_constant = True
            index_text = macro_key[len(indicator):]
            try:
                return self._property_path.at(index_text)
            except InvalidPathError as e:
                self.add_error(str(e), index_text, macro_key)
                return None

        return find_value(self._repositories, macro_key, self)

    def is_undefined(self, value: Any) -> bool:
        """Check if ``value`` is None or text containing the undefined marker."""
        return value is None or (
            isinstance(value, str) and self.symbols.undefined_marker in value
        )

    def register_repository(
        self,
        repositories: Union[Repository, List[Repository]]
    ) -> 'MacroInt':
        """Append one repository or a list of repositories (lowest priority last).

        Returns:
            The MacroInt instance (chainable)

        Raises:
            TypeError: If a repository is neither a mapping nor callable
        """
        if isinstance(repositories, (list, tuple)):
            new = list(repositories)
        else:
            new = [repositories]
        for repository in new:
            if not isinstance(repository, Mapping) and not callable(repository):
                raise TypeError(
                    f"Repository must be a mapping or a callable, got {type(repository).__name__}"
                )
        self._repositories.extend(new)
        return self

    @staticmethod
    def register_modifier(
        names: Union[str, Iterable[str]],
        callback: ModifierCallback
    ) -> ModifierRegistry:
        """Register a modifier in the shared registry."""
        return default_registry.register(names, callback)

    @staticmethod
    def unregister_modifier(names: Union[str, Iterable[str]]) -> bool:
        """Remove modifier aliases from the shared registry."""
        return default_registry.unregister(names)

    def is_one_macro(self) -> bool:
        """Check if the macro being resolved is the complete expression.

        Only meaningful inside a modifier callback. Used to decide whether a
        macro value may be something other than a string.
        """
        return self._is_one_macro

    def add_error(self, *parts: Any) -> None:
        """Add an error message built from ``parts`` to ``errors``.

        The current macro and the complete expression are appended
        automatically, empty and repeated parts are dropped and the parts
        are joined with `` <== ``. A non-empty property path is added at the
        end.

        Examples:
            >>> mi = MacroInt()
            >>> mi.add_error('1', '2', '2')
            >>> mi.errors
            ['1 <== 2']
        """
        parts = list(parts)
        if self._current_expression is not None:
            parts.append(self._current_expression)
        if self._complete_expression is not None:
            parts.append(self._complete_expression)

        filtered = []
        for part in parts:
            if part and str(part) not in filtered:
                filtered.append(str(part))
        message = " <== ".join(filtered)
        if len(self._property_path):
            message += f"  (@Property: {self._property_path.dotted})"
        self.errors.append(message)

    def format_errors(self, line_offset: str = "\n  ") -> str:
        """Format ``errors`` with a title, one error per line."""
        if not self.errors:
            return "Errors: <none>"
        if len(self.errors) == 1:
            title = "Error: "
        else:
            title = f"Errors ({len(self.errors)}):" + line_offset + "  "
        return title + (line_offset + "  ").join(self.errors)

    def to_string(self, line_offset: str = "\n  ") -> str:
        """Describe the state of the instance, including the formatted errors."""
        return line_offset.join([
            "MacroInt:",
            f"Expression: {self._complete_expression}",
            f"Current Expression: {self._current_expression}",
            f"Property: {self._property_path.dotted}",
            self.format_errors(line_offset),
        ])

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"MacroInt(repositories={len(self._repositories)}, errors={len(self.errors)})"


def resolve(
    expression: Any,
    repositories: Union[Repository, List[Repository], None] = None,
    options: Optional[Mapping[str, Any]] = None,
    **config
) -> Any:
    """Convenience function resolving ``expression`` with a one-off MacroInt.

    Args:
        expression: String or dict/list structure to resolve
        repositories: A repository or a list of repositories
        options: ``resolve`` options (dicts/lists only)
        **config: Keyword arguments for ``MacroInt``

    Examples:
        >>> resolve('${greeting | upper}, ${who}!', {'greeting': 'hello', 'who': 'world'})
        'HELLO, world!'
        >>> resolve(['${a}', '${b}'], {'a': 1, 'b': 2})
        [1, 2]
    """
    return MacroInt(repositories, **config).resolve(expression, options)
