"""Interpolate macros in strings, dict values and list elements.

This package resolves ``${...}`` macros against one or more repositories
(mappings or callbacks), supporting:
- Type-preserving results when the whole expression is one macro
- Modifier pipelines (``${key | default: 'x' | upper}``) with custom modifiers
- Nested macros (``${prefix_${name}}``) and backslash escaping
- Dotted keys into nested repositories (``${db.host}``)
- Property-path references (``${^-1}``) and siblings-templates in structures
- Cycle-safe, in-place resolution of dict/list structures

Basic usage:
    >>> from macroint import MacroInt
    >>> mi = MacroInt({'name': 'MacroInt', 'port': 8080})
    >>> mi.resolve('Hello ${name}')
    'Hello MacroInt'
    >>> mi.resolve('${port}')
    8080

Environment variables are just another repository:
    >>> import os
    >>> mi = MacroInt([os.environ, {'HOME': '/nowhere'}])
    >>> mi.resolve("${NOT_AN_ENV_VARIABLE_X | -d: 'fallback'}")
    'fallback'
"""

from macroint.base import (
    MacroInt,
    ResolveError,
    resolve,
)

from macroint.modifiers import (
    ModifierRegistry,
    ModifierRegistrationError,
    default_registry,
    builtin_registry,
    register_modifier,
    unregister_modifier,
)

from macroint.symbols import (
    MacroSymbols,
    DEFAULT_SYMBOLS,
    InvalidSymbolError,
)

from macroint.substitution import (
    FoundModifier,
    interpolate,
)

from macroint.traversal import (
    TreeWalker,
    OptionsError,
)

from macroint.paths import (
    PropertyPath,
    InvalidPathError,
)

from macroint.repositories import find_value

from macroint.util import (
    MacroIntError,
    get_by_path,
    copy_container,
    apply_template,
)

__version__ = "0.3.0"  # Keep in sync with package version

__all__ = [
    # Core
    "MacroInt",
    "resolve",
    "interpolate",
    "FoundModifier",
    # Modifiers
    "ModifierRegistry",
    "default_registry",
    "builtin_registry",
    "register_modifier",
    "unregister_modifier",
    # Symbols
    "MacroSymbols",
    "DEFAULT_SYMBOLS",
    # Structures
    "TreeWalker",
    "PropertyPath",
    "find_value",
    "get_by_path",
    "copy_container",
    "apply_template",
    # Exceptions
    "MacroIntError",
    "ResolveError",
    "OptionsError",
    "ModifierRegistrationError",
    "InvalidSymbolError",
    "InvalidPathError",
]
