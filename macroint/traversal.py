"""Traversal of dict/list structures for in-place macro resolution.

The walker visits every entry of a container, interpolates string values
that contain a macro, descends into nested containers and applies
siblings-templates on the way down.

Siblings-templates: if a container has an entry under the
siblings-template key (``$template`` by default), that entry is a template
for every other container entry of the same container. Missing entries are
copied from the template before the sibling is walked:

    >>> from macroint import MacroInt
    >>> config = {
    ...     '$template': {'port': 1234, 'name': '${^-2}'},
    ...     'p1': {},
    ...     'p2': {'port': 4321},
    ... }
    >>> _ = MacroInt().resolve(config)
    >>> config['p1'], config['p2']
    ({'port': 1234, 'name': 'p1'}, {'port': 4321, 'name': 'p2'})
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from macroint.util import MacroIntError, apply_template, is_container, iter_entries

logger = logging.getLogger(__name__)

KNOWN_OPTIONS = ('exclude', 'include')


class OptionsError(MacroIntError, ValueError):
    """Raised when ``resolve`` gets options it can't use."""
    pass


def validate_options(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Check the ``resolve`` options of a container and return them as kwargs.

    Raises:
        OptionsError: If an option name is unknown

    Examples:
        >>> validate_options({'exclude': ['a']})
        {'exclude': ['a']}
        >>> validate_options({'xxx': ''})
        Traceback (most recent call last):
        ...
        macroint.traversal.OptionsError: resolve.options: unknown option "xxx"
    """
    options = dict(options or {})
    for key in options:
        if key not in KNOWN_OPTIONS:
            raise OptionsError(f'resolve.options: unknown option "{key}"')
    return options


class TreeWalker:
    """Resolve macros in a dict/list structure in place.

    Args:
        macro_int: The ``MacroInt`` used to interpolate string values
        exclude: Property names that are skipped at every level
        include: ``{'path': ..., 'property': ...}`` entries; at a container
            whose dotted property path equals ``path`` only ``property`` is
            processed. Containers at other paths are processed normally.
    """

    def __init__(
        self,
        macro_int,
        exclude: Optional[Iterable[str]] = None,
        include: Optional[Iterable[Mapping[str, str]]] = None
    ):
        self.macro_int = macro_int
        self.exclude = set(exclude or ())
        self.include = list(include or ())
        # objects are kept alive so their ids can't be reused during a walk
        self._handled: Dict[int, Any] = {}

    def _include_key(self) -> Optional[str]:
        if not self.include:
            return None
        search_path = self.macro_int.property_path.dotted
        for entry in self.include:
            if entry.get('path') == search_path:
                return entry.get('property')
        return None

    def walk(self, obj: Union[dict, list]) -> None:
        """Process every entry of ``obj``; containers seen before are skipped."""
        if id(obj) in self._handled:
            logger.debug("Skipping already handled object at %r",
                         self.macro_int.property_path.dotted)
            return
        self._handled[id(obj)] = obj

        macro_int = self.macro_int
        symbols = macro_int.symbols
        template_key = symbols.siblings_template_key
        include_key = self._include_key()
        template = obj.get(template_key) if isinstance(obj, dict) else None

        for key, value in iter_entries(obj):
            name = str(key)
            if isinstance(obj, dict) and key == template_key:
                continue
            if name in self.exclude:
                continue
            if include_key is not None and include_key != name:
                continue

            if isinstance(value, str):
                if symbols.macro_begin in value:
                    with macro_int.property_path.push(name):
                        result = macro_int._interpolate(value)
                        obj[key] = result
                        if is_container(result):
                            self.walk(result)

            elif is_container(value):
                with macro_int.property_path.push(name):
                    if is_container(template):
                        apply_template(template, value)
                    self.walk(value)

    @property
    def handled(self) -> List[Any]:
        """Containers processed so far, in visiting order."""
        return list(self._handled.values())
