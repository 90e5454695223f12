"""Property-path tracking for the tree walker.

The property path is the sequence of keys (and list indices, as strings)
leading from the root of a resolved structure to the value currently being
interpolated. Macros can refer back to it with the property-path indicator:

    parent.child.key = "${^-1}"  -->  "key"
    parent.child.key = "${^-3}"  -->  "parent"
    parent.child.key = "${^0}"   -->  "parent"
    parent.child.key = "${^2}"   -->  "key"
"""

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List

from macroint.util import MacroIntError


class InvalidPathError(MacroIntError):
    """Raised when a property-path index is malformed or out of range."""
    pass


class PropertyPath:
    """Stack of property names from the traversal root to the current leaf.

    Examples:
        >>> path = PropertyPath(['parent', 'child'])
        >>> with path.push('key'):
        ...     path.dotted, path.at('-1'), path.at('0')
        ('parent.child.key', 'key', 'parent')
        >>> path.dotted
        'parent.child'
    """

    def __init__(self, parts: Iterable[Any] = ()):
        self._parts: List[str] = [str(part) for part in parts]

    @contextmanager
    def push(self, key: Any) -> Iterator['PropertyPath']:
        """Push ``key`` for the duration of a ``with`` block."""
        self._parts.append(str(key))
        try:
            yield self
        finally:
            self._parts.pop()

    @property
    def dotted(self) -> str:
        return '.'.join(self._parts)

    def at(self, index_text: str) -> str:
        """Return the entry addressed by ``index_text``.

        Non-negative indices count from the root (0 is the outermost key),
        negative ones from the current key (-1 is the key itself). An empty
        index means 0.

        Raises:
            InvalidPathError: If the index isn't an integer or is out of range
        """
        try:
            index = int(index_text) if index_text.strip() else 0
        except ValueError:
            raise InvalidPathError(
                "Invalid property-path-index. The index must be a number."
            )
        length = len(self._parts)
        if not -length <= index < length:
            raise InvalidPathError(
                "Invalid property-path-index."
                + (" Path is empty." if length == 0 else " Index out of range.")
            )
        return self._parts[index]

    def __iter__(self):
        return iter(self._parts)

    def __len__(self):
        return len(self._parts)

    def __eq__(self, other):
        if isinstance(other, PropertyPath):
            return self._parts == other._parts
        if isinstance(other, (list, tuple)):
            return self._parts == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"PropertyPath({self._parts!r})"
