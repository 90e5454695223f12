"""Ordered lookup of macro keys in repositories.

A repository is either a mapping (possibly nested; dotted keys walk into it)
or a callback ``callback(key, macro_int)`` returning a value or None.
The first repository yielding a value other than None wins.
"""

from typing import Any, Callable, Iterable, Mapping, Union

from macroint.util import get_by_path

Repository = Union[Mapping[str, Any], Callable[[str, Any], Any]]


def lookup(repository: Repository, key: str, segments: list, macro_int: Any = None) -> Any:
    """Look ``key`` up in a single repository.

    Examples:
        >>> lookup({'a': {'b': 1}}, 'a.b', ['a', 'b'])
        1
        >>> lookup(lambda key, mi: key.upper(), 'abc', ['abc'])
        'ABC'
    """
    if isinstance(repository, Mapping):
        if len(segments) == 1:
            return repository.get(key)
        return get_by_path(repository, segments)
    if callable(repository):
        return repository(key, macro_int)
    raise TypeError(
        f"Repository must be a mapping or a callable, got {type(repository).__name__}"
    )


def find_value(repositories: Iterable[Repository], key: str, macro_int: Any = None) -> Any:
    """Return the value of ``key`` from the first repository that defines it.

    Examples:
        >>> find_value([{'x': 123}, {'x': 999, 'y': 321}], 'x')
        123
        >>> find_value([{'x': 123}, {'x': 999, 'y': 321}], 'y')
        321
        >>> find_value([{'x': 123}], 'z') is None
        True
    """
    segments = key.split('.')
    for repository in repositories:
        result = lookup(repository, key, segments, macro_int)
        if result is not None:
            return result
    return None
