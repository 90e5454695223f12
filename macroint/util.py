"""Utility functions for macroint: path walking and container copying.

This module provides helpers for working with the nested dict/list
structures that repositories hold and that the tree walker processes.
"""

from typing import Any, Iterator, List, Tuple, Union
from collections.abc import Mapping, Sequence


class MacroIntError(Exception):
    """Base class of the exceptions raised by macroint."""
    pass


def is_container(obj: Any) -> bool:
    """Return True for the structures the tree walker descends into.

    Examples:
        >>> is_container({}), is_container([]), is_container(()), is_container('x')
        (True, True, False, False)
    """
    return isinstance(obj, (dict, list))


def iter_entries(obj: Union[dict, list]) -> Iterator[Tuple[Any, Any]]:
    """Yield ``(key, value)`` pairs of a dict, or ``(index, item)`` of a list.

    The keys are snapshotted first and every value is read when its turn
    comes, so entries rewritten earlier in the iteration are seen updated.
    """
    if isinstance(obj, dict):
        for key in list(obj):
            if key in obj:
                yield key, obj[key]
    else:
        for index in range(len(obj)):
            if index < len(obj):
                yield index, obj[index]


def get_by_path(obj: Any, path: Union[str, Tuple, List], separator: str = '.') -> Any:
    """Get a value from a nested structure by path.

    Walking stops at the first segment that can't be found, in which case
    None is returned. Sequences are indexed with decimal segments.

    Args:
        obj: Nested structure
        path: Path as separated string or sequence of segments
        separator: Separator for string paths

    Returns:
        Value at the path, or None if not found

    Examples:
        >>> d = {'a': {'b': {'c': 42}}, 'l': ['x', 'y']}
        >>> get_by_path(d, 'a.b.c')
        42
        >>> get_by_path(d, ('l', '1'))
        'y'
        >>> get_by_path(d, 'a.x.c') is None
        True
    """
    if isinstance(path, str):
        path = path.split(separator)

    current = obj
    for key in path:
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, Sequence) and not isinstance(current, str):
            try:
                current = current[int(key)]
            except (IndexError, ValueError):
                return None
        else:
            return None
        if current is None:
            return None

    return current


def copy_container(template: Union[dict, list], current: Any = None) -> Union[dict, list]:
    """Deep-copy a dict/list, merging ``current`` of the same type on top.

    Only dicts and lists are copied; any other value is shared.

    Args:
        template: Container to copy
        current: Optional existing container whose entries win over the template

    Returns:
        New container

    Examples:
        >>> copy_container({'a': 1, 'b': {'c': 2}}, {'a': 5})
        {'a': 5, 'b': {'c': 2}}
        >>> copy_container(['t0', 't1', 't2'], ['c0'])
        ['c0', 't1', 't2']
    """
    if isinstance(template, dict):
        result = dict(template)
        if isinstance(current, dict):
            result.update(current)
        for key, value in result.items():
            if is_container(value):
                result[key] = copy_container(value)
    else:
        result = list(template)
        if isinstance(current, list):
            result[:len(current)] = current
        for index, value in enumerate(result):
            if is_container(value):
                result[index] = copy_container(value)
    return result


def apply_template(template: Union[dict, list], destination: Union[dict, list]) -> None:
    """Copy the entries of a siblings-template into ``destination`` (in place).

    An entry is copied when the destination lacks it (or holds None) or
    holds a container there. Container values are copied, never shared;
    an existing container of the same type is merged over the copy.
    Dict templates only apply to dicts and list templates only to lists.

    Examples:
        >>> sibling = {'url': 'localhost'}
        >>> apply_template({'url': 'x', 'port': 1234}, sibling)
        >>> sibling
        {'url': 'localhost', 'port': 1234}
    """
    if isinstance(template, dict) != isinstance(destination, dict):
        return

    for key, template_value in iter_entries(template):
        if isinstance(destination, dict):
            current = destination.get(key)
        else:
            current = destination[key] if key < len(destination) else None

        if current is None or is_container(current):
            value = (
                copy_container(template_value, current)
                if is_container(template_value)
                else template_value
            )
            if isinstance(destination, dict) or key < len(destination):
                destination[key] = value
            else:
                destination.append(value)
