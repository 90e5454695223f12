"""Shared fixtures for macroint tests."""

import pytest

from macroint import MacroInt, builtin_registry


@pytest.fixture
def registry():
    """A private modifier registry holding only the pre-defined modifiers."""
    return builtin_registry()


@pytest.fixture
def string_macro_int():
    """A MacroInt set up like the string-resolution tests expect.

    Errors are not thrown, the property path is L0..L4 and undefined values
    are rendered as ``<undefined!>``.
    """
    macro_int = MacroInt(
        {
            'macro': 'macro_result',
            'macro1': 'macro1_result',
            'macro2': 'macro2_result',
            'macro3': 'macro3_result',
            'number': 123,
            'bool': True,
            'obj': {},
            'parent1_macro': 'Parent1_Macro',
            'parent_macro_result': 'Parent_Macro_Result',
            'L2_macro': 'l2_Macro_Result',
            'empty': '',
        },
        throw_errors=False,
        symbols={'undefined_marker': '<undefined!>'},
    )
    macro_int.property_path = ['L0', 'L1', 'L2', 'L3', 'L4']
    return macro_int
