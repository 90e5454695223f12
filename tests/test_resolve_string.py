"""Tests for resolving macros in strings."""

import pytest
from macroint import MacroInt, OptionsError, ResolveError

UNDEFINED_VALUE = '<undefined!>'


def check_errors(errors, expected):
    """Check that every expected error shows up, in order.

    An expected entry is a substring, or a list of substrings that all have
    to be part of the same error.
    """
    if not expected:
        assert errors == []
        return
    assert len(errors) >= len(expected), errors
    for found, wanted in zip(errors, expected):
        for part in ([wanted] if isinstance(wanted, str) else wanted):
            assert part in found, (part, found)


def check_macro(macro_int, expression, expected_result, expected_errors=None):
    result = macro_int.resolve(expression)
    check_errors(macro_int.errors, expected_errors)
    assert result == expected_result


def test_options_with_string(string_macro_int):
    """Test that options are rejected for string expressions."""
    with pytest.raises(OptionsError):
        string_macro_int.resolve('', {'include': []})
    with pytest.raises(OptionsError):
        string_macro_int.resolve('', {})


def test_simple_expression(string_macro_int):
    check_macro(string_macro_int, '${macro}', 'macro_result')
    check_macro(string_macro_int, '>>${macro}<<', '>>macro_result<<')
    check_macro(string_macro_int, '${macro}, ${macro1}', 'macro_result, macro1_result')


def test_non_string_results(string_macro_int):
    """Test that whole-expression macros keep the type of the value."""
    assert string_macro_int.resolve('${number}') == 123
    assert string_macro_int.resolve('${bool}') is True
    assert string_macro_int.resolve('${obj}') == {}
    assert string_macro_int.resolve('${empty}') == ''


def test_non_string_results_embedded(string_macro_int):
    """Test that embedded macro values are converted to text."""
    assert string_macro_int.resolve('-${number}-') == '-123-'
    assert string_macro_int.resolve('-${bool}-') == '-True-'
    assert string_macro_int.resolve('-${obj}-') == '-{}-'
    assert string_macro_int.resolve('-${empty}-') == '--'
    assert string_macro_int.resolve('-${nothing}-') == '-' + UNDEFINED_VALUE + '-'


def test_spaces_around_keys(string_macro_int):
    check_macro(
        string_macro_int,
        ' ${ macro}, ${macro1 }, ${ macro2 } ',
        ' macro_result, macro1_result, macro2_result ',
    )


def test_invalid_and_empty_macros(string_macro_int):
    check_macro(string_macro_int, '${macro []}${macro1[1]}', UNDEFINED_VALUE + UNDEFINED_VALUE)
    check_macro(string_macro_int, '${}', None)
    check_macro(
        string_macro_int,
        'x ${ macro }/${macro2}/${macro[2]}/${[2]}/${macro3[1]',
        'x macro_result/macro2_result/<undefined!>/<undefined!>/${macro3[1]',
    )


def test_escaped_macros(string_macro_int):
    check_macro(
        string_macro_int,
        '/ escaped :\\${macro\\}, \\\\${macro1}\\, \\ ${macro2}',
        '/ escaped :${macro}, \\macro1_result,  macro2_result',
    )


def test_escape_edge_cases():
    macro_int = MacroInt({'x': 1})
    assert macro_int.resolve('\\${x}') == '${x}'
    assert macro_int.resolve('\\') == ''
    assert macro_int.resolve('a\\') == 'a'
    assert macro_int.resolve('\\\\') == '\\'


def test_property_path(string_macro_int):
    check_macro(
        string_macro_int,
        '${^0}, ${^1}, ${ ^2}, ${^3 }, ${ ^4    } | '
        '${^-1}, ${ ^-2 }, ${   ^-3}, ${^-4    }, ${^-5}',
        'L0, L1, L2, L3, L4 | L4, L3, L2, L1, L0',
    )


def test_property_path_invalid_index(string_macro_int):
    check_macro(
        string_macro_int,
        '${^9}, ${ ^-91 }',
        UNDEFINED_VALUE + ', ' + UNDEFINED_VALUE,
        [['property-path-index', '^9'], ['property-path-index', '${ ^-91 }']],
    )


def test_property_path_borders(string_macro_int):
    check_macro(string_macro_int, '${^4}, ${^5}', 'L4, ' + UNDEFINED_VALUE,
                ['Index out of range.'])
    string_macro_int.errors.clear()
    check_macro(string_macro_int, '${^-5}, ${^-6}', 'L0, ' + UNDEFINED_VALUE,
                [['^-6', 'property-path-index']])


def test_property_path_three_levels():
    """Test path references on a three-level path at both ends."""
    macro_int = MacroInt(throw_errors=False)
    macro_int.property_path = ['L0', 'L1', 'L2']
    assert macro_int.resolve('${^0}') == 'L0'
    assert macro_int.resolve('${^-1}') == 'L2'
    assert macro_int.errors == []

    assert macro_int.resolve('${^5}') is None
    assert macro_int.resolve('${^-5}') is None
    assert len(macro_int.errors) == 2
    assert all('Invalid property-path-index' in error for error in macro_int.errors)


def test_property_path_not_a_number(string_macro_int):
    check_macro(string_macro_int, '${^12xxx}', None,
                ['Invalid property-path-index. The index must be a number.'])


def test_property_path_without_index(string_macro_int):
    """Test that a bare indicator refers to the first path entry."""
    check_macro(string_macro_int, '${^}', 'L0')
    check_macro(string_macro_int, '${ ^ }/${^-1}', 'L0/L4')


def test_property_path_empty(string_macro_int):
    string_macro_int.property_path = []
    check_macro(string_macro_int, '${^0}', None, ['Invalid property-path-index. Path is empty'])


def test_error_mentions_property(string_macro_int):
    string_macro_int.resolve('${x | -m}')
    assert string_macro_int.errors == [
        'Undefined result for mandatory expression. <== ${x | -m}  (@Property: L0.L1.L2.L3.L4)'
    ]


def test_nested_macros(string_macro_int):
    check_macro(string_macro_int, "${${'parent'}${'1'}${'_macro'}}", 'Parent1_Macro')
    check_macro(string_macro_int, '${parent_${macro}}', 'Parent_Macro_Result')
    check_macro(string_macro_int, '${${^-3}_macro}_outside', 'l2_Macro_Result_outside')
    check_macro(string_macro_int, '${${^2}_macro}_outside', 'l2_Macro_Result_outside')


def test_nested_key_from_constants():
    assert MacroInt({'ab': 'X'}).resolve("${${'a'}${'b'}}") == 'X'


def test_recursive_expansion(string_macro_int):
    """Test that values containing macros are scanned again."""
    string_macro_int.register_repository({
        'recursive1': '${recursive2}',
        'recursive2': '${recursive3}',
        'recursive3': '${recursive4}',
        'recursive4': 'recursive4',
    })
    check_macro(string_macro_int, '>${recursive1}<', '>recursive4<')


def test_recursive_expansion_with_default(string_macro_int):
    string_macro_int.register_repository({
        'recursive1': '${recursive2}',
        'recursive2': '${recursive3}',
    })
    assert string_macro_int.resolve("${${recursive1} | -d:'default'}") == 'default'


def test_whole_macro_value_is_not_rescanned():
    """Test that a whole-expression macro returns its value as is."""
    macro_int = MacroInt({'a': '${b}', 'b': 'B'})
    assert macro_int.resolve('${a}') == '${b}'
    assert macro_int.resolve('${a}.') == 'B.'


def test_mandatory(string_macro_int):
    check_macro(string_macro_int, '${macro|mandatory}', 'macro_result')
    check_macro(string_macro_int, '${macro_| -m}', None,
                ['Undefined result for mandatory expression.'])
    assert len(string_macro_int.errors) == 1


def test_mandatory_throws():
    macro_int = MacroInt()
    with pytest.raises(ResolveError) as info:
        macro_int.resolve('${missing | mandatory}')
    assert str(info.value).startswith('Error: Undefined result for mandatory expression.')
    assert info.value.errors == macro_int.errors


def test_defaults(string_macro_int):
    check_macro(string_macro_int, '${macro | -d:macro1}', 'macro_result')
    check_macro(string_macro_int, '${macro_ | default:macro1}', 'macro1_result')
    check_macro(string_macro_int, "${macro | -d:'default'}", 'macro_result')
    check_macro(string_macro_int, '${macro__ | -d:"default"}', 'default')


def test_defaults_with_property_path(string_macro_int):
    check_macro(string_macro_int, "${macro | -d: '${^-1}'}", 'macro_result')
    check_macro(string_macro_int, "${macro_ | -d: '${^-1}'}", 'L4')


def test_default_chain_reports_skipped_defaults(string_macro_int):
    """Test one error per unresolved default when errors aren't thrown."""
    check_macro(
        string_macro_int,
        "${macro__ | -d: macro2__ |  -d:macro3__ | -d: macro4__ | -d: 'default'}",
        'default',
        [
            'Unresolved default "macro2__" for modifier default.',
            'Unresolved default "macro3__" for modifier default.',
            'Unresolved default "macro4__" for modifier default.',
        ],
    )
    assert len(string_macro_int.errors) == 3


def test_default_chain_fallback():
    macro_int = MacroInt(throw_errors=False)
    assert macro_int.resolve("${missing | -d: missing2 | -d: 'fallback'}") == 'fallback'
    assert len(macro_int.errors) == 1
    assert 'missing2' in macro_int.errors[0]


def test_default_chain_is_silent_when_throwing():
    macro_int = MacroInt({'macro': 'macro_result'})
    result = macro_int.resolve(
        '${ma_ | -d:ma_ | -d: ma_| -d:ma_ | -d:ma_ | -d:ma_ | -d:ma_ | -d:ma_ | -d:ma_ | -d:macro}'
    )
    assert result == 'macro_result'
    assert macro_int.errors == []

    macro_int = MacroInt(throw_errors=False, report_skipped_defaults=False)
    assert macro_int.resolve("${a | -d: b | -d: 'c'}") == 'c'
    assert macro_int.errors == []


def test_macro_after_constant(string_macro_int):
    macro = "macro | -d:'default' | -d: macro2"
    check_macro(string_macro_int, '${' + macro + '}', 'macro_result',
                [[macro, 'Unused modifier-value after constant value']])


def test_constant_after_constant(string_macro_int):
    constant = 'stringN[] // $$$ !" "!""!'
    macro = '${"' + constant + '" |-d:`str2`}'
    check_macro(string_macro_int, macro, constant,
                [[constant, macro, 'Unused modifier-value after constant value']])


def test_escaped_separator_in_default(string_macro_int):
    check_macro(string_macro_int, "${macro__|-d:'12\\|\\|34'}", '12||34')


def test_defaults_with_mandatory(string_macro_int):
    check_macro(string_macro_int, '${macro__|default:macro|-m}', 'macro_result')
    check_macro(string_macro_int, '${macro1_| -d:macro2|-m}', 'macro2_result')
    check_macro(
        string_macro_int,
        '${macro__ |-d:macro1__ |-d:macro2__ |-d:macro3__ |-d:macro3| -m}',
        'macro3_result',
        ['macro1__', 'macro2__', 'macro3__'],
    )


def test_defaults_with_mandatory_error(string_macro_int):
    macro = '${macro__ |-d:macro1__ |-d:macro2__ |-d:macro3__| -m}'
    check_macro(string_macro_int, macro, None, [
        'macro1__',
        'macro2__',
        'macro3__',
        [macro, 'Undefined result for mandatory expression.'],
    ])


def test_trailing_separator(string_macro_int):
    check_macro(string_macro_int, '${ macro |}', 'macro_result')


def test_unknown_modifier_after_constant(string_macro_int):
    constant = "'constant'"
    check_macro(string_macro_int, '${"' + constant + '" |`str2`}', constant,
                ['Unknown modifier "`str2`"'])

    string_macro_int.errors.clear()
    macro = "${'s3' | $ | $-1 | -m}"
    check_macro(string_macro_int, macro, 's3', [
        [macro, 'Unknown modifier "$"'],
        'Unknown modifier "$-1"',
    ])


def test_unknown_modifier_after_undefined(string_macro_int):
    macro = '${s1 | $ | $-1 | -m}'
    check_macro(string_macro_int, macro, None, [
        [macro, 'Unknown modifier "$"'],
        'Unknown modifier "$-1"',
        'Undefined result for mandatory expression.',
    ])


def test_allow_undefined():
    macro_int = MacroInt({'x': 123}, allow_undefined=True)
    assert macro_int.resolve('${y}') is None

    macro_int = MacroInt({'x': 123}, allow_undefined=False)
    with pytest.raises(ResolveError):
        macro_int.resolve('${y}')

    macro_int = MacroInt({'x': 123}, allow_undefined=False, throw_errors=False)
    assert macro_int.resolve('a${y}b${x}') == 'a${y}b123'
    assert macro_int.resolve('${y}') == '${y}'
    assert len(macro_int.errors) == 2
    assert 'macro-value is undefined.' in macro_int.errors[0]


def test_throw_errors():
    macro_int = MacroInt({'x': 123}, throw_errors=False)
    assert macro_int.resolve('${x | unknown}') == 123

    macro_int = MacroInt({'x': 123}, throw_errors=True)
    with pytest.raises(ResolveError):
        macro_int.resolve('${x | unknown}')


def test_errors_reset_when_throwing():
    """Test that errors are cleared at the start of a throwing resolve."""
    macro_int = MacroInt()
    with pytest.raises(ResolveError):
        macro_int.resolve('${^-99}')
    assert len(macro_int.errors) == 1

    macro_int.throw_errors = False
    macro_int.resolve('${^-99}')
    assert len(macro_int.errors) == 2

    macro_int.throw_errors = True
    assert macro_int.resolve('no macro') == 'no macro'
    assert macro_int.errors == []


def test_resolve_error_lists_every_error():
    with pytest.raises(ResolveError) as info:
        MacroInt().resolve('${a | -m}/${b | -m}')
    assert len(info.value.errors) == 2
    assert str(info.value).startswith('Errors (2):')


def test_macro_after_empty_macro_keeps_type():
    """Test that a macro becomes the whole expression once the text before it is gone."""
    macro_int = MacroInt({'a': '', 'b': 5, 'c': 'x'})
    assert macro_int.resolve('${a}${b}') == 5
    assert macro_int.resolve('${c}${b}') == 'x5'
    assert macro_int.resolve('${b}${a}') == '5'


def test_to_string():
    """Test the instance description with zero, one and two errors."""
    macro_int = MacroInt(throw_errors=False)
    macro_int.property_path = ['p1', 'p2']
    assert macro_int.resolve('000') == '000'

    header = (
        'MacroInt:\n'
        '  Expression: 000\n'
        '  Current Expression: None\n'
        '  Property: p1.p2'
    )
    assert macro_int.to_string() == header + '\n  Errors: <none>'
    assert macro_int.format_errors() == 'Errors: <none>'

    macro_int.add_error('eee')
    assert macro_int.to_string() == header + '\n  Error: eee <== 000  (@Property: p1.p2)'

    macro_int.add_error('eee2')
    assert str(macro_int) == (
        header
        + '\n  Errors (2):'
        + '\n    eee <== 000  (@Property: p1.p2)'
        + '\n    eee2 <== 000  (@Property: p1.p2)'
    )
    assert macro_int.to_string(' / ') == (
        'MacroInt: / Expression: 000 / Current Expression: None / Property: p1.p2'
        ' / Errors (2): /   eee <== 000  (@Property: p1.p2)'
        ' /   eee2 <== 000  (@Property: p1.p2)'
    )
    assert macro_int.format_errors('\n') == (
        'Errors (2):\n  eee <== 000  (@Property: p1.p2)\n  eee2 <== 000  (@Property: p1.p2)'
    )
