"""Tests for type expression parsing and resolution."""

import pytest

from interop_gen.errors import DescriptorError
from interop_gen.ir import TypeInfo
from interop_gen.meta import (
    Bucket, TypeIdentity, Primitive, Nullable, Array, Map, Generic, Custom,
    AsyncWrapper, TypeParameter, Unknown,
)
from interop_gen.typeexpr import TypeExprResolver, parse_type_expr

STRING = Primitive(Bucket.STRING, 'System.String')
INT = Primitive(Bucket.NUMBER, 'System.Int32')


def make_resolver(*infos):
    return TypeExprResolver({info.key: info for info in infos})


def test_parse_nested_expression():
    expr = parse_type_expr('List<n.Item?>[]?')
    assert expr.name == 'List'
    assert expr.suffixes == ['[]', '?']
    assert expr.args[0].name == 'n.Item'
    assert expr.args[0].suffixes == ['?']


def test_parse_skips_global_qualifier_and_nested_type_separator():
    assert parse_type_expr('global::System.String').name == 'System.String'
    assert parse_type_expr('Outer+Inner').name == 'Outer.Inner'


@pytest.mark.parametrize('text', ['List<int', 'int>', 'Dictionary<,int>', '', '[]'])
def test_parse_malformed_expression_raises(text):
    with pytest.raises(DescriptorError):
        parse_type_expr(text)


@pytest.mark.parametrize('text,bucket', [
    ('byte', Bucket.NUMBER),
    ('short', Bucket.NUMBER),
    ('uint', Bucket.NUMBER),
    ('float', Bucket.NUMBER),
    ('decimal', Bucket.NUMBER),
    ('long', Bucket.BIGINT),
    ('ulong', Bucket.BIGINT),
    ('System.Int64', Bucket.BIGINT),
    ('bool', Bucket.BOOLEAN),
    ('char', Bucket.STRING),
    ('string', Bucket.STRING),
    ('DateTime', Bucket.DATE),
    ('System.DateTimeOffset', Bucket.DATE),
    ('void', Bucket.VOID),
])
def test_primitive_buckets(text, bucket):
    ref = make_resolver().resolve(text)
    assert isinstance(ref, Primitive)
    assert ref.bucket is bucket


def test_big_integers_never_share_numeric_bucket():
    resolver = make_resolver()
    numeric = {resolver.resolve(t).bucket for t in ('sbyte', 'ushort', 'int', 'double')}
    assert resolver.resolve('long').bucket not in numeric
    assert resolver.resolve('ulong').bucket not in numeric


@pytest.mark.parametrize('text,bucket', [
    ('byte[]', Bucket.UINT8_ARRAY),
    ('sbyte[]', Bucket.INT8_ARRAY),
    ('ushort[]', Bucket.UINT16_ARRAY),
    ('short[]', Bucket.INT16_ARRAY),
    ('uint[]', Bucket.UINT32_ARRAY),
    ('int[]', Bucket.INT32_ARRAY),
    ('long[]', Bucket.BIGINT64_ARRAY),
    ('ulong[]', Bucket.BIGUINT64_ARRAY),
])
def test_integer_arrays_map_to_typed_arrays(text, bucket):
    ref = make_resolver().resolve(text)
    assert ref.bucket is bucket
    assert ref.clr_name.endswith('[]')


def test_other_arrays_and_lists():
    resolver = make_resolver()
    assert resolver.resolve('double[]') == Array(Primitive(Bucket.NUMBER, 'System.Double'))
    assert resolver.resolve('List<string>') == Array(STRING, 'System.Collections.Generic.List')
    assert resolver.resolve('IReadOnlyList<string>') == Array(
        STRING, 'System.Collections.Generic.IReadOnlyList')


def test_dictionaries():
    ref = make_resolver().resolve('IReadOnlyDictionary<string, int[]>')
    assert ref == Map(STRING, Primitive(Bucket.INT32_ARRAY, 'System.Int32[]'),
                      'System.Collections.Generic.IReadOnlyDictionary')


def test_nullable_forms_are_equivalent():
    resolver = make_resolver()
    assert resolver.resolve('int?') == Nullable(INT)
    assert resolver.resolve('Nullable<int>') == Nullable(INT)
    assert resolver.resolve('System.Nullable<int>?') == Nullable(INT)


def test_async_wrappers():
    resolver = make_resolver()
    assert resolver.resolve('Task') == AsyncWrapper()
    assert resolver.resolve('ValueTask<string?>') == AsyncWrapper(Nullable(STRING))


def test_unclassifiable_types_are_unknown():
    resolver = make_resolver()
    assert resolver.resolve('object') == Unknown('System.Object')
    assert resolver.resolve('IEnumerable<string>') == Unknown(
        'System.Collections.Generic.IEnumerable', (STRING,))
    assert resolver.resolve('DBNull') == Unknown('System.DBNull')
    assert resolver.resolve('Mystery<int>') == Unknown('Mystery', (INT,))


def test_custom_types_resolve_from_enclosing_namespaces():
    item = TypeInfo('object', 'n', 'Item')
    resolver = make_resolver(item)
    identity = TypeIdentity('n', 'Item')
    assert resolver.resolve('Item', 'n') == Custom(identity)
    assert resolver.resolve('Item', 'n.Sub') == Custom(identity)
    assert resolver.resolve('n.Item', 'other') == Custom(identity)
    assert resolver.resolve('Item', 'other') == Unknown('Item')


def test_generic_custom_types_carry_arguments():
    box = TypeInfo('object', 'n', 'Box', type_params=['T'])
    resolver = make_resolver(box)
    assert resolver.resolve('Box<string>', 'n') == Generic(TypeIdentity('n', 'Box', 1), (STRING,))
    assert resolver.resolve('Box', 'n') == Unknown('Box')


def test_type_parameters_in_scope():
    resolver = make_resolver()
    assert resolver.resolve('T', 'n', ('T',)) == TypeParameter('T')
    assert resolver.resolve('List<T>', 'n', ('T',)) == Array(
        TypeParameter('T'), 'System.Collections.Generic.List')


def test_declared_types_shadow_well_known_names():
    task = TypeInfo('object', 'n', 'Task')
    resolver = make_resolver(task)
    assert resolver.resolve('Task', 'n') == Custom(TypeIdentity('n', 'Task'))
    assert resolver.resolve('Task', 'other') == AsyncWrapper()
