"""Tests for the type graph crawler."""

import pytest

from descriptors import enum, event, function, inspect, invokable, make_generator, module, obj
from interop_gen.errors import DescriptorError
from interop_gen.meta import MethodKind, Nullable, TypeIdentity


def names(inspection):
    return [str(identity) for identity in inspection.types]


def test_cyclic_types_terminate_and_appear_once():
    inspection = inspect(module(
        methods=[invokable('GetA', returns='A', namespace='n')],
        types=[
            obj('n', 'A', [('B', 'B')]),
            obj('n', 'B', [('A', 'A'), ('Self', 'B?')]),
        ],
    ))
    assert names(inspection) == ['n.A', 'n.B']


def test_types_reachable_through_every_edge():
    inspection = inspect(module(
        methods=[invokable(
            'Get', namespace='n',
            args=[('items', 'Dictionary<string, List<Item?>>')],
            returns='Task<Box<Payload>>')],
        types=[
            obj('n', 'Item'),
            obj('n', 'Box', [('Value', 'T')], type_params=['T']),
            obj('n', 'Payload', [('Tags', 'Tag[]')], extends=['Base']),
            obj('n', 'Base', [('Kind', 'Kind')]),
            obj('n', 'Tag'),
            enum('n', 'Kind', ['A', 'B']),
        ],
    ))
    assert names(inspection) == ['n.Item', 'n.Box`1', 'n.Payload', 'n.Base', 'n.Kind', 'n.Tag']


def test_static_and_computed_members_are_excluded():
    inspection = inspect(module(
        methods=[invokable('Get', returns='Foo')],
        types=[
            obj('', 'Foo', [
                {'name': 'Value', 'type': 'int'},
                {'name': 'Shared', 'type': 'Hidden', 'static': True},
                {'name': 'Derived', 'type': 'Hidden', 'computed': True},
            ]),
            obj('', 'Hidden'),
        ],
    ))
    foo = inspection.get_type(TypeIdentity('', 'Foo'))
    assert [m.js_name for m in foo.members] == ['value']
    assert names(inspection) == ['Foo']


def test_methods_keep_module_then_declaration_order():
    inspection = inspect(
        module([invokable('First'), event('Second')], assembly='A'),
        module([function('Third')], assembly='B'),
    )
    assert [m.name for m in inspection.methods] == ['First', 'Second', 'Third']
    assert [m.assembly for m in inspection.methods] == ['A', 'A', 'B']
    assert [m.kind for m in inspection.methods] == [
        MethodKind.INVOKABLE, MethodKind.EVENT, MethodKind.FUNCTION]


def test_method_metadata():
    inspection = inspect(module(
        methods=[invokable('GetValue', namespace='Foo.Bar', owner='Program',
                           args=[('function', 'string?')], returns='Task<int?>')],
    ))
    meta = inspection.methods[0]
    assert meta.js_name == 'getValue'
    assert meta.js_space == 'Foo.Bar'
    assert meta.owner == 'Program'
    arg = meta.arguments[0]
    assert (arg.name, arg.js_name, arg.nullable) == ('function', 'fn', True)
    assert meta.return_value.is_async
    assert meta.return_value.nullable
    assert not meta.return_value.is_void


def test_namespaces_in_first_seen_order():
    inspection = inspect(module(
        methods=[
            invokable('One', namespace='b', returns='a.Foo'),
            invokable('Two', namespace='c'),
            invokable('Three', namespace='b'),
        ],
        types=[obj('a', 'Foo')],
    ))
    assert inspection.namespaces == ('b', 'a', 'c')


def test_namespace_tree_keeps_similar_roots_apart():
    inspection = inspect(module(methods=[
        invokable('Method', namespace='Foo'),
        invokable('Method', namespace='FooBar.Baz'),
    ]))
    roots = inspection.root.children
    assert [r.name for r in roots] == ['Foo', 'FooBar']
    assert roots[0].children == ()
    assert [c.path for c in roots[1].children] == ['FooBar.Baz']
    assert [m.js_space for m in roots[1].children[0].methods] == ['FooBar.Baz']


def test_namespace_rules_resolve_target_spaces():
    inspection = inspect(module(
        methods=[function('OnFun', namespace='Foo.Bar.Fun', args=[('nya', 'Nya.Nya')])],
        types=[obj('Foo.Bar.Nya', 'Nya')],
        rules=[(r'Foo\.Bar\.(\S+)', '$1')],
    ))
    assert inspection.namespaces == ('Fun', 'Nya')
    assert inspection.methods[0].space == 'Foo.Bar.Fun'


def test_duplicate_target_names_are_dropped_with_warning():
    inspection = inspect(module(methods=[
        invokable('Foo', owner='A'),
        invokable('Foo', owner='B'),
        function('Foo'),
        event('Foo'),
    ]))
    kept = [(m.owner, m.kind) for m in inspection.methods]
    assert kept == [('A', MethodKind.INVOKABLE), ('MockClass', MethodKind.FUNCTION)]
    assert len(inspection.warnings) == 2


def test_ignored_and_untagged_methods_are_skipped():
    gen = make_generator(module(methods=[
        invokable('Keep'),
        invokable('Skip'),
        {'kind': 'other', 'name': 'Plain'},
    ]))
    gen.ignore('MockClass.Skip')
    assert [m.name for m in gen.inspect().methods] == ['Keep']


def test_enum_values_follow_declared_indices():
    inspection = inspect(module(
        methods=[invokable('Get', returns='Color')],
        types=[enum('', 'Color', [('A', 1), 'B', ('C', 6), 'D'])],
    ))
    color = inspection.get_type(TypeIdentity('', 'Color'))
    assert [(v.name, v.value) for v in color.values] == [('A', 1), ('B', 2), ('C', 6), ('D', 7)]
    assert color.is_enum
    assert color.is_value_type


def test_nullable_member_flag():
    inspection = inspect(module(
        methods=[invokable('Get', returns='Foo')],
        types=[obj('', 'Foo', [('Name', 'string?'), ('Count', 'int')])],
    ))
    foo = inspection.get_type(TypeIdentity('', 'Foo'))
    assert [m.nullable for m in foo.members] == [True, False]
    assert isinstance(foo.members[0].type, Nullable)


def test_inspection_is_immutable():
    inspection = inspect(module(methods=[invokable('Get', returns='Foo')], types=[obj('', 'Foo')]))
    with pytest.raises(TypeError):
        inspection.types[TypeIdentity('', 'Bar')] = None


def test_malformed_type_expression_names_module_and_method():
    with pytest.raises(DescriptorError) as e:
        inspect(module(methods=[invokable('Broken', args=[('a', 'List<int')])], assembly='Sample'))
    assert 'Sample' in str(e.value)
    assert 'MockClass.Broken' in str(e.value)


def test_acronym_prefixes_in_method_and_member_names():
    inspection = inspect(module(
        methods=[invokable('UIReady', returns='Foo'), function('IOFlush')],
        types=[obj('', 'Foo', [('UIState', 'int'), ('Name', 'string')])],
    ))
    assert [m.js_name for m in inspection.methods] == ['uIReady', 'iOFlush']
    foo = inspection.get_type(TypeIdentity('', 'Foo'))
    assert [m.js_name for m in foo.members] == ['uiState', 'name']
