"""
Type graph crawler

Collects interop methods from compiled-module descriptors and walks every
custom type reachable from their signatures, producing one Inspection.
"""

import logging
from typing import Iterable, Optional

from .codegen import as_camel_case, lower_first, safe_js_name
from .errors import DescriptorError
from .ir import IR, MethodInfo, TypeInfo, type_key
from .meta import (
    ArgumentMeta, EnumValue, Inspection, MemberMeta, MethodKind, MethodMeta,
    NamespaceNode, TypeIdentity, TypeMeta, TypeRef, ValueMeta,
    AsyncWrapper, Custom, Generic, Nullable, iter_type_refs,
)
from .namespace import NamespaceResolver, split_namespace
from .typeexpr import TypeExprResolver

logger = logging.getLogger(__name__)


class _NodeBuilder:
    """Mutable namespace tree node, frozen into NamespaceNode when done"""

    def __init__(self, name: str, path: str):
        self.name = name
        self.path = path
        self.children: dict[str, '_NodeBuilder'] = {}
        self.methods: list[MethodMeta] = []
        self.types: list[TypeMeta] = []

    def child(self, segment: str) -> '_NodeBuilder':
        if segment not in self.children:
            path = f'{self.path}.{segment}' if self.path else segment
            self.children[segment] = _NodeBuilder(segment, path)
        return self.children[segment]

    def freeze(self) -> NamespaceNode:
        return NamespaceNode(
            name=self.name,
            path=self.path,
            children=tuple(c.freeze() for c in self.children.values()),
            methods=tuple(self.methods),
            types=tuple(self.types),
        )


class Crawler:
    """Builds an Inspection from compiled-module descriptors"""

    def __init__(self, resolver: NamespaceResolver, ignores: Iterable[str] = ()):
        self.resolver = resolver
        self.ignores = set(ignores)
        self._registry: dict[str, TypeInfo] = {}
        self._exprs: Optional[TypeExprResolver] = None
        self._methods: list[MethodMeta] = []
        self._types: dict[TypeIdentity, TypeMeta] = {}
        self._namespaces: list[str] = []
        self._names: set[tuple[str, str, str]] = set()
        self._warnings: list[str] = []

    def crawl(self, modules: list[IR]) -> Inspection:
        """Crawl all modules; methods keep module then declaration order"""
        self._reset()
        for ir in modules:
            for key, info in ir.types.items():
                if key in self._registry:
                    self._warn(f'{ir.assembly}: type {key} is already declared, ignoring')
                    continue
                self._registry[key] = info
        self._exprs = TypeExprResolver(self._registry)

        for ir in modules:
            for method in ir.interop_methods():
                if method.full_name in self.ignores or method.name in self.ignores:
                    logger.debug(f'Ignoring {method.full_name}')
                    continue
                try:
                    self._add_method(ir, method)
                except DescriptorError as e:
                    raise DescriptorError(f'{method.full_name}: {e}', ir.assembly) from e

        return Inspection(
            methods=tuple(self._methods),
            types=self._types,
            namespaces=tuple(self._namespaces),
            root=self._build_tree(),
            warnings=tuple(self._warnings),
        )

    def _reset(self):
        self._registry = {}
        self._methods = []
        self._types = {}
        self._namespaces = []
        self._names = set()
        self._warnings = []

    def _warn(self, message: str):
        logger.warning(message)
        self._warnings.append(message)

    def _see_namespace(self, js_space: str):
        if js_space not in self._namespaces:
            self._namespaces.append(js_space)

    # ==========================================================================
    # Methods
    # ==========================================================================

    def _add_method(self, ir: IR, method: MethodInfo):
        kind = MethodKind(method.kind)
        js_space = self.resolver.resolve(method.namespace)
        js_name = lower_first(method.name)

        name_key = (js_space, kind.bucket, js_name)
        if name_key in self._names:
            self._warn(f'{ir.assembly}: {method.full_name} duplicates '
                       f'{js_space}.{js_name}, ignoring')
            return
        self._names.add(name_key)

        arguments = []
        for param in method.params:
            ref = self._exprs.resolve(param.type, method.namespace)
            arguments.append(ArgumentMeta(
                name=param.name,
                js_name=safe_js_name(param.name),
                type=ref,
                nullable=isinstance(ref, Nullable),
            ))

        ret = self._exprs.resolve(method.returns, method.namespace)
        is_async = isinstance(ret, AsyncWrapper)
        inner = ret.inner if is_async else ret
        return_value = ValueMeta(
            type=ret,
            nullable=isinstance(inner, Nullable),
            is_async=is_async,
        )

        meta = MethodMeta(
            kind=kind,
            assembly=ir.assembly,
            owner=method.owner,
            space=method.namespace,
            js_space=js_space,
            name=method.name,
            js_name=js_name,
            arguments=tuple(arguments),
            return_value=return_value,
        )
        self._methods.append(meta)
        self._see_namespace(js_space)

        for arg in arguments:
            self._visit(arg.type)
        self._visit(ret)

    # ==========================================================================
    # Types
    # ==========================================================================

    def _visit(self, ref: TypeRef):
        """Visit every custom type referenced by `ref`"""
        for nested in iter_type_refs(ref):
            if isinstance(nested, (Custom, Generic)):
                self._visit_type(nested.identity)

    def _visit_type(self, identity: TypeIdentity):
        if identity in self._types:
            return
        info = self._registry.get(type_key(identity.full_name, identity.arity))
        if info is None:
            return

        meta = self._build_type(info, identity)
        # Registered before descending so cycles terminate
        self._types[identity] = meta
        self._see_namespace(meta.js_space)
        logger.debug(f'Discovered {identity} => {meta.js_space}.{identity.name}')

        for base in meta.extends:
            self._visit(base)
        for member in meta.members:
            self._visit(member.type)

    def _build_type(self, info: TypeInfo, identity: TypeIdentity) -> TypeMeta:
        js_space = self.resolver.resolve(info.namespace)
        params = tuple(info.type_params)

        if info.kind == 'enum':
            return TypeMeta(
                identity=identity,
                js_space=js_space,
                kind='enum',
                is_value_type=True,
                values=tuple(self._enum_values(info)),
            )

        members = []
        for member in info.members:
            if not member.is_instance_readable:
                continue
            ref = self._exprs.resolve(member.type, info.namespace, params)
            members.append(MemberMeta(
                name=member.name,
                js_name=as_camel_case(member.name),
                type=ref,
                nullable=isinstance(ref, Nullable),
            ))

        extends = []
        for base in info.extends:
            ref = self._exprs.resolve(base, info.namespace, params)
            if isinstance(ref, (Custom, Generic)):
                extends.append(ref)

        return TypeMeta(
            identity=identity,
            js_space=js_space,
            kind='object',
            is_value_type=info.is_value_type,
            type_params=params,
            members=tuple(members),
            extends=tuple(extends),
        )

    @staticmethod
    def _enum_values(info: TypeInfo) -> list[EnumValue]:
        values = []
        next_value = 0
        for item in info.items:
            if item.value is not None:
                next_value = item.value
            values.append(EnumValue(item.name, next_value))
            next_value += 1
        return values

    # ==========================================================================
    # Namespace tree
    # ==========================================================================

    def _build_tree(self) -> NamespaceNode:
        root = _NodeBuilder('', '')
        nodes = {}
        for js_space in self._namespaces:
            node = root
            for segment in split_namespace(js_space):
                node = node.child(segment)
            nodes[js_space] = node
        for method in self._methods:
            nodes[method.js_space].methods.append(method)
        for meta in self._types.values():
            nodes[meta.js_space].types.append(meta)
        return root.freeze()
