"""
Metadata model

Immutable records produced by the crawler and read by the emitters:
interop methods, the type references in their signatures and the custom
types those references reach.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

GLOBAL_NAMESPACE = 'Global'


class MethodKind(Enum):
    """Direction of an interop method"""
    INVOKABLE = 'invokable'  # implemented managed-side, called from script
    FUNCTION = 'function'    # implemented script-side, called from managed code
    EVENT = 'event'          # broadcast from managed code to script subscribers

    @property
    def bucket(self) -> str:
        """Name bucket; target names are unique per (namespace, bucket)"""
        return 'export' if self is MethodKind.INVOKABLE else 'import'


class Bucket(Enum):
    """Primitive buckets with their script-side type text"""
    NUMBER = 'number'
    BIGINT = 'bigint'
    BOOLEAN = 'boolean'
    STRING = 'string'
    DATE = 'Date'
    VOID = 'void'
    UINT8_ARRAY = 'Uint8Array'
    INT8_ARRAY = 'Int8Array'
    UINT16_ARRAY = 'Uint16Array'
    INT16_ARRAY = 'Int16Array'
    UINT32_ARRAY = 'Uint32Array'
    INT32_ARRAY = 'Int32Array'
    BIGINT64_ARRAY = 'BigInt64Array'
    BIGUINT64_ARRAY = 'BigUint64Array'
    ANY = 'any'


@dataclass(frozen=True)
class TypeIdentity:
    """Canonical identity of a custom type: namespace + name + arity"""
    namespace: str
    name: str
    arity: int = 0

    @property
    def full_name(self) -> str:
        return f'{self.namespace}.{self.name}' if self.namespace else self.name

    def __str__(self) -> str:
        return f'{self.full_name}`{self.arity}' if self.arity else self.full_name


# ==============================================================================
# Type references
# ==============================================================================

@dataclass(frozen=True)
class Primitive:
    bucket: Bucket
    clr_name: str = ''


@dataclass(frozen=True)
class Nullable:
    inner: 'TypeRef'


@dataclass(frozen=True)
class Array:
    """Native array when `collection` is empty, else a list collection"""
    element: 'TypeRef'
    collection: str = ''


@dataclass(frozen=True)
class Map:
    key: 'TypeRef'
    value: 'TypeRef'
    collection: str = 'System.Collections.Generic.Dictionary'


@dataclass(frozen=True)
class Generic:
    """Instantiation of a generic custom type"""
    identity: TypeIdentity
    args: tuple['TypeRef', ...]


@dataclass(frozen=True)
class Custom:
    identity: TypeIdentity


@dataclass(frozen=True)
class AsyncWrapper:
    """Task-like result; `inner` is None for a task without value"""
    inner: Optional['TypeRef'] = None


@dataclass(frozen=True)
class TypeParameter:
    name: str


@dataclass(frozen=True)
class Unknown:
    """Managed type without script-side mapping; `clr_name` excludes arguments"""
    clr_name: str = ''
    args: tuple['TypeRef', ...] = ()


TypeRef = Union[Primitive, Nullable, Array, Map, Generic, Custom,
                AsyncWrapper, TypeParameter, Unknown]

VOID = Primitive(Bucket.VOID, 'System.Void')


def strip_nullable(ref: 'TypeRef') -> 'TypeRef':
    """Unwrap a top-level Nullable"""
    while isinstance(ref, Nullable):
        ref = ref.inner
    return ref


def iter_type_refs(ref: 'TypeRef'):
    """Yield `ref` and every type reference nested in it, pre-order"""
    yield ref
    if isinstance(ref, Nullable):
        yield from iter_type_refs(ref.inner)
    elif isinstance(ref, Array):
        yield from iter_type_refs(ref.element)
    elif isinstance(ref, Map):
        yield from iter_type_refs(ref.key)
        yield from iter_type_refs(ref.value)
    elif isinstance(ref, Generic):
        for arg in ref.args:
            yield from iter_type_refs(arg)
    elif isinstance(ref, AsyncWrapper) and ref.inner is not None:
        yield from iter_type_refs(ref.inner)


# ==============================================================================
# Methods
# ==============================================================================

@dataclass(frozen=True)
class ArgumentMeta:
    name: str
    js_name: str
    type: TypeRef
    nullable: bool = False


@dataclass(frozen=True)
class ValueMeta:
    type: TypeRef
    nullable: bool = False
    is_async: bool = False

    @property
    def is_void(self) -> bool:
        """True for `void` and for a task without value"""
        ref = self.type
        if isinstance(ref, AsyncWrapper):
            return ref.inner is None
        return ref == VOID


@dataclass(frozen=True)
class MethodMeta:
    kind: MethodKind
    assembly: str
    owner: str
    space: str
    js_space: str
    name: str
    js_name: str
    arguments: tuple[ArgumentMeta, ...]
    return_value: ValueMeta

    def __str__(self) -> str:
        args = ', '.join(f'{a.name}: {a.type}' for a in self.arguments)
        return f'[{self.kind.name}] {self.assembly}.{self.space}.{self.name} ({args}) => {self.return_value.type}'


# ==============================================================================
# Custom types
# ==============================================================================

@dataclass(frozen=True)
class MemberMeta:
    name: str
    js_name: str
    type: TypeRef
    nullable: bool = False


@dataclass(frozen=True)
class EnumValue:
    name: str
    value: int


@dataclass(frozen=True)
class TypeMeta:
    identity: TypeIdentity
    js_space: str
    kind: str
    is_value_type: bool = False
    type_params: tuple[str, ...] = ()
    members: tuple[MemberMeta, ...] = ()
    values: tuple[EnumValue, ...] = ()
    extends: tuple[TypeRef, ...] = ()  # Custom or Generic bases

    @property
    def is_enum(self) -> bool:
        return self.kind == 'enum'


# ==============================================================================
# Inspection
# ==============================================================================

@dataclass(frozen=True)
class NamespaceNode:
    """One segment of the namespace tree"""
    name: str
    path: str
    children: tuple['NamespaceNode', ...] = ()
    methods: tuple[MethodMeta, ...] = ()
    types: tuple[TypeMeta, ...] = ()


@dataclass(frozen=True)
class Inspection:
    """Immutable result of one crawl"""
    methods: tuple[MethodMeta, ...]
    types: Mapping[TypeIdentity, TypeMeta]
    namespaces: tuple[str, ...]
    root: NamespaceNode = field(default_factory=lambda: NamespaceNode('', ''))
    warnings: tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.types, MappingProxyType):
            object.__setattr__(self, 'types', MappingProxyType(dict(self.types)))

    def methods_in(self, js_space: str) -> list[MethodMeta]:
        return [m for m in self.methods if m.js_space == js_space]

    def types_in(self, js_space: str) -> list[TypeMeta]:
        return [t for t in self.types.values() if t.js_space == js_space]

    def get_type(self, identity: TypeIdentity) -> Optional[TypeMeta]:
        return self.types.get(identity)
