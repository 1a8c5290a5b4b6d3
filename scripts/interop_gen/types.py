"""
Type conversion module

Translates TypeRef values into TypeScript type text and decides which
values cross the boundary serialized.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .meta import (
    GLOBAL_NAMESPACE, TypeIdentity, TypeRef,
    Primitive, Nullable, Array, Map, Generic, Custom, AsyncWrapper,
    TypeParameter, Unknown,
)

if TYPE_CHECKING:
    from .meta import Inspection


class Position(Enum):
    """Where a type reference appears"""
    ARGUMENT = 'argument'
    RETURN = 'return'
    MEMBER = 'member'
    NESTED = 'nested'


@dataclass
class ConversionContext:
    """Context for type conversion"""
    position: Position    # Position of the outermost reference
    space: str            # Script-side namespace the text is emitted into
    clr_name: str = ''    # Managed name of the converted type


class TypeHandler(ABC):
    """Base class for custom type handlers"""

    @abstractmethod
    def ts_type(self, ctx: ConversionContext) -> str:
        """Return TypeScript type text"""
        pass


def requires_serialization(ref: TypeRef) -> bool:
    """True when values of `ref` cross the boundary as serialized JSON"""
    if isinstance(ref, (Custom, Generic, Map)):
        return True
    if isinstance(ref, Array):
        return bool(ref.collection) or requires_serialization(ref.element)
    if isinstance(ref, Nullable):
        return requires_serialization(ref.inner)
    if isinstance(ref, AsyncWrapper):
        return ref.inner is not None and requires_serialization(ref.inner)
    return False


class TypeConverter:
    """Manages type conversion from managed types to TypeScript"""

    def __init__(self, inspection: Optional['Inspection'] = None):
        self.inspection = inspection
        self._handlers: dict[str, TypeHandler] = {}

    def register(self, clr_name: str, handler: TypeHandler):
        """Register a custom type handler for an otherwise unmapped type"""
        self._handlers[clr_name] = handler

    def has_handler(self, clr_name: str) -> bool:
        """Check if a custom handler exists for this type"""
        return clr_name in self._handlers

    def get_handler(self, clr_name: str) -> Optional[TypeHandler]:
        """Get custom handler for type"""
        return self._handlers.get(clr_name)

    def convert(self, ref: TypeRef, position: Position, space: str) -> tuple[str, bool]:
        """Translate `ref` into (text, requires_serialization)"""
        return self.ts_type(ref, position, space), requires_serialization(ref)

    def ts_type(self, ref: TypeRef, position: Position, space: str) -> str:
        """Get TypeScript type for a type reference"""
        if isinstance(ref, Nullable):
            inner = self.ts_type(ref.inner, Position.NESTED, space)
            if position is Position.ARGUMENT:
                return f'{inner} | undefined'
            return f'{inner} | null'

        elif isinstance(ref, Primitive):
            return ref.bucket.value

        elif isinstance(ref, Array):
            return f'Array<{self.ts_type(ref.element, Position.NESTED, space)}>'

        elif isinstance(ref, Map):
            key = self.ts_type(ref.key, Position.NESTED, space)
            value = self.ts_type(ref.value, Position.NESTED, space)
            return f'Map<{key}, {value}>'

        elif isinstance(ref, AsyncWrapper):
            if ref.inner is None:
                return 'Promise<void>'
            return f'Promise<{self.ts_type(ref.inner, Position.NESTED, space)}>'

        elif isinstance(ref, Generic):
            args = ', '.join(self.ts_type(a, Position.NESTED, space) for a in ref.args)
            return f'{self.type_name(ref.identity, space)}<{args}>'

        elif isinstance(ref, Custom):
            return self.type_name(ref.identity, space)

        elif isinstance(ref, TypeParameter):
            return ref.name

        elif isinstance(ref, Unknown) and ref.clr_name in self._handlers:
            ctx = ConversionContext(position=position, space=space, clr_name=ref.clr_name)
            return self._handlers[ref.clr_name].ts_type(ctx)

        return 'any'

    def type_name(self, identity: TypeIdentity, space: str) -> str:
        """Type name, qualified unless declared in `space`"""
        js_space = self.js_space_of(identity)
        if js_space == space:
            return identity.name
        return f'{js_space}.{identity.name}'

    def js_space_of(self, identity: TypeIdentity) -> str:
        """Script-side namespace a custom type is declared under"""
        meta = self.inspection.get_type(identity) if self.inspection else None
        if meta is not None:
            return meta.js_space
        return identity.namespace or GLOBAL_NAMESPACE

