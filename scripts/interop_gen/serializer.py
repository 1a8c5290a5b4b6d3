"""
Serializer registration module

Generates the C# serializer context listing every type crossing the
boundary serialized, so the managed side can resolve its type info
without reflection.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen
from .meta import (
    TypeRef, Primitive, Nullable, Array, Map, Generic, Custom, AsyncWrapper,
    TypeParameter, Unknown, strip_nullable,
)
from .types import requires_serialization

if TYPE_CHECKING:
    from .meta import Inspection, TypeIdentity

LIST_INTERFACES = {
    'System.Collections.Generic.IList',
    'System.Collections.Generic.IReadOnlyList',
    'System.Collections.Generic.ICollection',
    'System.Collections.Generic.IReadOnlyCollection',
}

DICT_INTERFACES = {
    'System.Collections.Generic.IDictionary',
    'System.Collections.Generic.IReadOnlyDictionary',
}

REFERENCE_PRIMITIVES = {'System.String', 'System.Object', 'System.Void'}

VALUE_UNMAPPED = {'System.Guid', 'System.TimeSpan'}


class SerializerGenerator:
    """Generates serializer context registrations"""

    def __init__(self, inspection: 'Inspection'):
        self.inspection = inspection
        self._seen: set[str] = set()
        self._registrations: list[str] = []

    def generate(self) -> str:
        """Generate serializer file content; empty when nothing is registered"""
        registrations = self.collect()
        if not registrations:
            return ''

        gen = CodeGen()
        gen.line('using System.Text.Json.Serialization;')
        gen.line()
        for text in registrations:
            gen.line(f'[JsonSerializable(typeof({text}))]')
        gen.line('internal partial class SerializerContext : JsonSerializerContext')
        with gen.block('{'):
            gen.line('[System.Runtime.CompilerServices.ModuleInitializer]')
            gen.line('internal static void InjectTypeInfoResolver ()')
            with gen.block('{'):
                gen.line('Serializer.Options.TypeInfoResolverChain.Add(SerializerContext.Default);')
        return gen.output()

    def collect(self) -> list[str]:
        """Registrations in emission order, deduplicated by rendered text"""
        self._seen = set()
        self._registrations = []
        for method in self.inspection.methods:
            for arg in method.arguments:
                self._register(arg.type)
            self._register(method.return_value.type)
        for meta in self.inspection.types.values():
            if not meta.type_params:
                self._add(self.render(Custom(meta.identity)))
        return self._registrations

    def _add(self, text: str):
        if text not in self._seen:
            self._seen.add(text)
            self._registrations.append(text)

    def _register(self, ref: TypeRef):
        if not requires_serialization(ref):
            return
        ref = strip_nullable(ref)

        if isinstance(ref, AsyncWrapper):
            self._add(f'({self.render(ref.inner)}, byte)')
            self._register(ref.inner)
            return

        self._add(self.render(ref))
        if isinstance(ref, Array) and ref.collection in LIST_INTERFACES:
            element = self.render(ref.element)
            self._add(f'global::System.Collections.Generic.List<{element}>')
            self._add(f'{element}[]')
        elif isinstance(ref, Map) and ref.collection in DICT_INTERFACES:
            self._add(f'global::System.Collections.Generic.Dictionary<'
                      f'{self.render(ref.key)}, {self.render(ref.value)}>')

    # ==========================================================================
    # Rendering
    # ==========================================================================

    def render(self, ref: TypeRef) -> str:
        """Canonical managed-side type text"""
        if isinstance(ref, Nullable):
            inner = self.render(ref.inner)
            return f'{inner}?' if self.is_value_type(ref.inner) else inner
        if isinstance(ref, Primitive):
            return f'global::{ref.clr_name}'
        if isinstance(ref, Array):
            if not ref.collection:
                return f'{self.render(ref.element)}[]'
            return f'global::{ref.collection}<{self.render(ref.element)}>'
        if isinstance(ref, Map):
            return f'global::{ref.collection}<{self.render(ref.key)}, {self.render(ref.value)}>'
        if isinstance(ref, Generic):
            args = ', '.join(self.render(a) for a in ref.args)
            return f'global::{ref.identity.full_name}<{args}>'
        if isinstance(ref, Custom):
            return f'global::{ref.identity.full_name}'
        if isinstance(ref, AsyncWrapper):
            return f'({self.render(ref.inner)}, byte)' if ref.inner is not None else 'global::System.Threading.Tasks.Task'
        if isinstance(ref, TypeParameter):
            return ref.name
        if isinstance(ref, Unknown) and '.' in ref.clr_name:
            if not ref.args:
                return f'global::{ref.clr_name}'
            args = ', '.join(self.render(a) for a in ref.args)
            return f'global::{ref.clr_name}<{args}>'
        # Unqualified names cannot be addressed from the generated file
        return 'global::System.Object'

    def is_value_type(self, ref: TypeRef) -> bool:
        if isinstance(ref, Primitive):
            return ref.clr_name not in REFERENCE_PRIMITIVES and not ref.clr_name.endswith('[]')
        if isinstance(ref, (Custom, Generic)):
            return self._is_value_identity(ref.identity)
        if isinstance(ref, Unknown):
            return ref.clr_name in VALUE_UNMAPPED
        return False

    def _is_value_identity(self, identity: 'TypeIdentity') -> bool:
        meta = self.inspection.get_type(identity)
        return meta is not None and meta.is_value_type
