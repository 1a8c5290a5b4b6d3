"""
Declaration generation module

Generates the TypeScript declaration file: namespace blocks holding enum
and interface declarations followed by the interop method signatures.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen
from .enum import EnumGenerator
from .meta import MethodKind, Nullable
from .namespace import split_namespace
from .types import Position

if TYPE_CHECKING:
    from .meta import Inspection, MethodMeta, TypeMeta
    from .types import TypeConverter

HEADER = 'import type { Event } from "./event";'


class DeclarationGenerator:
    """Generates TypeScript declarations"""

    def __init__(self, inspection: 'Inspection', type_conv: 'TypeConverter'):
        self.inspection = inspection
        self.type_conv = type_conv
        self.enum_gen = EnumGenerator()

    def generate(self) -> str:
        """Generate declaration file content"""
        gen = CodeGen()
        gen.line(HEADER)
        for js_space in self.inspection.namespaces:
            types = self.inspection.types_in(js_space)
            methods = self.inspection.methods_in(js_space)
            if not types and not methods:
                continue
            gen.line()
            self._gen_namespace(js_space, types, methods, gen)
        return gen.output()

    def _gen_namespace(self, js_space: str, types: list['TypeMeta'],
                       methods: list['MethodMeta'], gen: CodeGen):
        segments = split_namespace(js_space)
        for segment in segments:
            gen.line(f'export namespace {segment} {{')
            gen.indent()

        for meta in types:
            if meta.is_enum:
                self.enum_gen.generate_declaration(meta, gen)
            else:
                self._gen_interface(meta, gen)
        for method in methods:
            gen.line(self._method_signature(method))

        for _ in segments:
            gen.dedent()
            gen.line('}')

    # ==========================================================================
    # Types
    # ==========================================================================

    def _gen_interface(self, meta: 'TypeMeta', gen: CodeGen):
        space = meta.js_space
        header = f'export interface {meta.identity.name}'
        if meta.type_params:
            header += f'<{", ".join(meta.type_params)}>'
        if meta.extends:
            bases = [self.type_conv.ts_type(b, Position.NESTED, space) for b in meta.extends]
            header += f' extends {", ".join(bases)}'

        with gen.block(header + ' {'):
            for member in meta.members:
                if isinstance(member.type, Nullable):
                    ts = self.type_conv.ts_type(member.type.inner, Position.MEMBER, space)
                    gen.line(f'{member.js_name}?: {ts};')
                else:
                    ts = self.type_conv.ts_type(member.type, Position.MEMBER, space)
                    gen.line(f'{member.js_name}: {ts};')

    # ==========================================================================
    # Methods
    # ==========================================================================

    def _method_signature(self, method: 'MethodMeta') -> str:
        space = method.js_space
        args = ', '.join(
            f'{a.name}: {self.type_conv.ts_type(a.type, Position.ARGUMENT, space)}'
            for a in method.arguments)

        if method.kind is MethodKind.EVENT:
            return f'export const {method.js_name}: Event<[{args}]>;'

        ret = self.type_conv.ts_type(method.return_value.type, Position.RETURN, space)
        if method.kind is MethodKind.FUNCTION:
            return f'export let {method.js_name}: ({args}) => {ret};'
        return f'export function {method.js_name}({args}): {ret};'
