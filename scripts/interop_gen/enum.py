"""
Enum generation module

Generates enum declarations and the bidirectional lookup objects the
runtime bindings expose for them.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen, js_string

if TYPE_CHECKING:
    from .meta import TypeMeta


class EnumGenerator:
    """Generates enum declarations and lookups"""

    def generate_declaration(self, enum: 'TypeMeta', gen: CodeGen):
        """Generate `export enum` declaration preserving declared indices"""
        items = []
        implicit = 0
        for value in enum.values:
            if value.value == implicit:
                items.append(value.name)
            else:
                items.append(f'{value.name} = {value.value}')
            implicit = value.value + 1

        with gen.block(f'export enum {enum.identity.name} {{'):
            gen.separated(items)

    def generate_lookup(self, enum: 'TypeMeta') -> str:
        """Generate binding entry mapping value -> name and name -> value"""
        return f'{enum.identity.name}: {{ {", ".join(self.lookup_pairs(enum))} }}'

    @staticmethod
    def lookup_pairs(enum: 'TypeMeta') -> list[str]:
        """Value -> name pairs (first declared name wins), then name -> value"""
        by_value: dict[int, str] = {}
        for value in enum.values:
            by_value.setdefault(value.value, value.name)
        pairs = [f'{js_string(str(v))}: {js_string(n)}' for v, n in by_value.items()]
        pairs += [f'{js_string(v.name)}: {v.value}' for v in enum.values]
        return pairs
