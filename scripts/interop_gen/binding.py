"""
Binding generation module

Generates the JavaScript runtime bindings: one exported object per root
namespace segment holding invokable adapters, function slots, events and
enum lookups.
"""

from typing import Union, TYPE_CHECKING

from .codegen import CodeGen
from .enum import EnumGenerator
from .meta import MethodKind, NamespaceNode
from .namespace import to_accessor_prefix
from .types import requires_serialization

if TYPE_CHECKING:
    from .meta import ArgumentMeta, Inspection, MethodMeta

HEADER = (
    'import { exports } from "./exports";',
    'import { Event } from "./event";',
    'function getExports () { if (exports == null) throw Error("Boot the runtime before invoking C# APIs."); return exports; }',
    'function serialize(obj) { return JSON.stringify(obj); }',
    'function deserialize(json) { const result = JSON.parse(json); if (result === null) return undefined; return result; }',
    'export { Event, serialize, deserialize };',
)


def _has_bindings(node: NamespaceNode) -> bool:
    if node.methods or any(t.is_enum for t in node.types):
        return True
    return any(_has_bindings(c) for c in node.children)


def _bound_children(node: NamespaceNode) -> list[NamespaceNode]:
    """Child nodes holding bindings, by name"""
    return sorted((c for c in node.children if _has_bindings(c)), key=lambda c: c.name)


def _params(args: tuple['ArgumentMeta', ...]) -> str:
    return ', '.join(a.js_name for a in args)


def _wrapped(args: tuple['ArgumentMeta', ...], wrapper: str) -> str:
    """Arguments, wrapping the ones crossing the boundary serialized"""
    return ', '.join(f'{wrapper}({a.js_name})' if requires_serialization(a.type) else a.js_name
                     for a in args)


class BindingGenerator:
    """Generates JavaScript bindings"""

    def __init__(self, inspection: 'Inspection'):
        self.inspection = inspection
        self.enum_gen = EnumGenerator()

    def generate(self) -> str:
        """Generate bindings file content; empty when there are no methods"""
        if not self.inspection.methods:
            return ''

        gen = CodeGen()
        gen.lines(*HEADER)
        gen.line()
        for root in _bound_children(self.inspection.root):
            with gen.block(f'export const {root.name} = {{', '};'):
                self._gen_object(root, gen)
        return gen.output()

    def _gen_object(self, node: NamespaceNode, gen: CodeGen):
        entries: list[Union[str, NamespaceNode]] = []
        for method in node.methods:
            entries.extend(self.method_entries(method))
        for meta in node.types:
            if meta.is_enum:
                entries.append(self.enum_gen.generate_lookup(meta))
        entries.extend(_bound_children(node))

        for i, entry in enumerate(entries):
            sep = '' if i == len(entries) - 1 else ','
            if isinstance(entry, NamespaceNode):
                with gen.block(f'{entry.name}: {{', '}' + sep):
                    self._gen_object(entry, gen)
            else:
                gen.line(entry + sep)

    def method_entries(self, method: 'MethodMeta') -> list[str]:
        """Object entries binding one interop method"""
        if method.kind is MethodKind.INVOKABLE:
            return [self._invokable(method)]
        if method.kind is MethodKind.FUNCTION:
            return self._function(method)
        return self._event(method)

    # ==========================================================================
    # Method kinds
    # ==========================================================================

    @staticmethod
    def accessor(method: 'MethodMeta') -> str:
        """Exports accessor: underscored source namespace plus owner name"""
        prefix = to_accessor_prefix(method.space)
        return f'{prefix}_{method.owner}' if prefix else method.owner

    def _invokable(self, method: 'MethodMeta') -> str:
        params = _params(method.arguments)
        call = (f'getExports().{self.accessor(method)}.{method.name}'
                f'({_wrapped(method.arguments, "serialize")})')

        ret = method.return_value
        if not requires_serialization(ret.type):
            return f'{method.js_name}: ({params}) => {call}'
        if ret.is_async:
            return f'{method.js_name}: async ({params}) => deserialize(await {call})'
        return f'{method.js_name}: ({params}) => deserialize({call})'

    def _function(self, method: 'MethodMeta') -> list[str]:
        name = method.js_name
        path = f'{method.js_space}.{name}'
        params = _params(method.arguments)
        call = f'this.{name}Handler({_wrapped(method.arguments, "deserialize")})'

        ret = method.return_value
        if not requires_serialization(ret.type):
            wire = f'({params}) => {call}'
        elif ret.is_async:
            wire = f'async ({params}) => serialize(await {call})'
        else:
            wire = f'({params}) => serialize({call})'

        return [
            f'get {name}() {{ return this.{name}Handler; }}',
            f'set {name}(handler) {{ this.{name}Handler = handler; this.{name}SerializedHandler = {wire}; }}',
            f'get {name}Serialized() {{ if (typeof this.{name}Handler !== "function") '
            f'throw Error("Failed to invoke \'{path}\' from C#. Make sure to assign function in JavaScript."); '
            f'return this.{name}SerializedHandler; }}',
        ]

    def _event(self, method: 'MethodMeta') -> list[str]:
        name = method.js_name
        params = _params(method.arguments)
        broadcast = f'{method.js_space}.{name}.broadcast({_wrapped(method.arguments, "deserialize")})'
        return [
            f'{name}: new Event()',
            f'{name}Serialized: ({params}) => {broadcast}',
        ]
