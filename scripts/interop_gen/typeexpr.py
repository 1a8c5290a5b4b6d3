"""
Type expression module

Parses managed-side type expressions (`int?`, `List<n.Item>`, `Foo[]?[]`,
`Task<byte[]?>`) and resolves them into TypeRef values against the custom
types declared by the loaded modules.
"""

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import DescriptorError
from .ir import TypeInfo, type_key
from .meta import (
    Bucket, TypeIdentity, TypeRef,
    Primitive, Nullable, Array, Map, Generic, Custom, AsyncWrapper,
    TypeParameter, Unknown,
)

# C# keyword aliases
ALIASES = {
    'bool': 'System.Boolean',
    'byte': 'System.Byte',
    'sbyte': 'System.SByte',
    'short': 'System.Int16',
    'ushort': 'System.UInt16',
    'int': 'System.Int32',
    'uint': 'System.UInt32',
    'long': 'System.Int64',
    'ulong': 'System.UInt64',
    'float': 'System.Single',
    'double': 'System.Double',
    'decimal': 'System.Decimal',
    'char': 'System.Char',
    'string': 'System.String',
    'object': 'System.Object',
    'void': 'System.Void',
}

PRIMITIVES = {
    'System.Boolean': Bucket.BOOLEAN,
    'System.Byte': Bucket.NUMBER,
    'System.SByte': Bucket.NUMBER,
    'System.Int16': Bucket.NUMBER,
    'System.UInt16': Bucket.NUMBER,
    'System.Int32': Bucket.NUMBER,
    'System.UInt32': Bucket.NUMBER,
    'System.Int64': Bucket.BIGINT,
    'System.UInt64': Bucket.BIGINT,
    'System.Single': Bucket.NUMBER,
    'System.Double': Bucket.NUMBER,
    'System.Decimal': Bucket.NUMBER,
    'System.Char': Bucket.STRING,
    'System.String': Bucket.STRING,
    'System.DateTime': Bucket.DATE,
    'System.DateTimeOffset': Bucket.DATE,
    'System.Void': Bucket.VOID,
}

# Native integer arrays map to typed arrays instead of Array<number>
TYPED_ARRAYS = {
    'System.Byte': Bucket.UINT8_ARRAY,
    'System.SByte': Bucket.INT8_ARRAY,
    'System.UInt16': Bucket.UINT16_ARRAY,
    'System.Int16': Bucket.INT16_ARRAY,
    'System.UInt32': Bucket.UINT32_ARRAY,
    'System.Int32': Bucket.INT32_ARRAY,
    'System.Int64': Bucket.BIGINT64_ARRAY,
    'System.UInt64': Bucket.BIGUINT64_ARRAY,
}

LIST_COLLECTIONS = {
    'System.Collections.Generic.List',
    'System.Collections.Generic.IList',
    'System.Collections.Generic.IReadOnlyList',
    'System.Collections.Generic.ICollection',
    'System.Collections.Generic.IReadOnlyCollection',
}

DICT_COLLECTIONS = {
    'System.Collections.Generic.Dictionary',
    'System.Collections.Generic.IDictionary',
    'System.Collections.Generic.IReadOnlyDictionary',
}

ASYNC_TYPES = {
    'System.Threading.Tasks.Task',
    'System.Threading.Tasks.ValueTask',
}

# Recognized but unmapped; resolved to Unknown under their full name
OTHER_KNOWN = {
    'System.Object',
    'System.Guid',
    'System.TimeSpan',
    'System.Uri',
    'System.DBNull',
    'System.Collections.Generic.IEnumerable',
    'System.Collections.Generic.ISet',
    'System.Collections.Generic.HashSet',
}

# Namespaces searched for well-known short names (`List<T>`, `Task`, `DateTime`)
IMPLICIT_NAMESPACES = ('System', 'System.Collections.Generic', 'System.Threading.Tasks')

_TOKEN_RE = re.compile(r'\s*(?:(global::)|([A-Za-z_][A-Za-z0-9_]*)|(\[\s*\])|(.))')


@dataclass
class TypeExpr:
    """Syntactic type expression"""
    name: str
    args: list['TypeExpr'] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)  # '?' and '[]', innermost first

    def __str__(self) -> str:
        text = self.name
        if self.args:
            text += '<' + ', '.join(str(a) for a in self.args) + '>'
        return text + ''.join(self.suffixes)


def _tokenize(text: str) -> list[str]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            break
        pos = m.end()
        if m.group(1):
            continue
        if m.group(3):
            tokens.append('[]')
        else:
            tokens.append(m.group(2) or m.group(4))
    return tokens


class _Parser:
    """Recursive-descent parser over type expression tokens"""

    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def parse(self) -> TypeExpr:
        expr = self._type()
        if self.pos != len(self.tokens):
            self._fail(f'unexpected "{self.tokens[self.pos]}"')
        return expr

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            self._fail('unexpected end')
        self.pos += 1
        return token

    def _expect(self, token: str):
        if self._take() != token:
            self._fail(f'expected "{token}"')

    def _fail(self, reason: str):
        raise DescriptorError(f'invalid type expression "{self.text}": {reason}')

    def _type(self) -> TypeExpr:
        expr = TypeExpr(name=self._qualified_name())
        if self._peek() == '<':
            self._take()
            expr.args.append(self._type())
            while self._peek() == ',':
                self._take()
                expr.args.append(self._type())
            self._expect('>')
        while self._peek() in ('?', '[]'):
            expr.suffixes.append(self._take())
        return expr

    def _qualified_name(self) -> str:
        parts = [self._identifier()]
        while self._peek() in ('.', '+'):
            self._take()
            parts.append(self._identifier())
        return '.'.join(parts)

    def _identifier(self) -> str:
        token = self._take()
        if not (token[0].isalpha() or token[0] == '_'):
            self._fail(f'expected identifier, got "{token}"')
        return token


def parse_type_expr(text: str) -> TypeExpr:
    """Parse a type expression string"""
    return _Parser(text).parse()


class TypeExprResolver:
    """Resolves type expressions into TypeRef values"""

    def __init__(self, registry: Mapping[str, TypeInfo]):
        self.registry = registry

    def resolve(self, text: str, space: str = '', type_params: tuple[str, ...] = ()) -> TypeRef:
        """Parse and resolve `text` referenced from namespace `space`"""
        return self.resolve_expr(parse_type_expr(text), space, type_params)

    def resolve_expr(self, expr: TypeExpr, space: str, type_params: tuple[str, ...] = ()) -> TypeRef:
        ref = self._resolve_named(expr, space, type_params)
        for suffix in expr.suffixes:
            if suffix == '?':
                if not isinstance(ref, Nullable):
                    ref = Nullable(ref)
            else:
                ref = self._array_of(ref)
        return ref

    def lookup(self, name: str, space: str, arity: int) -> Optional[TypeInfo]:
        """Find a custom type, searching enclosing namespaces of `space`"""
        parts = space.split('.') if space else []
        for i in range(len(parts), -1, -1):
            candidate = '.'.join(parts[:i] + [name])
            info = self.registry.get(type_key(candidate, arity))
            if info is not None:
                return info
        return None

    def _array_of(self, element: TypeRef) -> TypeRef:
        if isinstance(element, Primitive) and element.clr_name in TYPED_ARRAYS:
            return Primitive(TYPED_ARRAYS[element.clr_name], f'{element.clr_name}[]')
        return Array(element)

    def _well_known(self, name: str) -> Optional[str]:
        """Full name of a well-known type, if `name` denotes one"""
        if name in ALIASES:
            return ALIASES[name]
        known = PRIMITIVES.keys() | LIST_COLLECTIONS | DICT_COLLECTIONS | ASYNC_TYPES
        known |= OTHER_KNOWN | {'System.Nullable'}
        if name in known:
            return name
        for space in IMPLICIT_NAMESPACES:
            if f'{space}.{name}' in known:
                return f'{space}.{name}'
        return None

    def _resolve_named(self, expr: TypeExpr, space: str, type_params: tuple[str, ...]) -> TypeRef:
        name = expr.name
        args = expr.args

        if not args and name in type_params:
            return TypeParameter(name)

        # Declared types shadow well-known names from enclosing namespaces
        info = self.lookup(name, space, len(args))
        full = self._well_known(name) if info is None else None

        if full is not None:
            resolved = [self.resolve_expr(a, space, type_params) for a in args]
            if full in PRIMITIVES and not resolved:
                return Primitive(PRIMITIVES[full], full)
            if full == 'System.Nullable' and len(resolved) == 1:
                return resolved[0] if isinstance(resolved[0], Nullable) else Nullable(resolved[0])
            if full in LIST_COLLECTIONS and len(resolved) == 1:
                return Array(resolved[0], full)
            if full in DICT_COLLECTIONS and len(resolved) == 2:
                return Map(resolved[0], resolved[1], full)
            if full in ASYNC_TYPES and len(resolved) <= 1:
                return AsyncWrapper(resolved[0] if resolved else None)
            return Unknown(full, tuple(resolved))

        if info is not None:
            identity = TypeIdentity(info.namespace, info.name, info.arity)
            if not args:
                return Custom(identity)
            resolved = tuple(self.resolve_expr(a, space, type_params) for a in args)
            return Generic(identity, resolved)

        resolved = tuple(self.resolve_expr(a, space, type_params) for a in args)
        return Unknown(name, resolved)
