"""
IR (Intermediate Representation) module

Reads and represents compiled-module descriptors: the interop methods a
module declares and the shapes of the custom types it defines. Type
references are kept as managed-side type expressions; the crawler resolves
them once every module is loaded.
"""

from dataclasses import dataclass, field
from typing import Optional
import json

from .errors import DescriptorError

METHOD_KINDS = ('invokable', 'function', 'event')
TYPE_KINDS = ('object', 'enum')


def type_key(full_name: str, arity: int) -> str:
    """Registry key of a type: full name plus generic arity, e.g. `n.Box`1`"""
    return f'{full_name}`{arity}' if arity else full_name


@dataclass
class ParamInfo:
    """Method parameter information"""
    name: str
    type: str


@dataclass
class MethodInfo:
    """Method declaration information"""
    kind: str
    namespace: str
    owner: str
    name: str
    params: list[ParamInfo]
    returns: str = 'void'

    @property
    def full_name(self) -> str:
        """Namespace-qualified name, e.g. `Foo.Bar.Program.Run`"""
        parts = [self.namespace, self.owner, self.name]
        return '.'.join(p for p in parts if p)


@dataclass
class MemberInfo:
    """Property of an object type"""
    name: str
    type: str
    is_static: bool = False
    is_computed: bool = False

    @property
    def is_instance_readable(self) -> bool:
        return not self.is_static and not self.is_computed


@dataclass
class EnumItem:
    """Enum item (constant)"""
    name: str
    value: Optional[int] = None


@dataclass
class TypeInfo:
    """Custom type declaration"""
    kind: str
    namespace: str
    name: str
    type_params: list[str] = field(default_factory=list)
    members: list[MemberInfo] = field(default_factory=list)
    items: list[EnumItem] = field(default_factory=list)
    extends: list[str] = field(default_factory=list)
    is_value_type: bool = False

    @property
    def full_name(self) -> str:
        return f'{self.namespace}.{self.name}' if self.namespace else self.name

    @property
    def arity(self) -> int:
        return len(self.type_params)

    @property
    def key(self) -> str:
        return type_key(self.full_name, self.arity)


@dataclass
class NamespaceRuleInfo:
    """Namespace override declared by a module"""
    pattern: str
    replacement: str


@dataclass
class IR:
    """Intermediate representation of a compiled module"""
    assembly: str
    methods: list[MethodInfo]
    types: dict[str, TypeInfo]
    namespace_rules: list[NamespaceRuleInfo] = field(default_factory=list)

    @classmethod
    def load(cls, json_path: str) -> 'IR':
        """Load IR from a JSON file"""
        with open(json_path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise DescriptorError(f'invalid JSON: {e}', json_path) from e
        return cls._from_dict(data, json_path)

    @classmethod
    def from_dict(cls, data: dict) -> 'IR':
        """Create IR from a dictionary"""
        return cls._from_dict(data, '')

    @classmethod
    def _from_dict(cls, data: dict, source: str) -> 'IR':
        """Internal: Parse dict into IR"""
        if not isinstance(data, dict):
            raise DescriptorError('descriptor must be a JSON object', source)
        assembly = data.get('assembly') or source
        if not assembly:
            raise DescriptorError('descriptor has no assembly name')

        types = {}
        for decl in data.get('types', []):
            info = cls._parse_type(decl, assembly)
            types[info.key] = info

        methods = [cls._parse_method(decl, assembly) for decl in data.get('methods', [])]

        rules = []
        for rule in data.get('namespace_rules', []):
            if 'pattern' not in rule:
                raise DescriptorError('namespace rule without pattern', assembly)
            rules.append(NamespaceRuleInfo(
                pattern=rule['pattern'],
                replacement=rule.get('replacement', ''),
            ))

        return cls(
            assembly=assembly,
            methods=methods,
            types=types,
            namespace_rules=rules,
        )

    @staticmethod
    def _parse_method(decl: dict, assembly: str) -> MethodInfo:
        """Parse method declaration"""
        if 'name' not in decl:
            raise DescriptorError('method without name', assembly)
        kind = str(decl.get('kind', '')).lower()
        params = []
        for p in decl.get('args', []):
            if 'name' not in p or 'type' not in p:
                raise DescriptorError(f'malformed argument of {decl["name"]}', assembly)
            params.append(ParamInfo(
                name=p['name'],
                type=p['type'],
            ))
        return MethodInfo(
            kind=kind,
            namespace=decl.get('namespace') or '',
            owner=decl.get('owner', ''),
            name=decl['name'],
            params=params,
            returns=decl.get('returns') or 'void',
        )

    @staticmethod
    def _parse_type(decl: dict, assembly: str) -> TypeInfo:
        """Parse custom type declaration"""
        if 'name' not in decl:
            raise DescriptorError('type without name', assembly)
        kind = decl.get('kind', 'object')
        if kind not in TYPE_KINDS:
            raise DescriptorError(f'unknown kind "{kind}" of type {decl["name"]}', assembly)

        members = []
        for m in decl.get('members', []):
            if 'name' not in m or 'type' not in m:
                raise DescriptorError(f'malformed member of {decl["name"]}', assembly)
            members.append(MemberInfo(
                name=m['name'],
                type=m['type'],
                is_static=bool(m.get('static', False)),
                is_computed=bool(m.get('computed', False)),
            ))

        items = []
        for item in decl.get('items', []):
            if 'name' not in item:
                raise DescriptorError(f'malformed item of {decl["name"]}', assembly)
            value = item.get('value')
            if value is not None:
                try:
                    value = int(value)
                except (TypeError, ValueError) as e:
                    raise DescriptorError(f'invalid value of {decl["name"]}.{item["name"]}: {value!r}',
                                          assembly) from e
            items.append(EnumItem(
                name=item['name'],
                value=value,
            ))

        return TypeInfo(
            kind=kind,
            namespace=decl.get('namespace') or '',
            name=decl['name'],
            type_params=list(decl.get('type_params', [])),
            members=members,
            items=items,
            extends=list(decl.get('extends', [])),
            is_value_type=bool(decl.get('value_type', kind == 'enum')),
        )

    def get_type(self, full_name: str, arity: int = 0) -> Optional[TypeInfo]:
        """Get custom type by full name and generic arity"""
        return self.types.get(type_key(full_name, arity))

    def interop_methods(self) -> list[MethodInfo]:
        """Return only methods tagged with an interop kind"""
        return [m for m in self.methods if m.kind in METHOD_KINDS]
