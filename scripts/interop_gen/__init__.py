"""
interop_gen - interop surface generator for managed/script boundaries

This package reads compiled-module descriptors listing interop methods
(invokables, functions and events) together with the custom types they
reference, and emits three synchronized artifacts: TypeScript declarations,
JavaScript runtime bindings and a C# serializer context.
"""

from .ir import IR, MethodInfo, ParamInfo, TypeInfo, MemberInfo, EnumItem
from .meta import (
    Inspection, MethodMeta, MethodKind, TypeMeta, TypeIdentity, NamespaceNode,
)
from .namespace import NamespaceResolver, NamespaceRule
from .crawler import Crawler
from .types import TypeConverter, TypeHandler, ConversionContext, Position
from .codegen import CodeGen
from .enum import EnumGenerator
from .declaration import DeclarationGenerator
from .binding import BindingGenerator
from .serializer import SerializerGenerator
from .errors import InteropError, DescriptorError, GenerationError
from .generator import Generator, Artifacts

__all__ = [
    'IR', 'MethodInfo', 'ParamInfo', 'TypeInfo', 'MemberInfo', 'EnumItem',
    'Inspection', 'MethodMeta', 'MethodKind', 'TypeMeta', 'TypeIdentity', 'NamespaceNode',
    'NamespaceResolver', 'NamespaceRule',
    'Crawler',
    'TypeConverter', 'TypeHandler', 'ConversionContext', 'Position',
    'CodeGen',
    'EnumGenerator',
    'DeclarationGenerator',
    'BindingGenerator',
    'SerializerGenerator',
    'InteropError', 'DescriptorError', 'GenerationError',
    'Generator', 'Artifacts',
]
