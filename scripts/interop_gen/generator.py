"""
Main generator module

Orchestrates the crawler and the three emitters, producing the
declaration, binding and serializer artifacts for a set of modules.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Optional

from .binding import BindingGenerator
from .crawler import Crawler
from .declaration import DeclarationGenerator
from .errors import GenerationError
from .ir import IR
from .meta import Inspection
from .namespace import NamespaceResolver, NamespaceRule
from .serializer import SerializerGenerator
from .types import TypeConverter, TypeHandler

logger = logging.getLogger(__name__)

ARTIFACTS = ('declarations', 'bindings', 'serializer')


@dataclass
class Artifacts:
    """Generated texts, plus the failure of every artifact that could not be built"""
    declarations: str = ''
    bindings: str = ''
    serializer: str = ''
    errors: dict[str, GenerationError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class Generator:
    """Main interop generator"""

    def __init__(self, entry_module: str = ''):
        self.entry_module = entry_module
        self._modules: list[IR] = []
        self._ignores: set[str] = set()
        self._rules: list[NamespaceRule] = []
        self._type_handlers: dict[str, TypeHandler] = {}
        self._inspection: Optional[Inspection] = None

    def add_module(self, ir: IR) -> IR:
        """Add a compiled-module descriptor"""
        self._modules.append(ir)
        self._inspection = None
        return ir

    def load(self, json_path: str) -> IR:
        """Load and add a descriptor JSON file"""
        return self.add_module(IR.load(json_path))

    def ignore(self, *names: str):
        """Skip interop methods by full or short name"""
        self._ignores.update(names)
        self._inspection = None

    def namespace_rule(self, pattern: str, replacement: str):
        """Append a namespace override rule after the entry module's rules"""
        self._rules.append(NamespaceRule(pattern, replacement))
        self._inspection = None

    def type_handler(self, clr_name: str):
        """Decorator to register a type handler for an unmapped managed type"""
        def decorator(cls):
            self._type_handlers[clr_name] = cls()
            return cls
        return decorator

    def entry(self) -> Optional[IR]:
        """Entry module; the first module when none is named"""
        for ir in self._modules:
            if ir.assembly == self.entry_module:
                return ir
        if self.entry_module:
            logger.warning(f'Entry module {self.entry_module} not found, namespace rules from descriptors ignored')
            return None
        return self._modules[0] if self._modules else None

    def rules(self) -> list[NamespaceRule]:
        """Effective namespace override rules, in evaluation order"""
        rules = []
        entry = self.entry()
        if entry is not None:
            rules.extend(NamespaceRule(r.pattern, r.replacement) for r in entry.namespace_rules)
        rules.extend(self._rules)
        return rules

    def inspect(self) -> Inspection:
        """Crawl all modules; the result is cached until configuration changes"""
        if self._inspection is None:
            crawler = Crawler(NamespaceResolver(self.rules()), self._ignores)
            self._inspection = crawler.crawl(self._modules)
            self._report(self._inspection)
        return self._inspection

    def _report(self, inspection: Inspection):
        logger.info(f'Inspected {len(self._modules)} module(s): {len(inspection.methods)} method(s), '
                    f'{len(inspection.types)} type(s), {len(inspection.namespaces)} namespace(s)')
        for method in inspection.methods:
            logger.debug(f'  {method}')

    def generate(self) -> Artifacts:
        """Generate all artifacts; a failing emitter does not block the others"""
        inspection = self.inspect()
        type_conv = TypeConverter(inspection)
        for clr_name, handler in self._type_handlers.items():
            type_conv.register(clr_name, handler)

        emitters: dict[str, Callable[[], str]] = {
            'declarations': DeclarationGenerator(inspection, type_conv).generate,
            'bindings': BindingGenerator(inspection).generate,
            'serializer': SerializerGenerator(inspection).generate,
        }

        artifacts = Artifacts()
        for name in ARTIFACTS:
            try:
                setattr(artifacts, name, emitters[name]())
            except Exception as e:
                error = GenerationError(name, e)
                logger.error(str(error))
                artifacts.errors[name] = error
        return artifacts

    def write(self, declarations_path: str, bindings_path: str, serializer_path: str) -> Artifacts:
        """Generate and write every artifact that succeeded"""
        artifacts = self.generate()
        paths = {
            'declarations': declarations_path,
            'bindings': bindings_path,
            'serializer': serializer_path,
        }
        for name in ARTIFACTS:
            if name in artifacts.errors:
                continue
            path = paths[name]
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(getattr(artifacts, name))
            logger.info(f'Wrote {path}')
        return artifacts
