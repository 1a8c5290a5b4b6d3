"""
Namespace resolution module

Maps managed-side namespaces to script-side namespace paths through an
ordered table of (pattern, replacement) override rules.
"""

import re
from dataclasses import dataclass

from .errors import DescriptorError
from .meta import GLOBAL_NAMESPACE

# `$1` / `${name}` group references, as written in override tables
_GROUP_REF_RE = re.compile(r'\$(?:(\d+)|\{(\w+)\})')


@dataclass(frozen=True)
class NamespaceRule:
    """Override rule; first matching rule wins"""
    pattern: str
    replacement: str


def _to_python_replacement(replacement: str) -> str:
    """Translate `$1`/`${name}` references into `\\g<1>`/`\\g<name>`"""
    escaped = replacement.replace('\\', '\\\\')
    return _GROUP_REF_RE.sub(lambda m: f'\\g<{m.group(1) or m.group(2)}>', escaped)


def _compile(rule: NamespaceRule) -> re.Pattern:
    try:
        return re.compile(rule.pattern)
    except re.error as e:
        raise DescriptorError(f'invalid namespace rule pattern "{rule.pattern}": {e}') from e


class NamespaceResolver:
    """Resolves script-side namespaces from managed namespaces"""

    def __init__(self, rules: list[NamespaceRule] = ()):
        self.rules = tuple(rules)
        self._compiled = [(_compile(r), r) for r in self.rules]
        self._cache: dict[str, str] = {}

    def resolve(self, space: str) -> str:
        """Resolve namespace; empty namespace maps to `Global`"""
        space = space or GLOBAL_NAMESPACE
        if space in self._cache:
            return self._cache[space]

        resolved = space
        for pattern, rule in self._compiled:
            if pattern.search(space):
                try:
                    resolved = pattern.sub(_to_python_replacement(rule.replacement), space)
                except re.error as e:
                    raise DescriptorError(f'invalid replacement "{rule.replacement}" '
                                          f'of namespace rule "{rule.pattern}": {e}') from e
                break

        resolved = resolved.strip('.') or GLOBAL_NAMESPACE
        self._cache[space] = resolved
        return resolved


def split_namespace(js_space: str) -> list[str]:
    """Split dotted namespace into segments"""
    return [part for part in js_space.split('.') if part]


def to_accessor_prefix(space: str) -> str:
    """Namespace as accessor-name prefix: `Foo.Bar` -> `Foo_Bar`"""
    return '_'.join(split_namespace(space))
