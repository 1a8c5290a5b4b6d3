"""
Code generation utilities

Provides an indentation-aware line builder and the naming helpers shared
by the emitters.
"""

# JavaScript reserved words and globals that can't name an arrow parameter
JS_RESERVED = {
    'arguments', 'await', 'break', 'case', 'catch', 'class', 'const',
    'continue', 'debugger', 'default', 'delete', 'do', 'else', 'enum',
    'eval', 'export', 'extends', 'false', 'finally', 'for', 'function',
    'if', 'implements', 'import', 'in', 'instanceof', 'interface', 'let',
    'new', 'null', 'package', 'private', 'protected', 'public', 'return',
    'static', 'super', 'switch', 'this', 'throw', 'true', 'try', 'typeof',
    'var', 'void', 'while', 'with', 'yield',
}

# Preferred substitutes; other reserved names get a trailing underscore
JS_SUBSTITUTES = {
    'function': 'fn',
}


class CodeGen:
    """Code generation helper with indentation support"""

    def __init__(self, indent_str: str = '    '):
        self._lines: list[str] = []
        self._indent: int = 0
        self._indent_str: str = indent_str

    def line(self, text: str = ''):
        """Add a line with current indentation; blank lines carry no indent"""
        self._lines.append(self._indent_str * self._indent + text if text else '')

    def lines(self, *texts: str):
        """Add multiple lines"""
        for text in texts:
            self.line(text)

    def indent(self):
        """Increase indentation"""
        self._indent += 1

    def dedent(self):
        """Decrease indentation"""
        if self._indent > 0:
            self._indent -= 1

    def block(self, header: str, footer: str = '}'):
        """Context manager for code blocks"""
        return _BlockContext(self, header, footer)

    def separated(self, items: list[str], sep: str = ','):
        """Add lines, terminating all but the last with `sep`"""
        for i, item in enumerate(items):
            self.line(item if i == len(items) - 1 else item + sep)

    def output(self) -> str:
        """Newline-terminated text; empty when nothing was generated"""
        return '\n'.join(self._lines) + '\n' if self._lines else ''


class _BlockContext:
    """Context manager for indented code blocks"""

    def __init__(self, gen: CodeGen, header: str, footer: str):
        self._gen = gen
        self._header = header
        self._footer = footer

    def __enter__(self):
        self._gen.line(self._header)
        self._gen.indent()
        return self

    def __exit__(self, *args):
        self._gen.dedent()
        self._gen.line(self._footer)


def as_camel_case(name: str) -> str:
    """Convert managed PascalCase name to script camelCase

    Examples:
        GetBackendName -> getBackendName
        IO -> io
        URLPath -> urlPath
    """
    if not name:
        return name
    upper = 0
    while upper < len(name) and name[upper].isupper():
        upper += 1
    if upper == 0:
        return name
    if upper == len(name):
        return name.lower()
    if upper == 1:
        return name[0].lower() + name[1:]
    # Acronym prefix: keep the last capital as start of the next word
    return name[:upper - 1].lower() + name[upper - 1:]


def lower_first(name: str) -> str:
    """Lowercase the first letter only: UIReady -> uIReady"""
    return name[:1].lower() + name[1:]


def safe_js_name(name: str) -> str:
    """Substitute argument names colliding with reserved identifiers"""
    if name in JS_SUBSTITUTES:
        return JS_SUBSTITUTES[name]
    if name in JS_RESERVED:
        return f'{name}_'
    return name


def js_string(text: str) -> str:
    """Double-quoted JavaScript string literal"""
    escaped = text.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'
