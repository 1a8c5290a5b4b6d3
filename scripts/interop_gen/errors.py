"""
Error types

Raised by the descriptor loader, the type-expression parser and the
generator when an artifact can't be produced.
"""


class InteropError(Exception):
    """Base class for interop_gen failures"""


class DescriptorError(InteropError):
    """Malformed compiled-module descriptor or type expression"""

    def __init__(self, message: str, module: str = ''):
        self.module = module
        if module:
            message = f'{module}: {message}'
        super().__init__(message)


class GenerationError(InteropError):
    """Failure while emitting one of the artifacts"""

    def __init__(self, artifact: str, cause: Exception):
        self.artifact = artifact
        self.cause = cause
        super().__init__(f'failed to generate {artifact}: {cause}')
