class StructTSError(Exception):
    """Base exception for all structts errors."""
    pass

class UnsupportedConstruct(StructTSError):
    """Raised when a type expression has no TypeScript translation rule."""

    def __init__(self, node: str, kind: str):
        self.node = node
        self.kind = kind
        super().__init__(f"Unsupported construct ({kind}): {node}")

class MalformedTag(StructTSError):
    """Raised when a struct field tag cannot be parsed."""

    def __init__(self, tag: str, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f"Malformed struct tag {tag!r}: {reason}")

class ConfigError(StructTSError):
    """Raised for configuration loading and validation errors."""
    pass

class GenerationError(StructTSError):
    """Raised when a package cannot be generated."""
    pass
