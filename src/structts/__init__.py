"""Generate TypeScript type declarations from Go source packages."""

__version__ = "0.1.0"
