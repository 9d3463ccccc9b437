"""G-code parsing, arc expansion, toolpath line segments and table data models."""

__version__ = "0.1.0"
__all__ = ["segments", "preprocessor", "parser", "viewparse", "tables"]