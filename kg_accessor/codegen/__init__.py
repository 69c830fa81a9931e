"""Code generation from the schema registry."""

from kg_accessor.codegen.stubs import StubGenerator, class_name_for, render_stubs

__all__ = [
    "StubGenerator",
    "class_name_for",
    "render_stubs",
]
