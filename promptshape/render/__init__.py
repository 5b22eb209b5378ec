"""
Prompt rendering.

Components:
    - stringifier: render(), render_shape(), render_enum_values(), render_value()
"""

from promptshape.render.stringifier import render, render_enum_values, render_shape, render_value

__all__ = ["render", "render_enum_values", "render_shape", "render_value"]
