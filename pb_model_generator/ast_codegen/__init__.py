"""
PocketBase AST Code Generator Module

This module builds pydantic model modules for PocketBase collections as
structured fragments and renders them with the ast module.
"""

from .models import (
    MemberSpec,
    ModelClassSpec,
    ModelModule,
    build_model_module,
    generate_model_code,
    render_model_module,
)
from .geo_point import build_geo_point_module, generate_geo_point_code


__all__ = [
    'MemberSpec',
    'ModelClassSpec',
    'ModelModule',
    'build_model_module',
    'generate_model_code',
    'render_model_module',
    'build_geo_point_module',
    'generate_geo_point_code',
]
