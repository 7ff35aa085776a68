"""Workflow template registry and built-in templates."""

from __future__ import annotations

from litestar_chatflow.templates.builtin import BASE_TEMPLATE, BUILTIN_TEMPLATES, asset_workflow
from litestar_chatflow.templates.registry import TemplateRegistry, normalize_name

__all__ = ["BASE_TEMPLATE", "BUILTIN_TEMPLATES", "TemplateRegistry", "asset_workflow", "normalize_name"]
