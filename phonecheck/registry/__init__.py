"""
phonecheck/registry — curated local registry, read-only.
"""

from phonecheck.registry.local_registry import LocalRegistry, category_label

__all__ = [
    "LocalRegistry",
    "category_label",
]
