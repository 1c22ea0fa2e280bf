"""
Transform rules for graph-transform.

Rules derive flat documents from a graph. They are supplied to the pipeline
through an explicit RuleRegistry.
"""

from .base import TransformRule
from .builtin import EdgeDocumentRule, LabelDocumentRule
from .registry import RuleRegistry, default_registry, register_rule

__all__ = [
    "TransformRule",
    "EdgeDocumentRule",
    "LabelDocumentRule",
    "RuleRegistry",
    "default_registry",
    "register_rule",
]
