"""
Subject hooks and the registry that resolves them by key.
"""

from .registry import SubjectHook, FunctionHook, HookRegistry

__all__ = ["SubjectHook", "FunctionHook", "HookRegistry"]
