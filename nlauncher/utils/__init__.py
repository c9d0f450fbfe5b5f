"""Utility modules for the launcher."""

from .shell import ShellExecutor, strip_field_codes

__all__ = ["ShellExecutor", "strip_field_codes"]
