"""Convenience exports for service helpers."""

from .reachability import ReachabilityControl

__all__ = ["ReachabilityControl"]
