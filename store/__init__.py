"""
会话存储模块入口。
"""

from .session_store import ReachabilitySession, SessionRepo, session_repo

__all__ = [
    "ReachabilitySession",
    "SessionRepo",
    "session_repo",
]
