"""
Security module for the application.

Provides audit logging for unauthorized access, access-request decisions
and quiz submissions.
"""

from .security_logger import SecurityLogger

__all__ = [
    'SecurityLogger',
]
