"""
Security logging module.

This module provides specialized logging for security and audit events
such as unauthorized access, access-request decisions and quiz submissions.
"""

from flask import request, current_app, has_request_context
from datetime import datetime, timezone
import json


def _remote_addr() -> str:
    return request.remote_addr if has_request_context() else "-"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class SecurityLogger:
    """
    Security event logger.

    Logs security-related events for monitoring and auditing.
    """

    @staticmethod
    def log_unauthorized_access(resource: str, user_id: int = None):
        """
        Log unauthorized access attempt.

        Args:
            resource: Resource that was accessed
            user_id: User ID if authenticated
        """
        user_info = f"User ID: {user_id}" if user_id else "Unauthenticated"
        current_app.logger.warning(
            f"SECURITY: Unauthorized access - {user_info}, "
            f"Resource: {resource}, IP: {_remote_addr()}, "
            f"Time: {_timestamp()}"
        )

    @staticmethod
    def log_failed_login(email: str, reason: str = "Invalid credentials"):
        current_app.logger.warning(
            f"SECURITY: Failed login attempt - Email: {email}, "
            f"IP: {_remote_addr()}, Reason: {reason}, "
            f"Time: {_timestamp()}"
        )

    @staticmethod
    def log_request_decision(request_id: int, instructor_id: int, outcome: str):
        """
        Log an instructor's decision on a student's access request.

        Args:
            request_id: AccessRequest ID
            instructor_id: Deciding instructor
            outcome: 'accept' or 'reject'
        """
        current_app.logger.info(
            f"SECURITY: Access request {outcome} - Request ID: {request_id}, "
            f"Instructor ID: {instructor_id}, IP: {_remote_addr()}, "
            f"Time: {_timestamp()}"
        )

    @staticmethod
    def log_attempts_exceeded(quiz_id: int, student_id: int, limit: int):
        current_app.logger.warning(
            f"SECURITY: Attempt limit reached - Quiz ID: {quiz_id}, "
            f"Student ID: {student_id}, Limit: {limit}, IP: {_remote_addr()}, "
            f"Time: {_timestamp()}"
        )

    @staticmethod
    def log_submission(quiz_id: int, student_id: int, details: dict):
        """
        Log an accepted quiz submission.

        Args:
            quiz_id: Quiz ID
            student_id: Submitting student
            details: Score summary as dictionary
        """
        current_app.logger.info(
            f"AUDIT: Quiz submitted - Quiz ID: {quiz_id}, Student ID: {student_id}, "
            f"Details: {json.dumps(details)}, IP: {_remote_addr()}, "
            f"Time: {_timestamp()}"
        )
