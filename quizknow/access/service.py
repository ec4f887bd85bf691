"""
Access relationship store.

Every read and write gate in the quiz package asks ``AccessService.is_authorized``;
the accepted ``AccessRequest`` row is the only record of the relationship.
State transitions are single conditional statements so that two concurrent
decisions on the same request cannot both succeed.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quizknow import db
from quizknow.access.models import AccessRequest, ACTIVE_STATUSES, REQUEST_STATUSES, pair_key
from quizknow.auth.models import User
from quizknow.common.errors import (
    DuplicateRequest, Forbidden, InvalidState, InvalidTarget, NotFound, StorageError, ValidationError,
)
from quizknow.common.time_utils import utcnow
from quizknow.security.security_logger import SecurityLogger


DECISION_OUTCOMES = {'accept': 'accepted', 'reject': 'rejected'}


class AccessService:
    """Service class for the student/instructor access relationship."""

    @staticmethod
    def create_request(student_id: int, instructor_id: int, message: str = "") -> AccessRequest:
        """
        Create a pending request from a student to an instructor.

        Raises:
            Forbidden: caller is not a student account
            InvalidTarget: instructor_id is not an instructor account
            DuplicateRequest: a pending or accepted request already exists for the pair
        """
        student = db.session.get(User, student_id)
        if not student or not student.is_student():
            raise Forbidden("Only students can send requests")

        instructor = db.session.get(User, instructor_id)
        if not instructor or not instructor.is_instructor():
            raise InvalidTarget("Invalid instructor ID")

        existing = AccessRequest.query.filter(
            AccessRequest.student_id == student_id,
            AccessRequest.instructor_id == instructor_id,
            AccessRequest.status.in_(ACTIVE_STATUSES),
        ).first()
        if existing:
            raise DuplicateRequest("Request already sent")

        access_request = AccessRequest(
            student_id=student_id,
            instructor_id=instructor_id,
            status='pending',
            message=message or "",
            requested_at=utcnow(),
            active_pair=pair_key(student_id, instructor_id),
        )
        db.session.add(access_request)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost the race against a concurrent request for the same pair
            db.session.rollback()
            raise DuplicateRequest("Request already sent")
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"Error creating access request for student {student_id}")
            raise StorageError("Failed to send request") from e

        current_app.logger.info(
            f"Access request {access_request.id} created: student {student_id} -> instructor {instructor_id}"
        )
        return access_request

    @staticmethod
    def decide(request_id: int, deciding_instructor_id: int, outcome: str, reason: str = None) -> AccessRequest:
        """
        Accept or reject a pending request.

        The transition is one ``UPDATE ... WHERE status = 'pending'``; when no
        row matches, the request is re-read to report why.
        """
        new_status = DECISION_OUTCOMES.get(outcome)
        if new_status is None:
            raise ValidationError("outcome must be 'accept' or 'reject'")

        access_request = db.session.get(AccessRequest, request_id)
        if not access_request:
            raise NotFound("Request not found")
        if access_request.instructor_id != deciding_instructor_id:
            SecurityLogger.log_unauthorized_access(f"access_request:{request_id}", deciding_instructor_id)
            raise Forbidden(f"Only the instructor can {outcome} this request")

        values = {'status': new_status, 'decided_at': utcnow()}
        if new_status == 'rejected':
            values['active_pair'] = None
            values['rejection_reason'] = reason or ""

        try:
            updated = AccessRequest.query.filter_by(
                id=request_id,
                instructor_id=deciding_instructor_id,
                status='pending',
            ).update(values, synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"Error deciding access request {request_id}")
            raise StorageError("Failed to process request") from e

        db.session.refresh(access_request)
        if updated != 1:
            raise InvalidState("Request is not pending")

        SecurityLogger.log_request_decision(request_id, deciding_instructor_id, outcome)
        return access_request

    @staticmethod
    def cancel(request_id: int, requesting_student_id: int) -> None:
        """
        Withdraw a pending request. The row is removed.

        Instances the caller already holds keep their loaded attributes;
        ``db.session.get`` returns None for the id afterwards.
        """
        access_request = db.session.get(AccessRequest, request_id)
        if not access_request:
            raise NotFound("Request not found")
        if access_request.student_id != requesting_student_id:
            SecurityLogger.log_unauthorized_access(f"access_request:{request_id}", requesting_student_id)
            raise Forbidden("Only the student who sent the request can cancel it")

        try:
            deleted = AccessRequest.query.filter_by(
                id=request_id,
                student_id=requesting_student_id,
                status='pending',
            ).delete(synchronize_session='fetch')
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"Error cancelling access request {request_id}")
            raise StorageError("Failed to cancel request") from e

        if deleted != 1:
            raise InvalidState("Cannot cancel non-pending request")
        current_app.logger.info(f"Access request {request_id} cancelled by student {requesting_student_id}")

    @staticmethod
    def is_authorized(student_id: int, instructor_id: int) -> bool:
        """True iff an accepted request exists for the pair."""
        return db.session.query(
            AccessRequest.query.filter_by(
                student_id=student_id,
                instructor_id=instructor_id,
                status='accepted',
            ).exists()
        ).scalar()

    @staticmethod
    def authorized_instructor_ids(student_id: int) -> list[int]:
        rows = db.session.query(AccessRequest.instructor_id).filter_by(
            student_id=student_id,
            status='accepted',
        ).all()
        return [row.instructor_id for row in rows]

    @staticmethod
    def authorized_student_ids(instructor_id: int) -> list[int]:
        rows = db.session.query(AccessRequest.student_id).filter_by(
            instructor_id=instructor_id,
            status='accepted',
        ).all()
        return [row.student_id for row in rows]

    @staticmethod
    def list_instructors() -> list[User]:
        """Every instructor account, so students can find whom to ask."""
        return User.query.filter_by(role='instructor').order_by(User.last_name, User.first_name, User.id).all()

    @staticmethod
    def authorized_instructors(student_id: int) -> list[User]:
        """Instructors who accepted this student."""
        instructor_ids = AccessService.authorized_instructor_ids(student_id)
        if not instructor_ids:
            return []
        return User.query.filter(User.id.in_(instructor_ids)).order_by(User.last_name, User.first_name, User.id).all()

    @staticmethod
    def authorized_students(instructor_id: int) -> list[User]:
        """The instructor's roster."""
        student_ids = AccessService.authorized_student_ids(instructor_id)
        if not student_ids:
            return []
        return User.query.filter(User.id.in_(student_ids)).order_by(User.last_name, User.first_name, User.id).all()

    @staticmethod
    def list_received(instructor_id: int, status: str = None) -> list[AccessRequest]:
        """Requests addressed to an instructor, newest first."""
        query = AccessRequest.query.filter_by(instructor_id=instructor_id)
        if status:
            if status not in REQUEST_STATUSES:
                raise ValidationError(f"Unknown status: {status}")
            query = query.filter_by(status=status)
        return query.order_by(AccessRequest.requested_at.desc(), AccessRequest.id.desc()).all()

    @staticmethod
    def list_sent(student_id: int, status: str = None) -> list[AccessRequest]:
        """Requests sent by a student, newest first."""
        query = AccessRequest.query.filter_by(student_id=student_id)
        if status:
            if status not in REQUEST_STATUSES:
                raise ValidationError(f"Unknown status: {status}")
            query = query.filter_by(status=status)
        return query.order_by(AccessRequest.requested_at.desc(), AccessRequest.id.desc()).all()
