"""
Database model for student -> instructor access requests.

The request row is the only record of the relationship: a student may see an
instructor's quizzes iff an ``accepted`` request exists for the pair.
"""
from quizknow import db
from quizknow.common.time_utils import utcnow, isoformat


REQUEST_STATUSES = ('pending', 'accepted', 'rejected')
ACTIVE_STATUSES = ('pending', 'accepted')


def pair_key(student_id: int, instructor_id: int) -> str:
    return f"{student_id}:{instructor_id}"


class AccessRequest(db.Model):
    """Model for student requests to join an instructor."""
    __tablename__ = "access_requests"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    instructor_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)  # pending, accepted, rejected
    message = db.Column(db.Text, nullable=False, default="")
    requested_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)

    # Set while pending or accepted, cleared on rejection. The unique
    # constraint keeps one active request per pair while rejected rows
    # stay around as history.
    active_pair = db.Column(db.String(64), nullable=True)

    # Relationships
    student = db.relationship("User", foreign_keys=[student_id], backref="sent_requests")
    instructor = db.relationship("User", foreign_keys=[instructor_id], backref="received_requests")

    __table_args__ = (
        db.UniqueConstraint('active_pair', name='uq_access_requests_active_pair'),
        db.Index('ix_access_requests_pair_status', 'student_id', 'instructor_id', 'status'),
        db.Index('ix_access_requests_instructor_status', 'instructor_id', 'status'),
    )

    def __repr__(self) -> str:
        return f"<AccessRequest student={self.student_id} instructor={self.instructor_id} status={self.status}>"

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'student_id': self.student_id,
            'instructor_id': self.instructor_id,
            'status': self.status,
            'message': self.message,
            'requested_at': isoformat(self.requested_at),
            'decided_at': isoformat(self.decided_at),
            'rejection_reason': self.rejection_reason,
        }
        if self.student is not None:
            data['student'] = self.student.to_public_dict()
        if self.instructor is not None:
            data['instructor'] = self.instructor.to_public_dict()
        return data
