from flask import jsonify, request
from flask_login import current_user

from quizknow.access import access_bp
from quizknow.access.schemas import AccessRequestCreate, AccessRequestDecision
from quizknow.access.service import AccessService
from quizknow.common.decorators import role_required, student_required, instructor_required
from quizknow.common.validation import parse_payload


@access_bp.route('/', methods=['POST'])
@student_required
def send_request():
    """API endpoint for a student to request access to an instructor."""
    data = request.get_json(silent=True) or {}
    # The instructor may also be passed as a query parameter
    if isinstance(data, dict) and 'instructor_id' not in data and request.args.get('instructor_id'):
        data['instructor_id'] = request.args.get('instructor_id')
    payload = parse_payload(AccessRequestCreate, data)

    access_request = AccessService.create_request(current_user.id, payload.instructor_id, payload.message)
    return jsonify({
        'success': True,
        'message': 'Request sent successfully',
        'request': access_request.to_dict(),
    }), 201


@access_bp.route('/received')
@instructor_required
def received_requests():
    """API endpoint for an instructor to list requests addressed to them."""
    requests = AccessService.list_received(current_user.id, request.args.get('status'))
    return jsonify({'success': True, 'requests': [r.to_dict() for r in requests]}), 200


@access_bp.route('/sent')
@student_required
def sent_requests():
    """API endpoint for a student to list the requests they sent."""
    requests = AccessService.list_sent(current_user.id, request.args.get('status'))
    return jsonify({'success': True, 'requests': [r.to_dict() for r in requests]}), 200


@access_bp.route('/<int:request_id>/accept', methods=['PUT'])
@instructor_required
def accept_request(request_id):
    access_request = AccessService.decide(request_id, current_user.id, 'accept')
    return jsonify({
        'success': True,
        'message': 'Request accepted successfully',
        'request': access_request.to_dict(),
    }), 200


@access_bp.route('/<int:request_id>/reject', methods=['PUT'])
@instructor_required
def reject_request(request_id):
    payload = parse_payload(AccessRequestDecision, request.get_json(silent=True))
    access_request = AccessService.decide(request_id, current_user.id, 'reject', payload.reason)
    return jsonify({
        'success': True,
        'message': 'Request rejected successfully',
        'request': access_request.to_dict(),
    }), 200


@access_bp.route('/<int:request_id>', methods=['DELETE'])
@student_required
def cancel_request(request_id):
    AccessService.cancel(request_id, current_user.id)
    return jsonify({'success': True, 'message': 'Request cancelled successfully'}), 200


@access_bp.route('/authorized/<int:instructor_id>')
@role_required('student')
def check_authorized(instructor_id):
    """Tell the current student whether they have access to an instructor."""
    return jsonify({
        'success': True,
        'instructor_id': instructor_id,
        'authorized': AccessService.is_authorized(current_user.id, instructor_id),
    }), 200


@access_bp.route('/instructors')
@role_required('student', 'instructor', 'admin')
def list_instructors():
    """Directory of instructor accounts a student can send a request to."""
    instructors = AccessService.list_instructors()
    return jsonify({'success': True, 'instructors': [u.to_public_dict() for u in instructors]}), 200


@access_bp.route('/my-instructors')
@student_required
def my_instructors():
    """Instructors who accepted the current student."""
    instructors = AccessService.authorized_instructors(current_user.id)
    return jsonify({'success': True, 'instructors': [u.to_public_dict() for u in instructors]}), 200


@access_bp.route('/students')
@instructor_required
def list_students():
    """The current instructor's roster: students with an accepted request."""
    students = AccessService.authorized_students(current_user.id)
    return jsonify({'success': True, 'students': [u.to_public_dict() for u in students]}), 200
