"""
Test cases for the HTTP surface: role gates, status codes and the error envelope.
"""
from quizknow.access.service import AccessService
from quizknow.quiz.submission import SubmissionPipeline


class TestRequestRoutes:
    """Test cases for /api/requests."""

    def test_request_accept_flow(self, login, student, instructor):
        """Send, list, accept and check a request over HTTP."""
        student_client = login(student)
        response = student_client.post('/api/requests/', json={'instructor_id': instructor.id, 'message': 'Hi'})
        assert response.status_code == 201
        request_id = response.get_json()['request']['id']

        duplicate = student_client.post('/api/requests/', json={'instructor_id': instructor.id})
        assert duplicate.status_code == 409
        assert duplicate.get_json() == {'success': False, 'error': 'Request already sent', 'code': 'duplicate_request'}

        instructor_client = login(instructor)
        received = instructor_client.get('/api/requests/received?status=pending').get_json()['requests']
        assert [r['id'] for r in received] == [request_id]

        accepted = instructor_client.put(f'/api/requests/{request_id}/accept')
        assert accepted.status_code == 200
        assert accepted.get_json()['request']['status'] == 'accepted'

        check = student_client.get(f'/api/requests/authorized/{instructor.id}').get_json()
        assert check['authorized'] is True
        again = instructor_client.put(f'/api/requests/{request_id}/reject', json={'reason': 'late'})
        assert again.status_code == 409

    def test_instructor_id_from_query_string(self, login, student, instructor):
        """The instructor id may come from the query string."""
        response = login(student).post(f'/api/requests/?instructor_id={instructor.id}')
        assert response.status_code == 201

    def test_invalid_target_and_validation(self, login, student, make_user):
        """Bad targets and malformed ids get 400."""
        client = login(student)
        other_student = make_user('student')
        assert client.post('/api/requests/', json={'instructor_id': other_student.id}).status_code == 400
        response = client.post('/api/requests/', json={'instructor_id': 'abc'})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'validation_error'

    def test_role_gates(self, login, student, instructor, client):
        """Anonymous callers get 401, wrong roles get 403."""
        assert client.post('/api/requests/', json={'instructor_id': instructor.id}).status_code == 401
        assert login(instructor).post('/api/requests/', json={'instructor_id': instructor.id}).status_code == 403
        assert login(student).get('/api/requests/received').status_code == 403

    def test_reject_and_cancel(self, login, student, instructor):
        """A rejected request stays as history, a cancelled one disappears."""
        first = AccessService.create_request(student.id, instructor.id)
        rejected = login(instructor).put(f'/api/requests/{first.id}/reject', json={'reason': 'Full'})
        assert rejected.get_json()['request']['rejection_reason'] == 'Full'

        second_id = AccessService.create_request(student.id, instructor.id).id
        client = login(student)
        assert client.delete(f'/api/requests/{second_id}').status_code == 200
        assert client.delete(f'/api/requests/{second_id}').status_code == 404
        sent = client.get('/api/requests/sent').get_json()['requests']
        assert [r['status'] for r in sent] == ['rejected']

    def test_other_instructor_cannot_decide(self, login, student, instructor, other_instructor):
        """Only the addressed instructor can decide a request."""
        access_request = AccessService.create_request(student.id, instructor.id)
        response = login(other_instructor).put(f'/api/requests/{access_request.id}/accept')
        assert response.status_code == 403
        assert response.get_json()['code'] == 'forbidden'

    def test_roster(self, login, student, instructor, authorize, make_user):
        """The roster lists accepted students as public user records."""
        authorize(student, instructor)
        AccessService.create_request(make_user('student').id, instructor.id)

        students = login(instructor).get('/api/requests/students').get_json()['students']

        assert students == [student.to_public_dict()]
        assert 'password_hash' not in students[0]
        assert students[0]['full_name'] == 'Sam Tester'

    def test_instructor_directory(self, login, student, instructor, other_instructor):
        """Any signed-in user can list instructors to find an id to request."""
        response = login(student).get('/api/requests/instructors')
        assert response.status_code == 200
        names = [u['full_name'] for u in response.get_json()['instructors']]
        assert names == ['Ines Tester', 'Oscar Tester']
        assert all(u['role'] == 'instructor' for u in response.get_json()['instructors'])

    def test_instructor_directory_requires_login(self, client):
        """Anonymous callers get the JSON 401."""
        assert client.get('/api/requests/instructors').status_code == 401

    def test_my_instructors(self, login, student, instructor, other_instructor, authorize):
        """Only instructors who accepted the student are listed."""
        authorize(student, instructor)
        AccessService.create_request(student.id, other_instructor.id)

        client = login(student)
        response = client.get('/api/requests/my-instructors')
        assert response.status_code == 200
        assert [u['id'] for u in response.get_json()['instructors']] == [instructor.id]
        assert login(instructor).get('/api/requests/my-instructors').status_code == 403


class TestQuizRoutes:
    """Test cases for /api/quizzes."""

    def test_create_and_student_view(self, login, student, instructor, authorize, quiz_data):
        """Instructors see the answer key, students do not."""
        authorize(student, instructor)
        instructor_client = login(instructor)

        created = instructor_client.post('/api/quizzes/', json=quiz_data())
        assert created.status_code == 201
        quiz = created.get_json()['quiz']
        assert quiz['questions'][0]['correct_answer'] == 'B'

        student_view = login(student).get(f"/api/quizzes/{quiz['id']}").get_json()['quiz']
        assert 'correct_answer' not in student_view['questions'][0]
        assert all('is_correct' not in o for o in student_view['questions'][0]['options'])

        listed = login(student).get('/api/quizzes/').get_json()['quizzes']
        assert [q['id'] for q in listed] == [quiz['id']]

    def test_create_validation_error(self, login, instructor, quiz_data):
        """An invalid quiz body gets the validation envelope."""
        response = login(instructor).post('/api/quizzes/', json=quiz_data(title=''))
        assert response.status_code == 400
        assert response.get_json()['code'] == 'validation_error'

    def test_non_object_body(self, login, instructor):
        """A JSON body that is not an object is refused."""
        response = login(instructor).post('/api/quizzes/', json=['not', 'an', 'object'])
        assert response.status_code == 400

    def test_students_cannot_manage(self, login, student, instructor, make_quiz, quiz_data):
        """Students cannot create or delete quizzes."""
        quiz = make_quiz(instructor)
        client = login(student)
        assert client.post('/api/quizzes/', json=quiz_data()).status_code == 403
        assert client.delete(f'/api/quizzes/{quiz.id}').status_code == 403

    def test_unauthorized_student_forbidden(self, login, student, instructor, make_quiz):
        """A student without access can neither read nor submit."""
        quiz = make_quiz(instructor)
        client = login(student)
        assert client.get(f'/api/quizzes/{quiz.id}').status_code == 403
        assert client.post(f'/api/quizzes/{quiz.id}/submit', json={'answers': ['B', True]}).status_code == 403

    def test_missing_quiz(self, login, instructor):
        """Unknown quiz ids get the JSON 404."""
        response = login(instructor).get('/api/quizzes/999')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'not_found'

    def test_update_and_delete(self, login, instructor, other_instructor, make_quiz):
        """Owner-only update and delete over HTTP."""
        quiz = make_quiz(instructor)
        assert login(other_instructor).put(f'/api/quizzes/{quiz.id}', json={'title': 'x'}).status_code == 403

        client = login(instructor)
        updated = client.put(f'/api/quizzes/{quiz.id}', json={'title': 'Updated', 'settings': {'passingScore': 40}})
        assert updated.get_json()['quiz']['settings']['passing_score'] == 40
        assert client.delete(f'/api/quizzes/{quiz.id}').status_code == 200
        assert client.get(f'/api/quizzes/{quiz.id}').status_code == 404

    def test_assign(self, login, instructor, student, authorize, make_quiz):
        """Assigning needs access first and echoes the due date."""
        quiz = make_quiz(instructor)
        client = login(instructor)
        body = {'student_id': student.id, 'due_date': '2030-01-01T00:00:00Z'}

        assert client.post(f'/api/quizzes/{quiz.id}/assign', json=body).status_code == 400
        authorize(student, instructor)
        response = client.post(f'/api/quizzes/{quiz.id}/assign', json=body)
        assert response.status_code == 200
        assert response.get_json()['assignment']['due_date'] == '2030-01-01T00:00:00'


class TestTakingQuizzes:
    """Test cases for start/submit/attempts/progress."""

    def test_start_submit_and_limit(self, login, student, instructor, authorize, make_quiz):
        """Start, submit, hit the limit and list attempts."""
        authorize(student, instructor)
        quiz = make_quiz(instructor)
        client = login(student)

        started = client.post(f'/api/quizzes/{quiz.id}/start')
        assert started.status_code == 200
        assert started.get_json()['session']['is_open'] is True

        submitted = client.post(f'/api/quizzes/{quiz.id}/submit', json={'answers': ['B', False], 'timeSpent': 12})
        assert submitted.status_code == 201
        data = submitted.get_json()
        assert data['submission']['score'] == 1
        assert data['submission']['max_score'] == 2
        assert data['submission']['percentage'] == 50
        assert data['passed'] is False
        assert [a['is_correct'] for a in data['submission']['answers']] == [True, False]

        again = client.post(f'/api/quizzes/{quiz.id}/submit', json={'answers': ['B', True]})
        assert again.status_code == 409
        assert again.get_json()['code'] == 'attempts_exceeded'

        attempts = client.get(f'/api/quizzes/{quiz.id}/attempts').get_json()
        assert [a['attempt_number'] for a in attempts['attempts']] == [1]

    def test_answers_hidden_when_disabled(self, login, student, instructor, authorize, make_quiz):
        """No per-question breakdown when correct answers are hidden."""
        authorize(student, instructor)
        quiz = make_quiz(instructor, settings={'showCorrectAnswers': False})
        data = login(student).post(f'/api/quizzes/{quiz.id}/submit', json={'answers': ['B', True]}).get_json()
        assert 'answers' not in data['submission']
        assert data['submission']['score'] == 2

    def test_invalid_submission_body(self, login, student, instructor, authorize, make_quiz):
        """A negative timeSpent is a 400."""
        authorize(student, instructor)
        quiz = make_quiz(instructor)
        response = login(student).post(f'/api/quizzes/{quiz.id}/submit', json={'answers': [], 'timeSpent': -1})
        assert response.status_code == 400

    def test_instructor_views(self, login, student, instructor, other_instructor, authorize, make_quiz):
        """The owner sees submissions and the summary, others do not."""
        authorize(student, instructor)
        quiz = make_quiz(instructor)
        SubmissionPipeline.submit(quiz.id, student.id, ['B', True])

        client = login(instructor)
        submissions = client.get(f'/api/quizzes/{quiz.id}/submissions').get_json()['submissions']
        assert submissions[0]['student_name'] == 'Sam Tester'
        summary = client.get(f'/api/quizzes/{quiz.id}/summary').get_json()['summary']
        assert summary['pass_rate'] == 100.0
        assert login(other_instructor).get(f'/api/quizzes/{quiz.id}/submissions').status_code == 403

    def test_student_progress(self, login, student, instructor, authorize, make_quiz):
        """The progress endpoint returns stats and per-quiz records."""
        authorize(student, instructor)
        quiz = make_quiz(instructor)
        SubmissionPipeline.submit(quiz.id, student.id, ['B', True], time_spent=10)

        response = login(student).get('/api/quizzes/student-progress')
        assert response.status_code == 200
        data = response.get_json()
        assert data['stats']['completed_quizzes'] == 1
        assert data['stats']['average_score'] == 100.0
        assert data['quiz_progress'][0]['status'] == 'completed'

    def test_progress_is_student_only(self, login, instructor):
        """Instructors cannot call the progress endpoint."""
        assert login(instructor).get('/api/quizzes/student-progress').status_code == 403
