from flask import Blueprint, jsonify

from app.helpers.app_helper import app_context, error_response, json_ready
from app.services.status_service import StatusService
from app.services.student_service import StudentService

status_bp = Blueprint('status', __name__, url_prefix='/api')


@status_bp.route('/status/check', methods=['POST'])
def run_status_check():
    """Run the teacher/student status sweep now"""
    try:
        result = StatusService(app_context()).run_status_check()
        if result['skipped']:
            return jsonify({'message': 'Status check already running', 'data': result}), 409
        return jsonify({'message': 'Status check complete', 'data': result}), 200
    except Exception as e:
        return error_response(e)


@status_bp.route('/status/teachers/<teacher_id>', methods=['POST'])
def refresh_teacher_status(teacher_id):
    try:
        teacher = StatusService(app_context()).update_teacher_status(teacher_id)
        if teacher is None:
            return jsonify({'error': 'Teacher not found'}), 404
        return jsonify({'data': json_ready(teacher)}), 200
    except Exception as e:
        return error_response(e)


@status_bp.route('/status/students/<student_id>', methods=['POST'])
def refresh_student_status(student_id):
    try:
        student = StatusService(app_context()).update_student_status(student_id)
        if student is None:
            return jsonify({'error': 'Student not found'}), 404
        return jsonify({'data': json_ready(student)}), 200
    except Exception as e:
        return error_response(e)


@status_bp.route('/students/remove-duplicates', methods=['POST'])
def remove_duplicate_students():
    try:
        result = StudentService(app_context()).remove_duplicates()
        return jsonify({
            'message': f"Removed {result['removed_count']} duplicate students",
            'data': result
        }), 200
    except Exception as e:
        return error_response(e)
