from flask import Blueprint, request, jsonify
from marshmallow import Schema, fields, validate, EXCLUDE

from app.helpers.app_helper import app_context, error_response, json_ready
from app.models.booking import BOOKING_STATUSES
from app.models.student import GRADE_LEVELS
from app.services.booking_service import BookingService

bookings_bp = Blueprint('bookings', __name__, url_prefix='/api/bookings')


# Request schemas
class CreateBookingSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    teacher_id = fields.Str(required=True, data_key='teacherId')
    student_name = fields.Str(required=True, data_key='studentName', validate=validate.Length(min=1))
    parent_fb_name = fields.Str(required=True, data_key='parentFbName', validate=validate.Length(min=1))
    grade_level = fields.Str(required=True, data_key='gradeLevel', validate=validate.OneOf(GRADE_LEVELS))
    subject = fields.Str(required=True, validate=validate.Length(min=1))
    week_start_date = fields.Date(required=True, data_key='weekStartDate')
    weekly_schedule = fields.Dict(keys=fields.Str(), required=False, load_default=dict, data_key='weeklySchedule')
    contact_number = fields.Str(required=False, allow_none=True, data_key='contactNumber')
    email = fields.Email(required=False, allow_none=True)
    notes = fields.Str(required=False, allow_none=True)
    upsert_student = fields.Bool(required=False, load_default=True, data_key='upsertStudent')


class SessionStatusSchema(Schema):
    session_status = fields.Dict(keys=fields.Str(), required=True, data_key='sessionStatus')


class DayStatusSchema(Schema):
    status = fields.Str(required=True)
    date = fields.Date(required=False, allow_none=True)


class BookingStatusSchema(Schema):
    status = fields.Str(required=True, validate=validate.OneOf(BOOKING_STATUSES))


@bookings_bp.route('', methods=['POST'])
def create_booking():
    """Create a weekly booking"""
    try:
        data = CreateBookingSchema().load(request.get_json(silent=True) or {})
        upsert_student = data.pop('upsert_student')

        booking = BookingService(app_context()).create_booking(data, upsert_student=upsert_student)

        return jsonify({
            'message': 'Booking created successfully',
            'data': json_ready(booking.to_response())
        }), 201

    except Exception as e:
        return error_response(e)


@bookings_bp.route('', methods=['GET'])
def get_bookings():
    """List non-deleted bookings, optionally filtered by status or teacher"""
    try:
        bookings = BookingService(app_context()).list_bookings(
            status=request.args.get('status'),
            teacher_id=request.args.get('teacherId')
        )
        return jsonify({
            'results': len(bookings),
            'data': [json_ready(booking.to_response()) for booking in bookings]
        }), 200

    except Exception as e:
        return error_response(e)


@bookings_bp.route('/stats', methods=['GET'])
def get_booking_stats():
    try:
        return jsonify({'data': BookingService(app_context()).get_booking_stats()}), 200
    except Exception as e:
        return error_response(e)


@bookings_bp.route('/teacher/<teacher_id>', methods=['GET'])
def get_bookings_by_teacher(teacher_id):
    try:
        bookings = BookingService(app_context()).get_bookings_by_teacher(teacher_id)
        return jsonify({
            'results': len(bookings),
            'data': [json_ready(booking.to_response()) for booking in bookings]
        }), 200
    except Exception as e:
        return error_response(e)


@bookings_bp.route('/<booking_id>', methods=['GET'])
def get_booking(booking_id):
    try:
        booking = BookingService(app_context()).get_booking(booking_id)
        return jsonify({'data': json_ready(booking.to_response())}), 200
    except Exception as e:
        return error_response(e)


@bookings_bp.route('/<booking_id>/session-status', methods=['PUT'])
def update_session_status(booking_id):
    """Write the week's session-day status codes"""
    try:
        data = SessionStatusSchema().load(request.get_json(silent=True) or {})
        booking = BookingService(app_context()).update_session_status(booking_id, data['session_status'])
        return jsonify({
            'message': 'Session status updated',
            'data': json_ready(booking.to_response())
        }), 200
    except Exception as e:
        return error_response(e)


@bookings_bp.route('/<booking_id>/session-status/<day>', methods=['PATCH'])
def set_day_status(booking_id, day):
    """Write a single weekday's status code"""
    try:
        data = DayStatusSchema().load(request.get_json(silent=True) or {})
        booking = BookingService(app_context()).set_day_status(
            booking_id, day, data['status'], data.get('date')
        )
        return jsonify({
            'message': 'Session status updated',
            'data': json_ready(booking.to_response())
        }), 200
    except Exception as e:
        return error_response(e)


@bookings_bp.route('/<booking_id>/status', methods=['PATCH'])
def update_booking_status(booking_id):
    try:
        data = BookingStatusSchema().load(request.get_json(silent=True) or {})
        booking = BookingService(app_context()).update_booking_status(booking_id, data['status'])
        return jsonify({
            'message': 'Booking status updated',
            'data': json_ready(booking.to_response())
        }), 200
    except Exception as e:
        return error_response(e)


@bookings_bp.route('/<booking_id>', methods=['DELETE'])
def delete_booking(booking_id):
    try:
        permanent = request.args.get('permanent', 'false').lower() == 'true'
        result = BookingService(app_context()).delete_booking(booking_id, permanent=permanent)
        return jsonify({'message': 'Booking deleted successfully', 'data': result}), 200
    except Exception as e:
        return error_response(e)
