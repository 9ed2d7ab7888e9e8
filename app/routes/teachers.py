from flask import Blueprint, request, jsonify
from marshmallow import Schema, fields, validate

from app.helpers.app_helper import app_context, error_response, json_ready
from app.services.schedule_service import SCHEDULE_MODES, ScheduleService

teachers_bp = Blueprint('teachers', __name__, url_prefix='/api/teachers')


class ScheduleQuerySchema(Schema):
    mode = fields.Str(load_default='week', validate=validate.OneOf(SCHEDULE_MODES))
    offset = fields.Int(load_default=0)


@teachers_bp.route('/<teacher_id>/schedule', methods=['GET'])
def get_teacher_schedule(teacher_id):
    """Weekly or monthly schedule of a teacher with earnings"""
    try:
        query = ScheduleQuerySchema().load(request.args.to_dict())
        service = ScheduleService(app_context())
        rows = service.project(teacher_id, query['mode'], query['offset'])

        return jsonify({
            'mode': query['mode'],
            'offset': query['offset'],
            'results': len(rows),
            'data': json_ready(rows),
            'summary': service.summarize(rows)
        }), 200

    except Exception as e:
        return error_response(e)
