import re
from datetime import datetime
from bson import ObjectId
from typing import Optional

GRADE_LEVELS = [f'Grade {n}' for n in range(1, 13)]


def exact_name_pattern(value: str) -> dict:
    """Case-insensitive exact-match query fragment for a name field"""
    return {'$regex': f'^{re.escape((value or "").strip())}$', '$options': 'i'}


class Student:
    """
    Student record, identified in bookings by (student_name, parent_fb_name)
    compared case-insensitively.
    """
    def __init__(self,
                 _id: Optional[ObjectId],
                 student_name: str,
                 parent_fb_name: str,
                 grade_level: Optional[str] = None,
                 contact_number: Optional[str] = None,
                 email: Optional[str] = None,
                 assigned_teacher_for_the_week: Optional[ObjectId] = None,
                 status: str = 'active',  # 'active', 'inactive'
                 inactive_days: int = 0,
                 last_status_change: Optional[datetime] = None,
                 is_deleted: bool = False,
                 deleted_at: Optional[datetime] = None,
                 created_at: datetime = None,
                 updated_at: datetime = None):
        self._id = _id
        self.student_name = student_name.strip() if student_name else student_name
        self.parent_fb_name = parent_fb_name.strip() if parent_fb_name else parent_fb_name
        self.grade_level = grade_level
        self.contact_number = contact_number
        self.email = email
        self.assigned_teacher_for_the_week = assigned_teacher_for_the_week
        self.status = status
        self.inactive_days = inactive_days
        self.last_status_change = last_status_change
        self.is_deleted = is_deleted
        self.deleted_at = deleted_at
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def identity_key(self) -> str:
        return f"{(self.student_name or '').lower()}|{(self.parent_fb_name or '').lower()}"

    @classmethod
    def from_dict(cls, data: dict) -> 'Student':
        return cls(
            _id=data.get('_id'),
            student_name=data.get('student_name'),
            parent_fb_name=data.get('parent_fb_name'),
            grade_level=data.get('grade_level'),
            contact_number=data.get('contact_number'),
            email=data.get('email'),
            assigned_teacher_for_the_week=data.get('assigned_teacher_for_the_week'),
            status=data.get('status', 'active'),
            inactive_days=data.get('inactive_days', 0),
            last_status_change=data.get('last_status_change'),
            is_deleted=data.get('is_deleted', False),
            deleted_at=data.get('deleted_at'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at')
        )

    def to_dict(self) -> dict:
        data = {
            'student_name': self.student_name,
            'parent_fb_name': self.parent_fb_name,
            'grade_level': self.grade_level,
            'contact_number': self.contact_number,
            'email': self.email,
            'assigned_teacher_for_the_week': self.assigned_teacher_for_the_week,
            'status': self.status,
            'inactive_days': self.inactive_days,
            'last_status_change': self.last_status_change,
            'is_deleted': self.is_deleted,
            'deleted_at': self.deleted_at,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }
        if self._id is not None:
            data['_id'] = self._id
        return data
