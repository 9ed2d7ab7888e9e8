from datetime import datetime
from bson import ObjectId
from typing import Optional


class Teacher:
    """
    Tutor record. Contact fields belong to operators; status,
    inactive_days and last_status_change belong to the status check.
    """
    def __init__(self,
                 _id: Optional[ObjectId],
                 name: str,
                 major_subject: Optional[str] = None,
                 contact_number: Optional[str] = None,
                 email: Optional[str] = None,
                 facebook_account: Optional[str] = None,
                 total_bookings: int = 0,
                 status: str = 'active',  # 'active', 'inactive'
                 inactive_days: int = 0,
                 last_status_change: Optional[datetime] = None,
                 is_deleted: bool = False,
                 deleted_at: Optional[datetime] = None,
                 created_at: datetime = None,
                 updated_at: datetime = None):
        self._id = _id
        self.name = name
        self.major_subject = major_subject
        self.contact_number = contact_number
        self.email = email.lower().strip() if email else email
        self.facebook_account = facebook_account
        self.total_bookings = total_bookings
        self.status = status
        self.inactive_days = inactive_days
        self.last_status_change = last_status_change
        self.is_deleted = is_deleted
        self.deleted_at = deleted_at
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_dict(cls, data: dict) -> 'Teacher':
        return cls(
            _id=data.get('_id'),
            name=data.get('name'),
            major_subject=data.get('major_subject'),
            contact_number=data.get('contact_number'),
            email=data.get('email'),
            facebook_account=data.get('facebook_account'),
            total_bookings=data.get('total_bookings', 0),
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
            'name': self.name,
            'major_subject': self.major_subject,
            'contact_number': self.contact_number,
            'email': self.email,
            'facebook_account': self.facebook_account,
            'total_bookings': self.total_bookings,
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
