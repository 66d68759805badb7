"""Aggregate attendance statistics."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func

from qr_attendance import db
from qr_attendance.models.attendance import AttendanceEvent
from qr_attendance.models.attendee import Attendee
from qr_attendance.utils.helpers import local_midnight, local_now

class StatsService:
    """Dashboard counters for the admin console."""

    @staticmethod
    def branch_stats() -> List[Dict[str, Any]]:
        rows = db.session.query(
            Attendee.branch, func.count(Attendee.id)
        ).group_by(Attendee.branch).order_by(Attendee.branch).all()

        return [{'branch': branch, 'count': count} for branch, count in rows]

    @staticmethod
    def today_details(since: datetime) -> List[Dict[str, Any]]:
        """Today's events grouped by direction, with the attendees involved."""
        rows = db.session.query(AttendanceEvent, Attendee).join(
            Attendee, AttendanceEvent.attendee_id == Attendee.id
        ).filter(
            AttendanceEvent.date >= since
        ).order_by(AttendanceEvent.date.asc()).all()

        groups: Dict[str, Dict[str, Any]] = {}
        for event, attendee in rows:
            group = groups.setdefault(event.type.value, {
                'type': event.type.value,
                'count': 0,
                'students': []
            })
            group['count'] += 1
            group['students'].append({
                'name': attendee.full_name,
                'regNo': attendee.university_reg_no,
                'branch': attendee.branch,
                'time': event.date.isoformat()
            })

        return list(groups.values())

    @staticmethod
    def get_stats(now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or local_now()
        today = local_midnight(now)

        return {
            'totalUsers': Attendee.query.count(),
            'todayAttendance': AttendanceEvent.query.filter(AttendanceEvent.date >= today).count(),
            'totalAttendance': AttendanceEvent.query.count(),
            'branchStats': StatsService.branch_stats(),
            'todayDetails': StatsService.today_details(today)
        }
