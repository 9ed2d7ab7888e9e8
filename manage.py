#!/usr/bin/env python3
"""
Liynmar Management Script
Operational commands for the tutoring back office
"""

import sys
import argparse
import json
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


class LiynmarManager:
    """Management commands run against the configured database"""

    def __init__(self, app=None):
        self.app = app
        self.celery = None

    def setup_app(self):
        """Set up Flask app context"""
        if not self.app:
            from app.app import create_app
            self.app, self.celery = create_app()
        return self.app

    @property
    def context(self):
        from app.context import get_context
        return get_context(self.setup_app())

    def init_database(self):
        """Create collections' indexes"""
        print("🗄️ Creating indexes...")
        try:
            from app.extensions import ensure_indexes
            ensure_indexes(self.context.db)
            print("✅ Indexes created")
            return 0
        except Exception as e:
            print(f"❌ Index creation error: {str(e)}")
            return 1

    def status_check(self):
        """Run the teacher/student status sweep once"""
        print("🔄 Running status check...")
        try:
            from app.tasks.status_tasks import run_status_check_function
            result = run_status_check_function(self.context)
            if result['skipped']:
                print("⏭️ Another status check is in progress")
                return 0
            print(f"✅ {result['teachers_updated']} teachers and {result['students_updated']} students updated "
                  f"({result['errors']} errors)")
            return 0 if result['errors'] == 0 else 1
        except Exception as e:
            print(f"❌ Status check error: {str(e)}")
            return 1

    def show_schedule(self, teacher_id, mode='week', offset=0):
        """Print a teacher's projected schedule with earnings"""
        try:
            from app.helpers.app_helper import json_ready
            from app.services.schedule_service import ScheduleService

            service = ScheduleService(self.context)
            rows = service.project(teacher_id, mode, offset)
            print(json.dumps({
                'rows': json_ready(rows),
                'summary': service.summarize(rows)
            }, indent=2))
            return 0
        except Exception as e:
            print(f"❌ Schedule error: {str(e)}")
            return 1

    def dedupe_students(self):
        """Soft-delete duplicate student records"""
        try:
            from app.services.student_service import StudentService
            result = StudentService(self.context).remove_duplicates()
            print(f"✅ Removed {result['removed_count']} duplicate students")
            return 0
        except Exception as e:
            print(f"❌ Duplicate cleanup error: {str(e)}")
            return 1


def main(argv=None, manager=None):
    """Main CLI interface"""
    parser = argparse.ArgumentParser(description='Liynmar Management Tool')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('init-db', help='Create database indexes')
    subparsers.add_parser('status-check', help='Recompute teacher/student active status')
    subparsers.add_parser('dedupe-students', help='Remove duplicate student records')

    schedule_parser = subparsers.add_parser('schedule', help="Show a teacher's schedule and earnings")
    schedule_parser.add_argument('teacher_id', help='Teacher ID')
    schedule_parser.add_argument('--mode', choices=['week', 'month'], default='week')
    schedule_parser.add_argument('--offset', type=int, default=0, help='0 = current period, -1 = previous')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    manager = manager or LiynmarManager()

    if args.command == 'init-db':
        return manager.init_database()
    elif args.command == 'status-check':
        return manager.status_check()
    elif args.command == 'schedule':
        return manager.show_schedule(args.teacher_id, args.mode, args.offset)
    elif args.command == 'dedupe-students':
        return manager.dedupe_students()

    print(f"❌ Unknown command: {args.command}")
    return 1


if __name__ == '__main__':
    sys.exit(main())
