#!/usr/bin/env python3
"""
Run Status Check
Recomputes teacher/student active flags from the current week's bookings.
Meant for cron hosts that do not run Celery beat.
"""

import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)


def main():
    """Run one status reconciliation sweep"""
    try:
        from app.app import create_app
        from app.context import get_context
        from app.tasks.status_tasks import run_status_check_function

        app, _ = create_app()
        result = run_status_check_function(get_context(app))

        if result['skipped']:
            print("⏭️ Previous status check still running, nothing to do")
            return 0

        print(f"✅ Updated {result['teachers_updated']} teachers and {result['students_updated']} students")
        if result['errors']:
            print(f"⚠️ {result['errors']} records failed, see log")
            return 1
        return 0

    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
