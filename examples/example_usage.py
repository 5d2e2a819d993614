"""Example: drive the attendance ledger through the service layer (no Flask).

Controllers are thin; the business rules live in the services.
"""

import importlib

from config import get_settings_module

from src.access_control.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    result = container.attendance_service.clock_in("E001", display_name="Demo Employee")
    print(result.message, result.record.to_json())

    summary = container.attendance_service.today()
    print(f"{summary.active_count} active / {summary.completed_count} completed today")


if __name__ == "__main__":
    main()
