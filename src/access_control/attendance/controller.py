from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response, json_body
from ..common.validators import parse_positive_int
from ..container import Container
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.exceptions import StateConflict, ValidationError
from .service import report_to_json

logger = logging.getLogger(__name__)


def _optional_date(value, field_name: str):
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from None


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    broadcaster = container.broadcaster

    @app.route("/api/attendance/clock", methods=["POST"], endpoint="attendance_clock")
    def clock():
        try:
            data = json_body()
            result = service.clock(
                identity=data.get("lagId") or data.get("identity"),
                display_name=data.get("name"),
                action=data.get("action") or data.get("type"),
            )
            return jsonify({
                "success": True,
                "message": result.message,
                "attendance": result.record.to_json(),
            })
        except (ValidationError, StateConflict) as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error clocking attendance")
            return error_response("Error clocking attendance", 500)

    @app.route("/api/attendance/stream", methods=["GET"], endpoint="attendance_stream")
    def stream():
        subscription = broadcaster.subscribe()
        return Response(
            subscription.events(),
            mimetype="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    def today():
        try:
            summary = service.today(identity=request.args.get("lagId") or request.args.get("identity"))
        except Exception:
            logger.exception("Error fetching today's attendance")
            return error_response("Error fetching today's attendance", 500)

        return jsonify({
            "success": True,
            "data": {
                "date": summary.work_date.isoformat(),
                "totalPresent": len(summary.records),
                "clockedIn": summary.active_count,
                "clockedOut": summary.completed_count,
                "records": [r.to_json() for r in summary.records],
            },
        })

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_records")
    def records():
        args = request.args
        try:
            page = parse_positive_int(args.get("page"), "page", default=1)
            limit = parse_positive_int(args.get("limit"), "limit", default=DEFAULT_PAGE_LIMIT)
            result = service.list_records(
                identity=args.get("lagId") or args.get("identity"),
                start_date=_optional_date(args.get("startDate"), "startDate"),
                end_date=_optional_date(args.get("endDate"), "endDate"),
                status=args.get("status"),
                page=page,
                limit=limit,
            )
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error fetching attendance")
            return error_response("Error fetching attendance", 500)

        return jsonify({
            "success": True,
            "records": [r.to_json() for r in result.records],
            "total": result.total,
            "page": result.page,
            "totalPages": result.total_pages,
        })

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    def report():
        args = request.args
        if not args.get("month") or not args.get("year"):
            return error_response("Month and year are required", 400)
        try:
            report = service.monthly_report(
                month=parse_positive_int(args.get("month"), "month", default=1),
                year=parse_positive_int(args.get("year"), "year", default=1),
                identity=args.get("lagId") or args.get("identity"),
            )
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error generating report")
            return error_response("Error generating report", 500)

        return jsonify({"success": True, "report": report_to_json(report)})
