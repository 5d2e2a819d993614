from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response, json_body
from ..common.validators import parse_optional_bool, parse_positive_int
from ..container import Container
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _date_arg(name: str):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD") from None


def register(app: Flask, container: Container) -> None:
    service = container.access_log_service

    @app.route("/api/access/logs", methods=["POST"], endpoint="access_logs_create")
    def log_access():
        try:
            data = json_body()
            log_id = service.record_attempt(
                identity=data.get("lagId"),
                display_name=data.get("name"),
                access_granted=data.get("accessGranted"),
                device_id=data.get("deviceId"),
                access_type=data.get("accessType"),
            )
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error logging access")
            return error_response("Error logging access", 500)
        return jsonify({"success": True, "logId": str(log_id), "message": "Access logged successfully"}), 201

    @app.route("/api/access/logs", methods=["GET"], endpoint="access_logs_list")
    def list_logs():
        try:
            result = service.list_logs(
                identity=request.args.get("lagId"),
                access_granted=parse_optional_bool(request.args.get("accessGranted")),
                start_date=_date_arg("startDate"),
                end_date=_date_arg("endDate"),
                page=parse_positive_int(request.args.get("page"), "page", default=1),
                limit=parse_positive_int(request.args.get("limit"), "limit", default=DEFAULT_PAGE_LIMIT),
            )
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error fetching access logs")
            return error_response("Error fetching access logs", 500)

        return jsonify({
            "success": True,
            "logs": [
                {
                    "id": str(log.log_id),
                    "lagId": log.identity,
                    "name": log.display_name,
                    "accessGranted": log.access_granted,
                    "accessType": log.access_type.value,
                    "deviceId": log.device_id,
                    "timestamp": int(log.logged_at.timestamp() * 1000),
                    "date": log.log_date.isoformat(),
                    "time": log.logged_at.strftime("%H:%M:%S"),
                }
                for log in result.logs
            ],
            "total": result.total,
            "page": result.page,
            "totalPages": result.total_pages,
        })

    @app.route("/api/access/stats", methods=["GET"], endpoint="access_stats")
    def stats():
        try:
            s = service.stats(start_date=_date_arg("startDate"), end_date=_date_arg("endDate"))
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error fetching access stats")
            return error_response("Error fetching access stats", 500)

        return jsonify({
            "success": True,
            "data": {
                "totalAttempts": s.total_attempts,
                "grantedAccess": s.granted,
                "deniedAccess": s.denied,
                "successRate": s.success_rate,
                "topDeniedUsers": [
                    {"lagId": d.identity, "name": d.display_name, "deniedCount": d.denied_count}
                    for d in s.top_denied
                ],
            },
        })
