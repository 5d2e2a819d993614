from __future__ import annotations

import logging
import time

from flask import Flask, jsonify, request

from ..common.http import error_response, json_body
from ..common.template_codec import decode_template, encode_template
from ..common.validators import parse_optional_bool, parse_positive_int
from ..container import Container
from ..core.constants import DEFAULT_PROFILE_PAGE_LIMIT
from ..core.exceptions import DuplicateCheckUnavailable, DuplicateProfileError, NotFoundError, ValidationError
from .model import Profile

logger = logging.getLogger(__name__)


def _profile_to_json(profile: Profile, *, include_thumbnail: bool = True) -> dict:
    data = {
        "id": str(profile.profile_id),
        "name": profile.display_name,
        "lagId": profile.external_id,
        "faceTemplate": encode_template(profile.template),
        "timestamp": int(profile.created_at.timestamp() * 1000),
        "createdAt": profile.created_at.isoformat(),
        "updatedAt": profile.updated_at.isoformat(),
    }
    if include_thumbnail:
        data["thumbnail"] = encode_template(profile.thumbnail)
    return data


def register(app: Flask, container: Container) -> None:
    service = container.profile_service

    @app.route("/api/profiles", methods=["POST"], endpoint="profiles_create")
    def create_profile():
        try:
            data = json_body()
            profile_id = service.register(
                external_id=data.get("lagId") or data.get("externalId"),
                display_name=data.get("name"),
                template=decode_template(data.get("faceTemplate")),
                thumbnail=decode_template(data.get("thumbnail"), "thumbnail"),
            )
            return jsonify({
                "success": True,
                "profileId": str(profile_id),
                "message": "Profile saved successfully",
            }), 201
        except ValidationError as e:
            return error_response(str(e), 400)
        except DuplicateProfileError as e:
            extra = {"duplicateType": e.duplicate_type.value}
            if e.existing is not None:
                extra["existingProfile"] = {"name": e.existing.display_name, "lagId": e.existing.external_id}
            if e.similarity is not None:
                extra["similarity"] = round(e.similarity, 2)
            return error_response(str(e), 409, **extra)
        except DuplicateCheckUnavailable as e:
            return error_response(str(e), 503)
        except Exception:
            logger.exception("Error saving profile")
            return error_response("Error saving profile", 500)

    @app.route("/api/profiles", methods=["GET"], endpoint="profiles_list")
    def list_profiles():
        include_thumbnails = parse_optional_bool(request.args.get("includeThumbnails")) is not False
        try:
            profiles = service.list_all()
        except Exception:
            logger.exception("Error fetching profiles")
            return error_response("Error fetching profiles", 500)
        return jsonify({
            "success": True,
            "profiles": [_profile_to_json(p, include_thumbnail=include_thumbnails) for p in profiles],
            "total": len(profiles),
            "serverTimestamp": int(time.time() * 1000),
        })

    @app.route("/api/profiles/paginated", methods=["GET"], endpoint="profiles_paginated")
    def list_profiles_paginated():
        try:
            page = parse_positive_int(request.args.get("page"), "page", default=1)
            limit = parse_positive_int(request.args.get("limit"), "limit", default=DEFAULT_PROFILE_PAGE_LIMIT)
            result = service.list_page(page=page, limit=limit)
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error fetching profiles")
            return error_response("Error fetching profiles", 500)
        return jsonify({
            "success": True,
            "profiles": [_profile_to_json(p) for p in result.profiles],
            "total": result.total,
            "page": result.page,
            "totalPages": result.total_pages,
            "serverTimestamp": int(time.time() * 1000),
        })

    @app.route("/api/profiles/stats/count", methods=["GET"], endpoint="profiles_count")
    def count_profiles():
        try:
            return jsonify({"success": True, "data": service.count()})
        except Exception:
            logger.exception("Error counting profiles")
            return error_response("Error counting profiles", 500)

    @app.route("/api/profiles/lagid/<external_id>", methods=["GET"], endpoint="profiles_get_by_lagid")
    def get_profile_by_external_id(external_id: str):
        try:
            profile = service.get_by_external_id(external_id)
        except NotFoundError as e:
            return error_response(str(e), 404)
        except Exception:
            logger.exception("Error fetching profile %s", external_id)
            return error_response("Error fetching profile", 500)
        return jsonify({"success": True, "data": _profile_to_json(profile)})

    @app.route("/api/profiles/<int:profile_id>", methods=["GET"], endpoint="profiles_get")
    def get_profile(profile_id: int):
        try:
            profile = service.get(profile_id)
        except NotFoundError as e:
            return error_response(str(e), 404)
        except Exception:
            logger.exception("Error fetching profile %s", profile_id)
            return error_response("Error fetching profile", 500)
        return jsonify({"success": True, "data": _profile_to_json(profile)})

    @app.route("/api/profiles/<int:profile_id>", methods=["DELETE"], endpoint="profiles_delete")
    def delete_profile(profile_id: int):
        try:
            service.delete(profile_id)
        except NotFoundError as e:
            return error_response(str(e), 404)
        except Exception:
            logger.exception("Error deleting profile %s", profile_id)
            return error_response("Error deleting profile", 500)
        return jsonify({"success": True, "message": "Profile deleted successfully"})

    @app.route("/api/profiles/lagid/<external_id>", methods=["DELETE"], endpoint="profiles_delete_by_lagid")
    def delete_profile_by_external_id(external_id: str):
        try:
            service.delete_by_external_id(external_id)
        except NotFoundError as e:
            return error_response(str(e), 404)
        except Exception:
            logger.exception("Error deleting profile %s", external_id)
            return error_response("Error deleting profile", 500)
        return jsonify({"success": True, "message": "Profile deleted successfully"})
