from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import StorageError, ValidationError
from ..container import Container
from ..izin.controller import current_actor


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/izin/rekap", methods=["GET"], endpoint="izin_report")
    def izin_report():
        actor = current_actor()
        if actor is None:
            return jsonify({"error": "Silakan login terlebih dahulu"}), 401
        if actor.role == Role.WALI_SANTRI:
            return jsonify({"error": "Anda tidak memiliki hak untuk halaman ini"}), 403

        try:
            start = parse_iso_date(request.args.get("start") or "")
            end = parse_iso_date(request.args.get("end") or "")
            scope = request.args.getlist("santri_id") or None
            rows = container.izin_report_service.build_report_rows(start=start, end=end, santri_ids=scope)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except ValueError:
            return jsonify({"error": "Tanggal tidak valid (YYYY-MM-DD)"}), 400
        except StorageError as e:
            return jsonify({"error": str(e)}), 503

        return jsonify(rows)
