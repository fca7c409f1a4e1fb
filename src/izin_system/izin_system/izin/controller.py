from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import format_datetime, now_local, parse_iso_date, parse_iso_datetime
from ..core.actor import Actor
from ..core.constants import ALASAN_PULANG_OPTIONS, KELUHAN_SAKIT_OPTIONS
from ..core.enums import Role
from ..core.exceptions import (
    ConflictError,
    CorruptRecordError,
    InvalidTransition,
    NotFoundError,
    NotWithdrawable,
    StorageError,
    Unauthorized,
    ValidationError,
)
from ..container import Container
from .model import IzinApplication, IzinPulang
from .service import IzinService
from .timeliness import days_late

logger = logging.getLogger(__name__)

# Most specific first: AlreadyDecided is caught as InvalidTransition.
_STATUS_CODES = (
    (ValidationError, 400),
    (Unauthorized, 403),
    (NotFoundError, 404),
    (InvalidTransition, 409),
    (NotWithdrawable, 409),
    (ConflictError, 409),
    (CorruptRecordError, 500),
    (StorageError, 503),
)


def izin_to_dict(record: IzinApplication) -> dict:
    data = {
        "izin_id": record.izin_id,
        "izin_type": record.izin_type.value,
        "santri_id": record.santri_id,
        "requested_by": record.requested_by,
        "created_at": format_datetime(record.created_at),
        "status": record.status.value,
        "description": record.description,
        "ustadzah_approval": record.ustadzah_approval,
        "approved_by": record.approved_by.actor_name if record.approved_by else None,
        "rejection_note": IzinService.rejection_note(record) or "",
        "version": record.version,
    }
    if isinstance(record, IzinPulang):
        data.update(
            reason=record.reason,
            departure_time=format_datetime(record.departure_time),
            planned_return_time=format_datetime(record.planned_return_time),
            ndalem_approval=record.ndalem_approval,
            granted_by_name=record.granted_by_name,
            has_returned=record.has_returned,
            returned_on_time=record.returned_on_time,
            actual_return_time=format_datetime(record.actual_return_time),
            outstanding_balance=record.outstanding_balance,
        )
    else:
        data["complaint"] = record.complaint
    return data


def current_actor() -> Optional[Actor]:
    """Identity placed in the session by the authentication layer."""
    if "user_id" not in session:
        return None
    try:
        role = Role(session.get("role"))
    except ValueError:
        return None
    return Actor(
        user_id=str(session["user_id"]),
        role=role,
        name=session.get("name"),
        santri_id=session.get("santri_id"),
    )


def register(app: Flask, container: Container) -> None:
    service = container.izin_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor is None:
                return jsonify({"error": "Silakan login terlebih dahulu"}), 401
            return view(actor, *args, **kwargs)

        return wrapper

    def handle_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except tuple(exc for exc, _ in _STATUS_CODES) as e:
                code = next(c for exc, c in _STATUS_CODES if isinstance(e, exc))
                if code >= 500:
                    logger.error("Kesalahan izin: %s", e)
                return jsonify({"error": str(e), "kind": type(e).__name__}), code
            except (KeyError, ValueError) as e:
                return jsonify({"error": f"Input tidak valid: {e}", "kind": "ValidationError"}), 400

        return wrapper

    def _form() -> dict:
        return request.get_json(silent=True) or request.form.to_dict()

    @app.route("/izin/options", methods=["GET"], endpoint="izin_options")
    def izin_options():
        return jsonify({"alasan_pulang": list(ALASAN_PULANG_OPTIONS), "keluhan_sakit": list(KELUHAN_SAKIT_OPTIONS)})

    @app.route("/izin/sakit", methods=["POST"], endpoint="create_izin_sakit")
    @login_required
    @handle_errors
    def create_izin_sakit(actor: Actor):
        data = _form()
        izin_id = service.create_sakit(
            actor=actor,
            santri_id=data.get("santri_id") or actor.santri_id or "",
            complaint=data.get("complaint", ""),
        )
        return jsonify({"izin_id": izin_id}), 201

    @app.route("/izin/pulang", methods=["POST"], endpoint="create_izin_pulang")
    @login_required
    @handle_errors
    def create_izin_pulang(actor: Actor):
        data = _form()
        izin_id = service.create_pulang(
            actor=actor,
            santri_id=data.get("santri_id") or actor.santri_id or "",
            reason=data.get("reason", ""),
            departure_time=parse_iso_datetime(data["departure_time"]),
            planned_return_time=parse_iso_datetime(data["planned_return_time"]),
        )
        return jsonify({"izin_id": izin_id}), 201

    @app.route("/izin/santri/<santri_id>", methods=["GET"], endpoint="izin_for_santri")
    @login_required
    @handle_errors
    def izin_for_santri(actor: Actor, santri_id: str):
        if actor.role == Role.WALI_SANTRI and actor.santri_id and actor.santri_id != santri_id:
            raise Unauthorized("Anda hanya dapat melihat izin santri Anda sendiri")
        return jsonify([izin_to_dict(r) for r in service.list_for_santri(santri_id=santri_id)])

    @app.route("/izin/<izin_id>", methods=["GET"], endpoint="izin_detail")
    @login_required
    @handle_errors
    def izin_detail(actor: Actor, izin_id: str):
        record = service.get(izin_id=izin_id)
        if actor.role == Role.WALI_SANTRI and record.requested_by != actor.user_id:
            raise Unauthorized("Anda hanya dapat melihat permohonan Anda sendiri")
        ops = service.available_operations(actor=actor, izin_id=izin_id)
        return jsonify({"izin": izin_to_dict(record), "operations": sorted(op.value for op in ops)})

    @app.route("/izin/<izin_id>", methods=["DELETE"], endpoint="withdraw_izin")
    @login_required
    @handle_errors
    def withdraw_izin(actor: Actor, izin_id: str):
        service.withdraw(actor=actor, izin_id=izin_id)
        return jsonify({"deleted": izin_id})

    @app.route("/admin/izin", methods=["GET"], endpoint="admin_izin")
    @login_required
    @handle_errors
    def admin_izin(actor: Actor):
        if actor.role == Role.WALI_SANTRI:
            raise Unauthorized("Anda tidak memiliki hak untuk halaman ini")
        start = request.args.get("start")
        end = request.args.get("end")
        now = now_local()
        history = service.list_history(
            start=parse_iso_date(start) if start else None,
            end=parse_iso_date(end) if end else None,
        )
        return jsonify(
            {
                "pending_ustadzah": [izin_to_dict(r) for r in service.list_pending_staff()],
                "pending_ndalem": [izin_to_dict(r) for r in service.list_pending_supervisor()],
                "ongoing": [izin_to_dict(r) for r in service.list_ongoing()],
                "overdue": [
                    dict(izin_to_dict(r), days_late=days_late(r.planned_return_time, now))
                    for r in service.list_overdue_returns(now=now)
                ],
                "history": [izin_to_dict(r) for r in history],
            }
        )

    @app.route("/admin/izin/<izin_id>/ustadzah", methods=["POST"], endpoint="decide_ustadzah")
    @login_required
    @handle_errors
    def decide_ustadzah(actor: Actor, izin_id: str):
        data = _form()
        record = service.approve_staff(
            actor=actor,
            izin_id=izin_id,
            approved=_as_bool(data.get("approved")),
            reason=data.get("reason", ""),
        )
        return jsonify(izin_to_dict(record))

    @app.route("/admin/izin/<izin_id>/ndalem", methods=["POST"], endpoint="decide_ndalem")
    @login_required
    @handle_errors
    def decide_ndalem(actor: Actor, izin_id: str):
        data = _form()
        record = service.approve_supervisor(
            actor=actor,
            izin_id=izin_id,
            approved=_as_bool(data.get("approved")),
            reason=data.get("reason", ""),
        )
        return jsonify(izin_to_dict(record))

    @app.route("/admin/izin/<izin_id>/kembali", methods=["POST"], endpoint="verify_return")
    @login_required
    @handle_errors
    def verify_return(actor: Actor, izin_id: str):
        data = _form()
        returned_at = data.get("actual_return_time")
        record = service.verify_return(
            actor=actor,
            izin_id=izin_id,
            actual_return_time=parse_iso_datetime(returned_at) if returned_at else None,
        )
        return jsonify(izin_to_dict(record))

    @app.route("/admin/izin/<izin_id>/sembuh", methods=["POST"], endpoint="verify_recovery")
    @login_required
    @handle_errors
    def verify_recovery(actor: Actor, izin_id: str):
        record = service.verify_recovery(actor=actor, izin_id=izin_id)
        return jsonify(izin_to_dict(record))


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text in {"1", "true", "ya", "yes", "setuju"}:
        return True
    if text in {"0", "false", "tidak", "no", "tolak"}:
        return False
    raise ValidationError("Keputusan harus setuju atau tolak")
