from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .izin.authority import AuthorityPolicy
from .izin.events import EventBus
from .izin.mysql_izin_repository import MySQLIzinRepository
from .izin.service import IzinService
from .notifications.notifier import LoggingNotifier, NotificationDispatcher, Notifier
from .report.service import IzinReportService
from .santri.mysql_santri_repository import MySQLSantriRepository
from .santri.presence import SantriPresenceUpdater


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    izin_repo: MySQLIzinRepository
    santri_repo: MySQLSantriRepository
    events: EventBus

    izin_service: IzinService
    izin_report_service: IzinReportService


def build_container(
    *,
    db_config: dict,
    policy: Optional[AuthorityPolicy] = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    izin_repo = MySQLIzinRepository(conn)
    santri_repo = MySQLSantriRepository(conn)

    events = EventBus()
    SantriPresenceUpdater(santri_repo).register(events)
    NotificationDispatcher(notifier or LoggingNotifier(), santri_repo).register(events)

    izin_service = IzinService(izin_repo, events=events, policy=policy)
    izin_report_service = IzinReportService(izin_repo, santri_repo)

    return Container(
        conn=conn,
        izin_repo=izin_repo,
        santri_repo=santri_repo,
        events=events,
        izin_service=izin_service,
        izin_report_service=izin_report_service,
    )
