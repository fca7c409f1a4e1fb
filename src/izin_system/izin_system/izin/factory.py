from __future__ import annotations

from dataclasses import dataclass

from .model import IzinApplication, IzinSakit
from .workflows.base import IzinWorkflow
from .workflows.pulang_workflow import PulangWorkflow
from .workflows.sakit_workflow import SakitWorkflow


@dataclass
class IzinWorkflowFactory:
    """Factory Pattern: choose the workflow strategy by izin variant."""

    def for_record(self, record: IzinApplication) -> IzinWorkflow:
        if isinstance(record, IzinSakit):
            return SakitWorkflow()
        return PulangWorkflow()
