from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ...applications.model import PensionDetails


class PensionCalculator(ABC):
    """Calculator interface (Strategy Pattern for pension amounts)."""

    @abstractmethod
    def calculate(self, *, last_basic_salary: float, service_years: float, at: datetime) -> PensionDetails:
        raise NotImplementedError
