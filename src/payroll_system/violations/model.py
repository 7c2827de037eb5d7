from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Violation:
    """Domain entity: a traffic/vehicle violation charged to an employee."""

    violation_id: int
    employee_code: str
    employee_name: str
    department: Optional[str]
    violation_price: float
    violation_date: date
    vehicle_code: str
    station: str
    violation_image: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "id": self.violation_id,
            "employeeCode": self.employee_code,
            "employeeName": self.employee_name,
            "department": self.department,
            "violationPrice": round(self.violation_price, 2),
            "date": self.violation_date.isoformat(),
            "vehicleCode": self.vehicle_code,
            "station": self.station,
            "violationImage": self.violation_image,
        }


@dataclass(frozen=True)
class ViolationAdjustment:
    """Running violation balance of one employee for one month.

    total = previous month's remaining + this month's violations;
    remaining = total - installment.
    """

    employee_code: str
    month: str
    total_violations: float = 0.0
    deduction_violations_installment: float = 0.0
    remaining_violations: float = 0.0

    def as_dict(self) -> dict:
        return {
            "employeeCode": self.employee_code,
            "month": self.month,
            "totalViolations": round(self.total_violations, 2),
            "deductionViolationsInstallment": round(self.deduction_violations_installment, 2),
            "remainingViolations": round(self.remaining_violations, 2),
        }
