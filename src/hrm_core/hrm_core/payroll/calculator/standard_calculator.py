from __future__ import annotations

from ...core.exceptions import ValidationError
from ..model import SalaryBreakdown, SalaryInputs
from .base import SalaryCalculator


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule.

    gross = base + allowances + overtime pay + bonuses - penalties
    net   = gross - deductions
    """

    def calculate(self, inputs: SalaryInputs) -> SalaryBreakdown:
        if inputs.base_salary < 0:
            raise ValidationError("base_salary must be >= 0", field="base_salary")
        if inputs.overtime_pay < 0:
            raise ValidationError("overtime_pay must be >= 0", field="overtime_pay")

        gross = (
            inputs.base_salary
            + inputs.allowances.total()
            + inputs.overtime_pay
            + inputs.bonuses.total()
            - inputs.penalties.total()
        )
        net = gross - inputs.deductions.total()
        return SalaryBreakdown(gross_salary=gross, net_salary=net)
