from __future__ import annotations


class PayrollError(Exception):
    """Base class for recoverable, data-level payroll failures."""

    code = "payroll_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(PayrollError):
    code = "invalid_input"
    status_code = 422


class InvalidStateError(PayrollError):
    code = "invalid_state"
    status_code = 409

    def __init__(self, message: str, current_status: str | None = None):
        super().__init__(message)
        self.current_status = current_status


class NotFoundError(PayrollError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateError(PayrollError):
    code = "duplicate"
    status_code = 409

    def __init__(self, employee_id: int, month: int, year: int, existing_id: int | None = None):
        super().__init__(f"Payroll for employee {employee_id} already exists for {month:02d}/{year}")
        self.existing_id = existing_id
