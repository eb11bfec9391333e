"""Error hierarchy for the certification core.

Every error aborts the whole operation. Each kind carries a stable ``code``
and the offending values in ``details`` so callers can diagnose and retry
with corrected input.

Categories:
- ValidationError: malformed input (mark, address, amount)
- AuthorizationError: caller lacks the required role
- StateError: request conflicts with the current course state
- ExternalTransferError: ownership ledger or payout failure
"""

from __future__ import annotations

from typing import Any


class CertificationError(Exception):
    """Base exception for all certification errors."""

    code = "certification_error"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": {k: _jsonable(v) for k, v in self.details.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


class ValidationError(CertificationError):
    code = "validation_error"


class AuthorizationError(CertificationError):
    code = "authorization_error"


class StateError(CertificationError):
    code = "state_error"


class ExternalTransferError(CertificationError):
    code = "external_transfer_error"


# =============================================================================
# VALIDATION
# =============================================================================


class InvalidMark(ValidationError):
    """Raised when a mark is outside [MIN_MARK, MAX_MARK]."""

    code = "invalid_mark"

    def __init__(self, mark: int, minimum: int, maximum: int):
        self.mark = mark
        super().__init__(
            f"Nota {mark} fuera de rango ({minimum}-{maximum})",
            mark=mark,
            minimum=minimum,
            maximum=maximum,
        )


class InvalidAddress(ValidationError):
    code = "invalid_address"

    def __init__(self, address: Any):
        self.address = address
        super().__init__(f"Dirección inválida: {address!r}", address=address)


class InvalidAmount(ValidationError):
    code = "invalid_amount"

    def __init__(self, field: str, value: Any):
        super().__init__(f"Valor inválido para {field}: {value}", field=field, value=value)


class AmountTooLarge(ValidationError):
    """Raised when an id or quantity reaches the reserved sentinel."""

    code = "amount_too_large"

    def __init__(self, field: str, value: int, limit: int):
        super().__init__(
            f"{field} demasiado grande: {value}",
            field=field,
            value=value,
            limit=limit,
        )


# =============================================================================
# AUTHORIZATION
# =============================================================================


class Unauthorized(AuthorizationError):
    code = "unauthorized"

    def __init__(self, account: str, role: str):
        self.account = account
        self.role = role
        super().__init__(
            f"La cuenta {account} no tiene el rol {role}",
            account=account,
            role=role,
        )


# =============================================================================
# STATE CONSISTENCY
# =============================================================================


class CourseNotFound(StateError):
    code = "course_not_found"

    def __init__(self, course_id: int):
        self.course_id = course_id
        super().__init__(f"Curso {course_id} no encontrado", course_id=course_id)


class MaxPlacesReached(StateError):
    code = "max_places_reached"

    def __init__(self, course_id: int, requested: int, available: int):
        super().__init__(
            f"Curso {course_id}: se pidieron {requested} plazas, disponibles {available}",
            course_id=course_id,
            requested=requested,
            available=available,
        )


class TooManyPlaces(StateError):
    code = "too_many_places"

    def __init__(self, course_id: int, requested: int, removable: int):
        super().__init__(
            f"Curso {course_id}: no se pueden retirar {requested} plazas (retirables: {removable})",
            course_id=course_id,
            requested=requested,
            removable=removable,
        )


class EvaluatorAlreadyAssigned(StateError):
    code = "evaluator_already_assigned"

    def __init__(self, course_id: int, evaluator: str):
        super().__init__(
            f"El evaluador {evaluator} ya está asignado al curso {course_id}",
            course_id=course_id,
            evaluator=evaluator,
        )


class TooManyEvaluators(StateError):
    code = "too_many_evaluators"

    def __init__(self, course_id: int, assigned: int, maximum: int):
        super().__init__(
            f"Curso {course_id}: {assigned} evaluadores asignados (máximo {maximum})",
            course_id=course_id,
            assigned=assigned,
            maximum=maximum,
        )


class EvaluatorNotAssigned(StateError):
    code = "evaluator_not_assigned"

    def __init__(self, course_id: int, evaluator: str):
        super().__init__(
            f"El evaluador {evaluator} no está asignado al curso {course_id}",
            course_id=course_id,
            evaluator=evaluator,
        )


class InsufficientFee(StateError):
    code = "insufficient_fee"

    def __init__(self, course_id: int, paid: Any, required: Any):
        super().__init__(
            f"Curso {course_id}: pagado {paid}, requerido {required}",
            course_id=course_id,
            paid=paid,
            required=required,
        )


class NoEvaluatorAssigned(StateError):
    code = "no_evaluator_assigned"

    def __init__(self, course_id: int):
        super().__init__(f"El curso {course_id} no tiene evaluadores", course_id=course_id)


class AlreadyEnrolled(StateError):
    code = "already_enrolled"

    def __init__(self, course_id: int, student: str):
        super().__init__(
            f"{student} ya está inscrito en el curso {course_id}",
            course_id=course_id,
            student=student,
        )


class CourseNotRegisteredForUser(StateError):
    code = "course_not_registered_for_user"

    def __init__(self, course_id: int, student: str):
        super().__init__(
            f"{student} no compró plaza en el curso {course_id}",
            course_id=course_id,
            student=student,
        )


class EvaluatorNotAssignedToCourse(StateError):
    code = "evaluator_not_assigned_to_course"

    def __init__(self, course_id: int, evaluator: str):
        super().__init__(
            f"{evaluator} no es evaluador del curso {course_id}",
            course_id=course_id,
            evaluator=evaluator,
        )


class StudentCannotBeEvaluator(StateError):
    code = "student_cannot_be_evaluator"

    def __init__(self, course_id: int, student: str):
        super().__init__(
            f"{student} es evaluador del curso {course_id} y no puede ser evaluado",
            course_id=course_id,
            student=student,
        )


class StudentNotEnrolled(StateError):
    code = "student_not_enrolled"

    def __init__(self, course_id: int, student: str):
        super().__init__(
            f"{student} no está inscrito en el curso {course_id}",
            course_id=course_id,
            student=student,
        )


class StudentAlreadyEvaluated(StateError):
    code = "student_already_evaluated"

    def __init__(self, course_id: int, student: str, mark: int):
        super().__init__(
            f"{student} ya fue evaluado en el curso {course_id}",
            course_id=course_id,
            student=student,
            recorded_mark=mark,
        )


class WrongUnitBalance(StateError):
    code = "wrong_unit_balance"

    def __init__(self, course_id: int, student: str, balance: int):
        super().__init__(
            f"{student} tiene {balance} unidades del curso {course_id} (se esperaba 1)",
            course_id=course_id,
            student=student,
            balance=balance,
            expected=1,
        )


class NoCourseRegisteredForUser(StateError):
    code = "no_course_registered_for_user"

    def __init__(self, student: str):
        super().__init__(f"{student} no tiene cursos registrados", student=student)


class InsufficientFunds(StateError):
    code = "insufficient_funds"

    def __init__(self, requested: Any, available: Any):
        super().__init__(
            f"Fondos insuficientes: pedido {requested}, disponible {available}",
            requested=requested,
            available=available,
        )


# =============================================================================
# EXTERNAL TRANSFER
# =============================================================================


class InsufficientBalance(ExternalTransferError):
    """Raised by the ownership ledger when a holder cannot cover a burn or transfer."""

    code = "insufficient_balance"

    def __init__(self, owner: str, course_id: int, held: int, requested: int):
        super().__init__(
            f"{owner} tiene {held} unidades del curso {course_id}, se pidieron {requested}",
            owner=owner,
            course_id=course_id,
            held=held,
            requested=requested,
        )


class WithdrawalFailed(ExternalTransferError):
    code = "withdrawal_failed"

    def __init__(self, recipient: str, amount: Any):
        super().__init__(
            f"La transferencia de {amount} a {recipient} falló",
            recipient=recipient,
            amount=amount,
        )
