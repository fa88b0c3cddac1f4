"""Status transitions an appointment may go through in this service.

Only two operations are governed here: editing fields and cancelling.
``completed`` and ``no_show`` are set by other workflows (visit completion,
front desk) and are never entered from this module.
"""

from enum import Enum

from clinic_scheduling.core.exceptions import StateException
from clinic_scheduling.schemas.appointments import AppointmentStatus


class LifecycleOperation(str, Enum):
    """Operations subject to status rules."""

    UPDATE = "update"
    CANCEL = "cancel"


# Statuses from which each operation is refused, with the message returned
_REFUSED: dict[LifecycleOperation, dict[AppointmentStatus, str]] = {
    LifecycleOperation.UPDATE: {
        AppointmentStatus.CANCELLED: "Cannot update a cancelled appointment",
    },
    LifecycleOperation.CANCEL: {
        AppointmentStatus.CANCELLED: "Appointment is already cancelled",
        AppointmentStatus.COMPLETED: "Cannot cancel a completed appointment",
    },
}

TERMINAL_STATUSES = frozenset({AppointmentStatus.CANCELLED})


def is_terminal(status: AppointmentStatus | str) -> bool:
    return AppointmentStatus(status) in TERMINAL_STATUSES


def authorize(status: AppointmentStatus | str, operation: LifecycleOperation) -> None:
    """
    Raise unless ``operation`` is allowed from ``status``.

    Raises:
        StateException: With the current status and the refused operation
    """
    current = AppointmentStatus(status)
    message = _REFUSED[operation].get(current)
    if message is not None:
        raise StateException(current.value, operation.value, message)


def ensure_can_update(status: AppointmentStatus | str) -> None:
    # Completed appointments stay editable (data corrections after the visit).
    authorize(status, LifecycleOperation.UPDATE)


def ensure_can_cancel(status: AppointmentStatus | str) -> None:
    authorize(status, LifecycleOperation.CANCEL)


def cancel(status: AppointmentStatus | str) -> AppointmentStatus:
    """Status after cancelling from ``status``."""
    ensure_can_cancel(status)
    return AppointmentStatus.CANCELLED


def allowed_from(operation: LifecycleOperation) -> frozenset[AppointmentStatus]:
    """Statuses from which ``operation`` may be applied."""
    return frozenset(set(AppointmentStatus) - set(_REFUSED[operation]))
