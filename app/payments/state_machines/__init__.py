"""
State machine enums for payment models.
"""

from payments.state_machines.states import PaymentStatus, PayoutStatus

__all__ = [
    "PaymentStatus",
    "PayoutStatus",
]
