"""Domain layer for emitrack application.

Services are exported lazily so that ``emitrack.domain.entities`` can be
imported by the database layer without pulling the services in.
"""

__all__ = [
    "EmiService",
    "TransactionService",
    "EmiReconciler",
]


def __getattr__(name):
    if name == "EmiService":
        from emitrack.domain.emi import EmiService
        return EmiService
    if name == "TransactionService":
        from emitrack.domain.transaction import TransactionService
        return TransactionService
    if name == "EmiReconciler":
        from emitrack.domain.reconciler import EmiReconciler
        return EmiReconciler
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
