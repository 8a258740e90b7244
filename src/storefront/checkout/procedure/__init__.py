"""Order creation procedure factory.

Provides get_procedure() / set_procedure() to swap implementations. Defaults
to DomainOrderProcedure advertising versions 1 and 2.
"""

from storefront.checkout.procedure.domain_adapter import DomainOrderProcedure
from storefront.checkout.procedure.port import OrderCreationProcedure

_current_procedure: OrderCreationProcedure | None = None


def get_procedure() -> OrderCreationProcedure:
    """Return the current order creation procedure."""
    global _current_procedure
    if _current_procedure is None:
        _current_procedure = DomainOrderProcedure()
    return _current_procedure


def set_procedure(procedure: OrderCreationProcedure) -> None:
    """Override the active procedure (useful for tests)."""
    global _current_procedure
    _current_procedure = procedure


def reset_procedure() -> None:
    """Reset to the default procedure."""
    global _current_procedure
    _current_procedure = None
