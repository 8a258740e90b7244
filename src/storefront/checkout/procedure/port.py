"""Order creation procedure port (abstract interface).

The procedure turns a session's cart into a priced order in one step.
Deployments may carry several versions side by side; callers pick one from
``available_versions()`` instead of guessing from error text.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class OrderCreationPayload:
    """Customer and delivery details sent with an order creation call."""

    session_id: str
    full_name: str
    email: str
    phone: str
    address: str
    postal_code: str
    notes: str
    delivery_date: str
    delivery_slot: str
    delivery_fee: float
    thermal_bag_fee: float
    add_thermal_bag: bool
    user_id: str | None = None
    placed_for_someone_else: bool = False
    express_delivery: bool = False
    payment_proof_path: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CreatedOrder:
    order_id: str
    version: int


class OrderCreationProcedure(ABC):
    """Abstract order creation procedure."""

    @abstractmethod
    def available_versions(self) -> set[int]:
        """Versions this deployment advertises."""
        ...

    @abstractmethod
    def create_order(self, version: int, payload: OrderCreationPayload) -> CreatedOrder:
        """Create an order from the session's cart.

        Raises ``ProcedureUnavailableError`` when ``version`` is not deployed.
        """
        ...
