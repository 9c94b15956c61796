from .address_wait import AddressWait
from .cancellation import CancellationToken

__all__ = [
    "AddressWait",
    "CancellationToken",
]
