from .pickup import PickupPointRow, ReceptionRow, ProductRow
from .auth import UserRow, SessionTokenRow

__all__ = [
    'PickupPointRow', 'ReceptionRow', 'ProductRow',
    'UserRow', 'SessionTokenRow',
]
