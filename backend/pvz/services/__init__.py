from .reception_service import ReceptionService
from .product_service import ProductService
from .pickup_point_service import PickupPointService
from .identity_service import IdentityService, IdentityConfig, SessionContext

__all__ = [
    'ReceptionService', 'ProductService', 'PickupPointService',
    'IdentityService', 'IdentityConfig', 'SessionContext',
]
