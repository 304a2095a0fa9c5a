from .base import UserStore, PickupPointStore, ReceptionStore, ProductStore, SessionStore

__all__ = [
    'UserStore', 'PickupPointStore', 'ReceptionStore', 'ProductStore', 'SessionStore',
]
