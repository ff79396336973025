# Routers package
from . import auth_router
from . import users_router
from . import doctors_router
from . import hospitals_router
from . import appointments_router
from . import pharmacies_router
from . import labs_router
from . import clinics_router

__all__ = [
    "auth_router",
    "users_router",
    "doctors_router",
    "hospitals_router",
    "appointments_router",
    "pharmacies_router",
    "labs_router",
    "clinics_router",
]
