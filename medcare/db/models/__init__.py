# Models package (re-export feature modules for stable imports)
from .users.user import User
from .health.doctor import Doctor
from .health.hospital import Hospital
from .health.appointment import Appointment
from .facilities.pharmacy import Pharmacy
from .facilities.lab import Lab
from .facilities.clinic import Clinic

__all__ = [
    "User",
    "Doctor",
    "Hospital",
    "Appointment",
    "Pharmacy",
    "Lab",
    "Clinic",
]
