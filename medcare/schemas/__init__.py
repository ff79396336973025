# Schemas package (re-export feature modules for stable imports)
from .auth.auth import *
from .users.user import *
from .doctors.doctor import *
from .hospitals.hospital import *
from .appointments.appointment import *
from .common.common import *
from .facilities.facility import *
