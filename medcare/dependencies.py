from datetime import timedelta
from functools import lru_cache
from fastapi import Depends, Request
from sqlmodel import Session

from .core.config import settings
from .database import get_session
from .db.models import Doctor, Hospital, Pharmacy, Lab, Clinic
from .application.identity import IdentityContext, Role
from .application.ports.user_repo import UserRepository
from .application.ports.appointments_repo import AppointmentsRepository
from .application.ports.password_hasher import PasswordHasher
from .application.ports.audit_logger import AuditLogger
from .application.services.token_service import TokenService
from .application.services.auth_gate import AuthGate, authorize
from .application.services.auth_service import AuthService
from .application.services.user_service import UserService
from .application.services.appointments_service import AppointmentsService
from .application.services.doctor_service import DoctorService
from .application.services.hospital_service import HospitalService
from .application.services.facility_service import FacilityService
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.security.password_hasher import BcryptPasswordHasher
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from .infrastructure.persistence.sqlalchemy.repositories.record_store_sql import SqlRecordStore


# ------------------------
# Stateless collaborators
# ------------------------
def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        default_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher(rounds=settings.BCRYPT_ROUNDS)

def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()


# ------------------------
# Repositories (one session per request)
# ------------------------
def get_user_repo(session: Session = Depends(get_session)) -> UserRepository:
    return SqlUserRepository(session)

def get_appointments_repo(session: Session = Depends(get_session)) -> AppointmentsRepository:
    return SqlAppointmentsRepository(session)


# ------------------------
# Auth gate and role gate
# ------------------------
def get_current_user(
    request: Request,
    user_repo: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
) -> IdentityContext:
    context = AuthGate(tokens=tokens, user_repo=user_repo).authenticate(request.headers.get("Authorization"))
    request.state.identity = context
    return context

def require_roles(*roles: Role):
    """Dependency factory layering the role gate after the auth gate."""
    def dependency(current_user: IdentityContext = Depends(get_current_user)) -> IdentityContext:
        authorize(current_user, roles)
        return current_user
    return dependency


# ------------------------
# Services
# ------------------------
def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AuthService:
    return AuthService(
        user_repo=user_repo,
        hasher=hasher,
        tokens=tokens,
        audit=audit,
        allow_admin_registration=settings.ALLOW_ADMIN_REGISTRATION,
        reset_token_ttl=timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
    )

def get_user_service(user_repo: UserRepository = Depends(get_user_repo)) -> UserService:
    return UserService(user_repo=user_repo)

def get_appointments_service(repo: AppointmentsRepository = Depends(get_appointments_repo)) -> AppointmentsService:
    return AppointmentsService(repo=repo)

def get_doctor_service(
    session: Session = Depends(get_session),
    appointments: AppointmentsRepository = Depends(get_appointments_repo),
) -> DoctorService:
    return DoctorService(store=SqlRecordStore(session, Doctor), appointments=appointments)

def get_hospital_service(session: Session = Depends(get_session)) -> HospitalService:
    return HospitalService(store=SqlRecordStore(session, Hospital), doctors=SqlRecordStore(session, Doctor))

def get_pharmacy_service(session: Session = Depends(get_session)) -> FacilityService:
    return FacilityService(store=SqlRecordStore(session, Pharmacy), label="Pharmacy")

def get_lab_service(session: Session = Depends(get_session)) -> FacilityService:
    return FacilityService(store=SqlRecordStore(session, Lab), label="Lab")

def get_clinic_service(session: Session = Depends(get_session)) -> FacilityService:
    return FacilityService(
        store=SqlRecordStore(session, Clinic),
        label="Clinic",
        search_fields=("name", "description", "address"),
        unique_name=False,
        soft_delete=True,
    )
