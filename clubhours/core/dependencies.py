# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""FastAPI dependency injection wiring for shared clients, stores and services."""
import httpx
from fastapi import Depends

from clubhours.core.config import settings
from clubhours.core.database import engine
from clubhours.repositories.credential_repository import CredentialRepository
from clubhours.repositories.token_repository import ResetTokenStore
from clubhours.services.auth_service import AuthService
from clubhours.services.dashboard_service import DashboardService
from clubhours.services.email_service import EmailService
from clubhours.services.records_client import RecordsClient
from clubhours.services.work_hour_service import WorkHourService

_http_client: httpx.AsyncClient | None = None
_records_client: RecordsClient | None = None
_credential_repo = CredentialRepository(engine)
_reset_tokens = ResetTokenStore()
_email_service = EmailService()


def init_http_client():
    global _http_client, _records_client
    _http_client = httpx.AsyncClient(timeout=settings.RECORDS_TIMEOUT)
    _records_client = RecordsClient(_http_client)


async def close_http_client():
    global _http_client, _records_client
    if _http_client:
        await _http_client.aclose()
    _http_client = None
    _records_client = None


def get_records_client() -> RecordsClient:
    assert _records_client is not None
    return _records_client


def get_credential_repo() -> CredentialRepository:
    return _credential_repo


def get_reset_token_store() -> ResetTokenStore:
    return _reset_tokens


def get_email_service() -> EmailService:
    return _email_service


def get_work_hour_service(
    records: RecordsClient = Depends(get_records_client),
) -> WorkHourService:
    return WorkHourService(records)


def get_dashboard_service(
    records: RecordsClient = Depends(get_records_client),
) -> DashboardService:
    return DashboardService(records)


def get_auth_service(
    records: RecordsClient = Depends(get_records_client),
    credentials: CredentialRepository = Depends(get_credential_repo),
    reset_tokens: ResetTokenStore = Depends(get_reset_token_store),
    email: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(records, credentials, reset_tokens, email)
