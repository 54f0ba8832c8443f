# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Authentication service: login, member selection and password reset."""
import asyncio
import smtplib
import uuid
from typing import Any, Dict, Optional

from clubhours.core.config import settings
from clubhours.core.exceptions import AuthenticationError, NotFoundError, UpstreamError
from clubhours.core.logging import get_logger
from clubhours.core.security import (
    create_access_token,
    create_selection_token,
    verify_selection_token,
)
from clubhours.models.domain import Member
from clubhours.repositories.credential_repository import CredentialRepository
from clubhours.repositories.token_repository import ResetTokenStore
from clubhours.services.email_service import EmailService
from clubhours.services.records_client import NAME_FIELDS, RecordsClient

logger = get_logger(__name__)

MSG_INVALID_CREDENTIALS = "Ungültige E-Mail-Adresse oder falsches Passwort."
MSG_SELECTION = "Multiple members found for this email. Please select your profile."
MSG_EMAIL_UNKNOWN = ("Diese E-Mail-Adresse ist nicht in unserem System registriert. "
                     "Bitte überprüfen Sie Ihre E-Mail-Adresse oder kontaktieren Sie den Support.")
MSG_DIRECTORY_DOWN = ("Zugriff auf die Benutzerdatenbank nicht möglich. "
                      "Bitte versuchen Sie es später erneut.")
MSG_RESET_SENT = "A password reset link has been sent to your email."
MSG_RESET_SEND_FAILED = "Failed to send password reset email. Please try again later."
MSG_RESET_INVALID = "Invalid or expired reset token"
MSG_USER_NOT_FOUND = "Benutzer nicht gefunden"
MSG_RESET_DONE = ("Passwort erfolgreich zurückgesetzt. "
                  "Sie können sich jetzt mit Ihrem neuen Passwort anmelden.")


def _user(member: Member) -> Dict[str, str]:
    return {"id": member.id, "name": member.name, "email": member.email}


def _token_response(member: Member) -> Dict[str, Any]:
    return {"success": True, "token": create_access_token(member.id), "user": _user(member)}


class AuthService:
    def __init__(self, records: RecordsClient, credentials: CredentialRepository,
                 reset_tokens: ResetTokenStore, email: EmailService):
        self._records = records
        self._credentials = credentials
        self._reset_tokens = reset_tokens
        self._email = email

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        email = email.strip().lower()
        credential = await asyncio.to_thread(self._credentials.verify_password, email, password)
        if credential is None:
            logger.info("Login rejected for %s", email)
            raise AuthenticationError(MSG_INVALID_CREDENTIALS)

        members = await self._records.get_members_by_email(email)
        if not members:
            logger.error("Credential exists but no member record for %s", email)
            raise AuthenticationError(MSG_INVALID_CREDENTIALS)

        if len(members) == 1:
            logger.info("Login succeeded for member %s", members[0].id)
            return _token_response(members[0])

        logger.info("Login for %s matches %d members, selection required", email, len(members))
        return {
            "success": True,
            "multiple": True,
            "users": [_user(m) for m in members],
            "selection_token": create_selection_token(email),
            "message": MSG_SELECTION,
        }

    async def select_member(self, selection_token: Optional[str], member_id: str) -> Dict[str, Any]:
        if not selection_token:
            raise AuthenticationError("Auswahl-Token fehlt")
        email = verify_selection_token(selection_token)
        if email is None:
            raise AuthenticationError("Auswahl-Token ungültig oder abgelaufen")

        member = await self._records.get_member_by_id(member_id)
        if member is None or member.email.lower() != email.lower():
            logger.warning("Selected member %s does not belong to the selection token", member_id)
            raise AuthenticationError()
        logger.info("Member %s selected", member.id)
        return _token_response(member)

    async def get_user(self, member_id: str) -> Dict[str, Any]:
        member = await self._records.get_member_by_id(member_id, NAME_FIELDS)
        if member is None:
            raise NotFoundError(MSG_USER_NOT_FOUND)
        return {
            "success": True,
            "user": {
                **_user(member),
                "profile": {
                    "nachname": member.last_name,
                    "vorname": member.first_name,
                    "teableId": member.id,
                },
            },
        }

    async def forgot_password(self, email: str) -> Dict[str, Any]:
        email = email.strip().lower()
        try:
            member = await self._records.get_member_by_email(email, NAME_FIELDS)
        except UpstreamError:
            return {"success": False, "message": MSG_DIRECTORY_DOWN}
        if member is None:
            logger.info("Password reset requested for unknown address")
            return {"success": False, "message": MSG_EMAIL_UNKNOWN}

        token = str(uuid.uuid4())
        self._reset_tokens.put(token, member.id, settings.RESET_TOKEN_TTL_SECONDS)
        try:
            await self._email.send_password_reset_email(member.email, token, member.id)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Password reset email to member %s failed: %s", member.id, exc)
            self._reset_tokens.delete_by_key(token)
            return {"success": False, "message": MSG_RESET_SEND_FAILED}
        logger.info("Password reset link issued for member %s", member.id)
        return {"success": True, "message": MSG_RESET_SENT}

    async def reset_password(self, token: str, password: str) -> Dict[str, Any]:
        reset = self._reset_tokens.get_by_key(token)
        if reset is None:
            logger.info("Password reset with invalid or expired token")
            return {"success": False, "message": MSG_RESET_INVALID}

        member = await self._records.get_member_by_id(reset.user_id, NAME_FIELDS)
        if member is None or not member.email:
            logger.error("Member %s of reset token not found", reset.user_id)
            return {"success": False, "message": MSG_USER_NOT_FOUND}

        if self._reset_tokens.delete_by_key(token) is None:
            # Consumed concurrently.
            return {"success": False, "message": MSG_RESET_INVALID}

        credential = await asyncio.to_thread(self._credentials.get_user_by_email, member.email)
        if credential is None:
            await asyncio.to_thread(self._credentials.create_user, member.email, password)
            logger.info("Created login for member %s", member.id)
        else:
            await asyncio.to_thread(self._credentials.update_password, credential.id, password)
            logger.info("Password reset for member %s", member.id)
        return {"success": True, "message": MSG_RESET_DONE}
