# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package. Re-exports the credential and reset-token stores."""
from clubhours.repositories.credential_repository import Credential, CredentialRepository
from clubhours.repositories.token_repository import ResetToken, ResetTokenStore

__all__ = ["Credential", "CredentialRepository", "ResetToken", "ResetTokenStore"]
