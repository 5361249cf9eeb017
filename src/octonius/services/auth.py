"""Passwordless login: OTP codes, JWT token pairs and login sessions."""

from __future__ import annotations

import datetime as dt
import secrets
import string
import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select

from .. import schemas
from ..errors import AuthenticationError, ConflictError, ForbiddenError
from ..models import AuthSession, AuthToken, OtpCode, User, ensure_utc, utcnow
from ..schema.enums import InvitationStatus, TokenType
from ..security import TokenManager
from .base import BaseService
from .groups import PrivateGroupService
from .notifications import Mailer
from .users import UserService, normalize_email
from .workplaces import WorkplaceService

__all__ = ["AuthService", "generate_otp", "OTP_ALPHABET", "OTP_LENGTH"]

logger = structlog.get_logger(__name__)

OTP_ALPHABET = string.ascii_uppercase + string.digits
OTP_LENGTH = 6


def generate_otp(length: int = OTP_LENGTH) -> str:
    return "".join(secrets.choice(OTP_ALPHABET) for _ in range(length))


class AuthService(BaseService):
    """Authentication flows used by ``/v1/auths`` and the bearer dependency."""

    def __init__(self, session, settings, mailer: Optional[Mailer] = None):
        super().__init__(session, settings)
        self.mailer = mailer or Mailer(settings)
        self.tokens = TokenManager(settings)

    @property
    def users(self) -> UserService:
        return UserService(self.session, self.settings)

    @property
    def workplaces(self) -> WorkplaceService:
        return WorkplaceService(self.session, self.settings, self.mailer)

    # ========================================================================
    # 가입 / OTP
    # ========================================================================

    def register(self, request: schemas.EmailRequest) -> User:
        if self.users.get_by_email(request.email) is not None:
            raise ConflictError("User with this email already exists")
        return self.users.create_user(schemas.UserCreateRequest(email=request.email))

    def request_otp(self, email: str) -> schemas.OtpRequestResponse:
        email = normalize_email(email)
        code = generate_otp()
        self.session.execute(delete(OtpCode).where(OtpCode.email == email))
        self.session.add(
            OtpCode(
                email=email,
                code=code,
                expires_at=utcnow() + dt.timedelta(seconds=self.settings.otp_ttl),
            )
        )
        self._commit()
        self.mailer.send(
            "send_otp_details", email, {"otp": code, "expires_in": self.settings.otp_ttl}
        )
        exists = self.users.get_by_email(email) is not None
        logger.info("auth.otp_requested", email=email, exists=exists)
        return schemas.OtpRequestResponse(exists=exists)

    def _consume_otp(self, email: str, otp: str) -> OtpCode:
        record = self.session.execute(
            select(OtpCode)
            .where(OtpCode.email == email, OtpCode.verified_at.is_(None))
            .order_by(OtpCode.created_at.desc())
        ).scalars().first()
        if record is None or not secrets.compare_digest(record.code, otp.strip().upper()):
            raise AuthenticationError("Invalid OTP")
        if ensure_utc(record.expires_at) <= utcnow():
            self.session.delete(record)
            self._commit()
            raise AuthenticationError("OTP has expired")
        return record

    def verify_otp(
        self, request: schemas.OtpVerifyRequest, ip_address: Optional[str] = None
    ) -> schemas.LoginResponse:
        email = normalize_email(request.email)
        record = self._consume_otp(email, request.otp)

        user = self.users.get_by_email(email)
        if user is None:
            # keep the row as proof of email ownership for setup-workplace
            record.verified_at = utcnow()
            record.expires_at = utcnow() + dt.timedelta(seconds=self.settings.otp_ttl)
            self._commit()
            logger.info("auth.otp_verified", email=email, exists=False)
            return schemas.LoginResponse(exists=False, user=None)

        self.session.delete(record)
        self.session.flush()
        pair = self.login(user, ip_address)
        logger.info("auth.login", user_id=str(user.id))
        return schemas.LoginResponse(
            exists=True,
            user=schemas.UserResponse.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            workplaces=self.workplaces.user_workplaces(user.id),
        )

    # ========================================================================
    # 토큰 / 세션
    # ========================================================================

    def issue_tokens(self, user: User) -> schemas.TokenPair:
        """Replace the user's stored tokens with a fresh access/refresh pair."""
        self.session.execute(delete(AuthToken).where(AuthToken.user_id == user.id))
        issued = {}
        for token_type in (TokenType.ACCESS, TokenType.REFRESH):
            token = self.tokens.issue(user.id, user.email, token_type)
            self.session.add(
                AuthToken(
                    user_id=user.id,
                    token=token.token,
                    token_type=token_type,
                    expires_at=token.expires_at,
                )
            )
            issued[token_type] = token.token
        self.session.flush()
        return schemas.TokenPair(
            access_token=issued[TokenType.ACCESS],
            refresh_token=issued[TokenType.REFRESH],
        )

    def _touch_session(self, user: User, ip_address: Optional[str]) -> AuthSession:
        auth_session = self.session.execute(
            select(AuthSession).where(AuthSession.user_id == user.id)
        ).scalar_one_or_none()
        if auth_session is None:
            auth_session = AuthSession(user_id=user.id)
            self.session.add(auth_session)
        auth_session.logged_in = True
        auth_session.last_login = utcnow()
        auth_session.ip_address = ip_address
        return auth_session

    def login(self, user: User, ip_address: Optional[str] = None) -> schemas.TokenPair:
        pair = self.issue_tokens(user)
        self._touch_session(user, ip_address)
        self._commit()
        return pair

    def refresh(self, refresh_token: str) -> schemas.RefreshResponse:
        payload = self.tokens.decode(refresh_token, TokenType.REFRESH)
        stored = self.session.execute(
            select(AuthToken).where(
                AuthToken.token == refresh_token,
                AuthToken.token_type == TokenType.REFRESH,
            )
        ).scalar_one_or_none()
        if stored is None or stored.blacklisted:
            raise AuthenticationError("Refresh token is not valid")
        if ensure_utc(stored.expires_at) <= utcnow():
            raise AuthenticationError("Refresh token has expired")

        user = self.session.get(User, uuid.UUID(payload["user_id"]))
        if user is None:
            raise AuthenticationError("User not found")

        access = self.tokens.issue(user.id, user.email, TokenType.ACCESS)
        self.session.execute(
            delete(AuthToken).where(
                AuthToken.user_id == user.id, AuthToken.token_type == TokenType.ACCESS
            )
        )
        self.session.add(
            AuthToken(
                user_id=user.id,
                token=access.token,
                token_type=TokenType.ACCESS,
                expires_at=access.expires_at,
            )
        )
        self._commit()
        logger.info("auth.refreshed", user_id=str(user.id))
        return schemas.RefreshResponse(access_token=access.token)

    def logout(self, user: User, token: str) -> None:
        auth_session = self.session.execute(
            select(AuthSession).where(AuthSession.user_id == user.id)
        ).scalar_one_or_none()
        if auth_session is not None:
            auth_session.logged_in = False
            auth_session.last_logout = utcnow()
        stored = self.session.execute(
            select(AuthToken).where(AuthToken.token == token)
        ).scalar_one_or_none()
        if stored is not None:
            stored.blacklisted = True
        self._commit()
        logger.info("auth.logout", user_id=str(user.id))

    def authenticate(self, token: str) -> User:
        """Resolve a bearer access token to its user.

        Raises:
            AuthenticationError: unknown, blacklisted, expired or invalid token.
            ForbiddenError: the account is disabled.
        """
        stored = self.session.execute(
            select(AuthToken).where(AuthToken.token == token)
        ).scalar_one_or_none()
        if stored is None or stored.blacklisted or stored.token_type != TokenType.ACCESS:
            raise AuthenticationError("Invalid or revoked token")
        if ensure_utc(stored.expires_at) <= utcnow():
            raise AuthenticationError("Token has expired")

        payload = self.tokens.decode(token, TokenType.ACCESS)
        user = self.session.get(User, uuid.UUID(payload["user_id"]))
        if user is None:
            raise AuthenticationError("User not found")
        if user.is_disabled:
            raise ForbiddenError("Account is disabled")
        return user

    def is_logged_in(self, user_id: uuid.UUID) -> bool:
        auth_session = self.session.execute(
            select(AuthSession).where(AuthSession.user_id == user_id)
        ).scalar_one_or_none()
        return bool(auth_session and auth_session.logged_in)

    # ========================================================================
    # 온보딩
    # ========================================================================

    def _claim_verified_email(self, email: str) -> None:
        """Consume the verified OTP that proves ownership of *email*."""
        record = self.session.execute(
            select(OtpCode)
            .where(OtpCode.email == email, OtpCode.verified_at.is_not(None))
            .order_by(OtpCode.verified_at.desc())
        ).scalars().first()
        if record is None or ensure_utc(record.expires_at) <= utcnow():
            raise AuthenticationError("Verify the OTP sent to this email first")
        self.session.delete(record)

    def setup_workplace(
        self,
        request: schemas.SetupWorkplaceRequest,
        ip_address: Optional[str] = None,
        current_user: Optional[User] = None,
    ) -> schemas.SetupWorkplaceResponse:
        """Create a workplace for a new account, or for the signed-in caller.

        Raises:
            AuthenticationError: new email without a verified OTP.
            ConflictError: the email has an account and the caller is not signed in.
            ForbiddenError: the caller is signed in as a different user.
        """
        email = normalize_email(request.email)
        if current_user is not None and current_user.email != email:
            raise ForbiddenError("You can only set up a workplace for your own account")

        user = self.users.get_by_email(email)
        if user is None:
            self._claim_verified_email(email)
            user = self.users.create_user(
                schemas.UserCreateRequest(
                    email=email,
                    first_name=request.first_name,
                    last_name=request.last_name,
                    source="onboarding",
                ),
                commit=False,
            )
        elif current_user is None:
            raise ConflictError("An account with this email exists; sign in first")
        else:
            if request.first_name:
                user.first_name = request.first_name
            if request.last_name:
                user.last_name = request.last_name

        workplace = self.workplaces.create_workplace(
            schemas.WorkplaceCreateRequest(name=request.workplace_name), user, commit=False
        )
        user.current_workplace_id = workplace.id
        pair = self.login(user, ip_address)
        logger.info("auth.workplace_setup", user_id=str(user.id), workplace_id=str(workplace.id))
        return schemas.SetupWorkplaceResponse(
            **pair.model_dump(),
            user=schemas.UserResponse.model_validate(user),
            workplace_id=workplace.id,
        )

    def accept_invitation(
        self, request: schemas.InvitationAcceptRequest, ip_address: Optional[str] = None
    ) -> schemas.InvitationAcceptResponse:
        invitation = self.workplaces.check_invitation(request.token)
        email = normalize_email(request.email)
        if invitation.email != email:
            raise ForbiddenError("This invitation was sent to a different email")

        user = self.users.get_by_email(email)
        if user is None:
            user = self.users.create_user(
                schemas.UserCreateRequest(email=email, source="invitation"), commit=False
            )

        membership = self.workplaces.roles.get_membership(user.id, invitation.workplace_id)
        if membership is None:
            self.users.add_to_workplace(
                user.id, invitation.workplace_id, invitation.role_id, commit=False
            )
        else:
            PrivateGroupService(self.session, self.settings).ensure_private_group(
                user, invitation.workplace_id, commit=False
            )
        if user.current_workplace_id is None:
            user.current_workplace_id = invitation.workplace_id

        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = utcnow()
        invitation.user_id = user.id
        pair = self.login(user, ip_address)
        logger.info(
            "invitation.accepted",
            invitation_id=str(invitation.id),
            user_id=str(user.id),
            workplace_id=str(invitation.workplace_id),
        )
        return schemas.InvitationAcceptResponse(
            **pair.model_dump(),
            user=schemas.UserResponse.model_validate(user),
            workplace_id=invitation.workplace_id,
            needs_onboarding=not user.first_name,
        )

