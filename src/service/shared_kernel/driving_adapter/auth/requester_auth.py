"""
Requester identity for holds and orders.

- Authenticated shopper: `Authorization: Bearer <jwt>` carrying `user_id`
- Anonymous shopper: signed JWT cookie (`public_intent`) issued on first contact and
  re-issued when missing, expired or tampered with
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Request, Response
import jwt
from uuid_utils import uuid7

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError, ForbiddenError
from src.service.shared_kernel.domain.value_object.requester import Requester


ANON_TOKEN_TYPE = 'public_intent'
OPERATOR_ROLES = frozenset({'admin', 'operator'})


class RequesterAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.cookie_max_age = timedelta(days=settings.ANON_COOKIE_MAX_AGE_DAYS)

    def create_anonymous_token(self, anon_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'anon_id': anon_id,
            'type': ANON_TOKEN_TYPE,
            'iat': now,
            'exp': now + self.cookie_max_age,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_bearer(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def read_anonymous_id(self, token: str | None) -> str | None:
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            return None
        if payload.get('type') != ANON_TOKEN_TYPE or not payload.get('anon_id'):
            return None
        return str(payload['anon_id'])

    @staticmethod
    def bearer_token(request: Request) -> str | None:
        header = request.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token:
            return None
        return token.strip()

    def resolve(self, request: Request, response: Response) -> Requester:
        if token := self.bearer_token(request):
            payload = self.decode_bearer(token)
            user_id = payload.get('user_id')
            if not isinstance(user_id, int):
                raise AuthenticationError('Invalid token')
            return Requester.for_user(user_id)

        anon_id = self.read_anonymous_id(request.cookies.get(settings.ANON_COOKIE_NAME))
        if anon_id is None:
            anon_id = str(uuid7())
            is_https = (
                request.url.scheme == 'https'
                or request.headers.get('x-forwarded-proto', '').lower() == 'https'
            )
            response.set_cookie(
                key=settings.ANON_COOKIE_NAME,
                value=self.create_anonymous_token(anon_id),
                max_age=int(self.cookie_max_age.total_seconds()),
                httponly=True,
                secure=is_https,
                samesite='none' if is_https else 'lax',
                path='/',
            )
        return Requester.anonymous(anon_id)


requester_auth = RequesterAuth()


async def get_requester(request: Request, response: Response) -> Requester:
    return requester_auth.resolve(request, response)


async def require_operator(request: Request) -> dict[str, Any]:
    token = RequesterAuth.bearer_token(request)
    if not token:
        raise AuthenticationError('Not authenticated')
    payload = requester_auth.decode_bearer(token)
    if payload.get('role') not in OPERATOR_ROLES:
        raise ForbiddenError('Only operators can perform this action')
    return payload

