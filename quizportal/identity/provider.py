"""Identity Provider Adapter - Fronteira com o provedor de identidade remoto."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from ..exceptions import (
    AuthError,
    DomainUnauthorizedError,
    PopupDismissedError,
    UnknownAuthError,
)
from ..models.schemas import Identity, ProviderUser

logger = logging.getLogger(__name__)

ProviderCallback = Callable[[Identity | None], Awaitable[None]]
Unsubscribe = Callable[[], None]

_DISMISSED_CODES = {"auth/popup-closed-by-user", "auth/cancelled-popup-request"}
_UNAUTHORIZED_DOMAIN_CODE = "auth/unauthorized-domain"


def classify_provider_error(code: str | None, message: str | None, origin: str) -> AuthError:
    """Classifica falha bruta do provedor na taxonomia de AuthError.

    Args:
        code: Codigo de erro do provedor (ex: auth/unauthorized-domain)
        message: Mensagem original
        origin: Origem atual (para remediacao de dominio)

    Returns:
        PopupDismissedError, DomainUnauthorizedError ou UnknownAuthError
    """
    code = code or ""
    message = message or ""

    if code in _DISMISSED_CODES:
        return PopupDismissedError(message="Popup de login fechado pelo usuario")

    lowered = message.lower()
    if (
        code == _UNAUTHORIZED_DOMAIN_CODE
        or "unauthorized-domain" in lowered
        or "unauthorized domain" in lowered
    ):
        return DomainUnauthorizedError(origin=origin)

    return UnknownAuthError(message=message, code=code or "unknown")


class IdentityProvider(Protocol):
    """Contrato do provedor de identidade (tratado como opaco)."""

    async def sign_in(self) -> Identity: ...

    async def sign_out(self) -> None: ...

    def subscribe(self, callback: ProviderCallback) -> Unsubscribe: ...


class ExternalIdentityProvider:
    """Provedor cujo estado chega de fora do processo.

    O login/logout real acontece em outro lugar (ex: popup no navegador);
    este adaptador recebe os eventos via `publish` e os repassa aos
    assinantes, e delega `sign_in`/`sign_out` a handlers opcionais.

    Example:
        >>> provider = ExternalIdentityProvider(sign_in_handler=popup_login)
        >>> unsubscribe = provider.subscribe(reconciler.handle_provider_push)
        >>> await provider.publish(ProviderUser(uid="abc").to_identity())
    """

    def __init__(
        self,
        sign_in_handler: Callable[[], Awaitable[ProviderUser | Identity]] | None = None,
        sign_out_handler: Callable[[], Awaitable[None]] | None = None,
    ):
        self._sign_in_handler = sign_in_handler
        self._sign_out_handler = sign_out_handler
        self._subscribers: list[ProviderCallback] = []

    def subscribe(self, callback: ProviderCallback) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def publish(self, identity: Identity | None) -> None:
        """Entrega mudanca de identidade autenticada aos assinantes."""
        for callback in list(self._subscribers):
            await callback(identity)

    async def sign_in(self) -> Identity:
        if self._sign_in_handler is None:
            raise UnknownAuthError(
                message="Login pelo provedor nao configurado",
                code="auth/operation-not-allowed",
            )

        user = await self._sign_in_handler()
        identity = user.to_identity() if isinstance(user, ProviderUser) else user
        await self.publish(identity)
        return identity

    async def sign_out(self) -> None:
        if self._sign_out_handler is not None:
            await self._sign_out_handler()
        await self.publish(None)
