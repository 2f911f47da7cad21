"""Identity Reconciler - Maquina de estados da identidade atual.

Combina a identidade autenticada empurrada pelo provedor com a identidade
convidada materializada localmente em um unico sinal de identidade atual.

Transicoes:
    UNAUTHENTICATED -> GUEST           continue_as_guest()
    UNAUTHENTICATED -> AUTHENTICATED   push do provedor com identidade
    GUEST -> AUTHENTICATED             push do provedor com identidade (convidado descartado)
    AUTHENTICATED -> UNAUTHENTICATED   push nulo (sem convidado ativo) ou sign_out()
    GUEST -> UNAUTHENTICATED           sign_out() (reset local, sem chamada remota)

Push nulo com convidado ativo NAO altera o estado.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from ..exceptions import (
    AuthError,
    DomainUnauthorizedError,
    PopupDismissedError,
    QuizPortalError,
    UnknownAuthError,
)
from ..models.enums import AuthState, IdentityKind
from ..models.schemas import GUEST_ID_PREFIX, Identity
from ..models.state import SessionContext
from .artifacts import LocalArtifactStore
from .provider import IdentityProvider, Unsubscribe, classify_provider_error

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity | None, Identity | None], Any]


class OwnerDataStore(Protocol):
    async def reset_owner(self, owner_id: str) -> int: ...


class IdentityReconciler:
    """Unico componente autorizado a agir sobre pushes do provedor.

    Example:
        >>> reconciler = IdentityReconciler(provider, artifacts, context, origin="app.example.com")
        >>> await reconciler.start()
        >>> guest = await reconciler.continue_as_guest()
        >>> reconciler.state
        <AuthState.GUEST: 'guest'>
    """

    def __init__(
        self,
        provider: IdentityProvider,
        artifacts: LocalArtifactStore,
        context: SessionContext | None = None,
        origin: str = "localhost",
        guest_data_stores: Sequence[OwnerDataStore] = (),
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.artifacts = artifacts
        self.context = context if context is not None else SessionContext()
        self.origin = origin
        self._guest_data_stores = list(guest_data_stores)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._listeners: list[IdentityListener] = []
        self._unsubscribe: Unsubscribe | None = None
        self._last_guest_ms = 0

    # -------------------------------------------------------------------------
    # Estado
    # -------------------------------------------------------------------------

    @property
    def current(self) -> Identity | None:
        return self.context.identity

    @property
    def state(self) -> AuthState:
        identity = self.context.identity
        if identity is None:
            return AuthState.UNAUTHENTICATED
        if identity.kind == IdentityKind.GUEST:
            return AuthState.GUEST
        return AuthState.AUTHENTICATED

    def on_change(self, listener: IdentityListener) -> Unsubscribe:
        """Registra listener (previous, current) chamado a cada troca de identidade."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Ciclo de vida
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Assina o provedor e restaura convidado salvo localmente."""
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.subscribe(self.handle_provider_push)

        async with self._lock:
            if self.context.identity is not None:
                return
            guest = await self.artifacts.load_guest()
            if guest is None:
                return
            previous = self._set_identity(guest)

        logger.info(f"Sessao convidada restaurada: {guest.id}")
        await self._notify(previous, guest)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -------------------------------------------------------------------------
    # Transicoes
    # -------------------------------------------------------------------------

    async def continue_as_guest(self) -> Identity:
        """Materializa nova identidade convidada (sem chamada de rede).

        Artefatos de convidado/cache anteriores sao limpos antes.
        Se ja houver convidado ativo, ele e retornado.
        """
        async with self._lock:
            current = self.context.identity
            if current is not None and current.is_guest:
                return current
            if current is not None:
                raise UnknownAuthError(
                    message="Sessao autenticada ativa; saia antes de continuar como convidado",
                    code="auth/session-active",
                )

            await self.artifacts.clear_all()
            guest = Identity.guest(self._new_guest_id())
            await self.artifacts.save_guest(guest)
            previous = self._set_identity(guest)
            self.context.login_error = None

        logger.info(f"Sessao convidada iniciada: {guest.id}")
        await self._notify(previous, guest)
        return guest

    async def handle_provider_push(self, identity: Identity | None) -> None:
        """Aplica push do provedor respeitando a precedencia do convidado."""
        purge_guest_id = None

        async with self._lock:
            current = self.context.identity

            if identity is None:
                if current is None:
                    return
                if current.is_guest:
                    logger.debug("Push nulo ignorado: sessao convidada ativa")
                    return
                await self.artifacts.clear_all()
                previous = self._set_identity(None)
                logger.info(f"Sessao autenticada encerrada pelo provedor: {current.id}")

            elif identity.kind != IdentityKind.AUTHENTICATED:
                logger.warning(f"Push do provedor com identidade nao autenticada ignorado: {identity.id}")
                return

            elif current is not None and not current.is_guest and current.id == identity.id:
                # Mesma conta: apenas atualiza perfil
                self._set_identity(identity)
                return

            else:
                await self.artifacts.clear_all()
                previous = self._set_identity(identity)
                self.context.login_error = None
                if previous is not None and previous.is_guest:
                    purge_guest_id = previous.id
                logger.info(f"Sessao autenticada: {identity.id}")

        await self._notify(previous, self.context.identity)
        if purge_guest_id:
            await self._purge_guest_data(purge_guest_id)

    async def sign_in(self) -> Identity | None:
        """Login pelo provedor.

        Returns:
            Identidade autenticada, ou None se o popup foi fechado

        Raises:
            DomainUnauthorizedError: Origem nao autorizada (carrega a origem)
            UnknownAuthError: Demais falhas
        """
        try:
            identity = await self.provider.sign_in()
        except PopupDismissedError:
            logger.debug("Login cancelado pelo usuario")
            return None
        except DomainUnauthorizedError as e:
            error = e if e.origin else DomainUnauthorizedError(origin=self.origin)
            self._record_login_error(error)
            raise error from e
        except AuthError as e:
            self._record_login_error(e)
            raise
        except Exception as e:
            error = classify_provider_error(getattr(e, "code", None), str(e), self.origin)
            if isinstance(error, PopupDismissedError):
                logger.debug("Login cancelado pelo usuario")
                return None
            self._record_login_error(error)
            raise error from e

        await self.handle_provider_push(identity)
        return identity

    async def sign_out(self) -> None:
        """Logout explicito.

        Convidado: reset local puro. Autenticado: logout no provedor e a
        mesma limpeza local.
        """
        current = self.context.identity
        if current is None:
            return

        if not current.is_guest:
            try:
                await self.provider.sign_out()
            except AuthError:
                raise
            except Exception as e:
                raise UnknownAuthError(message=str(e), code=getattr(e, "code", None) or "unknown") from e

        async with self._lock:
            current = self.context.identity
            if current is None:
                return
            await self.artifacts.clear_all()
            previous = self._set_identity(None)

        logger.info(f"Logout: {previous.id}")
        await self._notify(previous, None)
        if previous.is_guest:
            await self._purge_guest_data(previous.id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _new_guest_id(self) -> str:
        now_ms = int(self._clock() * 1000)
        if now_ms <= self._last_guest_ms:
            now_ms = self._last_guest_ms + 1
        self._last_guest_ms = now_ms
        return f"{GUEST_ID_PREFIX}{now_ms}"

    def _set_identity(self, identity: Identity | None) -> Identity | None:
        previous = self.context.identity
        self.context.identity = identity
        return previous

    def _record_login_error(self, error: AuthError) -> None:
        logger.error(f"Falha no login ({error.code}): {error.message}")
        self.context.login_error = {"code": error.code, **error.to_dict()}

    async def _notify(self, previous: Identity | None, current: Identity | None) -> None:
        for listener in list(self._listeners):
            result = listener(previous, current)
            if inspect.isawaitable(result):
                await result

    async def _purge_guest_data(self, guest_id: str) -> None:
        for store in self._guest_data_stores:
            try:
                await store.reset_owner(guest_id)
            except QuizPortalError as e:
                logger.warning(f"Falha ao remover dados do convidado {guest_id}: {e.message}")
