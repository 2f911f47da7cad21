# =============================================================================
# TESTES - Identity Reconciler
# =============================================================================
# Testes unitários para a máquina de estados de identidade
# =============================================================================

from unittest.mock import AsyncMock

import pytest


class TestClassifyProviderError:
    """Testes para classificação de erros do provedor."""

    def test_popup_closed(self):
        """Verifica popup fechado."""
        from quizportal.exceptions import PopupDismissedError
        from quizportal.identity import classify_provider_error

        error = classify_provider_error("auth/popup-closed-by-user", "closed", "app.test")

        assert isinstance(error, PopupDismissedError)

    def test_unauthorized_domain_by_code(self):
        """Verifica domínio não autorizado com origem."""
        from quizportal.exceptions import DomainUnauthorizedError
        from quizportal.identity import classify_provider_error

        error = classify_provider_error("auth/unauthorized-domain", "", "app.test")

        assert isinstance(error, DomainUnauthorizedError)
        assert error.origin == "app.test"
        assert error.details["origin"] == "app.test"

    def test_unauthorized_domain_by_message(self):
        """Verifica detecção pela mensagem."""
        from quizportal.exceptions import DomainUnauthorizedError
        from quizportal.identity import classify_provider_error

        error = classify_provider_error(None, "Firebase: Error (auth/unauthorized-domain).", "x")

        assert isinstance(error, DomainUnauthorizedError)

    def test_unknown(self):
        """Verifica fallback para UnknownAuthError."""
        from quizportal.exceptions import UnknownAuthError
        from quizportal.identity import classify_provider_error

        error = classify_provider_error("auth/network-request-failed", "offline", "x")

        assert isinstance(error, UnknownAuthError)
        assert error.code == "auth/network-request-failed"


class TestGuestTransitions:
    """Testes para entrada e saída de convidado."""

    @pytest.mark.asyncio
    async def test_continue_as_guest(self, reconciler, artifacts):
        """Verifica Unauthenticated -> Guest com snapshot salvo."""
        from quizportal.models.enums import AuthState

        guest = await reconciler.continue_as_guest()

        assert reconciler.state == AuthState.GUEST
        assert guest.id.startswith("guest_")
        assert await artifacts.load_guest() == guest

    @pytest.mark.asyncio
    async def test_continue_as_guest_clears_stale_cache(self, reconciler, artifacts, sample_questions):
        """Verifica limpeza de cache de sessão anterior."""
        await artifacts.save_question_cache("old-user", sample_questions)

        await reconciler.continue_as_guest()

        assert await artifacts.load_question_cache("old-user") == []

    @pytest.mark.asyncio
    async def test_guest_ids_are_unique(self, provider, artifacts):
        """Verifica IDs distintos mesmo no mesmo milissegundo."""
        from quizportal.identity import IdentityReconciler

        reconciler = IdentityReconciler(provider, artifacts, clock=lambda: 1000.0)

        first = await reconciler.continue_as_guest()
        await reconciler.sign_out()
        second = await reconciler.continue_as_guest()

        assert first.id == "guest_1000000"
        assert second.id == "guest_1000001"

    @pytest.mark.asyncio
    async def test_null_push_keeps_guest(self, reconciler):
        """Verifica que push nulo nunca derruba o convidado."""
        await reconciler.start()
        guest = await reconciler.continue_as_guest()

        for _ in range(3):
            await reconciler.handle_provider_push(None)

        assert reconciler.current == guest

    @pytest.mark.asyncio
    async def test_null_push_through_provider_keeps_guest(self, reconciler, provider):
        """Verifica o mesmo comportamento pela assinatura do provedor."""
        await reconciler.start()
        guest = await reconciler.continue_as_guest()

        await provider.publish(None)

        assert reconciler.current == guest

    @pytest.mark.asyncio
    async def test_guest_sign_out_is_local(self, reconciler, provider, artifacts):
        """Verifica logout de convidado sem chamada ao provedor."""
        from quizportal.models.enums import AuthState

        await reconciler.continue_as_guest()

        await reconciler.sign_out()

        assert reconciler.state == AuthState.UNAUTHENTICATED
        provider.sign_out_handler_mock.assert_not_called()
        assert await artifacts.load_guest() is None

    @pytest.mark.asyncio
    async def test_start_restores_saved_guest(self, provider, artifacts):
        """Verifica restauração do convidado salvo localmente."""
        from quizportal.identity import IdentityReconciler
        from quizportal.models.enums import AuthState
        from quizportal.models.schemas import Identity

        await artifacts.save_guest(Identity.guest("guest_42"))
        reconciler = IdentityReconciler(provider, artifacts)

        await reconciler.start()

        assert reconciler.state == AuthState.GUEST
        assert reconciler.current.id == "guest_42"

    @pytest.mark.asyncio
    async def test_guest_while_authenticated_rejected(self, reconciler, authenticated_identity):
        """Verifica que convidado exige logout prévio."""
        from quizportal.exceptions import UnknownAuthError

        await reconciler.handle_provider_push(authenticated_identity)

        with pytest.raises(UnknownAuthError):
            await reconciler.continue_as_guest()

    @pytest.mark.asyncio
    async def test_clear_failure_blocks_transition(self, provider, failing_agentfs):
        """Verifica que falha ao limpar artefatos impede a transição."""
        from quizportal.exceptions import StoreWriteError
        from quizportal.identity import IdentityReconciler, LocalArtifactStore
        from quizportal.models.enums import AuthState

        reconciler = IdentityReconciler(provider, LocalArtifactStore(failing_agentfs))

        with pytest.raises(StoreWriteError):
            await reconciler.continue_as_guest()

        assert reconciler.state == AuthState.UNAUTHENTICATED


class TestAuthenticatedTransitions:
    """Testes para identidade autenticada."""

    @pytest.mark.asyncio
    async def test_push_authenticates(self, reconciler, provider, authenticated_identity):
        """Verifica Unauthenticated -> Authenticated por push."""
        from quizportal.models.enums import AuthState

        await reconciler.start()
        await provider.publish(authenticated_identity)

        assert reconciler.state == AuthState.AUTHENTICATED
        assert reconciler.current.id == "user-abc"

    @pytest.mark.asyncio
    async def test_guest_replaced_and_artifacts_cleared(
        self, reconciler, artifacts, authenticated_identity, sample_questions
    ):
        """Verifica Guest -> Authenticated sem herdar artefatos."""
        await reconciler.start()
        guest = await reconciler.continue_as_guest()
        await artifacts.save_question_cache(guest.id, sample_questions)

        await reconciler.handle_provider_push(authenticated_identity)

        assert reconciler.current == authenticated_identity
        assert await artifacts.load_guest() is None
        assert await artifacts.load_question_cache(guest.id) == []

    @pytest.mark.asyncio
    async def test_guest_durable_data_purged(
        self, reconciler, question_store, authenticated_identity
    ):
        """Verifica remoção dos favoritos do convidado descartado."""
        guest = await reconciler.continue_as_guest()
        await question_store.toggle_bookmark(guest.id, "q-1")

        await reconciler.handle_provider_push(authenticated_identity)

        assert await question_store.get_bookmarks(guest.id) == []

    @pytest.mark.asyncio
    async def test_null_push_signs_out_authenticated(self, reconciler, authenticated_identity):
        """Verifica Authenticated -> Unauthenticated por push nulo."""
        from quizportal.models.enums import AuthState

        await reconciler.handle_provider_push(authenticated_identity)
        await reconciler.handle_provider_push(None)

        assert reconciler.state == AuthState.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_same_user_push_is_not_a_transition(self, reconciler, authenticated_identity):
        """Verifica que push repetido não notifica listeners."""
        changes = []
        reconciler.on_change(lambda prev, cur: changes.append((prev, cur)))

        await reconciler.handle_provider_push(authenticated_identity)
        await reconciler.handle_provider_push(authenticated_identity)

        assert len(changes) == 1

    @pytest.mark.asyncio
    async def test_sign_in_success(self, reconciler, authenticated_identity):
        """Verifica login completo pelo provedor."""
        await reconciler.start()

        identity = await reconciler.sign_in()

        assert identity == authenticated_identity
        assert reconciler.current == authenticated_identity

    @pytest.mark.asyncio
    async def test_sign_out_authenticated_calls_provider(
        self, reconciler, provider, authenticated_identity
    ):
        """Verifica logout remoto e limpeza local."""
        from quizportal.models.enums import AuthState

        await reconciler.start()
        await reconciler.sign_in()

        await reconciler.sign_out()

        provider.sign_out_handler_mock.assert_awaited_once()
        assert reconciler.state == AuthState.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_sign_out_failure_surfaces(self, reconciler, provider, authenticated_identity):
        """Verifica que falha no logout remoto é propagada."""
        from quizportal.exceptions import UnknownAuthError
        from quizportal.models.enums import AuthState

        await reconciler.handle_provider_push(authenticated_identity)
        provider.sign_out_handler_mock.side_effect = RuntimeError("network down")

        with pytest.raises(UnknownAuthError):
            await reconciler.sign_out()

        assert reconciler.state == AuthState.AUTHENTICATED


class TestSignInErrors:
    """Testes para falhas de login."""

    @pytest.mark.asyncio
    async def test_popup_dismissed_is_silent(self, reconciler, provider):
        """Verifica que popup fechado não é erro."""
        from quizportal.exceptions import PopupDismissedError
        from quizportal.models.enums import AuthState

        provider.sign_in_handler_mock.side_effect = PopupDismissedError()

        assert await reconciler.sign_in() is None
        assert reconciler.state == AuthState.UNAUTHENTICATED
        assert reconciler.context.login_error is None

    @pytest.mark.asyncio
    async def test_raw_unauthorized_domain_carries_origin(self, reconciler, provider):
        """Verifica classificação de erro bruto com a origem configurada."""
        from quizportal.exceptions import DomainUnauthorizedError

        error = RuntimeError("Firebase: Error (auth/unauthorized-domain).")
        error.code = "auth/unauthorized-domain"
        provider.sign_in_handler_mock.side_effect = error

        with pytest.raises(DomainUnauthorizedError) as exc:
            await reconciler.sign_in()

        assert exc.value.origin == "quiz.test.local"
        assert reconciler.context.login_error["code"] == "auth/unauthorized-domain"

    @pytest.mark.asyncio
    async def test_unknown_error_surfaces(self, reconciler, provider):
        """Verifica que outras falhas são propagadas."""
        from quizportal.exceptions import UnknownAuthError

        provider.sign_in_handler_mock.side_effect = ValueError("weird")

        with pytest.raises(UnknownAuthError):
            await reconciler.sign_in()


class TestListeners:
    """Testes para assinatura de mudanças."""

    @pytest.mark.asyncio
    async def test_async_listener_and_unsubscribe(self, reconciler, authenticated_identity):
        """Verifica listener assíncrono e cancelamento."""
        listener = AsyncMock()
        unsubscribe = reconciler.on_change(listener)

        guest = await reconciler.continue_as_guest()
        listener.assert_awaited_once_with(None, guest)

        unsubscribe()
        await reconciler.handle_provider_push(authenticated_identity)

        assert listener.await_count == 1

    @pytest.mark.asyncio
    async def test_stop_unsubscribes_from_provider(self, reconciler, provider, authenticated_identity):
        """Verifica que stop() encerra a assinatura."""
        await reconciler.start()
        reconciler.stop()

        await provider.publish(authenticated_identity)

        assert reconciler.current is None
