"""QuizPortal Router - Endpoints FastAPI sobre o controller."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from .controller import QuizPortalController
from .exceptions import (
    AuthError,
    DomainUnauthorizedError,
    EmptyQuizError,
    GenerationError,
    InvalidOwnerIdError,
    NoIdentityError,
    QuestionImportError,
    QuizNotActiveError,
    QuizPortalError,
    ResultNotFoundError,
    StoreError,
)
from .models.schemas import (
    AnswerRequest,
    AuthStatusResponse,
    BookmarkToggleResponse,
    DashboardStats,
    ExplainRequest,
    ImportReport,
    ImportRequest,
    NavigateRequest,
    ProviderEventRequest,
    Question,
    QuizResult,
    QuizSessionView,
    StartQuizRequest,
    TextResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["QuizPortal"])

# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


def get_controller(request: Request) -> QuizPortalController:
    """Dependency para obter o controller criado no lifespan."""
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="Aplicacao ainda nao inicializada")
    return controller


# =============================================================================
# ERROS
# =============================================================================

_STATUS_BY_ERROR: list[tuple[type[QuizPortalError], int]] = [
    (DomainUnauthorizedError, 403),
    (AuthError, 401),
    (NoIdentityError, 401),
    (InvalidOwnerIdError, 400),
    (GenerationError, 502),
    (QuestionImportError, 422),
    (EmptyQuizError, 404),
    (ResultNotFoundError, 404),
    (QuizNotActiveError, 409),
    (StoreError, 503),
]


def to_http_error(error: QuizPortalError) -> HTTPException:
    """Converte erro de dominio em HTTPException."""
    status_code = next(
        (status for cls, status in _STATUS_BY_ERROR if isinstance(error, cls)),
        500,
    )
    detail: dict[str, Any] = error.to_dict()
    if isinstance(error, AuthError):
        detail["code"] = error.code

    if status_code >= 500:
        logger.error(f"{error.__class__.__name__}: {error.message}")
    return HTTPException(status_code=status_code, detail=detail)


def _status(controller: QuizPortalController) -> AuthStatusResponse:
    return AuthStatusResponse(
        state=controller.auth_state,
        identity=controller.identity,
        login_error=controller.context.login_error,
    )


# =============================================================================
# AUTH
# =============================================================================


@router.get("/auth/me", response_model=AuthStatusResponse)
async def auth_me(controller: QuizPortalController = Depends(get_controller)):
    """Estado de autenticacao e identidade atual."""
    return _status(controller)


@router.post("/auth/guest", response_model=AuthStatusResponse)
async def auth_guest(controller: QuizPortalController = Depends(get_controller)):
    """Continua como convidado (sem chamada ao provedor)."""
    try:
        await controller.continue_as_guest()
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return _status(controller)


@router.post("/auth/sign-in", response_model=AuthStatusResponse)
async def auth_sign_in(controller: QuizPortalController = Depends(get_controller)):
    """Login pelo provedor.

    Popup fechado pelo usuario nao e erro: retorna o estado atual.
    Dominio nao autorizado retorna 403 com a origem a autorizar.
    """
    try:
        await controller.sign_in()
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return _status(controller)


@router.post("/auth/sign-out", response_model=AuthStatusResponse)
async def auth_sign_out(controller: QuizPortalController = Depends(get_controller)):
    try:
        await controller.sign_out()
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return _status(controller)


@router.post("/auth/provider-event", response_model=AuthStatusResponse)
async def auth_provider_event(
    event: ProviderEventRequest,
    controller: QuizPortalController = Depends(get_controller),
):
    """Recebe push do provedor (usuario autenticado ou null)."""
    identity = event.user.to_identity() if event.user else None
    try:
        await controller.provider_event(identity)
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return _status(controller)


# =============================================================================
# PERGUNTAS E FAVORITOS
# =============================================================================


@router.get("/questions", response_model=list[Question])
async def list_questions(
    cached: bool = False,
    controller: QuizPortalController = Depends(get_controller),
):
    """Lista perguntas do dono (cached=true le apenas o cache local)."""
    try:
        return await controller.list_questions(use_cache=cached)
    except QuizPortalError as e:
        raise to_http_error(e) from e


@router.post("/questions/import", response_model=ImportReport)
async def import_questions(
    request: ImportRequest,
    controller: QuizPortalController = Depends(get_controller),
):
    """Gera, valida, deduplica e grava perguntas."""
    try:
        return await controller.import_questions(request)
    except QuizPortalError as e:
        raise to_http_error(e) from e


@router.get("/bookmarks", response_model=list[str])
async def list_bookmarks(controller: QuizPortalController = Depends(get_controller)):
    try:
        return await controller.list_bookmarks()
    except QuizPortalError as e:
        raise to_http_error(e) from e


@router.post("/bookmarks/{question_id}/toggle", response_model=BookmarkToggleResponse)
async def toggle_bookmark(
    question_id: str,
    controller: QuizPortalController = Depends(get_controller),
):
    try:
        bookmarked = await controller.toggle_bookmark(question_id)
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return BookmarkToggleResponse(question_id=question_id, bookmarked=bookmarked)


# =============================================================================
# QUIZ
# =============================================================================


@router.post("/quiz/start", response_model=QuizSessionView)
async def start_quiz(
    request: StartQuizRequest,
    controller: QuizPortalController = Depends(get_controller),
):
    """Inicia tentativa (topico, quantidade ou "Full", modo favoritos)."""
    try:
        session = await controller.start_quiz(
            topic=request.topic,
            count=request.count,
            bookmark_mode=request.bookmark_mode,
        )
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return session.view()


@router.get("/quiz/current", response_model=QuizSessionView)
async def current_quiz(controller: QuizPortalController = Depends(get_controller)):
    try:
        return controller.require_active_quiz().view()
    except QuizPortalError as e:
        raise to_http_error(e) from e


@router.post("/quiz/answer", response_model=QuizSessionView)
async def answer_question(
    request: AnswerRequest,
    controller: QuizPortalController = Depends(get_controller),
):
    try:
        session = controller.require_active_quiz()
        session.select_answer(request.option, request.question_id)
    except QuizPortalError as e:
        raise to_http_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return session.view()


@router.post("/quiz/navigate", response_model=QuizSessionView)
async def navigate(
    request: NavigateRequest,
    controller: QuizPortalController = Depends(get_controller),
):
    """Move para um indice ou por delta (limitado a [0, N-1])."""
    try:
        session = controller.require_active_quiz()
    except QuizPortalError as e:
        raise to_http_error(e) from e

    if request.index is not None:
        session.go_to(request.index)
    else:
        session.go_to(session.state.current_index + request.delta)
    return session.view()


@router.post("/quiz/bookmark", response_model=BookmarkToggleResponse)
async def bookmark_current(controller: QuizPortalController = Depends(get_controller)):
    try:
        session = controller.require_active_quiz()
        question = session.state.current_question
        bookmarked = await session.toggle_bookmark()
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return BookmarkToggleResponse(question_id=question.id, bookmarked=bookmarked)


@router.post("/quiz/submit", response_model=QuizResult)
async def submit_quiz(controller: QuizPortalController = Depends(get_controller)):
    """Submissao manual (segunda submissao retorna 409)."""
    try:
        return await controller.submit_quiz()
    except QuizPortalError as e:
        raise to_http_error(e) from e


@router.post("/quiz/exit")
async def exit_quiz(controller: QuizPortalController = Depends(get_controller)):
    try:
        controller.exit_quiz()
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return {"success": True}


# =============================================================================
# HISTORICO, REVISAO E DASHBOARD
# =============================================================================


@router.get("/history", response_model=list[QuizResult])
async def history(controller: QuizPortalController = Depends(get_controller)):
    try:
        return await controller.history()
    except QuizPortalError as e:
        raise to_http_error(e) from e


async def _review(controller: QuizPortalController, result_id: str | None) -> dict[str, Any]:
    try:
        result, entries = await controller.review(result_id)
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return {
        "result": result.model_dump(mode="json"),
        "percentage": result.percentage,
        "entries": [entry.model_dump(mode="json") for entry in entries],
    }


@router.get("/review")
async def review_last(controller: QuizPortalController = Depends(get_controller)):
    """Revisao do ultimo resultado concluido."""
    return await _review(controller, None)


@router.get("/review/{result_id}")
async def review_result(
    result_id: str,
    controller: QuizPortalController = Depends(get_controller),
):
    return await _review(controller, result_id)


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(controller: QuizPortalController = Depends(get_controller)):
    try:
        return await controller.dashboard()
    except QuizPortalError as e:
        raise to_http_error(e) from e


# =============================================================================
# TUTOR
# =============================================================================


@router.post("/explain", response_model=TextResponse)
async def explain(
    request: ExplainRequest,
    controller: QuizPortalController = Depends(get_controller),
):
    try:
        text = await controller.explain(request.question, request.selected, request.correct)
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return TextResponse(text=text)


@router.post("/study-plan", response_model=TextResponse)
async def study_plan(controller: QuizPortalController = Depends(get_controller)):
    try:
        text = await controller.study_plan()
    except QuizPortalError as e:
        raise to_http_error(e) from e
    return TextResponse(text=text)
