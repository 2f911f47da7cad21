"""QuizPortal Schemas - Modelos Pydantic de dominio e de request/response."""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import AuthState, GenerationKind, IdentityKind, SessionPhase
from .normalization import resolve_correct_answer

GUEST_ID_PREFIX = "guest_"
DEFAULT_AVATAR_URL = "https://via.placeholder.com/100"
GUEST_AVATAR_URL = "https://ui-avatars.com/api/?name=Guest+User&background=6366f1&color=fff"

RANDOM_TOPIC = "Random"
RANDOM_TOPIC_LABEL = "Random (All Topics)"
BOOKMARKS_TOPIC = "Bookmarks Review"
FULL_COUNT = "Full"


# =============================================================================
# IDENTIDADE
# =============================================================================


class Identity(BaseModel):
    """Identidade atual (autenticada pelo provedor ou convidado local)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="ID da identidade (guest_ para convidados)")
    display_name: str = Field(default="User", description="Nome exibido")
    email: str = Field(default="", description="Email (vazio para convidados)")
    avatar_url: str = Field(default=DEFAULT_AVATAR_URL, description="URL do avatar")
    kind: IdentityKind = Field(..., description="Origem da identidade")

    @model_validator(mode="after")
    def _check_kind_prefix(self) -> "Identity":
        has_guest_prefix = self.id.startswith(GUEST_ID_PREFIX)
        if self.kind == IdentityKind.GUEST and not has_guest_prefix:
            raise ValueError(f"Identidade convidada deve ter prefixo '{GUEST_ID_PREFIX}'")
        if self.kind == IdentityKind.AUTHENTICATED and has_guest_prefix:
            raise ValueError(f"Identidade autenticada nao pode usar prefixo '{GUEST_ID_PREFIX}'")
        return self

    @property
    def is_guest(self) -> bool:
        return self.kind == IdentityKind.GUEST

    @classmethod
    def guest(cls, guest_id: str) -> "Identity":
        """Cria identidade convidada local."""
        return cls(
            id=guest_id,
            display_name="Guest Explorer",
            email="",
            avatar_url=GUEST_AVATAR_URL,
            kind=IdentityKind.GUEST,
        )


class ProviderUser(BaseModel):
    """Usuario como entregue pelo provedor de identidade."""

    uid: str = Field(..., min_length=1)
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None

    def to_identity(self) -> Identity:
        return Identity(
            id=self.uid,
            display_name=self.display_name or "User",
            email=self.email or "",
            avatar_url=self.photo_url or DEFAULT_AVATAR_URL,
            kind=IdentityKind.AUTHENTICATED,
        )


# =============================================================================
# PERGUNTAS
# =============================================================================


class QuestionDraft(BaseModel):
    """Pergunta validada ainda sem ID de armazenamento."""

    text: str = Field(..., description="Enunciado")
    options: list[str] = Field(..., description="Alternativas (>= 2, unicas)")
    correct_answer: str = Field(..., description="Texto literal ou letra A-D")
    topic: str = Field(default="", description="Topico")
    subject: str = Field(default="", description="Materia")

    @field_validator("text", "correct_answer")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Campo obrigatorio vazio")
        return value

    @field_validator("topic", "subject")
    @classmethod
    def _strip_optional(cls, value: str) -> str:
        return value.strip()

    @field_validator("options")
    @classmethod
    def _check_options(cls, options: list[str]) -> list[str]:
        cleaned = [option.strip() for option in options]
        if len(cleaned) < 2:
            raise ValueError("Pergunta precisa de pelo menos 2 alternativas")
        if any(not option for option in cleaned):
            raise ValueError("Alternativas nao podem ser vazias")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("Alternativas duplicadas")
        return cleaned

    @model_validator(mode="after")
    def _check_correct_answer(self) -> "QuestionDraft":
        if self.resolved_correct_answer not in self.options:
            raise ValueError("Resposta correta nao corresponde a nenhuma alternativa")
        return self

    @property
    def resolved_correct_answer(self) -> str:
        """Resposta correta normalizada para o texto da alternativa."""
        return resolve_correct_answer(self.options, self.correct_answer)


class Question(QuestionDraft):
    """Pergunta armazenada (ID unico no escopo do dono)."""

    id: str = Field(..., min_length=1, description="ID atribuido pelo store")


class QuestionView(BaseModel):
    """Pergunta exibida durante o quiz (sem a resposta)."""

    id: str
    text: str
    options: list[str]
    topic: str
    subject: str

    @classmethod
    def from_question(cls, question: Question) -> "QuestionView":
        return cls(
            id=question.id,
            text=question.text,
            options=list(question.options),
            topic=question.topic,
            subject=question.subject,
        )


class RawQuestion(BaseModel):
    """Pergunta bruta do adaptador de geracao (nao confiavel)."""

    model_config = ConfigDict(extra="ignore")

    text: str | None = Field(default=None, validation_alias=AliasChoices("question", "text"))
    options: list[Any] = Field(default_factory=list)
    correct_answer: str | None = Field(
        default=None,
        validation_alias=AliasChoices("correctAnswer", "correct_answer", "answer"),
    )
    topic: str | None = None
    subject: str | None = None

    def to_draft(self, subject: str = "", topic: str = "") -> QuestionDraft:
        """Valida e converte para QuestionDraft.

        Raises:
            pydantic.ValidationError: Se texto, alternativas ou resposta forem invalidos
        """
        return QuestionDraft(
            text=self.text or "",
            options=self.options,
            correct_answer=self.correct_answer or "",
            topic=self.topic or topic,
            subject=self.subject or subject,
        )


# =============================================================================
# RESULTADOS
# =============================================================================


class ResultDetail(BaseModel):
    """Resultado de uma pergunta dentro da tentativa."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    selected_option: str | None = Field(default=None, description="None se nao respondida")
    correct_answer_text: str = Field(..., description="Resposta correta resolvida")
    is_correct: bool


class QuizResult(BaseModel):
    """Resultado imutavel de uma tentativa."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    timestamp: int = Field(..., description="Epoch em milissegundos")
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    topic: str = ""
    details: tuple[ResultDetail, ...]

    @model_validator(mode="after")
    def _check_consistency(self) -> "QuizResult":
        if len(self.details) != self.total_questions:
            raise ValueError(
                f"details ({len(self.details)}) diferente de total_questions ({self.total_questions})"
            )
        correct = sum(1 for detail in self.details if detail.is_correct)
        if self.score != correct:
            raise ValueError(f"score ({self.score}) diferente de acertos ({correct})")
        return self

    @property
    def percentage(self) -> int:
        return round(self.score / self.total_questions * 100)


class ReviewEntry(BaseModel):
    """Pergunta revisada com seu detalhe de resultado."""

    question: Question
    detail: ResultDetail


# =============================================================================
# REQUESTS / RESPONSES
# =============================================================================


class ImportRequest(BaseModel):
    """Request de importacao via geracao."""

    kind: GenerationKind = Field(default=GenerationKind.TEXT)
    subject: str = Field(..., min_length=1, description="Materia (ex: Physics)")
    topic: str = Field(..., min_length=1, description="Topico (ex: Kinematics)")
    count: int = Field(default=5, ge=1, le=100, description="Perguntas solicitadas (1-100)")
    content: str | None = Field(default=None, description="Conteudo do arquivo (kind=file)")
    images: list[str] = Field(default_factory=list, description="Imagens base64/data URL (kind=image)")

    @field_validator("subject", "topic")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Informe materia e topico")
        return value

    @model_validator(mode="after")
    def _check_payload(self) -> "ImportRequest":
        if self.kind == GenerationKind.IMAGE and not self.images:
            raise ValueError("Envie pelo menos uma imagem")
        if self.kind == GenerationKind.FILE and not self.content:
            raise ValueError("Envie um arquivo")
        return self

    @property
    def payload(self) -> Any:
        if self.kind == GenerationKind.IMAGE:
            return self.images
        if self.kind == GenerationKind.FILE:
            return self.content
        return None


class ImportReport(BaseModel):
    """Resumo de uma importacao concluida."""

    requested: int
    generated: int
    valid: int
    unique: int
    inserted: int
    questions: list[Question]


class StartQuizRequest(BaseModel):
    topic: str = Field(default=RANDOM_TOPIC)
    count: int | Literal["Full"] = Field(default=25)
    bookmark_mode: bool = Field(default=False)

    @field_validator("count")
    @classmethod
    def _positive_count(cls, value: int | str) -> int | str:
        if isinstance(value, int) and value < 1:
            raise ValueError("count deve ser >= 1 ou 'Full'")
        return value


class AnswerRequest(BaseModel):
    option: str = Field(..., description="Texto da alternativa selecionada")
    question_id: str | None = Field(default=None, description="Padrao: pergunta atual")


class NavigateRequest(BaseModel):
    index: int | None = None
    delta: int | None = None

    @model_validator(mode="after")
    def _one_of(self) -> "NavigateRequest":
        if (self.index is None) == (self.delta is None):
            raise ValueError("Informe index ou delta")
        return self


class ProviderEventRequest(BaseModel):
    user: ProviderUser | None = None


class ExplainRequest(BaseModel):
    question: str = Field(..., min_length=1)
    selected: str | None = None
    correct: str = Field(..., min_length=1)


class TextResponse(BaseModel):
    text: str


class AuthStatusResponse(BaseModel):
    state: AuthState
    identity: Identity | None = None
    login_error: dict[str, Any] | None = Field(
        default=None, description="Ultima falha de login exibivel (code, error, message, details)"
    )


class BookmarkToggleResponse(BaseModel):
    question_id: str
    bookmarked: bool


class QuizSessionView(BaseModel):
    """Visao serializavel da sessao ativa."""

    topic: str
    phase: SessionPhase
    current_index: int
    total_questions: int
    question: QuestionView | None
    selected_option: str | None
    answered_count: int
    time_left: int
    time_left_display: str
    bookmarked: bool
    bookmark_ids: list[str]


class ChartPoint(BaseModel):
    name: str
    score: float
    topic: str


class DashboardStats(BaseModel):
    total_questions: int
    bookmarks_count: int
    unique_topics: int
    quizzes_taken: int
    topics: list[str]
    chart: list[ChartPoint]
