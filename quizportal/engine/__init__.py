"""QuizPortal Engines - Logica de negocios."""

from .dedup_engine import QuestionDeduplicationEngine
from .import_pipeline import QuestionImportPipeline
from .review_builder import ReviewIndexBuilder
from .scoring_engine import QuizScoringEngine
from .session_engine import QuizSessionEngine
from .timer import CountdownTimer

__all__ = [
    "CountdownTimer",
    "QuestionDeduplicationEngine",
    "QuestionImportPipeline",
    "QuizScoringEngine",
    "QuizSessionEngine",
    "ReviewIndexBuilder",
]
