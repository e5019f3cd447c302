# Import models so Alembic and Base metadata are aware of them
from .auth import User  # noqa: F401
from .flashcards import StudyModule, Flashcard, ModuleProgress  # noqa: F401
from .study import StudySession, CardPerformance  # noqa: F401
from .usage import DailyUsage, UsageKind  # noqa: F401
