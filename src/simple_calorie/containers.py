"""Dependency container wiring for the storage core."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from simple_calorie.adapters.openai_analysis_client import OpenAIAnalysisClient
from simple_calorie.adapters.sqlite_backend import SqliteDocumentBackend
from simple_calorie.adapters.supabase_backend import SupabaseDocumentBackend
from simple_calorie.app_logging import configure_logging
from simple_calorie.config import SQLITE_BACKEND, SUPABASE_BACKEND, Settings
from simple_calorie.services.analysis import AnalysisService
from simple_calorie.services.backend import DocumentBackend
from simple_calorie.services.clock import Clock
from simple_calorie.services.days import DayLogStore
from simple_calorie.services.favorites import FavoritesList
from simple_calorie.services.goals import GoalHistory
from simple_calorie.services.summary import DailySummaryService


@dataclass
class AppContainer:
    """Holds the shared backend and the stores built on it."""

    settings: Settings
    backend: DocumentBackend
    day_log: DayLogStore
    goals: GoalHistory
    favorites: FavoritesList
    summary_service: DailySummaryService
    analysis_service: AnalysisService | None
    close_resources: Callable[[], Awaitable[None]]


def build_backend(settings: Settings) -> DocumentBackend:
    """Create the configured persistence backend without connecting."""
    if settings.storage_backend == SQLITE_BACKEND:
        return SqliteDocumentBackend(path=settings.sqlite_path)
    if settings.storage_backend == SUPABASE_BACKEND:
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase backend requires url and service key")
        return SupabaseDocumentBackend(
            url=settings.supabase_url, service_key=settings.supabase_service_key
        )
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(
    settings: Settings | None = None, backend: DocumentBackend | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    resolved_backend = backend or build_backend(resolved_settings)
    clock = Clock(timezone_name=resolved_settings.timezone)
    day_log = DayLogStore(backend=resolved_backend, clock=clock)
    goals = GoalHistory(backend=resolved_backend, clock=clock)
    favorites = FavoritesList(backend=resolved_backend, clock=clock)
    summary_service = DailySummaryService(day_log=day_log, goals=goals)
    analysis_service = None
    if resolved_settings.openai_api_key:
        analysis_service = AnalysisService(
            client=OpenAIAnalysisClient.create(resolved_settings.openai_api_key),
            model=resolved_settings.openai_model,
            temperature=resolved_settings.openai_temperature,
            max_tokens=resolved_settings.openai_max_tokens,
        )

    async def close_resources() -> None:
        await resolved_backend.close()

    return AppContainer(
        settings=resolved_settings,
        backend=resolved_backend,
        day_log=day_log,
        goals=goals,
        favorites=favorites,
        summary_service=summary_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
