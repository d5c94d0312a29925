"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nextrep.adapters.overpass_client import HttpxOverpassClient
from nextrep.adapters.spoonacular_client import HttpxSpoonacularClient
from nextrep.adapters.supabase_entry_repository import (
    SupabaseDietRepository,
    SupabaseSleepRepository,
    SupabaseWorkoutRepository,
)
from nextrep.adapters.supabase_goal_repository import SupabaseGoalRepository
from nextrep.adapters.supabase_location_repository import (
    SupabaseLocationRepository,
)
from nextrep.adapters.supabase_tracker_repository import SupabaseTrackerRepository
from nextrep.adapters.supabase_user_repository import SupabaseUserRepository
from nextrep.config import Settings
from nextrep.services.cache import InMemoryCache
from nextrep.services.food import FoodSearchService
from nextrep.services.goals import GoalService
from nextrep.services.locations import LocationService
from nextrep.services.progress import ProgressService
from nextrep.services.schedule import ScheduleService
from nextrep.services.trackers import TrackerService
from nextrep.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    goal_service: GoalService
    schedule_service: ScheduleService
    tracker_service: TrackerService
    progress_service: ProgressService
    food_service: FoodSearchService
    location_service: LocationService
    user_service: UserService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    goal_repository = SupabaseGoalRepository(supabase_client)
    diet_repository = SupabaseDietRepository(supabase_client)
    workout_repository = SupabaseWorkoutRepository(supabase_client)
    sleep_repository = SupabaseSleepRepository(supabase_client)
    tracker_repository = SupabaseTrackerRepository(supabase_client)
    location_repository = SupabaseLocationRepository(supabase_client)
    user_repository = SupabaseUserRepository(supabase_client)

    schedule_service = ScheduleService(
        goals=goal_repository,
        diets=diet_repository,
        workouts=workout_repository,
        sleeps=sleep_repository,
        trackers=tracker_repository,
        week_start=resolved_settings.week_start_day,
    )
    goal_service = GoalService(goal_repository, entries=schedule_service)
    tracker_service = TrackerService(tracker_repository, entries=schedule_service)
    progress_service = ProgressService(
        goals=goal_repository,
        diets=diet_repository,
        workouts=workout_repository,
        sleeps=sleep_repository,
        trackers=tracker_repository,
        trailing_week_days=resolved_settings.trailing_week_days,
        trailing_month_days=resolved_settings.trailing_month_days,
    )
    spoonacular_client = HttpxSpoonacularClient.create(
        api_key=resolved_settings.spoonacular_api_key,
        base_url=resolved_settings.spoonacular_base_url,
    )
    food_service = FoodSearchService(client=spoonacular_client, cache=InMemoryCache())
    overpass_client = HttpxOverpassClient.create(
        resolved_settings.overpass_url,
        timeout_seconds=resolved_settings.overpass_timeout_seconds,
    )
    location_service = LocationService(
        repository=location_repository,
        client=overpass_client,
        timeout_seconds=resolved_settings.overpass_timeout_seconds,
    )

    async def close_resources() -> None:
        await spoonacular_client.close()
        await overpass_client.close()

    return AppContainer(
        settings=resolved_settings,
        goal_service=goal_service,
        schedule_service=schedule_service,
        tracker_service=tracker_service,
        progress_service=progress_service,
        food_service=food_service,
        location_service=location_service,
        user_service=UserService(user_repository),
        close_resources=close_resources,
    )
