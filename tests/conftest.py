"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import jwt
import pytest

from nextrep.adapters.overpass_client import OverpassClient
from nextrep.adapters.spoonacular_client import SpoonacularClient
from nextrep.config import Settings
from nextrep.containers import AppContainer
from nextrep.domain.entries import (
    DietEntry,
    MealType,
    SleepEntry,
    Tracker,
    TrackerType,
    WorkoutEntry,
    WorkoutType,
    scheduled_at,
)
from nextrep.domain.goals import Goal, GoalCategory, GoalData, GoalStatus
from nextrep.domain.locations import FitnessLocation, LocationType
from nextrep.domain.users import UserProfile
from nextrep.services.cache import InMemoryCache
from nextrep.services.calendar import to_utc
from nextrep.services.food import FoodSearchService
from nextrep.services.goals import GoalRepository, GoalService
from nextrep.services.locations import (
    CACHE_READ_LIMIT,
    LocationRepository,
    LocationService,
)
from nextrep.services.progress import ProgressService
from nextrep.services.schedule import EntryRepository, EntryT, ScheduleService
from nextrep.services.trackers import TrackerRepository, TrackerService
from nextrep.services.users import UserRepository, UserService

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=UTC)
USER_ID = UUID("11111111-1111-4111-8111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-4222-8222-222222222222")
JWT_SECRET = "test-secret-with-enough-length-for-hs256"


def fixed_clock() -> datetime:
    return NOW


@dataclass
class InMemoryGoalRepository(GoalRepository):
    """In-memory goal repository for tests."""

    goals: dict[UUID, Goal] = field(default_factory=dict)

    def add(self, goal: Goal) -> Goal:
        self.goals[goal.id] = goal
        return goal

    def get(self, goal_id: UUID) -> Goal | None:
        return self.goals.get(goal_id)

    def list(
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Goal]:
        goals = [
            goal
            for goal in self.goals.values()
            if goal.user_id == user_id
            and (category is None or goal.category is category)
            and (status is None or goal.status is status)
        ]
        goals.sort(key=lambda goal: to_utc(goal.start_date), reverse=True)
        if limit is None:
            return goals[offset:]
        return goals[offset : offset + limit]

    def count(
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
    ) -> int:
        return len(self.list(user_id, category=category, status=status))

    def update(self, goal: Goal) -> Goal:
        self.goals[goal.id] = goal
        return goal

    def delete(self, goal_id: UUID) -> None:
        self.goals.pop(goal_id, None)


@dataclass
class InMemoryEntryRepository(EntryRepository[EntryT]):
    """In-memory repository for one kind of scheduled entry."""

    entries: dict[UUID, EntryT] = field(default_factory=dict)

    def add(self, entry: EntryT) -> EntryT:
        self.entries[entry.id] = entry
        return entry

    def get(self, entry_id: UUID) -> EntryT | None:
        return self.entries.get(entry_id)

    def update(self, entry: EntryT) -> EntryT:
        self.entries[entry.id] = entry
        return entry

    def delete(self, entry_id: UUID) -> None:
        self.entries.pop(entry_id, None)

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[EntryT]:
        found = [
            entry
            for entry in self.entries.values()
            if entry.user_id == user_id
            and start <= to_utc(scheduled_at(entry)) < end
        ]
        return sorted(found, key=lambda entry: to_utc(scheduled_at(entry)))

    def list_for_goal(self, goal_id: UUID) -> list[EntryT]:
        return [entry for entry in self.entries.values() if entry.goal_id == goal_id]

    def detach_goal(self, goal_id: UUID) -> int:
        linked = self.list_for_goal(goal_id)
        for entry in linked:
            self.entries[entry.id] = replace(entry, goal_id=None)
        return len(linked)


@dataclass
class InMemoryTrackerRepository(TrackerRepository):
    """In-memory tracker repository for tests."""

    trackers: dict[UUID, Tracker] = field(default_factory=dict)

    def add(self, tracker: Tracker) -> Tracker:
        self.trackers[tracker.id] = tracker
        return tracker

    def get(self, tracker_id: UUID) -> Tracker | None:
        return self.trackers.get(tracker_id)

    def update(self, tracker: Tracker) -> Tracker:
        self.trackers[tracker.id] = tracker
        return tracker

    def delete(self, tracker_id: UUID) -> None:
        self.trackers.pop(tracker_id, None)

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Tracker]:
        found = [
            tracker
            for tracker in self.trackers.values()
            if tracker.user_id == user_id and start <= to_utc(tracker.date) < end
        ]
        return sorted(found, key=lambda tracker: to_utc(tracker.date))

    def list_for_references(self, reference_ids: list[UUID]) -> list[Tracker]:
        wanted = set(reference_ids)
        found = [
            tracker
            for tracker in self.trackers.values()
            if tracker.reference_id in wanted
        ]
        return sorted(found, key=lambda tracker: to_utc(tracker.date))

    def delete_for_reference(self, reference_id: UUID) -> int:
        doomed = [
            tracker.id
            for tracker in self.trackers.values()
            if tracker.reference_id == reference_id
        ]
        for tracker_id in doomed:
            del self.trackers[tracker_id]
        return len(doomed)


@dataclass
class InMemoryLocationRepository(LocationRepository):
    """In-memory fitness location cache for tests."""

    locations: dict[str, FitnessLocation] = field(default_factory=dict)
    upserted: list[FitnessLocation] = field(default_factory=list)

    def list_in_box(  # noqa: PLR0913
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        location_type: LocationType | None = None,
        limit: int = CACHE_READ_LIMIT,
    ) -> list[FitnessLocation]:
        found = [
            location
            for location in self.locations.values()
            if min_lat <= location.lat <= max_lat
            and min_lng <= location.lng <= max_lng
            and (location_type is None or location.type is location_type)
        ]
        return found[:limit]

    def upsert(self, locations: list[FitnessLocation]) -> int:
        for location in locations:
            self.locations[location.osm_id] = location
        self.upserted.extend(locations)
        return len(locations)


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user profiles for tests."""

    users: dict[UUID, UserProfile] = field(default_factory=dict)

    def get(self, user_id: UUID) -> UserProfile | None:
        return self.users.get(user_id)

    def update(self, user_id: UUID, changes: dict[str, object]) -> UserProfile | None:
        existing = self.users.get(user_id)
        if existing is None:
            return None
        updated = replace(existing, **changes)  # type: ignore[arg-type]
        self.users[user_id] = updated
        return updated


@dataclass
class FakeSpoonacularClient(SpoonacularClient):
    """Fake Spoonacular client with canned answers."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "results": [
                {
                    "id": 716429,
                    "title": "Chicken Rice Bowl",
                    "image": "https://img.spoonacular.com/716429.jpg",
                    "nutrition": {
                        "nutrients": [
                            {"name": "Calories", "amount": 584.5},
                            {"name": "Fat", "amount": 12.3},
                            {"name": "Carbohydrates", "amount": 70.1},
                            {"name": "Protein", "amount": 41.0},
                        ]
                    },
                }
            ]
        }
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "id": 9003,
            "name": "apple",
            "nutrition": {
                "nutrients": [
                    {"name": "Calories", "amount": 52},
                    {"name": "Protein", "amount": 0.3},
                    {"name": "Fat", "amount": 0.2},
                    {"name": "Carbohydrates", "amount": 14},
                ]
            },
        }
    )
    searches: list[tuple[str, int]] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    async def search_recipes(self, query: str, number: int) -> dict[str, object]:
        self.searches.append((query, number))
        if self.errors:
            raise self.errors.pop(0)
        return self.search_payload

    async def get_food_information(self, food_id: int) -> dict[str, object]:
        if self.errors:
            raise self.errors.pop(0)
        return self.food_payload


@dataclass
class FakeOverpassClient(OverpassClient):
    """Fake Overpass client that records queries."""

    payload: dict[str, object] = field(default_factory=lambda: {"elements": []})
    queries: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def query(self, overpass_ql: str) -> dict[str, object]:
        self.queries.append(overpass_ql)
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class Stores:
    """The in-memory repositories behind a test container."""

    goals: InMemoryGoalRepository = field(default_factory=InMemoryGoalRepository)
    diets: InMemoryEntryRepository[DietEntry] = field(
        default_factory=InMemoryEntryRepository
    )
    workouts: InMemoryEntryRepository[WorkoutEntry] = field(
        default_factory=InMemoryEntryRepository
    )
    sleeps: InMemoryEntryRepository[SleepEntry] = field(
        default_factory=InMemoryEntryRepository
    )
    trackers: InMemoryTrackerRepository = field(
        default_factory=InMemoryTrackerRepository
    )
    locations: InMemoryLocationRepository = field(
        default_factory=InMemoryLocationRepository
    )
    users: InMemoryUserRepository = field(default_factory=InMemoryUserRepository)


def make_goal(  # noqa: PLR0913
    data: GoalData,
    category: GoalCategory,
    *,
    user_id: UUID = USER_ID,
    start_date: datetime = NOW - timedelta(days=7),
    target_date: datetime = NOW + timedelta(days=7),
    status: GoalStatus = GoalStatus.PENDING,
    updated_at: datetime | None = None,
) -> Goal:
    return Goal(
        id=uuid4(),
        user_id=user_id,
        category=category,
        start_date=start_date,
        target_date=target_date,
        data=data,
        status=status,
        updated_at=updated_at,
    )


def make_diet(  # noqa: PLR0913
    when: datetime,
    *,
    calories: float = 500,
    protein: float = 30,
    fat: float = 20,
    carbs: float = 50,
    meal_weight: float | None = 200,
    goal_id: UUID | None = None,
    user_id: UUID = USER_ID,
) -> DietEntry:
    return DietEntry(
        id=uuid4(),
        user_id=user_id,
        meal_date_and_time=when,
        meal=MealType.LUNCH,
        food_name="Chicken salad",
        calories=calories,
        carbs=carbs,
        protein=protein,
        fat=fat,
        meal_weight=meal_weight,
        goal_id=goal_id,
    )


def make_workout(  # noqa: PLR0913
    when: datetime,
    *,
    duration: float | None = 45,
    reps: int | None = None,
    muscle_groups: tuple[str, ...] = (),
    workout_type: WorkoutType = WorkoutType.CARDIO,
    goal_id: UUID | None = None,
    user_id: UUID = USER_ID,
) -> WorkoutEntry:
    return WorkoutEntry(
        id=uuid4(),
        user_id=user_id,
        workout_date_and_time=when,
        type=workout_type,
        exercise_name="Running",
        duration=duration,
        reps=reps,
        target_muscle_groups=muscle_groups,
        goal_id=goal_id,
    )


def make_sleep(
    when: datetime,
    duration: float = 480,
    goal_id: UUID | None = None,
    user_id: UUID = USER_ID,
) -> SleepEntry:
    return SleepEntry(
        id=uuid4(), user_id=user_id, date=when, duration=duration, goal_id=goal_id
    )


def make_tracker(  # noqa: PLR0913
    entry: DietEntry | WorkoutEntry | SleepEntry,
    kind: TrackerType,
    *,
    when: datetime | None = None,
    completed_reps: int | None = None,
    completed_time: float | None = None,
    weight_consumed: float | None = None,
    sleep_hours: float | None = None,
) -> Tracker:
    return Tracker(
        id=uuid4(),
        user_id=entry.user_id,
        type=kind,
        reference_id=entry.id,
        date=when if when is not None else scheduled_at(entry),
        completed_reps=completed_reps,
        completed_time=completed_time,
        weight_consumed=weight_consumed,
        sleep_hours=sleep_hours,
    )


def make_token(user_id: UUID = USER_ID, claim: str = "id", **extra: object) -> str:
    payload = {claim: str(user_id), "exp": datetime.now(tz=UTC) + timedelta(hours=1)}
    payload.update(extra)
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        jwt_secret=JWT_SECRET,
        spoonacular_api_key="spoonacular-key",
    )


@pytest.fixture
def stores() -> Stores:
    return Stores()


@pytest.fixture
def schedule_service(stores: Stores) -> ScheduleService:
    return ScheduleService(
        goals=stores.goals,
        diets=stores.diets,
        workouts=stores.workouts,
        sleeps=stores.sleeps,
        trackers=stores.trackers,
        clock=fixed_clock,
    )


@pytest.fixture
def goal_service(stores: Stores, schedule_service: ScheduleService) -> GoalService:
    return GoalService(stores.goals, entries=schedule_service, clock=fixed_clock)


@pytest.fixture
def tracker_service(
    stores: Stores, schedule_service: ScheduleService
) -> TrackerService:
    return TrackerService(stores.trackers, entries=schedule_service, clock=fixed_clock)


@pytest.fixture
def progress_service(stores: Stores) -> ProgressService:
    return ProgressService(
        goals=stores.goals,
        diets=stores.diets,
        workouts=stores.workouts,
        sleeps=stores.sleeps,
        trackers=stores.trackers,
        clock=fixed_clock,
    )


@pytest.fixture
def user_service(stores: Stores) -> UserService:
    return UserService(stores.users, clock=fixed_clock)


@pytest.fixture
def spoonacular_client() -> FakeSpoonacularClient:
    return FakeSpoonacularClient()


@pytest.fixture
def overpass_client() -> FakeOverpassClient:
    return FakeOverpassClient()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    stores: Stores,
    goal_service: GoalService,
    schedule_service: ScheduleService,
    tracker_service: TrackerService,
    progress_service: ProgressService,
    user_service: UserService,
    spoonacular_client: FakeSpoonacularClient,
    overpass_client: FakeOverpassClient,
) -> AppContainer:
    food_service = FoodSearchService(
        client=spoonacular_client, cache=InMemoryCache(), retry_delay_seconds=0
    )
    location_service = LocationService(
        repository=stores.locations, client=overpass_client, clock=fixed_clock
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        goal_service=goal_service,
        schedule_service=schedule_service,
        tracker_service=tracker_service,
        progress_service=progress_service,
        food_service=food_service,
        location_service=location_service,
        user_service=user_service,
        close_resources=close_resources,
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}
