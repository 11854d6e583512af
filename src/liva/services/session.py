"""Session controller that keeps local state in step with the remote store."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from enum import Enum

from liva.domain.errors import (
    EstimationError,
    MissingCredentialsError,
    SessionNotReadyError,
    StoreError,
    StoreErrorKind,
)
from liva.domain.estimation import EstimationFailure, EstimationOutcome
from liva.domain.logs import RECIPE_UNIT, FoodLogDraft, FoodLogEntry
from liva.domain.nutrition import NutritionValues, UserGoals, default_goals
from liva.domain.recipes import Recipe, RecipeDraft
from liva.domain.stats import DailyCalories
from liva.services import aggregation
from liva.services.devices import DeviceSyncService, is_setup_error
from liva.services.estimation import EstimationService
from liva.services.identity import DeviceIdentityService
from liva.services.logs import FoodLogService
from liva.services.migration import LegacyMigrator
from liva.services.products import ProductLibraryService, suggest_products
from liva.services.recipes import RecipeService

CONNECTION_PROBLEM_NOTICE = "Er is een probleem met de verbinding naar de database."
SETUP_REQUIRED_NOTICE = (
    "Database setup vereist. Controleer de Supabase configuratie en herlaad."
)

_logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of an app session."""

    LOADING = "loading"
    SETUP_REQUIRED = "setup_required"
    CONNECTION_FAILED = "connection_failed"
    FIRST_RUN = "first_run"
    READY = "ready"


_ACTIVE_STATES = {SessionState.FIRST_RUN, SessionState.READY}


@dataclass
class AppSession:
    """Owns the in-memory logs, recipes and goals for one device session.

    Mutations write to the remote store first and only touch the local
    mirrors once the write succeeded.
    """

    identity: DeviceIdentityService
    migrator: LegacyMigrator
    device_sync: DeviceSyncService
    log_service: FoodLogService
    recipe_service: RecipeService
    product_service: ProductLibraryService
    estimation_service: EstimationService
    tz: tzinfo | None = None

    state: SessionState = field(default=SessionState.LOADING, init=False)
    notice: str | None = field(default=None, init=False)
    device_id: str = field(default="", init=False)
    logs: list[FoodLogEntry] = field(default_factory=list, init=False)
    recipes: list[Recipe] = field(default_factory=list, init=False)
    goals: UserGoals | None = field(default=None, init=False)
    is_training_day: bool = field(default=False, init=False)
    _background_tasks: set[asyncio.Task[object]] = field(
        default_factory=set, init=False, repr=False
    )

    @property
    def is_initialized(self) -> bool:
        """Return True once logs and recipes were loaded."""
        return self.state in _ACTIVE_STATES

    async def initialize(self) -> SessionState:
        """Resolve identity, migrate, sync and load the device's data."""
        if self.state is not SessionState.LOADING:
            return self.state
        try:
            self.device_id = self.identity.get_device_id()

            if self.migrator.has_legacy_data():
                await self.migrator.migrate(self.device_id)

            sync = await self.device_sync.sync_device(self.device_id)
            if sync.setup_required:
                return self._enter(SessionState.SETUP_REQUIRED, SETUP_REQUIRED_NOTICE)
            if sync.connection_failed:
                return self._enter(
                    SessionState.CONNECTION_FAILED, CONNECTION_PROBLEM_NOTICE
                )
            self.goals = sync.goals

            logs, recipes = await asyncio.gather(
                self.log_service.list_logs(self.device_id),
                self.recipe_service.list_recipes(self.device_id),
            )
        except Exception as exc:
            if is_setup_error(exc):
                return self._enter(SessionState.SETUP_REQUIRED, SETUP_REQUIRED_NOTICE)
            _logger.exception("Session initialization failed")
            return self._enter(SessionState.CONNECTION_FAILED, CONNECTION_PROBLEM_NOTICE)

        self.logs = logs
        self.recipes = recipes
        state = SessionState.READY if self.goals else SessionState.FIRST_RUN
        return self._enter(state)

    @property
    def active_goals(self) -> NutritionValues | None:
        """Return the goal profile for today, if goals are set."""
        if self.goals is None:
            return None
        return self.goals.active(self.is_training_day)

    def goals_for_editing(self) -> UserGoals:
        """Return the current goals, or the defaults offered on a first run."""
        return self.goals or default_goals()

    def set_training_day(self, is_training_day: bool) -> None:
        """Switch between the regular and training goal profiles."""
        self.is_training_day = is_training_day

    async def add_log(self, draft: FoodLogDraft) -> FoodLogEntry | None:
        """Store a food entry; return None when the store rejected it."""
        self._require_active()
        try:
            entry = await self.log_service.add_log(self.device_id, draft)
        except StoreError as exc:
            _logger.warning("Adding log failed: %s", exc.message)
            return None
        self.logs = [*self.logs, entry]
        self._spawn(self._remember_product(entry.name))
        return entry

    async def delete_log(self, log_id: str) -> bool:
        """Delete a food entry; return False when the store failed."""
        self._require_active()
        if not await self._delete(self.log_service.delete_log(log_id), "log"):
            return False
        self.logs = [log for log in self.logs if log.id != log_id]
        return True

    async def save_recipe(self, draft: RecipeDraft) -> Recipe | None:
        """Store a recipe; return None when the store rejected it."""
        self._require_active()
        try:
            recipe = await self.recipe_service.save_recipe(self.device_id, draft)
        except StoreError as exc:
            _logger.warning("Saving recipe failed: %s", exc.message)
            return None
        self.recipes = [*self.recipes, recipe]
        return recipe

    async def create_recipe(self, name: str, log_ids: list[str]) -> Recipe | None:
        """Build a recipe from today's selected entries and store it."""
        selected_ids = set(log_ids)
        today = aggregation.logs_for_day(self.logs, self._today(), self.tz)
        selected = [
            log for log in reversed(today) if log.id in selected_ids and not log.is_recipe
        ]
        if not name.strip() or not selected:
            raise ValueError("A recipe needs a name and at least one entry")
        return await self.save_recipe(aggregation.build_recipe(name.strip(), selected))

    async def log_recipe(self, recipe_id: str) -> FoodLogEntry | None:
        """Log one portion of a saved recipe."""
        recipe = next((item for item in self.recipes if item.id == recipe_id), None)
        if recipe is None:
            raise ValueError(f"Unknown recipe {recipe_id}")
        return await self.add_log(
            FoodLogDraft(
                name=recipe.name,
                quantity=1,
                unit=RECIPE_UNIT,
                macros=recipe.macros,
                is_recipe=True,
            )
        )

    async def delete_recipe(self, recipe_id: str) -> bool:
        """Delete a recipe; return False when the store failed."""
        self._require_active()
        deleted = await self._delete(
            self.recipe_service.delete_recipe(recipe_id), "recipe"
        )
        if not deleted:
            return False
        self.recipes = [recipe for recipe in self.recipes if recipe.id != recipe_id]
        return True

    async def save_goals(self, goals: UserGoals) -> bool:
        """Store goals for the device; the first save completes onboarding."""
        self._require_active()
        try:
            await self.device_sync.update_goals(self.device_id, goals)
        except StoreError as exc:
            _logger.warning("Saving goals failed: %s", exc.message)
            return False
        self.goals = goals
        self.state = SessionState.READY
        return True

    def today_totals(self) -> NutritionValues:
        """Return today's summed macros."""
        return aggregation.totals_for_day(self.logs, self._today(), self.tz)

    def remaining_today(self) -> NutritionValues | None:
        """Return today's remaining allowance against the active goals."""
        goals = self.active_goals
        if goals is None:
            return None
        return aggregation.remaining_allowance(goals, self.today_totals())

    def weekly_calories(self) -> list[DailyCalories]:
        """Return the calorie series for the last seven days."""
        return aggregation.last_7_days_series(self.logs, self._today(), self.tz)

    def history_for(self, day: datetime) -> list[FoodLogEntry]:
        """Return the entries of a given day, newest first."""
        return aggregation.logs_for_day(self.logs, day, self.tz)

    async def product_suggestions(self, query: str, limit: int = 5) -> list[str]:
        """Suggest previously logged product names."""
        if len(query) <= 1:
            return []
        products = await self.product_service.list_products(self.device_id)
        return suggest_products(products, query, limit)

    async def estimate_item(
        self, name: str, quantity: float, unit: str
    ) -> EstimationOutcome:
        """Estimate a product's macros, reporting failures instead of raising."""
        return await self._estimate(
            self.estimation_service.estimate_item(name, quantity, unit)
        )

    async def estimate_freeform(self, description: str) -> EstimationOutcome:
        """Estimate a described meal, reporting failures instead of raising."""
        return await self._estimate(
            self.estimation_service.estimate_freeform(description)
        )

    async def wait_for_background_tasks(self) -> None:
        """Wait for detached side effects started by commands."""
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    def _enter(self, state: SessionState, notice: str | None = None) -> SessionState:
        self.state = state
        self.notice = notice
        if notice:
            _logger.warning("Session entered %s: %s", state.value, notice)
        return state

    def _require_active(self) -> None:
        if self.state not in _ACTIVE_STATES:
            raise SessionNotReadyError(f"Session is {self.state.value}")

    def _today(self) -> datetime:
        return aggregation.start_of_day(datetime.now(tz=UTC), self.tz)

    def _spawn(self, coro: Coroutine[object, object, object]) -> None:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _remember_product(self, name: str) -> None:
        try:
            await self.product_service.remember(self.device_id, [name])
        except Exception:
            _logger.exception("Remembering product %r failed", name)

    async def _delete(self, call: Coroutine[object, object, None], label: str) -> bool:
        try:
            await call
        except StoreError as exc:
            if exc.kind is StoreErrorKind.NOT_FOUND:
                # Already gone remotely; drop it locally as well.
                return True
            _logger.warning("Deleting %s failed: %s", label, exc.message)
            return False
        return True

    async def _estimate(
        self, call: Coroutine[object, object, object]
    ) -> EstimationOutcome:
        try:
            estimate = await call
        except MissingCredentialsError:
            _logger.warning("Estimation unavailable: no API credentials")
            return EstimationOutcome(failure=EstimationFailure.MISSING_CREDENTIALS)
        except EstimationError as exc:
            _logger.warning("Estimation failed: %s", exc)
            return EstimationOutcome(failure=EstimationFailure.FAILED)
        except Exception:
            _logger.exception("Estimation failed unexpectedly")
            return EstimationOutcome(failure=EstimationFailure.FAILED)
        return EstimationOutcome(estimate=estimate)
