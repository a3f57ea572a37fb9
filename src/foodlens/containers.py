"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from foodlens.adapters.openai_nutrition_client import OpenAINutritionClient
from foodlens.adapters.supabase_food_repository import SupabaseFoodRepository
from foodlens.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from foodlens.adapters.supabase_user_repository import SupabaseUserRepository
from foodlens.adapters.supabase_water_repository import SupabaseWaterRepository
from foodlens.config import Settings
from foodlens.services.admin import AdminService
from foodlens.services.ai import NutritionAIClient, NutritionAIService
from foodlens.services.chat import ChatService
from foodlens.services.clock import AppClock
from foodlens.services.food import FoodDiaryService, FoodRepository
from foodlens.services.images import ImagePipeline
from foodlens.services.limits import LimitGate
from foodlens.services.maintenance import ReconciliationService
from foodlens.services.recipes import RecipeRepository, RecipeService
from foodlens.services.streaks import StreakService
from foodlens.services.subscriptions import SubscriptionService
from foodlens.services.usage import UsageService
from foodlens.services.users import UserRepository, UserService
from foodlens.services.water import WaterRepository, WaterService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    clock: AppClock
    user_service: UserService
    subscription_service: SubscriptionService
    limit_gate: LimitGate
    streak_service: StreakService
    food_service: FoodDiaryService
    recipe_service: RecipeService
    chat_service: ChatService
    water_service: WaterService
    reconciliation_service: ReconciliationService
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


async def _no_resources() -> None:
    return None


def wire_services(  # noqa: PLR0913
    settings: Settings,
    *,
    user_repository: UserRepository,
    food_repository: FoodRepository,
    recipe_repository: RecipeRepository,
    water_repository: WaterRepository,
    ai_client: NutritionAIClient,
    clock: AppClock | None = None,
    close_resources: Callable[[], Awaitable[None]] = _no_resources,
) -> AppContainer:
    """Assemble services on top of the given repositories and AI client."""
    resolved_clock = clock or AppClock.from_name(settings.app_timezone)
    pipeline = ImagePipeline(
        upload_dir=Path(settings.upload_dir),
        free_limit_mb=settings.free_upload_limit_mb,
        max_upload_mb=settings.max_upload_mb,
    )
    subscription_service = SubscriptionService(user_repository, resolved_clock)
    usage_service = UsageService(user_repository, resolved_clock)
    limit_gate = LimitGate(user_repository, subscription_service, usage_service)
    streak_service = StreakService(user_repository, resolved_clock)
    ai_service = NutritionAIService(
        client=ai_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )
    food_service = FoodDiaryService(
        repository=food_repository,
        users=user_repository,
        subscriptions=subscription_service,
        gate=limit_gate,
        pipeline=pipeline,
        ai=ai_service,
        streaks=streak_service,
        water=water_repository,
        clock=resolved_clock,
    )
    reconciliation_service = ReconciliationService(user_repository, resolved_clock)
    return AppContainer(
        settings=settings,
        clock=resolved_clock,
        user_service=UserService(
            user_repository,
            subscription_service,
            pipeline,
            user_data=[food_repository, recipe_repository, water_repository],
        ),
        subscription_service=subscription_service,
        limit_gate=limit_gate,
        streak_service=streak_service,
        food_service=food_service,
        recipe_service=RecipeService(
            repository=recipe_repository,
            users=user_repository,
            gate=limit_gate,
            pipeline=pipeline,
            ai=ai_service,
        ),
        chat_service=ChatService(
            users=user_repository,
            gate=limit_gate,
            ai=ai_service,
            diary=food_service,
            streaks=streak_service,
            pipeline=pipeline,
        ),
        water_service=WaterService(water_repository, user_repository, resolved_clock),
        reconciliation_service=reconciliation_service,
        admin_service=AdminService(
            repository=user_repository,
            subscriptions=subscription_service,
            reconciliation=reconciliation_service,
            clock=resolved_clock,
        ),
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    openai_client = OpenAINutritionClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.ai_timeout_seconds,
        max_retries=resolved_settings.ai_max_retries,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return wire_services(
        resolved_settings,
        user_repository=SupabaseUserRepository(supabase_client),
        food_repository=SupabaseFoodRepository(supabase_client),
        recipe_repository=SupabaseRecipeRepository(supabase_client),
        water_repository=SupabaseWaterRepository(supabase_client),
        ai_client=openai_client,
        close_resources=close_resources,
    )
