"""
Serverless nugget functions as a FastAPI app.

Endpoints:
- /generateNewNuggets: plain HTTPS, refills one category of the pool
- /initializeNuggetsForAllCategories: plain HTTPS, seeds empty categories
- /generateLearningNuggets: callable protocol ({"data": ...} in,
  {"result": ...} or {"error": {"status", "message"}} out), requires a user
- /health
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from loguru import logger

from eunoia import __version__
from eunoia.config.schema import Config
from eunoia.errors import AIServiceUnavailableError, EunoiaError
from eunoia.nuggets.generator import NuggetGenerator
from eunoia.nuggets.models import NuggetCategory, SharedNugget
from eunoia.nuggets.pool import NuggetPool
from eunoia.providers.base import LLMProvider
from eunoia.providers.litellm_provider import make_provider
from eunoia.remote.base import LEARNING_NUGGETS, DocumentStore

MODEL_CHOICES = ("openai", "deepseek")
MAX_CALLABLE_COUNT = 50

# callable error code -> HTTP status
_CALLABLE_STATUS = {
    "unauthenticated": 401,
    "invalid-argument": 400,
    "failed-precondition": 400,
    "internal": 500,
}


class CallableError(Exception):
    """Error returned through the callable protocol envelope."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def _callable_error_response(request: Request, exc: CallableError) -> JSONResponse:
    return JSONResponse(
        status_code=_CALLABLE_STATUS.get(exc.code, 500),
        content={"error": {"status": exc.code.upper().replace("-", "_"), "message": exc.message}},
    )


def _bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def create_app(
    config: Config,
    store: DocumentStore,
    provider_factory: Callable[[str], LLMProvider] | None = None,
    verify_token: Callable[[str], str | None] | None = None,
) -> FastAPI:
    """
    Build the functions app.

    Args:
        config: Eunoia configuration (nugget settings, provider keys).
        store: Document store holding the nugget pool.
        provider_factory: Builds a provider for "openai"/"deepseek";
            defaults to LiteLLM with keys from config.
        verify_token: Maps a bearer token to a user id (None when invalid).
            Without it every callable request is unauthenticated.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(title="Eunoia Functions", version=__version__)
    app.add_exception_handler(CallableError, _callable_error_response)

    def _provider(choice: str) -> LLMProvider:
        if provider_factory is not None:
            return provider_factory(choice)
        return make_provider(config, choice)

    def _pool(choice: str) -> NuggetPool:
        generator = NuggetGenerator(
            _provider(choice),
            model=config.get_model(choice),
            temperature=config.nuggets.temperature,
            max_tokens=config.nuggets.max_tokens,
        )
        return NuggetPool(store, generator, nuggets_per_category=config.nuggets.nuggets_per_category)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.api_route("/generateNewNuggets", methods=["GET", "POST"])
    async def generate_new_nuggets(category: str | None = None) -> JSONResponse:
        try:
            parsed = NuggetCategory.parse(category or "")
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid or missing category"})

        try:
            nuggets = await _pool(config.functions.default_model).generate_new_nuggets(parsed)
        except EunoiaError as e:
            logger.error("generateNewNuggets failed for {}: {}", parsed.value, e.message)
            return JSONResponse(status_code=500, content={"error": f"Generation failed: {e.message}"})

        return JSONResponse(
            status_code=200,
            content={"success": True, "category": parsed.value, "count": len(nuggets)},
        )

    @app.post("/initializeNuggetsForAllCategories")
    async def initialize_all() -> JSONResponse:
        try:
            results = await _pool(config.functions.default_model).initialize_missing_categories()
        except EunoiaError as e:
            logger.error("initializeNuggetsForAllCategories failed: {}", e.message)
            return JSONResponse(status_code=500, content={"error": f"Initialization failed: {e.message}"})

        total = sum(results.values())
        logger.info("Initialization finished: {} nuggets generated", total)
        return JSONResponse(status_code=200, content={"results": results, "total": total})

    @app.post("/generateLearningNuggets")
    async def generate_learning_nuggets(
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, Any]:
        token = _bearer(authorization)
        user_id = verify_token(token) if token and verify_token else None
        if not user_id:
            raise CallableError("unauthenticated", "The function must be called while authenticated.")

        try:
            body = await request.json()
        except ValueError:
            body = {}
        data = body.get("data") if isinstance(body, dict) else None
        data = data if isinstance(data, dict) else {}

        if not data.get("category"):
            raise CallableError("invalid-argument", "A category must be provided.")
        try:
            category = NuggetCategory.parse(str(data["category"]))
        except ValueError:
            raise CallableError("invalid-argument", f"Unknown category: {data['category']}")

        count = data.get("count")
        if count is None:
            count = config.nuggets.callable_default_count
        if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_CALLABLE_COUNT:
            raise CallableError("invalid-argument", f"count must be between 1 and {MAX_CALLABLE_COUNT}.")

        model = data.get("model") or config.functions.default_model
        if model not in MODEL_CHOICES:
            raise CallableError("invalid-argument", f"Unknown model: {model}")

        try:
            provider = _provider(model)
        except AIServiceUnavailableError as e:
            raise CallableError("failed-precondition", e.message)

        generator = NuggetGenerator(
            provider,
            model=config.get_model(model),
            temperature=config.nuggets.temperature,
            max_tokens=config.nuggets.max_tokens,
        )
        try:
            pairs = await generator.generate(category, count, as_json=True)
            nuggets = [SharedNugget.create(category, title, content) for title, content in pairs]
            await store.batch_set(LEARNING_NUGGETS, [(n.id, n.to_document()) for n in nuggets])
        except EunoiaError as e:
            logger.error("generateLearningNuggets failed for {}: {}", user_id, e.message)
            raise CallableError("internal", f"Error generating learning nuggets: {e.message}")

        logger.info("{} learning nuggets generated for {} by {}", len(nuggets), category.value, user_id)
        return {"result": {"count": len(nuggets)}}

    return app
