import logging
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from order_management.config import settings
from order_management.database import create_engine, create_session_factory, create_tables
from order_management.presentation.api import router, INTERNAL_ERROR

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(
    database_url: Optional[str] = None,
    strict_status_transitions: Optional[bool] = None,
    require_existing_customer: Optional[bool] = None,
    order_number_max_attempts: Optional[int] = None
) -> FastAPI:
    database_url = database_url or settings.DATABASE_URL

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        engine = create_engine(database_url)
        await create_tables(engine)
        logger.info("Таблицы созданы")
        app.state.session_factory = create_session_factory(engine)

        yield

        logger.info("Приложение останавливается...")
        await engine.dispose()

    app = FastAPI(
        title="Order Management Service",
        description="Заказы, покупатели и каталог товаров",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.strict_status_transitions = (
        settings.STRICT_STATUS_TRANSITIONS if strict_status_transitions is None else strict_status_transitions
    )
    app.state.require_existing_customer = (
        settings.REQUIRE_EXISTING_CUSTOMER if require_existing_customer is None else require_existing_customer
    )
    app.state.order_number_max_attempts = order_number_max_attempts or settings.ORDER_NUMBER_MAX_ATTEMPTS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg", message)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Необработанная ошибка {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": INTERNAL_ERROR})

    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        return {"message": "Order Management Service работает"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
