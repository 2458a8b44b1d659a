"""
FastAPI应用主入口
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import LoggingMiddleware, RequestIDMiddleware
from api.routes import auth, comments, favorites, matches, news, players, teams
from api.routes import ws as ws_routes
from application.ports.realtime import RealtimeBrokerPort
from application.services.match_service import MatchApplicationService
from application.services.realtime_service import RealtimeService
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging, get_logger
from core.response import success_response
from infrastructure.database import create_tables
from infrastructure.notifications import CeleryMatchEventNotifier
from infrastructure.realtime.brokers import InMemoryRealtimeBroker, RedisRealtimeBroker
from infrastructure.realtime.connection_manager import ConnectionManager
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


configure_logging()
logger = get_logger(__name__)


def build_realtime_broker() -> RealtimeBrokerPort:
    """REALTIME_BROKER: auto -> redis(若配置了 url) 否则 inmemory"""
    provider = settings.REALTIME_BROKER
    if provider in ("redis", "auto") and settings.redis.url:
        logger.info("realtime_broker_selected", provider="redis")
        return RedisRealtimeBroker()
    if provider == "redis":
        logger.warning("realtime_broker_redis_missing_url", message="REDIS__URL not set, falling back to in-memory broker")
    logger.info("realtime_broker_selected", provider="inmemory")
    return InMemoryRealtimeBroker()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")

    # 初始化实时通信：每个进程一个 hub，broker 负责跨进程转发
    broker = build_realtime_broker()
    hub = ConnectionManager()
    notifier = CeleryMatchEventNotifier()
    realtime = RealtimeService(
        broker=broker,
        connections=hub,
        match_service=MatchApplicationService(uow_factory=SQLAlchemyUnitOfWork),
        notifier=notifier,
    )
    await broker.subscribe(realtime.on_broker_event)
    app.state.realtime_broker = broker
    app.state.realtime_connections = hub
    app.state.realtime_service = realtime
    logger.info("realtime_initialized", notifications_enabled=notifier.enabled)

    yield

    await realtime.aclose()
    await broker.aclose()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="CS2 赛事数据与实时比分推送服务",
)

# 中间件从下往上执行：RequestID 最先执行，为日志提供 request_id
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

for module in (auth, teams, players, matches, news, comments, favorites):
    app.include_router(module.router, prefix=settings.API_PREFIX)
app.include_router(ws_routes.router)


@app.get("/", tags=["Root"])
async def root():
    """API根路径"""
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "websocket": "/ws",
        },
        message="Welcome",
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    hub = getattr(app.state, "realtime_connections", None)
    return success_response(data={"status": "healthy", "connections": hub.count if hub else 0})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
