"""
ZaHub 披萨点单后端服务 - 主应用入口
为移动端商城提供自定义披萨组装、购物车和下单API

主要功能模块：
- 菜单与配料目录
- 自定义披萨组装与计价
- 购物车管理
- 购物车结算为订单

技术栈：FastAPI + DuckDB + JWT认证
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .config.settings import settings
from .core.database import db_manager
from .core.error_handler import (
    application_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.exceptions import BaseApplicationError, DatabaseError
from .core.logging import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    configure_logging()
    # 启动时初始化数据库
    try:
        db_manager.init_database()
        logger.info("Database initialized", db_path=db_manager.db_path)
    except DatabaseError as e:
        # 不要让应用启动失败，允许在运行时重试
        logger.error("Database initialization failed", error=e.message)

    yield


def create_app() -> FastAPI:
    """创建FastAPI应用"""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="ZaHub 披萨点单系统API",
        debug=settings.debug,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册异常处理器
    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # 注册路由
    app.include_router(api_router, prefix=settings.api_prefix)

    # 健康检查
    @app.get("/health")
    async def health_check():
        try:
            db_manager.get_connection()
            return {
                "status": "healthy",
                "version": settings.api_version,
                "database": "connected"
            }
        except DatabaseError as e:
            return {
                "status": "unhealthy",
                "version": settings.api_version,
                "database": f"error: {e.message}"
            }

    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": "ZaHub 披萨点单系统API"
        }

    return app


# 应用实例
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
