"""
统一错误处理模块
提供标准化的错误响应格式和错误处理中间件

主要功能：
- 统一的错误响应格式（以 success/error_code 区分结果）
- 错误代码到HTTP状态码的映射
- 空购物车/未登录给出具体指引，其余错误给出可重试的通用提示
- 未知异常写入 logs 表
"""

import traceback
from typing import Dict, Any, Optional

import structlog
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from .exceptions import BaseApplicationError
from .database import db_manager

logger = structlog.get_logger(__name__)

GENERIC_RETRY_MESSAGE = "操作未完成，请稍后重试"


class ErrorResponse:
    """标准错误响应格式"""

    def __init__(self, error_code: str, message: str,
                 details: Optional[Dict[str, Any]] = None,
                 http_status: int = 400):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def to_json_response(self) -> JSONResponse:
        """转换为FastAPI JSONResponse"""
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict()
        )


class ErrorHandler:
    """全局错误处理器"""

    # 错误代码到HTTP状态码的映射
    ERROR_CODE_STATUS_MAP = {
        "VALIDATION_ERROR": 400,
        "NOT_AUTHENTICATED": 401,
        "AUTHENTICATION_REQUIRED": 401,
        "INTERNAL_ERROR": 500,

        # 购物车/订单相关错误
        "EMPTY_CART": 400,
        "CART_LINE_NOT_FOUND": 404,
        "PRODUCT_NOT_FOUND": 404,
        "ORDER_NOT_FOUND": 404,
        "PROMOTION_NOT_FOUND": 404,
        "RECORD_NOT_FOUND": 404,
        "CHECKOUT_FAILED": 503,

        # 数据存储错误
        "DATA_STORE_ERROR": 503,
    }

    # 这些错误的原始信息对用户有指导意义，直接返回
    SPECIFIC_MESSAGE_CODES = {
        "VALIDATION_ERROR",
        "NOT_AUTHENTICATED",
        "AUTHENTICATION_REQUIRED",
        "EMPTY_CART",
        "CART_LINE_NOT_FOUND",
        "PRODUCT_NOT_FOUND",
        "ORDER_NOT_FOUND",
        "PROMOTION_NOT_FOUND",
    }

    @classmethod
    def handle_application_error(cls, error: BaseApplicationError) -> ErrorResponse:
        """处理应用业务异常"""
        http_status = cls.ERROR_CODE_STATUS_MAP.get(error.error_code, 400)
        if error.error_code in cls.SPECIFIC_MESSAGE_CODES:
            message = error.message
        else:
            message = GENERIC_RETRY_MESSAGE
            logger.warning("Request failed", error_code=error.error_code, error=error.message)

        return ErrorResponse(
            error_code=error.error_code,
            message=message,
            details=error.details,
            http_status=http_status
        )

    @classmethod
    def handle_http_exception(cls, error: HTTPException) -> ErrorResponse:
        """处理FastAPI HTTP异常"""
        return ErrorResponse(
            error_code="HTTP_ERROR",
            message=str(error.detail),
            details={"status_code": error.status_code},
            http_status=error.status_code
        )

    @classmethod
    def handle_validation_error(cls, error: Exception) -> ErrorResponse:
        """处理Pydantic验证错误"""
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="请求参数验证失败",
            details={"validation_errors": str(error)},
            http_status=422
        )

    @classmethod
    def handle_unknown_error(cls, error: Exception) -> ErrorResponse:
        """处理未知异常"""
        error_details = {
            "type": type(error).__name__,
            "message": str(error),
            "traceback": traceback.format_exc()
        }
        cls._log_system_error(error_details)

        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=GENERIC_RETRY_MESSAGE,
            details={"error_type": type(error).__name__},
            http_status=500
        )

    @classmethod
    def _log_system_error(cls, error_details: Dict[str, Any]):
        """记录系统错误到数据库"""
        logger.error("Unhandled error", error_type=error_details["type"], error=error_details["message"])
        db_manager.log_action(None, "system_error", error_details)


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    """应用异常处理中间件"""
    return ErrorHandler.handle_application_error(exc).to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP异常处理中间件"""
    return ErrorHandler.handle_http_exception(exc).to_json_response()


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """验证异常处理中间件"""
    return ErrorHandler.handle_validation_error(exc).to_json_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """通用异常处理中间件"""
    return ErrorHandler.handle_unknown_error(exc).to_json_response()


def create_success_response(data: Any = None, message: str = "操作成功") -> Dict[str, Any]:
    """创建标准成功响应"""
    response = {
        "success": True,
        "message": message
    }

    if data is not None:
        response["data"] = data

    return response
