"""
自定义异常类
提供更精确的错误处理和异常信息
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """应用基础异常类"""

    default_code: Optional[str] = None
    default_message: str = "系统繁忙，请稍后重试"

    def __init__(
        self,
        message: str = None,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.default_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class DatabaseError(BaseApplicationError):
    """数据库相关异常（任何底层读写失败）"""
    default_code = "DATA_STORE_ERROR"


class RecordNotFoundError(DatabaseError):
    """期望恰好一条记录但未找到"""
    default_code = "RECORD_NOT_FOUND"
    default_message = "记录不存在"


class AuthenticationError(BaseApplicationError):
    """认证相关异常"""
    default_code = "AUTHENTICATION_REQUIRED"


class NotAuthenticatedError(AuthenticationError):
    """无法解析当前会话对应的应用用户"""
    default_code = "NOT_AUTHENTICATED"
    default_message = "请先登录后再继续操作"


class ValidationError(BaseApplicationError):
    """数据验证异常"""
    default_code = "VALIDATION_ERROR"
    default_message = "请求参数验证失败"


class BusinessLogicError(BaseApplicationError):
    """业务逻辑异常"""
    pass


class EmptyCartError(BusinessLogicError):
    """购物车为空，无法下单"""
    default_code = "EMPTY_CART"
    default_message = "购物车为空，请先添加披萨"


class CartLineNotFoundError(BusinessLogicError):
    """购物车条目不存在"""
    default_code = "CART_LINE_NOT_FOUND"
    default_message = "购物车条目不存在"


class ProductNotFoundError(BusinessLogicError):
    """菜单商品不存在"""
    default_code = "PRODUCT_NOT_FOUND"
    default_message = "商品不存在"


class OrderNotFoundError(BusinessLogicError):
    """订单不存在异常"""
    default_code = "ORDER_NOT_FOUND"
    default_message = "订单不存在"


class CheckoutFailedError(BusinessLogicError):
    """结算失败，订单未创建"""
    default_code = "CHECKOUT_FAILED"
    default_message = "下单失败，请稍后重试"


class PromotionNotFoundError(BusinessLogicError):
    """促销不存在"""
    default_code = "PROMOTION_NOT_FOUND"
    default_message = "促销不存在"
