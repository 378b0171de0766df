"""
安全相关功能
解析 Bearer JWT 得到认证身份，再解析为应用用户ID
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config.settings import settings
from .exceptions import NotAuthenticatedError
from ..services.user_service import user_service


class SecurityManager:
    """安全管理器"""

    def create_jwt_token(self, auth_user_id: str, additional_claims: Dict[str, Any] = None) -> str:
        """创建JWT token"""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": auth_user_id,
            "exp": now + timedelta(hours=settings.jwt_expire_hours),
            "iat": now,
        }
        if additional_claims:
            payload.update(additional_claims)
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        """解码JWT token"""
        try:
            return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise NotAuthenticatedError("登录已过期，请重新登录")
        except jwt.InvalidTokenError as e:
            raise NotAuthenticatedError("登录凭证无效，请重新登录", details={"reason": str(e)})

    def get_auth_user_id_from_token(self, token: str) -> str:
        """从token中提取认证身份"""
        payload = self.decode_jwt_token(token)
        auth_user_id = payload.get("sub")
        if not auth_user_id:
            raise NotAuthenticatedError("登录凭证缺少用户身份")
        return str(auth_user_id)


# 全局安全管理器实例
security_manager = SecurityManager()

_bearer = HTTPBearer(auto_error=False)


async def get_auth_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)
) -> str:
    """从Authorization header中提取并验证认证身份"""
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedError()
    return security_manager.get_auth_user_id_from_token(credentials.credentials)


def get_current_user_id(auth_user_id: str = Depends(get_auth_user_id)) -> int:
    """获取当前应用用户ID，找不到档案时抛出 NotAuthenticatedError"""
    return user_service.resolve_app_user_id(auth_user_id)


def create_access_token(auth_user_id: str) -> str:
    """创建访问token"""
    return security_manager.create_jwt_token(auth_user_id)
