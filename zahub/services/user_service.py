"""
用户服务
把认证身份解析为应用用户ID，并维护用户档案
"""

from typing import Optional

import structlog

from ..core.database import db_manager
from ..core.exceptions import NotAuthenticatedError, RecordNotFoundError, ValidationError
from ..models.user import AppUser

logger = structlog.get_logger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db=None):
        self.db = db or db_manager

    def resolve_app_user_id(self, auth_user_id: Optional[str]) -> int:
        """
        获取认证身份对应的应用用户ID

        Raises:
            NotAuthenticatedError: 无会话身份或找不到对应档案时
        """
        if not auth_user_id:
            raise NotAuthenticatedError()
        try:
            row = self.db.select_one("users", {"auth_user_id": auth_user_id})
        except RecordNotFoundError:
            logger.info("No app user for auth identity", auth_user_id=auth_user_id)
            raise NotAuthenticatedError("找不到您的用户档案，请先完成注册")
        return row["id"]

    def get_profile(self, user_id: int) -> AppUser:
        try:
            row = self.db.select_one("users", {"id": user_id})
        except RecordNotFoundError:
            raise NotAuthenticatedError()
        return AppUser.model_validate(row)

    def register_profile(self, auth_user_id: str, full_name: str) -> AppUser:
        """创建用户档案；已存在时直接返回"""
        if not auth_user_id:
            raise NotAuthenticatedError()
        name = (full_name or "").strip()
        if len(name) < 3:
            raise ValidationError("姓名至少需要3个字符", details={"field": "full_name"})

        existing = self.db.select("users", {"auth_user_id": auth_user_id})
        if existing:
            return AppUser.model_validate(existing[0])

        user_id = self.db.insert("users", {
            "auth_user_id": auth_user_id,
            "full_name": name,
            "role": "CLIENT",
        })
        self.db.log_action(user_id, "user_register", {"full_name": name})
        return self.get_profile(user_id)


user_service = UserService()
