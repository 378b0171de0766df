from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # 数据库配置
    database_url: str = "duckdb://./data/zahub.duckdb"

    # JWT配置
    jwt_secret_key: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 7  # 7天

    # API配置
    api_title: str = "ZaHub API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # 下单配置
    currency: str = "COP"
    default_delivery_address: str = "Pendiente por confirmar (generado desde la app ZaHub)"
    order_channel: str = "APP_MOBILE"
    # True: 结算整体放在一个事务里，任一明细失败则全部回滚
    checkout_atomic: bool = False

    # 日志配置
    log_level: str = "INFO"
    log_json: Optional[bool] = None

    # 开发模式
    debug: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False


# 全局设置实例
settings = Settings()
