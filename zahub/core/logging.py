"""
日志配置
运行日志使用 structlog 输出结构化记录；业务审计记录写入 logs 表
"""

import logging

import structlog

from ..config.settings import settings


def configure_logging(level: str = None, json_output: bool = None) -> None:
    """初始化 structlog，开发模式下输出彩色控制台日志，否则输出JSON"""
    level_name = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.log_json if settings.log_json is not None else not settings.debug

    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))
    # 压低第三方库的噪音
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )
