"""Exception handling utilities for FastAPI routes.

统一异常处理，集成 domains.core 的 ApplicationError 体系:
- ValidationError（如非法关系类型） -> 400
- NotFoundError（如研究员不存在） -> 404
- 其他未处理异常 -> 500，携带原始错误信息
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domains.core import ApplicationError
from domains.core.logging import get_logger

logger = get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    注册 FastAPI 异常处理器

    将 ApplicationError 及其子类自动转换为 HTTP 响应。

    使用示例:
        app = FastAPI()
        register_exception_handlers(app)
    """

    @app.exception_handler(ApplicationError)
    async def application_error_handler(
        request: Request,
        exc: ApplicationError
    ) -> JSONResponse:
        """处理 ApplicationError 及其子类"""
        logger.warning(
            "application_error",
            code=exc.code,
            error=exc.message,
            details=exc.details,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=exc.http_status_code,
            content={
                "success": False,
                "error": exc.message,
                "code": exc.code,
                "details": exc.details,
            }
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """全局异常处理器 - 捕获所有未处理的异常"""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(exc),
                "error_type": type(exc).__name__,
            }
        )


__all__ = [
    "register_exception_handlers",
]
