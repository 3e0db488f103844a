# 参考文档: DESIGN.md 中间件部分
# 请求日志中间件

import time
import uuid
import logging
from fastapi import FastAPI, Request
from typing import Dict, Any

logger = logging.getLogger(__name__)


def setup_logging_middleware(app: FastAPI, config: Dict[str, Any]):
    """
    设置请求日志中间件，每个请求分配短请求ID并写入 X-Request-ID 响应头

    Args:
        app: FastAPI应用实例
        config: 配置字典
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = uuid.uuid4().hex[:8]
        start_time = time.time()

        logger.info(
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"[{request_id}] ERROR - {str(e)} - Time: {time.time() - start_time:.3f}s")
            raise

        logger.info(f"[{request_id}] {response.status_code} - Time: {time.time() - start_time:.3f}s")
        response.headers["X-Request-ID"] = request_id
        return response
