"""
API 错误类型：路由层根据 status_code 把异常转换成 HTTP 响应。
"""
from typing import Optional


class ApiError(Exception):
    """
    路由层认识的错误基类，status_code 决定返回的 HTTP 状态码
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """
    缺少必填的查询参数（query / id）
    """

    status_code = 400


class TransportError(ApiError):
    """
    上游请求失败：网络异常或非 2xx 状态码。
    upstream_status 为 None 表示请求根本没有拿到响应。
    """

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
