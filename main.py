import logging
import os
import re
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

import uvicorn
from crawler import Fetcher, get_anime_details, get_home_page, search_anime
from errors import ApiError, ValidationError
from models import ApiEnvelope, EndpointCatalog, EndpointInfo
load_dotenv()

logger = logging.getLogger("app")
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

app = FastAPI(
    title="HiAnime API",
    description="抓取 HiAnime 页面并以 JSON 形式提供首页、搜索和详情",
    version="0.1.0",
)

# -- CORS 设置 --
# 任何来源都可以 GET；预检请求（OPTIONS）无论路径和参数都直接 200
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

API_PATH = "/api/hianime"

CATALOG = EndpointCatalog(
    message="HiAnime API - Available endpoints",
    endpoints=[
        EndpointInfo(path=f"{API_PATH}?action=home", description="Get homepage content"),
        EndpointInfo(path=f"{API_PATH}?action=search&query=naruto&page=1", description="Search anime"),
        EndpointInfo(path=f"{API_PATH}?action=details&id=naruto-20", description="Get anime details"),
    ],
)


@app.middleware("http")
async def cors_headers(request: Request, call_next):
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


def get_fetcher() -> Fetcher:
    """
    每个请求新建一个 Fetcher；测试里通过 dependency_overrides 替换
    """
    return Fetcher(logger=logging.getLogger("app.fetcher"))


def parse_page(raw: Optional[str]) -> int:
    """
    page 取开头的整数部分（允许前导 '+'），缺省、非法或小于 1 时都按第 1 页处理
    """
    m = re.match(r"^\s*\+?(\d+)", raw or "")
    if not m:
        return 1
    return max(int(m.group(1)), 1)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiEnvelope(success=False, error=message).to_json(),
    )


@app.get("/api/health")
def health_check():
    """
    健康检查接口，不会访问上游
    """
    return {"status": "ok"}


@app.get("/")
@app.get(API_PATH)
def hianime(
    action: Optional[str] = None,
    query: Optional[str] = None,
    page: Optional[str] = None,
    anime_id: Optional[str] = Query(None, alias="id"),
    fetcher: Fetcher = Depends(get_fetcher),
):
    """
    按 action 分发：
      home    -> 首页 spotlight + trending
      search  -> 需要 query，可选 page
      details -> 需要 id
      其他    -> 返回接口说明，不访问上游
    """
    try:
        if action == "home":
            data = get_home_page(fetcher)
        elif action == "search":
            if not query:
                raise ValidationError("Query parameter required")
            data = search_anime(fetcher, query, parse_page(page))
        elif action == "details":
            if not anime_id:
                raise ValidationError("ID parameter required")
            data = get_anime_details(fetcher, anime_id)
        else:
            return CATALOG.to_json()

    except ValidationError as e:
        return _error(e.status_code, e.message)
    except ApiError as e:
        logger.error("API Error (%s): %s", action, e.message)
        return _error(e.status_code, e.message)
    except Exception as e:
        # 意外异常也转成 {success: false, error: "..."}，不让进程崩掉
        logger.exception("API Error (%s): %s", action, e)
        return _error(500, str(e) or "Internal server error")

    return ApiEnvelope(success=True, data=data).to_json()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8001")),
        reload=True,
    )
