"""トークン認証ミドルウェア。"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


def _request_token(request: Request) -> str:
    """クエリパラメータ token、なければ Authorization: Bearer ヘッダーからトークンを取り出す。"""
    token = request.query_params.get("token", "")
    if token:
        return token
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer":
        return credentials.strip()
    return ""


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """リクエストのトークンを検証するミドルウェア。

    OMITT_URL_TOKEN が設定されている場合、/mcp と /api 配下へのリクエストに
    トークンの一致を要求する。/health はヘルスチェック用のため検証をスキップする。
    """

    def __init__(self, app: ASGIApp, url_token: str = "", skip_paths: frozenset[str] = frozenset({"/health"})) -> None:
        super().__init__(app)
        self.url_token = url_token
        self.skip_paths = skip_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.url_token or request.url.path in self.skip_paths:
            return await call_next(request)

        if _request_token(request) != self.url_token:
            logger.warning("Rejected unauthenticated request to %s", request.url.path)
            return JSONResponse(
                {"error": "Unauthorized", "message": "Invalid or missing token"},
                status_code=401,
            )

        return await call_next(request)
