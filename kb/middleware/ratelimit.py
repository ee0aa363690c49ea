import time
import asyncio
import logging
from collections import deque
from typing import Callable, Iterable
from fastapi import Request
from fastapi.responses import JSONResponse
from jose import jwt, JWTError

logger = logging.getLogger(__name__)


class RateLimitMiddleware:
    """Sliding-window request limit per client key on selected path prefixes."""

    def __init__(
        self,
        app,
        *,
        window_seconds: int,
        max_calls: int,
        key_func: Callable[[Request], str],
        include_path_prefixes: Iterable[str] = ("/auth/login", "/auth/register"),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.app = app
        self.window = window_seconds
        self.max_calls = max_calls
        self.key_func = key_func
        self.include_paths = tuple(include_path_prefixes)
        self.clock = clock

        self._buckets: dict[str, deque[float]] = {}
        self._last_sweep = clock()
        self._lock = asyncio.Lock()

    def _should_guard(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.include_paths)

    def _sweep(self, cutoff: float) -> None:
        """Drop buckets whose newest hit has left the window."""
        stale = [k for k, hits in self._buckets.items() if not hits or hits[-1] <= cutoff]
        for k in stale:
            del self._buckets[k]
        self._last_sweep = cutoff + self.window

    async def _retry_after(self, key: str) -> int | None:
        """Record a hit for ``key``; seconds to wait if it is over the limit."""
        now = self.clock()
        async with self._lock:
            cutoff = now - self.window
            if now - self._last_sweep >= self.window:
                self._sweep(cutoff)

            hits = self._buckets.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_calls:
                return max(1, int(hits[0] + self.window - now))

            hits.append(now)
            return None

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not self._should_guard(scope.get("path", "")):
            return await self.app(scope, receive, send)

        key = self.key_func(Request(scope, receive=receive))
        retry_after = await self._retry_after(key)
        if retry_after is None:
            return await self.app(scope, receive, send)

        logger.warning("Rate limit exceeded for %s on %s", key, scope.get("path"))
        resp = JSONResponse(
            status_code=429,
            content={
                "detail": "Too many requests",
                "code": "RATE_LIMITED",
                "window_seconds": self.window,
                "max_calls": self.max_calls,
                "try_again_in": retry_after,
            },
        )
        resp.headers["Retry-After"] = str(retry_after)
        return await resp(scope, receive, send)


def make_key_func(secret_key: str, algorithm: str = "HS256") -> Callable[[Request], str]:
    def _key(req: Request) -> str:
        auth = req.headers.get("authorization", "")
        if auth.lower().startswith("bearer "):
            token = auth.split(" ", 1)[1].strip()
            try:
                sub = jwt.decode(token, secret_key, algorithms=[algorithm]).get("sub")
                if sub:
                    return f"user:{sub}"
            except JWTError:
                pass

        return f"ip:{req.client.host if req.client else 'unknown'}"
    return _key
