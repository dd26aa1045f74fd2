"""MetaPeek /api/analyze 的 HTTP 客户端"""

import logging
import socket
import threading
import time
from typing import Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

from config import ClientOptions, DEFAULT_API_URL, VERSION
from models import AnalyzeResponse

logger = logging.getLogger(__name__)

# 与 JavaScript encodeURIComponent 保持一致的保留字符
URI_COMPONENT_SAFE = "!'()*-._~"

WORKER_THREAD_NAME = "metapeek-request"
WORKER_JOIN_TIMEOUT = 1.0  # 秒


class MetaPeekError(Exception):
    """请求失败（网络错误、超时、API 返回非 2xx）"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self):
        return f"MetaPeekError({self.message!r}, status_code={self.status_code!r})"


class RequestCancelled(Exception):
    """CancellationToken 在响应返回前被触发"""


class CancellationToken:
    """协作式取消信号，可由其他线程或定时器触发"""

    POLL_INTERVAL = 0.05

    def __init__(self):
        self._event = threading.Event()
        self._timer: Optional[threading.Timer] = None

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel_after(self, seconds: float) -> "CancellationToken":
        """seconds 秒后自动取消"""
        self._timer = threading.Timer(seconds, self.cancel)
        self._timer.daemon = True
        self._timer.start()
        return self

    def dispose(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class TrackingAdapter(HTTPAdapter):
    """记录连接池借出的连接，取消时直接关掉正在使用的 socket

    session.close() 只会清理池里空闲的连接，正在等待响应的连接不受影响。
    """

    def __init__(self, *args, **kwargs):
        self._lock = threading.Lock()
        self._in_use = set()
        super().__init__(*args, **kwargs)

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": type("TrackingHTTPConnectionPool", (_TrackingPoolMixin, HTTPConnectionPool),
                         {"adapter": self}),
            "https": type("TrackingHTTPSConnectionPool", (_TrackingPoolMixin, HTTPSConnectionPool),
                          {"adapter": self}),
        }

    def track(self, conn):
        with self._lock:
            self._in_use.add(conn)

    def untrack(self, conn):
        with self._lock:
            self._in_use.discard(conn)

    def abort(self):
        """shutdown 正在使用的 socket，阻塞在 recv 上的线程会立即返回"""
        with self._lock:
            connections = list(self._in_use)
            self._in_use.clear()
        for conn in connections:
            sock = getattr(conn, "sock", None)
            if sock is not None:
                try:
                    sock.shutdown(socket.SHUT_RDWR)
                except OSError as e:
                    logger.debug(f"socket shutdown 失败: {e}")
            conn.close()
        return len(connections)


class _TrackingPoolMixin:
    adapter: Optional[TrackingAdapter] = None

    def _get_conn(self, timeout=None):
        conn = super()._get_conn(timeout=timeout)
        self.adapter.track(conn)
        return conn

    def _put_conn(self, conn):
        if conn is not None:
            self.adapter.untrack(conn)
        super()._put_conn(conn)


def build_endpoint(api_url: str, url: str) -> str:
    return f"{api_url}?url={quote(url, safe=URI_COMPONENT_SAFE)}"


def build_headers(api_key: Optional[str] = None) -> dict[str, str]:
    headers = {
        "Accept": "application/json",
        "User-Agent": f"metapeek-cli/{VERSION}",
    }
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def build_session(api_key: Optional[str] = None) -> tuple[requests.Session, TrackingAdapter]:
    session = requests.Session()
    # 不读取 HTTP_PROXY / .netrc 等环境配置
    session.trust_env = False
    session.headers.update(build_headers(api_key))
    adapter = TrackingAdapter()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session, adapter


def _send(session: requests.Session, adapter: TrackingAdapter, endpoint: str,
          options: ClientOptions) -> requests.Response:
    """发送 GET；有取消信号时在工作线程里请求，主线程等待信号"""
    token = options.cancel_token
    if token is None:
        return session.get(endpoint, timeout=options.timeout)

    if token.cancelled:
        raise RequestCancelled()

    outcome = {}
    done = threading.Event()

    def worker():
        try:
            outcome["response"] = session.get(endpoint, timeout=options.timeout)
        except Exception as e:
            outcome["error"] = e
        finally:
            done.set()

    thread = threading.Thread(target=worker, name=WORKER_THREAD_NAME, daemon=True)
    thread.start()
    while not done.wait(token.POLL_INTERVAL):
        if token.cancelled:
            closed = adapter.abort()
            thread.join(WORKER_JOIN_TIMEOUT)
            logger.debug(f"请求已取消，关闭连接 {closed} 个，工作线程结束: {not thread.is_alive()}")
            raise RequestCancelled()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["response"]


def _error_message(resp: requests.Response) -> str:
    """从错误响应体里取 message，取不到就用状态码"""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"API returned {resp.status_code}"


def analyze(url: str, options: Optional[ClientOptions] = None) -> AnalyzeResponse:
    """请求 MetaPeek 分析结果

    只发一次请求，不重试。失败一律抛 MetaPeekError；
    2xx 但响应体不是合法 JSON 时，ValueError 原样抛出由调用方兜底。
    """
    options = options or ClientOptions()
    endpoint = build_endpoint(options.api_url or DEFAULT_API_URL, url)

    session, adapter = build_session(options.api_key)

    logger.debug(f"GET {endpoint}")
    start = time.time()
    try:
        try:
            resp = _send(session, adapter, endpoint, options)
        except (requests.exceptions.Timeout, RequestCancelled):
            logger.debug(f"请求超时或被取消: {endpoint}")
            raise MetaPeekError("Request timed out") from None
        except (requests.exceptions.RequestException, OSError) as e:
            logger.debug(f"网络错误: {e}")
            raise MetaPeekError(f"Network error: {e}") from e

        logger.debug(f"HTTP {resp.status_code} ({(time.time() - start) * 1000:.0f}ms)")

        if not 200 <= resp.status_code < 300:
            raise MetaPeekError(_error_message(resp), resp.status_code)

        return AnalyzeResponse.from_dict(resp.json())
    finally:
        session.close()
