"""工具函数"""

import itertools
import re
import sys
import threading
from typing import Optional
from urllib.parse import urlparse

ALLOWED_SCHEMES = ("http", "https")
SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
ELLIPSIS = "…"

# ANSI SGR 代码
ANSI_CODES = {
    "bold": "1",
    "dim": "2",
    "red": "31",
    "green": "32",
    "yellow": "33",
    "cyan": "36",
}
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def normalize_url(url: str) -> str:
    """标准化 URL：去掉首尾空白，没有协议时补 https://"""
    url = url.strip()
    if not url:
        return ""
    if SCHEME_RE.match(url):
        return url
    return "https://" + url


def is_valid_url(url: str) -> bool:
    """判断是否为 http/https 绝对 URL"""
    try:
        parsed = urlparse(url)
        parsed.port  # 非法端口会抛 ValueError
    except ValueError:
        return False
    if parsed.scheme not in ALLOWED_SCHEMES:
        return False
    host = parsed.hostname or ""
    return bool(host) and not any(ch.isspace() for ch in parsed.netloc)


def truncate(text: str, max_len: int) -> str:
    """超长截断，末尾补省略号（结果长度恰为 max_len）"""
    if len(text) <= max_len:
        return text
    return text[:max_len - 1] + ELLIPSIS


def style(text: str, *names: str, enabled: bool = True) -> str:
    """给文本加 ANSI 样式，enabled=False 时原样返回"""
    if not enabled or not names:
        return text
    codes = ";".join(ANSI_CODES[n] for n in names)
    return f"\x1b[{codes}m{text}\x1b[0m"


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


class Spinner:
    """后台线程转圈提示，写到 stderr，不污染 stdout 的报告输出"""

    FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
    INTERVAL = 0.08

    def __init__(self, message: str, enabled: bool = True, stream=None):
        self.message = message
        self.enabled = enabled
        self.stream = stream or sys.stderr
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._frames = itertools.cycle(self.FRAMES)

    def start(self):
        if not self.enabled or self._thread is not None:
            return

        def run():
            while not self._stop.is_set():
                self.stream.write(f"\r{next(self._frames)} {self.message}")
                self.stream.flush()
                self._stop.wait(self.INTERVAL)

        self._thread = threading.Thread(target=run, daemon=True)
        self._thread.start()

    def stop(self):
        """停止并清除当前行；可重复调用"""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=1.0)
        self._thread = None
        # 清掉转圈那一行，后续输出从行首开始
        self.stream.write("\r" + " " * (len(self.message) + 2) + "\r")
        self.stream.flush()

    @property
    def running(self) -> bool:
        return self._thread is not None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
