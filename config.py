"""配置：默认值、客户端选项、终端能力、日志"""

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from client import CancellationToken

VERSION = "1.0.0"
PRODUCT_NAME = "MetaPeek"

DEFAULT_API_URL = "https://metapeek.icjia.app/api/analyze"
DEFAULT_TIMEOUT = 30.0  # 秒

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


@dataclass(frozen=True)
class ClientOptions:
    """analyze() 的调用参数（按值传入，不在客户端上保存状态）"""
    api_url: str = DEFAULT_API_URL
    api_key: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    cancel_token: Optional["CancellationToken"] = None


@dataclass(frozen=True)
class TerminalCapabilities:
    """终端能力：是否交互式、是否允许颜色"""
    interactive: bool = False
    color_enabled: bool = False

    @classmethod
    def detect(cls, stream=None) -> "TerminalCapabilities":
        stream = stream or sys.stdout
        try:
            is_tty = stream.isatty()
        except (AttributeError, ValueError):
            is_tty = False
        return cls(interactive=is_tty, color_enabled=is_tty)


def setup_logging(verbose: bool = False):
    """日志输出到 stderr，默认只显示 WARNING 以上"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
