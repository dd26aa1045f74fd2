"""MetaPeek CLI 入口"""

import argparse
import logging
import sys

from client import CancellationToken, MetaPeekError, analyze
from config import (
    ClientOptions,
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    TerminalCapabilities,
    VERSION,
    setup_logging,
)
from formatters import FORMATS, format_json, format_markdown, format_terminal
from models import AnalyzeResponse, MetaScore
from utils import Spinner, is_valid_url, normalize_url

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_LOW_GRADE = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metapeek-cli",
        description="Analyze meta tags and social sharing readiness for any URL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  metapeek-cli example.com
  metapeek-cli https://example.com --format markdown > report.md
  metapeek-cli https://example.com --json --no-spinner

exit codes:
  0  grade A or B
  1  grade C, D or F
  2  invalid URL, network/API error""",
    )
    parser.add_argument("url", help="URL to analyze")
    parser.add_argument("--json", action="store_true", help="Output raw JSON (overrides --format)")
    parser.add_argument("--format", choices=FORMATS, default="terminal",
                        help="Output format: terminal (default) or markdown")
    parser.add_argument("--api-url", default=DEFAULT_API_URL, help="Override API endpoint")
    parser.add_argument("--api-key", default=None, help="API key for authenticated endpoints")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help=f"Request timeout in seconds, 0 to disable (default {DEFAULT_TIMEOUT:g})")
    parser.add_argument("--no-color", dest="color", action="store_false", help="Disable colored output")
    parser.add_argument("--no-spinner", dest="spinner", action="store_false", help="Disable loading spinner")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    parser.add_argument("-V", "--version", action="version", version=VERSION)
    return parser


def render(data: AnalyzeResponse, args: argparse.Namespace, capabilities: TerminalCapabilities) -> str:
    """按参数选择输出格式，--json 优先"""
    if args.json:
        return format_json(data)
    if args.format == "markdown":
        return format_markdown(data)
    return format_terminal(data, color=args.color and capabilities.color_enabled)


def exit_code_for(score: MetaScore) -> int:
    return EXIT_PASS if score.passed else EXIT_LOW_GRADE


def run(argv=None, *, capabilities=None, stdout=None, stderr=None) -> int:
    """执行完整流程，返回退出码"""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    capabilities = capabilities or TerminalCapabilities.detect(stdout)

    # 1. 标准化 + 校验，非法 URL 不发请求
    url = normalize_url(args.url)
    if not is_valid_url(url):
        print(f'Error: Invalid URL "{args.url}"', file=stderr)
        return EXIT_ERROR

    # 2. 请求（交互终端下显示 spinner）
    timeout = args.timeout if args.timeout and args.timeout > 0 else None
    token = CancellationToken()
    if timeout:
        token.cancel_after(timeout)
    options = ClientOptions(
        api_url=args.api_url,
        api_key=args.api_key,
        timeout=timeout,
        cancel_token=token,
    )
    spinner = Spinner(
        f"Analyzing {url}...",
        enabled=capabilities.interactive and args.spinner and not args.json,
        stream=stderr,
    )

    try:
        with spinner:
            data = analyze(url, options)
        # 3. 格式化 + 输出
        output = render(data, args, capabilities)
        stdout.write(output + "\n")
        stdout.flush()
    except MetaPeekError as e:
        print(f"Error: {e.message}", file=stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Error: Interrupted", file=stderr)
        return EXIT_ERROR
    except Exception as e:
        logger.debug("未预期的错误", exc_info=True)
        print(f"Error: Unexpected error: {e}", file=stderr)
        return EXIT_ERROR
    finally:
        token.dispose()

    # 4. 按等级决定退出码
    return exit_code_for(data.score)


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
