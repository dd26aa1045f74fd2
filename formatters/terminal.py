"""终端输出（ANSI 颜色可关闭）"""

from config import PRODUCT_NAME
from models import AnalyzeResponse, CATEGORY_ORDER, Status
from utils import style, truncate

LABEL_WIDTH = 14
MESSAGE_WIDTH = 50


def _grade_color(grade: str) -> str:
    if grade in ("A", "B"):
        return "green"
    if grade == "C":
        return "yellow"
    return "red"


def _score_color(score: int) -> str:
    if score == 100:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def _status_icon(status: str, color: bool) -> str:
    if status == Status.PASS.value:
        return style("✓", "green", enabled=color)
    if status == Status.WARNING.value:
        return style("⚠", "yellow", enabled=color)
    return style("✗", "red", enabled=color)


def _issues_line(count: int, color: bool) -> str:
    if count == 0:
        return style("0 issues found", "green", enabled=color)
    noun = "issue" if count == 1 else "issues"
    return style(f"{count} {noun} found", "yellow", enabled=color)


def format_terminal(data: AnalyzeResponse, color: bool = True) -> str:
    score = data.score
    lines = [
        f"{style(PRODUCT_NAME, 'bold', enabled=color)} — {style(data.url, 'cyan', enabled=color)}",
        "",
        f"  Score: {style(str(score.overall), 'bold', enabled=color)}/100"
        f" ({style(score.grade, _grade_color(score.grade), enabled=color)})",
        "",
    ]

    for key, label, diag_key in CATEGORY_ORDER:
        cat = score.categories[key]
        icon = _status_icon(cat.status, color)
        cat_score = style(str(cat.score), _score_color(cat.score), enabled=color)
        msg = truncate(data.diagnostic_message(diag_key), MESSAGE_WIDTH)
        lines.append(f"  {icon} {label.ljust(LABEL_WIDTH)} {cat_score}  {style(msg, 'dim', enabled=color)}")

    lines += [
        "",
        f"  {_issues_line(score.total_issues, color)}",
        "",
        f"  {style(f'Analyzed in {data.timing}ms', 'dim', enabled=color)}",
        "",
    ]
    return "\n".join(lines)
