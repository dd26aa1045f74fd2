"""Markdown 报告（Jinja2 模板）"""

from jinja2 import Template

from config import PRODUCT_NAME
from models import AnalyzeResponse, CATEGORY_ORDER, Status

TEMPLATE = Template('''# {{ product }} — {{ data.url }}

**Score:** {{ data.score.overall }}/100 (**{{ data.score.grade }}**)

| Status | Category | Score | Details |
|--------|----------|------:|---------|
{% for row in rows %}
| {{ row.emoji }} | {{ row.label }} | {{ row.score }} | {{ row.details }} |
{% endfor %}

**Issues:** {{ data.score.total_issues }}

*Analyzed in {{ data.timing }}ms*
''', trim_blocks=True, keep_trailing_newline=True)


def status_emoji(status: str) -> str:
    if status == Status.PASS.value:
        return "✅"
    if status == Status.FAIL.value:
        return "❌"
    return "⚠️"


def format_markdown(data: AnalyzeResponse) -> str:
    rows = []
    for key, label, diag_key in CATEGORY_ORDER:
        cat = data.score.categories[key]
        rows.append({
            "emoji": status_emoji(cat.status),
            "label": label,
            "score": cat.score,
            "details": data.diagnostic_message(diag_key),
        })
    return TEMPLATE.render(product=PRODUCT_NAME, data=data, rows=rows)
