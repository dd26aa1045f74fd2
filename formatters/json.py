"""JSON 输出：原样美化输出服务端返回的数据"""

import json

from models import AnalyzeResponse


def format_json(data: AnalyzeResponse) -> str:
    return json.dumps(data.raw, indent=2, ensure_ascii=False)
