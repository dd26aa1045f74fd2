"""数据结构定义（对应 MetaPeek /api/analyze 的 JSON 响应）"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Status(Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class Grade(Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


PASSING_GRADES = {Grade.A.value, Grade.B.value}

# 分类展示顺序: (score.categories 的 key, 显示名, diagnostics 的 key)
CATEGORY_ORDER = [
    ("title", "Title", "title"),
    ("description", "Description", "description"),
    ("openGraph", "Open Graph", "ogTags"),
    ("ogImage", "OG Image", "ogImage"),
    ("twitterCard", "Twitter Card", "twitterCard"),
    ("canonical", "Canonical", "canonical"),
    ("robots", "Robots", "robots"),
]


@dataclass(frozen=True)
class DiagnosticResult:
    """单项检查的诊断信息"""
    status: str  # green / yellow / red
    icon: str  # check / warning / error
    message: str
    suggestion: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DiagnosticResult":
        return cls(
            status=data["status"],
            icon=data["icon"],
            message=data["message"],
            suggestion=data.get("suggestion"),
        )


@dataclass(frozen=True)
class ScoreCategory:
    """单个维度的评分"""
    name: str
    score: int
    max_score: int
    status: str  # pass / warning / fail
    weight: int
    issues: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "ScoreCategory":
        return cls(
            name=data["name"],
            score=data["score"],
            max_score=data["maxScore"],
            status=data["status"],
            weight=data["weight"],
            issues=tuple(data.get("issues", [])),
        )


@dataclass(frozen=True)
class MetaScore:
    """综合评分"""
    overall: int  # 0-100
    grade: str  # A/B/C/D/F
    total_issues: int
    categories: dict[str, ScoreCategory] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.grade in PASSING_GRADES

    @classmethod
    def from_dict(cls, data: dict) -> "MetaScore":
        return cls(
            overall=data["overall"],
            grade=data["grade"],
            total_issues=data["totalIssues"],
            categories={
                key: ScoreCategory.from_dict(value)
                for key, value in data["categories"].items()
            },
        )


@dataclass(frozen=True)
class AnalyzeResponse:
    """完整分析结果

    raw 保留服务端返回的原始 JSON（含 ok、meta 等未建模字段），
    JSON 输出直接使用它。
    """
    url: str
    final_url: str
    analyzed_at: str
    timing: int  # 毫秒
    diagnostics: dict[str, DiagnosticResult]
    score: MetaScore
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    def diagnostic_message(self, key: str) -> str:
        return self.diagnostics[key].message

    @classmethod
    def from_dict(cls, data: dict) -> "AnalyzeResponse":
        return cls(
            url=data["url"],
            final_url=data.get("finalUrl", data["url"]),
            analyzed_at=data.get("analyzedAt", ""),
            timing=data["timing"],
            diagnostics={
                key: DiagnosticResult.from_dict(value)
                for key, value in data["diagnostics"].items()
            },
            score=MetaScore.from_dict(data["score"]),
            raw=data,
        )
