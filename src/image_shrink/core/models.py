"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

SourceKind = str  # png | jpeg | unsupported

KIND_PNG: SourceKind = "png"
KIND_JPEG: SourceKind = "jpeg"
KIND_UNSUPPORTED: SourceKind = "unsupported"

STATUS_SUCCEEDED = "succeeded"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SourceFile:
    """扫描阶段得到的源文件信息。"""

    path: Path
    extension: str
    base_name: str

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        return cls(path=path, extension=path.suffix.lower(), base_name=path.stem)


@dataclass(frozen=True, slots=True)
class EncodeOptions:
    """Pillow 编码参数。"""

    format: str
    quality: int
    advanced_encoder: bool = False

    def save_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"quality": self.quality}
        if self.advanced_encoder:
            params.update(optimize=True, progressive=True)
        return params


@dataclass(frozen=True, slots=True)
class DerivativePlan:
    """单个派生文件的生成计划。"""

    target_extension: str
    encode_options: EncodeOptions


@dataclass(slots=True)
class DerivativeOutcome:
    """单个派生文件的执行结果。"""

    plan: DerivativePlan
    output_path: Path
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe_error(self) -> str:
        if self.error is None:
            return ""
        return f"{self.plan.target_extension}: {type(self.error).__name__}: {self.error}"


@dataclass(slots=True)
class FileOutcome:
    """记录单个源文件的处理结果（用于输出/报告）。"""

    source_path: Path
    status: str
    output_paths: list[Path] = field(default_factory=list)
    message: Optional[str] = None
    derivatives: list[DerivativeOutcome] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class BatchSummary:
    succeeded: int
    skipped: int
    failed: int

    @property
    def total(self) -> int:
        return self.succeeded + self.skipped + self.failed


@dataclass(slots=True)
class BatchResult:
    """批处理的产出。"""

    succeeded: list[FileOutcome] = field(default_factory=list)
    skipped: list[FileOutcome] = field(default_factory=list)
    failed: list[FileOutcome] = field(default_factory=list)

    def record(self, outcome: FileOutcome) -> None:
        if outcome.status == STATUS_SUCCEEDED:
            self.succeeded.append(outcome)
        elif outcome.status == STATUS_SKIPPED:
            self.skipped.append(outcome)
        else:
            self.failed.append(outcome)

    def summary(self) -> BatchSummary:
        return BatchSummary(
            succeeded=len(self.succeeded),
            skipped=len(self.skipped),
            failed=len(self.failed),
        )

    def all_outcomes(self) -> list[FileOutcome]:
        """返回所有结果记录，方便生成报告。"""

        return [*self.succeeded, *self.skipped, *self.failed]
