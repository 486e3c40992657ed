"""Source code quality analysis.

PATTERN: File walk + external complexity tooling + in-process heuristics
CRITICAL: Complexity comes from eslintcc; without it analysis fails loudly
GOTCHA: ESLint exits non-zero whenever it reports issues, output still parsed
"""

import hashlib
import json
import logging
import os
import re
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

from ... import constants as C
from ...config.quality_config import QualityGateConfig
from ...exceptions import ComplexityAnalysisError
from ...models.quality_models import (
    CodeComplexity,
    CodeMaintainability,
    CodeQualityMetrics,
    ComplexityFile,
    DuplicationReport,
    EslintComplexity,
    FileMetrics,
    FileScore,
    LargeFile,
)
from ..base import BaseCollector
from ..reporters.json_reporter import JsonReporter

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
SKIPPED_DIRS = {"node_modules"}
WHITESPACE = re.compile(r"\s+")


class SourceFile(NamedTuple):
    path: str
    lines: int
    content: str


def count_lines(content: str) -> int:
    return len(content.split("\n"))


def compute_file_metrics(files: List[SourceFile]) -> FileMetrics:
    """Line statistics and large files for the analyzed sources."""
    if not files:
        return FileMetrics()

    line_counts = [f.lines for f in files]
    return FileMetrics(
        total_files=len(files),
        avg_lines_per_file=sum(line_counts) / len(files),
        max_lines_per_file=max(line_counts),
        large_files=[
            LargeFile(file=f.path, lines=f.lines)
            for f in files
            if f.lines > C.LARGE_FILE_LINES
        ],
    )


def count_sonarjs_issues(reports: Any) -> EslintComplexity:
    """Count SonarJS rule hits in ESLint JSON reports."""
    cognitive = 0
    duplicate_strings = 0
    other = 0

    for report in reports if isinstance(reports, list) else []:
        if not isinstance(report, dict):
            continue
        for message in report.get("messages") or []:
            rule_id = message.get("ruleId") or ""
            if rule_id == "sonarjs/cognitive-complexity":
                cognitive += 1
            elif rule_id == "sonarjs/no-duplicate-string":
                duplicate_strings += 1
            elif "sonarjs" in rule_id:
                other += 1

    return EslintComplexity(
        cognitive_complexity=cognitive,
        duplicate_strings=duplicate_strings,
        other_issues=other,
    )


def parse_eslintcc_report(
    report: Dict[str, Any],
    line_counts: Dict[str, int],
    project_root: Path,
) -> CodeComplexity:
    """
    Build complexity statistics from an eslintcc JSON report.

    The complexity of a file is the highest ``rules.complexity.value`` of
    its messages. Files without any complexity message get a minimal
    estimate from their length.

    Args:
        report: Parsed eslintcc output (``{"files": [...]}``)
        line_counts: Line count per relative source path
        project_root: Root used to relativize reported paths

    Returns:
        CodeComplexity with files sorted by descending complexity
    """
    files: List[ComplexityFile] = []

    for file_report in report.get("files") or []:
        raw_path = str(file_report.get("file", ""))
        try:
            rel_path = Path(raw_path).resolve().relative_to(project_root.resolve()).as_posix()
        except ValueError:
            rel_path = raw_path

        max_complexity = 0.0
        for message in file_report.get("messages") or []:
            rule = (message.get("rules") or {}).get("complexity")
            if rule and rule.get("value", 0) > max_complexity:
                max_complexity = float(rule["value"])

        if max_complexity == 0:
            lines = line_counts.get(rel_path, 0)
            max_complexity = float(max(1, lines // 100))

        files.append(ComplexityFile(file=rel_path, complexity=max_complexity))

    files.sort(key=lambda f: f.complexity, reverse=True)
    scores = [f.complexity for f in files]

    return CodeComplexity(
        high_complexity_files=files,
        average_complexity=sum(scores) / len(scores) if scores else 0.0,
        max_complexity=max(scores) if scores else 0.0,
    )


def calculate_maintainability(
    complexity: CodeComplexity,
    file_metrics: FileMetrics,
    eslint_complexity: Optional[EslintComplexity] = None,
) -> CodeMaintainability:
    """Simplified maintainability index with letter rating."""
    index = 100.0

    if complexity.average_complexity > C.COMPLEXITY_EXCELLENT:
        index -= min(20.0, complexity.average_complexity * 2)

    if file_metrics.avg_lines_per_file > C.AVG_LINES_WARNING:
        index -= 10

    if eslint_complexity is not None:
        index -= min(20, eslint_complexity.total)

    index = max(0.0, min(100.0, index))

    low_files = [
        FileScore(file=f.file, score=max(0.0, 100 - f.complexity * 5))
        for f in complexity.high_complexity_files
        if f.complexity > C.COMPLEXITY_INDIVIDUAL_WARNING
    ]

    return CodeMaintainability(
        index=index,
        rating=C.score_rating(index),
        low_maintainability_files=low_files,
    )


def analyze_duplication(contents: Dict[str, str]) -> DuplicationReport:
    """
    Estimate duplication by hashing sliding blocks of source lines.

    Blocks of DUPLICATE_BLOCK_LINES lines longer than
    DUPLICATE_BLOCK_MIN_CHARS characters are compared with whitespace
    collapsed. Each repeated block counts its occurrences times the block
    length as duplicated lines.
    """
    occurrences: Dict[str, int] = defaultdict(int)
    total_lines = 0
    size = C.DUPLICATE_BLOCK_LINES

    for content in contents.values():
        lines = content.split("\n")
        total_lines += len(lines)
        for i in range(len(lines) - size + 1):
            block = "\n".join(lines[i:i + size]).strip()
            if len(block) <= C.DUPLICATE_BLOCK_MIN_CHARS:
                continue
            normalized = WHITESPACE.sub(" ", block)
            digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()
            occurrences[digest] += 1

    blocks = 0
    duplicated = 0
    for count in occurrences.values():
        if count > 1:
            blocks += 1
            duplicated += count * size

    percentage = (duplicated / total_lines * 100) if total_lines else 0.0
    return DuplicationReport(
        percentage=min(100.0, percentage),
        duplicated_lines=duplicated,
        blocks=blocks,
    )


class CodeQualityAnalyzer(BaseCollector):
    """
    Analyze source files for complexity, maintainability and duplication.

    PATTERN: Sequential tool runs feeding pure metric functions
    CRITICAL: Raises ComplexityAnalysisError when eslintcc output is unusable
    GOTCHA: Generated UI components can be excluded to avoid skewing scores
    """

    name = "code_quality"

    def __init__(
        self,
        config: Optional[QualityGateConfig] = None,
        include_ui_components: bool = True,
        exclude_paths: Optional[List[str]] = None,
    ):
        """
        Initialize analyzer.

        Args:
            config: Paths and commands
            include_ui_components: Analyze generated UI component files too
            exclude_paths: Extra path substrings to skip
        """
        super().__init__(config)
        self.exclude_paths = list(self.config.exclude_paths)
        if not include_ui_components:
            self.exclude_paths.append(self.config.ui_components_dir)
        if exclude_paths:
            self.exclude_paths.extend(exclude_paths)

    def _excluded(self, rel_path: str) -> bool:
        return any(pattern in rel_path for pattern in self.exclude_paths)

    def discover_files(self) -> List[SourceFile]:
        """Walk the source directory for analyzable files."""
        root = self.config.project_root
        src_dir = self.config.resolve(self.config.source_dir)
        files: List[SourceFile] = []

        if not src_dir.is_dir():
            self.logger.warning(f"Source directory not found: {src_dir}")
            return files

        for dirpath, dirnames, filenames in os.walk(src_dir):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRS
            )
            for filename in sorted(filenames):
                if not filename.endswith(SOURCE_EXTENSIONS):
                    continue
                full_path = Path(dirpath) / filename
                rel_path = full_path.relative_to(root).as_posix()
                if self._excluded(rel_path):
                    continue
                content = full_path.read_text(encoding="utf-8", errors="replace")
                files.append(SourceFile(rel_path, count_lines(content), content))

        return files

    async def run_eslint_complexity(self, files: List[SourceFile]) -> Optional[EslintComplexity]:
        """Count SonarJS complexity findings; None if ESLint is unavailable."""
        if not files:
            return EslintComplexity()

        self.logger.info("Running ESLint complexity checks...")
        result = await self._run(self.config.eslint_complexity_command + [f.path for f in files])
        if result is None:
            return None

        try:
            reports = json.loads(result.stdout.strip() or "[]")
        except json.JSONDecodeError:
            self.logger.warning("Unparseable ESLint complexity output")
            return EslintComplexity()
        return count_sonarjs_issues(reports)

    async def calculate_complexity(self, files: List[SourceFile]) -> CodeComplexity:
        """
        Per-file cyclomatic complexity via eslintcc.

        Raises:
            ComplexityAnalysisError: If eslintcc cannot run or its output is invalid
        """
        if not files:
            return CodeComplexity()

        self.logger.info("Analyzing complexity with eslintcc...")
        result = await self._run(self.config.eslintcc_command + [f.path for f in files])
        if result is None:
            raise ComplexityAnalysisError("eslintcc could not be executed")

        try:
            report = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ComplexityAnalysisError(f"Invalid eslintcc output: {e}") from e

        if not isinstance(report, dict):
            raise ComplexityAnalysisError("Unexpected eslintcc report format")

        line_counts = {f.path: f.lines for f in files}
        return parse_eslintcc_report(report, line_counts, self.config.project_root)

    async def analyze(self) -> CodeQualityMetrics:
        """
        Run the full analysis.

        Returns:
            CodeQualityMetrics

        Raises:
            ComplexityAnalysisError: If complexity cannot be computed
        """
        files = self.discover_files()
        self.logger.info(f"Analyzing {len(files)} source files")

        file_metrics = compute_file_metrics(files)
        eslint_complexity = await self.run_eslint_complexity(files)
        complexity = await self.calculate_complexity(files)
        maintainability = calculate_maintainability(complexity, file_metrics, eslint_complexity)
        duplication = analyze_duplication({f.path: f.content for f in files})

        return CodeQualityMetrics(
            timestamp=datetime.now(timezone.utc).isoformat(),
            complexity=complexity,
            maintainability=maintainability,
            file_metrics=file_metrics,
            eslint_complexity=eslint_complexity,
            duplication=duplication,
        )

    async def collect(self) -> Optional[CodeQualityMetrics]:
        try:
            return await self.analyze()
        except ComplexityAnalysisError as e:
            self.logger.error(f"Code quality analysis failed: {e}")
            return None

    def save(self, metrics: CodeQualityMetrics) -> Path:
        """
        Persist metrics as a timestamped file and as ``code-quality-latest.json``.

        Returns:
            Path of the latest file
        """
        metrics_dir = self.config.metrics_path
        metrics_dir.mkdir(parents=True, exist_ok=True)

        payload = JsonReporter(pretty=True).generate_report(metrics)
        stamp = re.sub(r"[:.+]", "-", metrics.timestamp)
        (metrics_dir / f"code-quality-{stamp}.json").write_text(payload, encoding="utf-8")

        latest = self.config.code_quality_file
        latest.write_text(payload, encoding="utf-8")
        self.logger.info(f"Code quality metrics saved to {latest}")
        return latest
