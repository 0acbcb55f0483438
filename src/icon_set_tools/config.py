"""マージジョブ設定（merge.yml）の読み込み.

YAML形式:
    jobs:
      - name: mdi
        old: published/mdi.json
        new: build/mdi.json
        output: dist/mdi.json
        mark_as_hidden: true
        report_dir: reports/mdi
        enabled: true

相対パスは YAML ファイルのディレクトリ基準で解決します。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml
from loguru import logger


@dataclass(frozen=True)
class MergeJob:
    name: str
    old_path: Path
    new_path: Path
    output_path: Path
    mark_as_hidden: bool = True
    report_dir: Path | None = None


def _resolve_path(base_dir: Path, value: object, job_name: str, key: str) -> Path:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Merge job '{job_name}': '{key}' must be a non-empty path string")
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def load_merge_config(config_path: Path | str) -> list[MergeJob]:
    """merge.yml を読み込んで有効なジョブのリストを返す.

    Args:
        config_path: YAML ファイルのパス

    Returns:
        enabled なジョブのリスト

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: YAML の構造が不正な場合
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Merge config not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict) or not isinstance(config.get("jobs", []), list):
        raise ValueError(f"Merge config must contain a 'jobs' list: {config_path}")

    base_dir = config_path.parent
    jobs: list[MergeJob] = []
    for index, raw in enumerate(config.get("jobs", [])):
        if not isinstance(raw, dict):
            raise ValueError(f"Merge job #{index} must be a mapping: {config_path}")
        if not raw.get("enabled", True):
            continue

        name = str(raw.get("name") or f"job{index}")
        report_dir = raw.get("report_dir")
        jobs.append(
            MergeJob(
                name=name,
                old_path=_resolve_path(base_dir, raw.get("old"), name, "old"),
                new_path=_resolve_path(base_dir, raw.get("new"), name, "new"),
                output_path=_resolve_path(base_dir, raw.get("output"), name, "output"),
                mark_as_hidden=bool(raw.get("mark_as_hidden", True)),
                report_dir=_resolve_path(base_dir, report_dir, name, "report_dir") if report_dir else None,
            )
        )

    logger.info(f"Loaded {len(jobs)} enabled merge jobs from {config_path}")
    return jobs
