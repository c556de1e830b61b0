"""Worker entry point executed inside pool processes.

``run_task`` holds no state between calls: it takes one AnalysisTask and
returns one TaskSuccess or TaskFailure. Exceptions never escape it, so a
bad file cannot take a sibling task down with it.
"""

from __future__ import annotations

import traceback

from ..exceptions import ExtractionError
from ..scanning.extractor import FileMetadataExtractor
from .messages import AnalysisTask, TaskFailure, TaskOutcome, TaskSuccess


def run_task(task: AnalysisTask) -> TaskOutcome:
    try:
        record, report = FileMetadataExtractor().analyze_file(
            task.file_path, task.root_dir, task.analysis_depth
        )
    except ExtractionError as e:
        return TaskFailure(task.file_path, e.reason, kind="extraction")
    except Exception as e:
        detail = traceback.format_exception_only(type(e), e)[-1].strip()
        return TaskFailure(task.file_path, detail, kind="worker")
    return TaskSuccess(task.file_path, record, report)
