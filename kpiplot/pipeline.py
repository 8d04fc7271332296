from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

from .chart import build_chart, chart_title, draw_chart
from .encode import check_format, encode_canvas, format_for_path
from .extract import extract_series
from .models import BenchmarkPresent, RenderResult, ReportItem
from .normalize import normalize_series
from .parse import parse_table
from .rules import MEDIA_TYPES, NORMALIZED_COLOR, RAW_COLOR

logger = logging.getLogger(__name__)


def render(raw: bytes, normalize: bool = False, fmt: str = "png") -> RenderResult:
    """
    Run the whole pipeline on a tabular export.

    Fatal conditions raise PipelineError subclasses. Recoverable ones are
    returned in RenderResult.warnings.
    """
    fmt = check_format(fmt)
    table = parse_table(raw)
    pair = extract_series(table)
    warnings: List[ReportItem] = []

    series = pair.analytics
    color = RAW_COLOR
    subtitle = f'Raw series "{pair.analytics.name}"'
    normalized = False

    if normalize:
        if isinstance(pair.benchmark, BenchmarkPresent):
            series, point_warnings = normalize_series(pair)
            warnings.extend(point_warnings)
            color = NORMALIZED_COLOR
            subtitle = f'Normalized over series "{pair.benchmark.series.name}"'
            normalized = True
        else:
            logger.debug("normalization skipped: %s", pair.benchmark.reason)
            warnings.append(ReportItem(
                column=pair.analytics.name,
                issue="benchmark_unavailable",
                value=pair.benchmark.reason,
                action="rendered_raw_series",
            ))

    chart = build_chart(series, chart_title(pair.kpi.value, table.experience_id), color, subtitle)
    return RenderResult(
        image=encode_canvas(draw_chart(chart), fmt),
        format=fmt,
        media_type=MEDIA_TYPES[fmt],
        normalized=normalized,
        points=len(series),
        warnings=warnings,
    )


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def write_atomic(path: Union[str, Path], data: bytes) -> None:
    """Write via a temp file in the target directory, then rename into place."""
    path = Path(path)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        # mkstemp creates 0600; give the result the mode a plain open() would
        os.chmod(tmp, 0o666 & ~_current_umask())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def render_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    normalize: bool = False,
) -> RenderResult:
    fmt = format_for_path(output_path)  # fail before any work
    raw = Path(input_path).read_bytes()
    result = render(raw, normalize=normalize, fmt=fmt)
    write_atomic(output_path, result.image)
    logger.info("wrote %s (%d bytes)", output_path, len(result.image))
    return result
