from __future__ import annotations

import datetime as dt
import logging
from importlib import metadata
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt
from matplotlib.patches import Patch, Rectangle

from .models import STATUS_COLORS, STATUS_LABELS, Lane, TimelineLayout

logger = logging.getLogger(__name__)

# Pixel geometry of the chrome around the computed layout.
LINE_LABEL_WIDTH = 96
MONTH_ROW_HEIGHT = 32
DAY_ROW_HEIGHT = 28
BAR_HEIGHT = 34
DPI = 100
FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 9 * FONT_SCALE
DAY_FONT = 7 * FONT_SCALE
BAR_FONT = 7 * FONT_SCALE
FOOTER_FONT = 7 * FONT_SCALE
GRID_COLOR = "#e5e7eb"
OVERDUE_COLOR = "#ef4444"
SATURDAY_COLOR = "#2563eb"
SUNDAY_COLOR = "#dc2626"
EMPTY_MESSAGE = "표시할 생산 일정이 없습니다."
EMPTY_HINT = "생산라인과 완료예정일이 확정된 요청만 표시됩니다."
LEGEND_HIDDEN_STATUSES = frozenset({"cancelled", "in_progress"})


def render_timeline(layout: TimelineLayout, out_path: str, title: str = "", today: dt.date | None = None) -> None:
    """
    Render a computed layout to a static SVG at `out_path`.

    - Geometry is taken verbatim from the layout (pixels, y grows downwards).
    - Bars are coloured by status; overdue bars get a red outline.
    - An empty layout still renders the header with a placeholder message.
    """

    header_height = MONTH_ROW_HEIGHT + DAY_ROW_HEIGHT
    body_height = layout.height if not layout.is_empty else 80
    total_width = LINE_LABEL_WIDTH + layout.width
    total_height = header_height + body_height

    fig = plt.figure(figsize=(total_width / DPI, (total_height + 60) / DPI), dpi=DPI)
    ax = fig.add_axes((0.0, 0.04, 1.0, 0.96 * total_height / (total_height + 60)))
    ax.set_xlim(0, total_width)
    ax.set_ylim(total_height, 0)
    ax.axis("off")

    if title:
        fig.suptitle(title, x=0.01, ha="left", fontsize=TITLE_FONT, y=0.995)
    fig.text(0.99, 0.005, _footer(layout), ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    _draw_header(ax, layout, today)
    _draw_legend(fig)

    if layout.is_empty:
        center_x = LINE_LABEL_WIDTH + layout.width / 2
        center_y = header_height + body_height / 2
        ax.text(center_x, center_y - 10, EMPTY_MESSAGE, ha="center", va="center", fontsize=LABEL_FONT, color="#4b5563")
        ax.text(center_x, center_y + 12, EMPTY_HINT, ha="center", va="center", fontsize=DAY_FONT, color="#6b7280")
    else:
        top = header_height
        for lane in layout.lanes:
            _draw_lane(ax, layout, lane, top)
            top += lane.height

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg")
    plt.close(fig)
    logger.debug("Rendered %d lanes to %s", len(layout.lanes), out_path)


def _draw_header(ax: plt.Axes, layout: TimelineLayout, today: dt.date | None) -> None:
    cell = layout.cell_width
    for header in layout.month_headers:
        x = LINE_LABEL_WIDTH + header.start_col * cell
        ax.text(x + 4, MONTH_ROW_HEIGHT / 2, header.label, ha="left", va="center", fontsize=LABEL_FONT, fontweight="bold")
        if header.start_col > 0:
            ax.plot([x, x], [0, MONTH_ROW_HEIGHT + DAY_ROW_HEIGHT], color=GRID_COLOR, linewidth=0.8)
    ax.plot([0, LINE_LABEL_WIDTH + layout.width], [MONTH_ROW_HEIGHT] * 2, color="#d1d5db", linewidth=1.2)

    for idx, day in enumerate(layout.columns):
        x = LINE_LABEL_WIDTH + idx * cell
        color = "#374151"
        if day.weekday() == 5:
            color = SATURDAY_COLOR
        elif day.weekday() == 6:
            color = SUNDAY_COLOR
        weight = "bold" if today is not None and day == today else "normal"
        ax.text(
            x + cell / 2,
            MONTH_ROW_HEIGHT + DAY_ROW_HEIGHT / 2,
            str(day.day),
            ha="center",
            va="center",
            fontsize=DAY_FONT,
            color=color,
            fontweight=weight,
        )
        ax.plot([x + cell, x + cell], [MONTH_ROW_HEIGHT, MONTH_ROW_HEIGHT + DAY_ROW_HEIGHT], color=GRID_COLOR, linewidth=0.5)


def _draw_lane(ax: plt.Axes, layout: TimelineLayout, lane: Lane, top: float) -> None:
    ax.add_patch(Rectangle((0, top), LINE_LABEL_WIDTH, lane.height, facecolor="#f9fafb", edgecolor=GRID_COLOR))
    ax.text(8, top + lane.height / 2, lane.line, ha="left", va="center", fontsize=LABEL_FONT, fontweight="bold")
    ax.plot([0, LINE_LABEL_WIDTH + layout.width], [top + lane.height] * 2, color=GRID_COLOR, linewidth=0.8)

    for placement in lane.tasks:
        color = STATUS_COLORS.get(placement.task.status, "#999999")
        x = LINE_LABEL_WIDTH + placement.x
        y = top + placement.y
        ax.add_patch(
            Rectangle(
                (x, y),
                placement.width,
                BAR_HEIGHT,
                facecolor=color,
                edgecolor=OVERDUE_COLOR if placement.overdue else "none",
                linewidth=2.0 if placement.overdue else 0.0,
                clip_on=True,
            )
        )
        ax.text(
            x + 6,
            y + BAR_HEIGHT / 2,
            placement.task.label,
            ha="left",
            va="center",
            fontsize=BAR_FONT,
            color="white",
            clip_on=True,
        )


def _footer(layout: TimelineLayout) -> str:
    window = layout.window
    return f"{window.start.isoformat()} ~ {window.end.isoformat()} · production-timeline v{_tool_version()}"


def _tool_version() -> str:
    try:
        return metadata.version("production-timeline")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def legend_entries() -> list[tuple[str, str]]:
    """(label, colour) pairs for the status legend, in status order."""
    return [
        (label, STATUS_COLORS[status])
        for status, label in STATUS_LABELS.items()
        if status not in LEGEND_HIDDEN_STATUSES
    ]


def _draw_legend(fig: plt.Figure) -> None:
    handles = [Patch(facecolor=color, label=label) for label, color in legend_entries()]
    fig.legend(
        handles=handles,
        title="상태 범례",
        loc="upper right",
        ncol=len(handles),
        fontsize=LABEL_FONT,
        title_fontsize=LABEL_FONT,
        frameon=False,
    )
