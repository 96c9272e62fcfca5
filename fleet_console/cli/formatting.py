"""Display helpers for the console CLI."""

from __future__ import annotations

from rich.markup import escape

from ..console.models import Notice, NoticeLevel
from ..console.presenters import HistoryRow
from ..ui.theme import THEME

_NOTICE_TONES = {
    NoticeLevel.INFO: THEME.accent,
    NoticeLevel.SUCCESS: THEME.success,
    NoticeLevel.ERROR: THEME.error,
}


def _markup(text: str, color: str) -> str:
    """Wrap text in Rich markup with the given color, escaping special chars."""
    return f"[{color}]{escape(text)}[/{color}]"


def _format_notice(notice: Notice) -> str:
    return _markup(notice.text, _NOTICE_TONES.get(notice.level, THEME.muted))


def _format_history_row(row: HistoryRow) -> str:
    """Multi-line markup for one history record."""
    lines = [_markup(row.header, THEME.muted)]
    if row.command is not None:
        lines.append(_markup(f"> {row.command}", THEME.primary))
    status = _markup(f"{row.icon} {row.label}:", THEME.tone(row.tone))
    lines.append(f"{status} {escape(row.output)}")
    return "\n".join(lines)
