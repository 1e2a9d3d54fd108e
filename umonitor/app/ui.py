import json
from html import escape
from typing import Optional, Sequence
from urllib.parse import urlencode

from .models import DisplayRow, SortKey, ViewState, clear_filter, toggle_sort

COLUMNS = [
    (SortKey.STATE, "State", "column-status"),
    (SortKey.NAME, "Name", "column-name"),
    (SortKey.TRANSITION, "Transition", "column-transition"),
    (SortKey.TIME, "Time", "column-time"),
    (SortKey.MESSAGE, "Message", "column-message"),
]

PAGE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<link id="icon" rel="icon" type="image/svg+xml" href="{icon}">
<style>
body{{font-family:-apple-system,"Segoe UI",Roboto,sans-serif;margin:0;background:#f8fafc;color:#111827}}
#page{{max-width:1200px;margin:0 auto;padding:24px}}
.logo{{font-size:28px;font-weight:bold;margin-bottom:16px}}
.app-green .logo{{color:#10b981}}.app-yellow .logo{{color:#f59e0b}}
.app-red .logo{{color:#ef4444}}.app-grey .logo{{color:#6b7280}}
a{{color:inherit}}
.filter{{width:60%;padding:6px 8px;font-size:14px}}
.reset{{margin-right:8px}}
table{{width:100%;border-collapse:collapse;margin-top:16px;background:#fff}}
thead td{{font-weight:bold;border-bottom:2px solid #e5e7eb;padding:8px}}
tbody td{{border-bottom:1px solid #f1f5f9;padding:6px 8px;font-size:14px}}
.up{{color:#047857}}.dn{{color:#b91c1c;font-weight:bold}}
.meta{{color:#6b7280;font-size:12px;margin-top:8px}}
#footer{{margin-top:24px;color:#6b7280;font-size:12px;text-align:center}}
</style>
</head>
<body>
<div id="app" class="app-{color}">
<div id="page">
<a href="./"><div class="logo">{base_title}</div></a>
<form method="get" action="./">
<a class="reset" href="{reset_href}">Reset</a>
<input type="text" name="filter" value="{filter}" placeholder="filter ..." autofocus class="filter">
<input type="hidden" name="sort" value="{sort}">
<input type="hidden" name="asc" value="{asc}">
</form>
{status_line}
<div id="layout">
<table id="events">
<thead><tr>{header}</tr></thead>
<tbody>
{rows}
</tbody>
</table>
</div>
<div id="footer"><b>{base_title}</b></div>
</div>
</div>
<script>
document.body.onkeydown = function (e) {{
  if (e.ctrlKey || e.shiftKey || e.altKey || e.metaKey) return;
  if (e.key === "Escape") {{ window.location.href = {reset_js}; return; }}
  document.querySelector("input.filter").focus();
}};
// resubmit so unsent filter text survives the reload
setTimeout(function () {{ document.querySelector("form").submit(); }}, {refresh_ms});
</script>
</body>
</html>
"""


def view_query(state: ViewState) -> str:
    return "?" + urlencode({
        "filter": state.filter_text,
        "sort": state.sort_key.value,
        "asc": "1" if state.ascending else "0",
    })


def sort_icon(state: ViewState, column: SortKey) -> str:
    if state.sort_key != column:
        return ""
    return "▼" if state.ascending else "▲"


def render_header(state: ViewState) -> str:
    cells = []
    for key, label, css in COLUMNS:
        href = escape(view_query(toggle_sort(state, key)))
        cells.append(f'<td class="{css}"><a href="{href}">{label}</a> {sort_icon(state, key)}</td>')
    return "".join(cells)


def render_row(row: DisplayRow) -> str:
    rec = row.record
    return (
        "<tr>"
        f'<td class="column-status"><div class="{row.up_or_down.value}">{escape(rec.state)}</div></td>'
        f'<td class="column-name">{escape(rec.name)}</td>'
        f'<td class="column-transition">{escape(row.transition_label)}</td>'
        f'<td class="column-time">{escape(row.formatted_time)}</td>'
        f'<td class="column-message">{escape(rec.transition.message or "")}</td>'
        "</tr>"
    )


def render_page(rows: Sequence[DisplayRow], state: ViewState, *, title: str, base_title: str,
                icon: str, color: str, refresh_s: int, last_error: Optional[str] = None) -> str:
    status_line = ""
    if last_error:
        status_line = f'<div class="meta">Status feed unavailable, showing last known data: {escape(last_error)}</div>'
    return PAGE.format(
        refresh_ms=refresh_s * 1000,
        title=escape(title),
        base_title=escape(base_title),
        icon=escape(icon),
        color=escape(color),
        reset_href=escape(view_query(clear_filter(state))),
        reset_js=json.dumps(view_query(clear_filter(state))),
        filter=escape(state.filter_text),
        sort=state.sort_key.value,
        asc="1" if state.ascending else "0",
        status_line=status_line,
        header=render_header(state),
        rows="\n".join(render_row(r) for r in rows),
    )
