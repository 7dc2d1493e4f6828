"""Operation-specific Rich renderers for ServiceResult.

Each renderer draws on a Rich Console supplied by
:func:`~pagesctl.output.console.render_text`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.text import Text

from pagesctl.output.console import render_text
from pagesctl.services.deploy import COMPLETION_MESSAGE

if TYPE_CHECKING:
    from rich.console import Console

    from pagesctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """

    def draw(console: Console) -> None:
        if result.ok:
            renderer = _OP_RENDERERS.get(result.op, _render_generic)
            renderer(result, console, verbose=verbose)
        else:
            _render_error(result, console, verbose=verbose)
        if verbose:
            _render_meta(console, result)

    return render_text(draw)


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="pages.ok")
    op = Text(f"  {result.op}", style="pages.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="pages.key")
    if key.endswith("branch"):
        v = Text(str(value), style="pages.branch")
    elif key == "commit":
        v = Text(str(value), style="pages.sha")
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including per-step timings (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "timings":
            _render_timings(console, v)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_timings(console: Console, timings: dict[str, Any]) -> None:
    """One line per step reached, slow steps highlighted."""
    for entry in timings.get("steps", []):
        duration = entry.get("duration_ms", 0.0)
        if entry.get("outcome") == "failed":
            style = "pages.error"
        elif duration > 5000:
            style = "bold red"
        elif duration > 500:
            style = "yellow"
        else:
            style = "dim"

        line = Text(f"    {duration:>9.2f}ms  ", style=style)
        line.append(Text(f"{entry.get('step', '?'):<10}", style="pages.step"))
        line.append(f"{entry.get('outcome', '?'):<7}")
        counts = {k: v for k, v in entry.items() if k not in ("step", "outcome", "duration_ms")}
        if counts:
            line.append("  " + ", ".join(f"{ck}={cv}" for ck, cv in counts.items()))
        console.print(line)

    total = timings.get("total_ms")
    if total is not None:
        console.print(Text(f"    {total:>9.2f}ms  total", style="dim"))


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning: ", style="pages.warning"), Text(warning), sep="", end="")
        console.print()


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="pages.error")
    op = Text(f"  {result.op}", style="pages.op")
    dash = Text(" - ")
    console.print(label, op, dash, Text(msg), sep="")

    if err and "step" in err.detail:
        step = Text(str(err.detail["step"]), style="pages.step")
        console.print(Text("  step: ", style="pages.key"), step, sep="")
        restored = err.detail.get("restored")
        if restored is False:
            console.print(Text("  original branch NOT restored", style="pages.error"))

    _render_warnings(console, result)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_deploy(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("deploy_branch", "remote", "files", "commit", "restored_branch"):
        if key in result.data:
            value = result.data[key]
            _field(console, key, "(none)" if value is None else value)
    console.print(Text(COMPLETION_MESSAGE, style="pages.ok"))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS = {
    "deploy": _render_deploy,
}
