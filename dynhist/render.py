"""Fixed-width text rendering of histogram buckets."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .dynhist import Bucket


def _width(value: float) -> int:
    return len(f"{value:.2f}")


def render_table(buckets: Sequence["Bucket"], total: "Bucket", print_sum: bool = False) -> str:
    """
    Render ``buckets`` as a table with counts, percentages and a dot bar.

    ``total`` carries the collector-wide ``min``/``max``/``count``/``sum``.
    Returns an empty string when there are no buckets.

    Example::

        [ min  max]   cnt total% (10000 events)
        [0.00 0.11]  1099 10.99% ..........
        [0.11 0.22]  1093 10.93% ..........
    """
    if not buckets:
        return ""

    # With an infinite max the last bucket's min can be the widest number.
    n_len = max(_width(total.min), _width(total.max), _width(buckets[-1].min))
    c_len = len(str(total.count))
    s_len = _width(total.sum)

    if print_sum:
        lines = [
            f"[{'min':>{n_len}} {'max':>{n_len}}] {'cnt':>{c_len}} total% "
            f"{'sum':>{s_len}} ({total.count} events)"
        ]
    else:
        lines = [
            f"[{'min':>{n_len}} {'max':>{n_len}}] {'cnt':>{c_len}} total% "
            f"({total.count} events)"
        ]

    for b in buckets:
        percent = 100.0 * b.count / total.count if total.count else 0.0
        dots = "." * int(percent)
        if dots:
            dots = " " + dots
        row = f"[{b.min:{n_len}.2f} {b.max:{n_len}.2f}] {b.count:{c_len}d} {percent:5.2f}%"
        if print_sum:
            row += f" {b.sum:{s_len}.2f}"
        lines.append(row + dots)

    return "\n".join(lines) + "\n"
