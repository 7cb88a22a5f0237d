"""ASCII line chart drawn with curses.

The chart is a single widget (`LineChart`) drawn into a terminal session
acquired with `terminal_session()`. `render()` draws it once and blocks in an
`EventLoop` until any key is pressed, restoring the terminal on every exit path.
"""
import contextlib
import curses
import sys
from collections import namedtuple
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .errors import DisplayInitError
from .models import ChartSeries

CHART_HEIGHT = 20

COLORS = {
    "white": curses.COLOR_WHITE,
    "green": curses.COLOR_GREEN,
}

_BOX = {"tl": "┌", "tr": "┐", "bl": "└", "br": "┘", "h": "─", "v": "│"}


def chart_width(points: int) -> int:
    """Widget width for a series: one column per point plus 10% padding."""
    return points + points // 10


def border_label(symbol: str, first: str, last: str) -> str:
    return f"  {symbol} Daily Chart ({first} - {last})  "


class Display:
    """A curses window together with the color attributes registered for it."""

    def __init__(self, window, colors: Optional[Dict[str, int]] = None):
        self.window = window
        self.colors = colors or {}

    def attr(self, color: str, bold: bool = False) -> int:
        value = self.colors.get(color, 0)
        if bold:
            value |= curses.A_BOLD
        return value

    def size(self) -> Tuple[int, int]:
        return self.window.getmaxyx()

    def put(self, y: int, x: int, text: str, attr: int = 0):
        rows, cols = self.size()
        if y < 0 or x < 0 or y >= rows or x >= cols or not text:
            return
        text = text[:cols - x]
        try:
            self.window.addstr(y, x, text, attr)
        except curses.error:
            # addstr raises after writing the bottom-right cell of the window
            pass

    def clear(self):
        self.window.erase()

    def refresh(self):
        self.window.refresh()


def plot_positions(data: Sequence[float], width: int, height: int) -> List[Tuple[int, int]]:
    """Map values onto a width x height grid, returning (row, col) per plotted column.

    Row 0 is the top (highest value). When there are more values than columns
    the series is resampled evenly, always keeping the first and last value.
    A flat series is drawn across the middle row.
    """
    if not data or width < 1 or height < 1:
        return []

    n = len(data)
    columns = min(n, width)
    lo, hi = min(data), max(data)
    span = hi - lo

    positions = []
    for col in range(columns):
        if n <= width:
            idx = col
        elif columns == 1:
            idx = n - 1
        else:
            idx = round(col * (n - 1) / (columns - 1))
        if span == 0:
            row = height // 2
        else:
            row = height - 1 - round((data[idx] - lo) / span * (height - 1))
        positions.append((row, col))
    return positions


class LineChart:
    """Line chart widget: a bordered box with y/x axes and one dot per column."""

    def __init__(self):
        self.mode = "dot"
        self.dot_style = "+"
        self.border_label = ""
        self.data: List[float] = []
        self.data_labels: List[str] = []
        self.width = 0
        self.height = CHART_HEIGHT
        self.x = 0
        self.y = 0
        self.axes_color = "white"
        self.line_color = "green"
        self.line_bold = True

    @classmethod
    def for_series(cls, symbol: str, series: ChartSeries) -> "LineChart":
        chart = cls()
        chart.border_label = border_label(symbol, series.first_label, series.last_label)
        chart.data = list(series.closes)
        chart.data_labels = list(series.labels)
        chart.width = chart_width(len(series))
        chart.height = CHART_HEIGHT
        return chart

    def draw(self, display: Display):
        rows, cols = display.size()
        width = min(self.width, cols - self.x)
        height = min(self.height, rows - self.y)
        if width < 2 or height < 2:
            return

        axes = display.attr(self.axes_color)
        self._draw_border(display, width, height, axes)

        inner_x, inner_y = self.x + 1, self.y + 1
        inner_w, inner_h = width - 2, height - 2
        if not self.data or inner_h < 3:
            return

        hi, lo = f"{max(self.data):.2f}", f"{min(self.data):.2f}"
        label_w = max(len(hi), len(lo))
        axis_col = inner_x + label_w
        axis_row = inner_y + inner_h - 2
        plot_w = inner_x + inner_w - axis_col - 1
        plot_h = axis_row - inner_y
        if plot_w < 1 or plot_h < 1:
            return

        display.put(inner_y, inner_x, hi.rjust(label_w), axes)
        display.put(axis_row - 1, inner_x, lo.rjust(label_w), axes)
        for row in range(inner_y, axis_row):
            display.put(row, axis_col, _BOX["v"], axes)
        display.put(axis_row, axis_col, _BOX["bl"] + _BOX["h"] * plot_w, axes)

        first, last = self.data_labels[0], self.data_labels[-1]
        label_row = axis_row + 1
        display.put(label_row, axis_col + 1, first[:plot_w], axes)
        last_col = axis_col + 1 + plot_w - len(last)
        if len(self.data_labels) > 1 and last_col > axis_col + 1 + len(first):
            display.put(label_row, last_col, last, axes)

        line = display.attr(self.line_color, bold=self.line_bold)
        for row, col in plot_positions(self.data, plot_w, plot_h):
            display.put(inner_y + row, axis_col + 1 + col, self.dot_style, line)

    def _draw_border(self, display: Display, width: int, height: int, attr: int):
        left, top = self.x, self.y
        right, bottom = self.x + width - 1, self.y + height - 1
        display.put(top, left, _BOX["tl"] + _BOX["h"] * (width - 2) + _BOX["tr"], attr)
        for row in range(top + 1, bottom):
            display.put(row, left, _BOX["v"], attr)
            display.put(row, right, _BOX["v"], attr)
        display.put(bottom, left, _BOX["bl"] + _BOX["h"] * (width - 2) + _BOX["br"], attr)
        if self.border_label and width > 2:
            display.put(top, left + 1, self.border_label[:width - 2], attr)


Event = namedtuple("Event", ["path", "key"])


class EventLoop:
    """Blocking keyboard loop dispatching to handlers registered by path."""

    KEYBOARD = "/sys/kbd"
    RESIZE = "/sys/wnd/resize"

    def __init__(self):
        self._handlers: Dict[str, List[Callable[[Event], None]]] = {}
        self._running = False

    def handle(self, path: str, handler: Callable[[Event], None]):
        self._handlers.setdefault(path, []).append(handler)

    def stop(self):
        self._running = False

    def loop(self, window):
        self._running = True
        while self._running:
            key = window.getch()
            if key == -1:
                continue
            path = self.RESIZE if key == curses.KEY_RESIZE else self.KEYBOARD
            for handler in self._handlers.get(path, []):
                handler(Event(path, key))


def _init_colors() -> Dict[str, int]:
    if not curses.has_colors():
        return {}
    curses.start_color()
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK
    pairs = {}
    for number, (name, foreground) in enumerate(COLORS.items(), start=1):
        curses.init_pair(number, foreground, background)
        pairs[name] = curses.color_pair(number)
    return pairs


@contextlib.contextmanager
def terminal_session(stream=None):
    """Take over the terminal with curses and always give it back.

    Raises DisplayInitError when the output is not a terminal or curses
    cannot set it up.
    """
    stream = stream or sys.stdout
    if not stream.isatty():
        raise DisplayInitError("standard output is not a terminal")

    try:
        window = curses.initscr()
    except curses.error as exc:
        raise DisplayInitError(f"cannot initialize terminal: {exc}") from exc

    try:
        curses.noecho()
        curses.cbreak()
        window.keypad(True)
        try:
            curses.curs_set(0)
        except curses.error:
            # some terminals cannot hide the cursor
            pass
        display = Display(window, _init_colors())
    except curses.error as exc:
        _restore(window)
        raise DisplayInitError(f"cannot initialize terminal: {exc}") from exc

    try:
        yield display
    finally:
        _restore(window)


def _restore(window):
    window.keypad(False)
    curses.nocbreak()
    curses.echo()
    curses.endwin()


def render(symbol: str, series: ChartSeries, session=terminal_session):
    """Draw the chart for a non-empty `series` and block until any key is pressed."""
    chart = LineChart.for_series(symbol, series)
    with session() as display:
        chart.draw(display)
        display.refresh()

        events = EventLoop()
        events.handle(EventLoop.KEYBOARD, lambda event: events.stop())

        def redraw(event):
            display.clear()
            chart.draw(display)
            display.refresh()

        events.handle(EventLoop.RESIZE, redraw)
        events.loop(display.window)
