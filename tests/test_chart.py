import curses
import datetime as dt

import pytest

from qtrn import chart
from qtrn.errors import DisplayInitError
from qtrn.models import ChartPoint, ChartSeries


class FakeWindow:
    """Records what gets drawn into a rows x cols grid and replays queued keys."""

    def __init__(self, rows=24, cols=80, keys=(ord('q'),)):
        self.rows, self.cols = rows, cols
        self.cells = {}
        self.keys = list(keys)
        self.refreshes = 0
        self.erased = 0

    def getmaxyx(self):
        return self.rows, self.cols

    def addstr(self, y, x, text, attr=0):
        for i, ch in enumerate(text):
            self.cells[(y, x + i)] = (ch, attr)

    def erase(self):
        self.erased += 1
        self.cells.clear()

    def refresh(self):
        self.refreshes += 1

    def getch(self):
        return self.keys.pop(0)

    def row(self, y):
        return ''.join(self.cells.get((y, x), (' ', 0))[0] for x in range(self.cols)).rstrip()

    def dots(self):
        return sorted((y, x) for (y, x), (ch, _) in self.cells.items() if ch == '+')


def make_series(closes, start=dt.date(2017, 1, 3)):
    return ChartSeries([ChartPoint(start + dt.timedelta(days=i), c) for i, c in enumerate(closes)])


def fake_session(window, log=None):
    def session():
        class _Session:
            def __enter__(self):
                if log is not None:
                    log.append('enter')
                return chart.Display(window)

            def __exit__(self, *exc):
                if log is not None:
                    log.append('exit')
                return False

        return _Session()
    return session


def test_border_label():
    assert chart.border_label('AAPL', '1/3/2017', '6/20/2017') == '  AAPL Daily Chart (1/3/2017 - 6/20/2017)  '


@pytest.mark.parametrize('points,width', [(1, 1), (5, 5), (9, 9), (10, 11), (25, 27), (120, 132)])
def test_chart_width(points, width):
    assert chart.chart_width(points) == width


def test_line_chart_for_series():
    series = make_series([115.0, 116.25, 114.8, 117.1, 118.0])
    widget = chart.LineChart.for_series('AAPL', series)
    assert widget.mode == 'dot'
    assert widget.dot_style == '+'
    assert widget.data == [115.0, 116.25, 114.8, 117.1, 118.0]
    assert widget.data_labels == ['1/3/2017', '1/4/2017', '1/5/2017', '1/6/2017', '1/7/2017']
    assert widget.border_label == '  AAPL Daily Chart (1/3/2017 - 1/7/2017)  '
    assert widget.width == 5
    assert widget.height == 20
    assert (widget.x, widget.y) == (0, 0)
    assert widget.axes_color == 'white'
    assert widget.line_color == 'green' and widget.line_bold


def test_plot_positions_scales_between_min_and_max():
    pos = chart.plot_positions([1.0, 2.0, 3.0], width=10, height=5)
    assert pos == [(4, 0), (2, 1), (0, 2)]


def test_plot_positions_flat_series_uses_middle_row():
    assert chart.plot_positions([5.0, 5.0], width=4, height=6) == [(3, 0), (3, 1)]


def test_plot_positions_resamples_to_width():
    data = [float(i) for i in range(100)]
    pos = chart.plot_positions(data, width=10, height=11)
    assert len(pos) == 10
    assert pos[0] == (10, 0)
    assert pos[-1] == (0, 9)


def test_draw_chart_into_window():
    closes = [float(100 + (i % 7)) for i in range(60)]
    widget = chart.LineChart.for_series('AAPL', make_series(closes))
    win = FakeWindow(rows=30, cols=100)
    widget.draw(chart.Display(win))

    assert widget.width == 66
    top = win.row(0)
    assert top.startswith('┌  AAPL Daily Chart (1/3/2017 - 3/3/2017)  ')
    assert top.endswith('┐')
    assert win.row(19).startswith('└') and win.row(19).endswith('┘')
    assert '106.00' in win.row(1)
    assert '100.00' in win.row(16)
    assert win.row(18).lstrip('│ ').startswith('1/3/2017')
    assert '3/3/2017' in win.row(18)
    dots = win.dots()
    assert dots
    assert all(1 <= y <= 16 for y, _ in dots)
    assert all(x < 65 for _, x in dots)


def test_draw_line_color_is_bold():
    widget = chart.LineChart.for_series('AAPL', make_series([1.0, 2.0] * 20))
    win = FakeWindow()
    widget.draw(chart.Display(win, {'green': 0x200, 'white': 0x100}))
    attrs = {attr for (ch, attr) in win.cells.values() if ch == '+'}
    assert attrs == {0x200 | curses.A_BOLD}


def test_draw_clips_to_small_window():
    widget = chart.LineChart.for_series('AAPL', make_series([float(i) for i in range(200)]))
    win = FakeWindow(rows=10, cols=40)
    widget.draw(chart.Display(win))
    assert all(y < 10 and x < 40 for y, x in win.cells)


def test_event_loop_stops_on_any_key():
    win = FakeWindow(keys=[-1, curses.KEY_RESIZE, ord('x'), ord('y')])
    loop = chart.EventLoop()
    seen = []
    loop.handle(chart.EventLoop.RESIZE, lambda e: seen.append(e.path))
    loop.handle(chart.EventLoop.KEYBOARD, lambda e: (seen.append(e.key), loop.stop()))
    loop.loop(win)
    assert seen == ['/sys/wnd/resize', ord('x')]
    assert win.keys == [ord('y')]


def test_render_draws_and_waits_for_key():
    log = []
    win = FakeWindow(keys=[curses.KEY_RESIZE, ord(' ')])
    chart.render('AAPL', make_series([115.0, 116.25, 114.8, 117.1, 118.0] * 4), session=fake_session(win, log))
    assert log == ['enter', 'exit']
    assert win.refreshes == 2
    assert win.erased == 1
    assert win.keys == []


def test_render_releases_session_when_drawing_fails(monkeypatch):
    log = []

    def broken_draw(self, display):
        raise RuntimeError('draw failed')

    monkeypatch.setattr(chart.LineChart, 'draw', broken_draw)
    with pytest.raises(RuntimeError):
        chart.render('AAPL', make_series([1.0, 2.0]), session=fake_session(FakeWindow(), log))
    assert log == ['enter', 'exit']


class _Stream:
    def __init__(self, tty):
        self.tty = tty

    def isatty(self):
        return self.tty


def test_terminal_session_requires_tty():
    with pytest.raises(DisplayInitError):
        with chart.terminal_session(_Stream(False)):
            pass


def test_terminal_session_wraps_curses_failure(monkeypatch):
    def fail():
        raise curses.error('setupterm: could not find terminal')

    monkeypatch.setattr(chart.curses, 'initscr', fail)
    with pytest.raises(DisplayInitError):
        with chart.terminal_session(_Stream(True)):
            pass


def test_terminal_session_restores_terminal_on_error(monkeypatch):
    calls = []

    class Screen:
        def keypad(self, flag):
            calls.append(('keypad', flag))

    for name in ('noecho', 'cbreak', 'nocbreak', 'echo', 'endwin'):
        monkeypatch.setattr(chart.curses, name, lambda name=name: calls.append(name))
    monkeypatch.setattr(chart.curses, 'initscr', lambda: Screen())
    monkeypatch.setattr(chart.curses, 'curs_set', lambda visibility: calls.append('curs_set'))
    monkeypatch.setattr(chart.curses, 'has_colors', lambda: False)

    with pytest.raises(RuntimeError):
        with chart.terminal_session(_Stream(True)) as display:
            assert isinstance(display, chart.Display)
            raise RuntimeError('boom')

    assert calls[-4:] == [('keypad', False), 'nocbreak', 'echo', 'endwin']
