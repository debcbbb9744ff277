"""
Tests for the live status view.
"""

from conftest import at
from timers import watch

NOW = at(16)


class TestLoadState:
    """State collected for one redraw."""

    def test_idle(self, repo):
        state = watch.load_state(repo, now=NOW)
        assert state['current'] is None
        assert state['current_log_seconds'] == 0
        assert state['today_seconds'] == 0
        assert state['today_logs'] == 0

    def test_logging(self, repo_with_tasks):
        state = watch.load_state(repo_with_tasks, now=NOW)
        assert state['current'].id == 3
        assert state['current_log_seconds'] == 3600
        assert state['current_total_seconds'] == 3600
        assert state['today_logs'] >= 1
        assert state['today_tasks'] <= state['today_logs']


class TestRender:
    """Rendered output."""

    def test_render_idle(self, repo, capsys):
        watch.render(repo, now=NOW)
        out = capsys.readouterr().out
        assert 'TIMERS' in out
        assert 'You are not logging on any task.' in out
        assert 'TODAY' in out

    def test_render_logging(self, repo_with_tasks, capsys):
        watch.render(repo_with_tasks, now=NOW)
        out = capsys.readouterr().out
        assert '@3:' in out
        assert 'Support' in out
        assert '1h 0m 0s' in out

    def test_main_once(self, repo, capsys):
        assert watch.main(repo, once=True) == 0
        assert 'TIMERS' in capsys.readouterr().out
