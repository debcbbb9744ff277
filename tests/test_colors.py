"""
Tests for the colors module.
"""

from importlib import reload

import pytest


@pytest.fixture
def colors_module(monkeypatch):
    """Reload timers.colors under a given color setting, restoring it afterwards."""
    import timers.colors

    def load(enabled):
        if enabled:
            monkeypatch.setenv('FORCE_COLOR', '1')
        else:
            monkeypatch.delenv('FORCE_COLOR', raising=False)
            monkeypatch.setenv('NO_COLOR', '1')
        return reload(timers.colors)

    yield load

    monkeypatch.undo()
    reload(timers.colors)


class TestColorsDetection:
    """Test color detection logic."""

    def test_force_color_env(self, colors_module):
        module = colors_module(True)
        assert module._supports_color() is True

    def test_no_color_env(self, colors_module):
        module = colors_module(False)
        assert module._supports_color() is False


class TestColorsFormatting:
    """Test color formatting functions."""

    def test_format_status(self, colors_module):
        Colors = colors_module(True).Colors

        s = Colors.format_status('logging')
        assert 'logging' in s
        assert '\033[32m' in s  # Green

        s = Colors.format_status('stopped')
        assert 'stopped' in s
        assert '\033[2m' in s  # Dim

    def test_format_active_task(self, colors_module):
        Colors = colors_module(True).Colors

        task_id = Colors.format_task_id(3, active=True)
        assert '@3:' in task_id
        assert '\033[33m' in task_id  # Yellow

        name = Colors.format_task_name('Support', active=True)
        assert 'Support' in name
        assert '\033[31m' in name  # Red

    def test_inactive_task_plain(self, colors_module):
        Colors = colors_module(True).Colors
        assert Colors.format_task_id(3) == '@3:'
        assert Colors.format_task_name('Support') == 'Support'

    def test_colorize(self, colors_module):
        module = colors_module(True)

        result = module.colorize('test', module.Colors.GREEN)
        assert '\033[32m' in result
        assert 'test' in result
        assert result.endswith('\033[0m')


class TestColorsDisabled:
    """Test behavior when colors are disabled."""

    def test_no_ansi_codes(self, colors_module):
        module = colors_module(False)
        Colors = module.Colors

        assert Colors.format_status('logging') == 'logging'
        assert Colors.format_task_id(3, active=True) == '@3:'
        assert module.colorize('test', Colors.GREEN) == 'test'
        assert Colors.RESET == ''
