"""
Live status view.

Re-reads the task directory every few seconds and redraws the current task,
its running time and today's totals.

Usage:
    timers watch                 # refresh every 3 seconds
    timers watch --refresh 1     # custom refresh rate
    timers watch --once          # single snapshot
"""

import logging
import os
import sys
import time
from datetime import datetime, timedelta
from typing import Optional

from timers import query
from timers.colors import Colors
from timers.errors import StorageError
from timers.models import utcnow
from timers.repo import Repo
from timers.timeparse import format_duration, local_midnight, to_local

logger = logging.getLogger(__name__)


def clear():
    os.system('clear' if os.name == 'posix' else 'cls')


def load_state(repo: Repo, now: Optional[datetime] = None) -> dict:
    """Collect everything the view shows in one pass over the repository."""
    now = now or utcnow()
    today = to_local(now).date()
    day_start = local_midnight(today)
    day_end = local_midnight(today + timedelta(days=1))

    current = repo.find_open_task()
    today_pairs = query.get_all_logs_between(repo, day_start, day_end, now)

    return {
        'current': current,
        'current_log_seconds': int(current.last_log.duration(now).total_seconds()) if current else 0,
        'current_total_seconds': int(current.duration(now).total_seconds()) if current else 0,
        'today_seconds': int(query.get_total_duration(repo, day_start, day_end, now).total_seconds()),
        'today_tasks': len({task.id for task, _ in today_pairs}),
        'today_logs': len(today_pairs),
    }


def render(repo: Repo, now: Optional[datetime] = None):
    """Render the status view."""
    state = load_state(repo, now)

    print(f"{Colors.BOLD}{'=' * 50}{Colors.RESET}")
    print(f"{Colors.BOLD}  TIMERS{Colors.RESET}")
    print(f"{Colors.BOLD}{'=' * 50}{Colors.RESET}")
    print()

    current = state['current']
    if current is None:
        print(f"   {Colors.DIM}You are not logging on any task.{Colors.RESET}")
    else:
        print(f"   {Colors.format_task_id(current.id, True)} {Colors.format_task_name(current.name, True)}")
        print(f"   this log: {Colors.BOLD}{format_duration(timedelta(seconds=state['current_log_seconds']))}{Colors.RESET}")
        print(f"   task total: {format_duration(timedelta(seconds=state['current_total_seconds']))}")
    print()

    print(f"{Colors.BOLD}TODAY{Colors.RESET}")
    print(f"   Logged: {Colors.GREEN}{format_duration(timedelta(seconds=state['today_seconds']))}{Colors.RESET}")
    print(f"   Tasks: {state['today_tasks']}, logs: {state['today_logs']}")
    print()

    stamp = datetime.now().strftime("%H:%M:%S")
    print(f"{Colors.DIM}{'-' * 50}{Colors.RESET}")
    print(f"{Colors.DIM}Updated: {stamp} | Dir: {repo.path} | Ctrl+C to exit{Colors.RESET}")


def enter_alt_screen():
    """Enter alternate screen buffer (preserves scrollback)."""
    if Colors._enabled:
        sys.stdout.write('\033[?1049h')
        sys.stdout.write('\033[H')
        sys.stdout.flush()


def exit_alt_screen():
    """Exit alternate screen buffer (restores scrollback)."""
    if Colors._enabled:
        sys.stdout.write('\033[?1049l')
        sys.stdout.flush()


def main(repo: Repo, refresh: float = 3.0, once: bool = False, no_alt_screen: bool = False) -> int:
    """
    Run the status view.

    Args:
        repo: Repository to watch
        refresh: Refresh interval in seconds
        once: Render a single snapshot and exit
        no_alt_screen: Disable the alternate screen buffer

    Returns:
        Process exit code
    """
    if once:
        render(repo)
        return 0

    use_alt_screen = not no_alt_screen
    try:
        if use_alt_screen:
            enter_alt_screen()
        while True:
            if use_alt_screen:
                # Move cursor to top instead of clearing
                sys.stdout.write('\033[H\033[J')
                sys.stdout.flush()
            else:
                clear()
            try:
                render(repo)
            except StorageError as e:
                # keep polling, the directory may come back
                logger.warning(f"Cannot read tasks: {e}")
                print(f"{Colors.RED}✗ {e}{Colors.RESET}")
            time.sleep(refresh)
    except KeyboardInterrupt:
        pass
    finally:
        if use_alt_screen:
            exit_alt_screen()
        print(f"{Colors.DIM}Watch stopped.{Colors.RESET}")
    return 0
