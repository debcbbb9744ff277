#!/usr/bin/env python3
"""
timers CLI - track time spent on tasks.

Usage:
    timers log "Task name"          # Create a task and start logging
    timers log @3 --at 09:30        # Resume task 3 from 09:30 today
    timers stop                     # Stop the current task
    timers status                   # Show the current task
    timers tasks --long             # List tasks
    timers report                   # Time logged per day this week
    timers timeline                 # Today's logs on a timeline
    timers export logs -o out.csv   # Export logs as CSV
    timers watch                    # Live status
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from typing import Optional

from timers import __version__, api
from timers.colors import Colors, colorize, status_str as _color_status
from timers.errors import (
    AlreadyLoggingError,
    StorageError,
    TaskNotFoundError,
    TaskValueError,
    TimeParseError,
)
from timers.export import EXPORT_FROM, EXPORT_TO, export_tasks
from timers.models import Task, utcnow
from timers.report import format_timeline_row, timeline, week_report
from timers.timeparse import format_duration, local_midnight, parse_time, to_local


# ============================================================================
# Helpers
# ============================================================================

def _parse_at(raw: Optional[str], default: Optional[datetime] = None) -> datetime:
    """Parse a --at/--from/--to value, falling back to ``default`` or now."""
    if raw is None:
        return default if default is not None else utcnow()
    parsed = parse_time(raw)
    if parsed is None:
        raise TimeParseError(raw)
    return parsed


def _parse_task_id(raw: str) -> int:
    # strips repeated @ too
    try:
        task_id = int(raw.lstrip('@'))
    except ValueError:
        raise TimeParseError(raw, what="Task ID")
    if task_id <= 0:
        raise TimeParseError(raw, what="Task ID")
    return task_id


def _format_task_line(task: Task) -> str:
    active = task.is_logging
    return f"{Colors.format_task_id(task.id, active)} {Colors.format_task_name(task.name, active)}"


def _print_status(task: Task):
    print(_format_task_line(task))
    print(f"status: {_color_status(task.status_text())}")
    print(f"time: {Colors.BOLD}{format_duration(task.duration())}{Colors.RESET}")


def _print_json(data):
    print(json.dumps(data, indent=2))


def user_input(prompt: str) -> str:
    try:
        return input(prompt)
    except EOFError:
        return 'n'


# ============================================================================
# Logging Commands
# ============================================================================

def _confirm_stop_current(repo, at: datetime, assume_yes: bool) -> bool:
    """Stop the task being logged, if any, after asking. False means abort."""
    current = api.get_current_log_task(repo=repo)
    if current is None:
        return True

    print(f"Currently logging on task {_format_task_line(current)}")
    if not assume_yes:
        answer = user_input("Do you want to start the new task? [y/n] ").strip().lower()
        if answer in ('n', 'no'):
            print("aborting")
            return False

    api.stop_current_task_at(at, repo=repo)
    return True


def cmd_log(args, repo, use_json):
    """Start logging on a new or existing task."""
    raw_task = args.task
    at = _parse_at(args.at)

    if raw_task.startswith('@'):
        task_id = _parse_task_id(raw_task)
        # every check runs before the current task is stopped
        api.check_log_task_at(task_id, at, repo=repo, replace_current=True)
        if not _confirm_stop_current(repo, at, args.yes):
            return 1
        task = api.log_task_at(task_id, at, repo=repo)
    else:
        if not raw_task.strip():
            print("✗ Cannot create empty task.")
            return 1
        if not _confirm_stop_current(repo, at, args.yes):
            return 1
        task = api.create_log_task_at(raw_task, at, repo=repo)

    if use_json:
        _print_json(task.to_dict())
    else:
        _print_status(task)
    return 0


def cmd_stop(args, repo, use_json):
    """Stop logging on the current task."""
    at = _parse_at(args.at)
    if api.get_current_log_task(repo=repo) is None:
        print("✗ Cannot stop because you're not logging on any task.")
        return 1
    task = api.stop_current_task_at(at, repo=repo)

    if use_json:
        _print_json(task.to_dict())
    else:
        _print_status(task)
    return 0


def cmd_status(args, repo, use_json):
    """Show the task currently being logged."""
    task = api.get_current_log_task(repo=repo)
    if use_json:
        _print_json(task.to_dict() if task else None)
    elif task is None:
        print("You are not logging on any task.")
    else:
        _print_status(task)
    return 0


# ============================================================================
# Listing and Reports
# ============================================================================

def cmd_tasks(args, repo, use_json):
    """List all tasks."""
    tasks = api.get_all_tasks(repo=repo, skip_corrupt=True)

    if use_json:
        _print_json([tasks[task_id].to_dict() for task_id in sorted(tasks)])
        return 0

    if not tasks:
        print("No tasks found")

    for task_id in sorted(tasks):
        task = tasks[task_id]
        if args.long:
            print(_format_task_line(task))
            print(f"  status: {_color_status(task.status_text())}")
            print(f"  duration: {format_duration(task.duration())}")
            if task.last_log is not None:
                last = to_local(task.last_log.start).strftime('%a %b %d %H:%M')
            else:
                last = 'never'
            print(f"  last log: {last}")
        else:
            print(f"{_format_task_line(task)} [{_color_status(task.status_text())}]")

    for error in repo.corrupt_files:
        print(colorize(f"⚠ Skipped {error}", Colors.YELLOW))
    return 0


def cmd_report(args, repo, use_json):
    """Time logged per day of the week."""
    rows, total = week_report(repo, weeks_ago=args.week)

    if use_json:
        _print_json({
            'days': [row.to_dict() for row in rows],
            'total': total.to_dict(),
        })
        return 0

    if not args.plain:
        print(f"{'DAY':<12} {'TIME LOGGED':<14} TASKS")
        print("-" * 34)

    for row in rows:
        label = f"{row.label:<12}"
        label = colorize(label, Colors.RED if row.weekend else Colors.GREEN)
        print(f"{label} {format_duration(row.duration):<14} {row.task_count}")

    if not args.plain:
        print("-" * 34)
        print(f"{'Total':<12} {format_duration(total.duration):<14} {total.task_count}")
    return 0


def cmd_timeline(args, repo, use_json):
    """Show logs inside a window on a timeline."""
    now = utcnow()
    start = _parse_at(args.from_, default=local_midnight(to_local(now).date()))
    end = _parse_at(args.to, default=now)
    if end <= start:
        print("✗ The end of the window must be after its start.")
        return 1

    rows = timeline(repo, start, end, width=args.width, now=now)

    if use_json:
        _print_json([row.to_dict(now) for row in rows])
        return 0

    if not rows:
        print("No logs in this window.")
        return 0

    for row in rows:
        print(format_timeline_row(row, now=now))

    total = sum((row.log.duration(now) for row in rows), timedelta(0))
    print("-" * (args.width + 14))
    print(f"Total: {format_duration(total)}")
    return 0


def cmd_export(args, repo, use_json):
    """Export tasks or logs as CSV."""
    start = _parse_at(args.from_, default=EXPORT_FROM)
    end = _parse_at(args.to, default=EXPORT_TO)
    tasks = api.get_all_tasks_between(start, end, repo=repo)

    if args.output:
        try:
            with open(args.output, 'w', newline='', encoding='utf-8') as out:
                rows = export_tasks(out, tasks, args.object, args.delimiter)
        except OSError as e:
            print(f"✗ Impossible to write file '{args.output}': {e}")
            return 1
        print(f"✓ Exported {rows} {args.object} to {args.output}", file=sys.stderr)
    else:
        export_tasks(sys.stdout, tasks, args.object, args.delimiter)
    return 0


def cmd_watch(args, repo, use_json):
    from timers import watch
    return watch.main(
        repo,
        refresh=args.refresh,
        once=args.once,
        no_alt_screen=args.no_alt_screen,
    )


COMMANDS = {
    'log': cmd_log,
    'stop': cmd_stop,
    'status': cmd_status,
    'tasks': cmd_tasks,
    'report': cmd_report,
    'timeline': cmd_timeline,
    'export': cmd_export,
    'watch': cmd_watch,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='timers',
        description='timers - Track time spent on tasks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Time formats:
  HH:MM, HH:MM:SS            today, local time
  YYYY-MM-DD HH:MM[:SS]      local time
  +H:M, -H:M, -MINUTES       relative to now (write --at=-H:M)
  y<time>                    one day earlier (yy = two days)

Examples:
  timers log "Write report"       Start logging on a new task
  timers log @2 --at 9:00         Resume task 2 from 9:00 today
  timers stop --at -15            Stop 15 minutes ago
'''
    )
    parser.add_argument('--version', action='version', version=f'timers {__version__}')
    parser.add_argument('--dir', default=None,
                        help=f'Task directory (default: ${api.DIR_ENV_VAR} or ~/.timers)')
    parser.add_argument('--json', action='store_true', help='Output in JSON format')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command')

    # log
    log_p = subparsers.add_parser('log', help='Log time on a task')
    log_p.add_argument('task', help='Name of a new task, or @ID of an existing task to resume')
    log_p.add_argument('--at', help='Start time (default: now)')
    log_p.add_argument('--yes', '-y', action='store_true',
                       help='Stop the current task without asking')

    # stop
    stop_p = subparsers.add_parser('stop', help='Stop logging on the current task')
    stop_p.add_argument('--at', help='Stop time (default: now)')

    # status
    subparsers.add_parser('status', help='Show the task being logged')

    # tasks
    tasks_p = subparsers.add_parser('tasks', help='List tasks')
    tasks_p.add_argument('--long', '-l', action='store_true', help='Show durations and last log')

    # report
    report_p = subparsers.add_parser('report', help='Time logged per day of the week')
    report_p.add_argument('--week', '-w', type=int, default=0,
                          help='Weeks back from the current one (default: 0)')
    report_p.add_argument('--plain', action='store_true', help='Rows only, no header or total')

    # timeline
    timeline_p = subparsers.add_parser('timeline', help='Show logs on a timeline')
    timeline_p.add_argument('--from', dest='from_', help='Window start (default: today 00:00)')
    timeline_p.add_argument('--to', help='Window end (default: now)')
    timeline_p.add_argument('--width', type=int, default=40, help='Bar width in characters')

    # export
    export_p = subparsers.add_parser('export', help='Export tasks or logs as CSV')
    export_p.add_argument('object', choices=['tasks', 'logs'])
    export_p.add_argument('--from', dest='from_', help='Only tasks with logs after this time')
    export_p.add_argument('--to', help='Only tasks with logs before this time')
    export_p.add_argument('--delimiter', '-d', default=',', help='Field delimiter (default: ,)')
    export_p.add_argument('--output', '-o', help='Output file (default: stdout)')

    # watch
    watch_p = subparsers.add_parser('watch', help='Live status')
    watch_p.add_argument('--refresh', type=float, default=3.0, help='Refresh interval in seconds')
    watch_p.add_argument('--once', action='store_true', help='Render once and exit')
    watch_p.add_argument('--no-alt-screen', action='store_true', help='Disable alternate screen buffer')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    use_json = args.json
    verbose = args.verbose

    if args.command == 'export' and len(args.delimiter) != 1:
        print("✗ The delimiter must be a single character")
        sys.exit(1)

    try:
        repo = api.get_repo(args.dir)
        code = COMMANDS[args.command](args, repo, use_json)
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
    except TimeParseError as e:
        print(f"✗ {e}")
        sys.exit(1)
    except AlreadyLoggingError as e:
        print(f"✗ {e}")
        print("  Stop it first with 'timers stop'")
        sys.exit(1)
    except TaskValueError as e:
        print(f"✗ {e}")
        sys.exit(1)
    except TaskNotFoundError as e:
        print(f"✗ {e}")
        sys.exit(1)
    except StorageError as e:
        print(f"✗ Storage error: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(2)

    sys.exit(code or 0)


if __name__ == '__main__':
    main()
