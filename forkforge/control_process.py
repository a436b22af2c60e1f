# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    control_process.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# control_process.py
"""
Pause, resume or stop a running ff_sync.py by creating or deleting flag files.

Examples:
- Pause the sync loop:  python -m forkforge.control_process sync pause
- Resume it:            python -m forkforge.control_process sync resume
- Stop it:              python -m forkforge.control_process sync stop
"""
import argparse
import os

from forkforge.utils import flag_file


def main():
    parser = argparse.ArgumentParser(description="Control long-running ForkForge processes via flag files.")
    parser.add_argument("process_name", type=str, help="The name of the process to control (e.g., 'sync').")
    parser.add_argument("action", choices=['pause', 'resume', 'stop'], help="The action to perform.")
    args = parser.parse_args()

    if args.action == 'resume':
        file_name = flag_file(args.process_name, "pause")
        if not os.path.exists(file_name):
            print(f"Process '{args.process_name}' is not currently paused (no pause flag found).")
            return
        try:
            os.remove(file_name)
            print(f"'{file_name}' removed. Process '{args.process_name}' will resume.")
        except OSError as e:
            print(f"Error removing file '{file_name}': {e}")
        return

    file_name = flag_file(args.process_name, args.action)
    try:
        with open(file_name, 'w'):
            pass
        print(f"'{file_name}' created. Process '{args.process_name}' will {args.action}.")
    except OSError as e:
        print(f"Error creating file '{file_name}': {e}")


if __name__ == "__main__":
    main()
