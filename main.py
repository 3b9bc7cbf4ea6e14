import os
import sys
import logging
import argparse

from core.backup_manager import SaveBackupCore
from core.errors import BackupError, OperationCancelled

__version__ = "1.0"

COMMANDS = ["backup", "list", "help", "prune", "log", "gui"]

USAGE = """Elden Ring Save Manager v{version}

Usage: ersm [command]

Commands:
  backup   Create a quick backup named after the current time
  list     List all backups, newest first
  prune    Forget backups whose folder was deleted by hand
  log      Show recent backup events
  gui      Open the desktop window
  help     Show this message

Run without a command to open the interactive menu.

Environment:
  ERSM_SAVE_ROOT   Use this folder instead of the game's save folder
  ERSM_DEBUG       Print debug logging
"""


def configure_logging():
    level = logging.DEBUG if os.environ.get("ERSM_DEBUG") else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def print_usage():
    print(USAGE.format(version=__version__))


def print_backups(backups):
    print("\nAvailable Backups:")
    print("-----------------")
    if not backups:
        print("No backups found.")
        return

    for i, backup in enumerate(backups, 1):
        missing = "" if backup["exists"] else "  (folder missing)"
        print(f"{i}. {backup['name']}{missing}")
        print(f"   Date: {backup['backupdate']}")
        print(f"   Description: {backup['description']}")
        print()


def ask(prompt):
    """Read a line of input; an empty answer cancels the operation"""
    try:
        answer = input(prompt).strip()
    except EOFError:
        raise OperationCancelled()
    if not answer:
        raise OperationCancelled()
    return answer


def confirm(prompt):
    if ask(f"{prompt} (y/n): ").lower() != "y":
        raise OperationCancelled()


def pick_backup(core, action):
    """Let the user choose a backup by name or by its list number"""
    backups = core.list_backups()
    print_backups(backups)
    if not backups:
        raise OperationCancelled("Nothing to " + action + ".")

    choice = ask(f"Enter the backup name or number to {action}: ")
    if choice.isdigit():
        index = int(choice)
        if 1 <= index <= len(backups):
            return backups[index - 1]["name"]
    return choice


# ========== INTERACTIVE MENU ACTIONS ==========

def menu_create(core):
    name = ask("Enter a name for the backup: ")
    try:
        description = input("Enter a description (optional): ")
    except EOFError:
        raise OperationCancelled()
    record = core.create_backup(name, description)
    print(f"Backup '{record['name']}' created successfully ✅")


def menu_restore(core):
    name = pick_backup(core, "restore")
    confirm(f"This will replace your current save with '{name}'. Are you sure?")
    core.restore_backup(name)
    print(f"Backup '{name}' restored successfully ✅")


def menu_delete(core):
    name = pick_backup(core, "delete")
    confirm(f"Permanently delete '{name}'?")
    core.delete_backup(name)
    print(f"Backup '{name}' deleted ✅")


def show_prune(core):
    removed = core.prune_missing()
    if removed:
        print(f"Removed {len(removed)} orphaned record(s): {', '.join(removed)}")
    else:
        print("Every record has its backup folder.")


def show_log(core):
    lines = core.read_event_log()
    if not lines:
        print("No backup events logged yet.")
    for line in lines:
        print(line)


def interactive_menu(core):
    print("================================================")
    print(" Elden Ring Save Manager")
    print("================================================")

    actions = {
        "1": lambda: menu_create(core),
        "2": lambda: menu_restore(core),
        "3": lambda: menu_delete(core),
        "4": lambda: print_backups(core.list_backups()),
        "5": lambda: show_prune(core),
        "6": lambda: show_log(core),
        "h": print_usage,
    }

    while True:
        print("\nOptions:")
        print("1. Create Backup")
        print("2. Restore Backup")
        print("3. Delete Backup")
        print("4. List Backups")
        print("5. Prune Missing Backups")
        print("6. View Log")
        print("H. Help")
        print("Q. Exit")

        try:
            choice = input("\nEnter your choice: ").strip().lower()
        except EOFError:
            choice = "q"

        if choice == "q":
            print("Goodbye!")
            return
        if choice not in actions:
            print("Invalid choice, please try again.")
            continue

        try:
            actions[choice]()
        except OperationCancelled as e:
            print(str(e))
        except BackupError as e:
            print(f"❌ {str(e)}")


def launch_gui(core):
    from ui.gui_interface import BackupGUI

    BackupGUI(core).run()


def main(argv=None):
    configure_logging()
    parser = argparse.ArgumentParser(prog="ersm", add_help=False)
    parser.add_argument("command", nargs="?", choices=COMMANDS)
    args = parser.parse_args(argv)

    if args.command == "help":
        print_usage()
        return 0

    core = SaveBackupCore()
    try:
        if args.command is None:
            interactive_menu(core)
        elif args.command == "backup":
            record = core.quick_backup()
            print(f"Backup '{record['name']}' created successfully ✅")
        elif args.command == "list":
            print_backups(core.list_backups())
        elif args.command == "prune":
            show_prune(core)
        elif args.command == "log":
            show_log(core)
        elif args.command == "gui":
            launch_gui(core)
    except BackupError as e:
        print(f"❌ {str(e)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
