import os
import shutil
import logging
import tempfile
from collections import deque
from datetime import datetime

from core.errors import (
    BackupNotFound, BackupAlreadyExists, InvalidBackupName, InvalidBackupLocation, IOFailure
)
from core.paths import default_save_root, find_save_folder
from core.stores import SettingsStore, NotesStore, BACKUP_DATE_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "No description provided"
QUICK_BACKUP_DESCRIPTION = "Quick backup"
SAFETY_PREFIX = "__restore_safety_"
SAFETY_DESCRIPTION = "Automatic backup taken before restore"
STAGING_PREFIX = ".ersm_restore_"
COPY_PREFIX = ".ersm_copy_"
EVENT_LOG_FILE = "ersm_log.txt"
INVALID_NAME_CHARS = '<>:"/\\|?*'


class SaveBackupCore:
    """Create, restore, delete and list backups of the active save folder.

    The stores are re-read at the start of every operation and the active
    save folder is resolved again each time, so a game update that changes
    the save folder id is picked up without restarting the tool.
    """

    def __init__(self, save_root=None, clock=datetime.now):
        self.save_root = os.path.normpath(save_root or default_save_root())
        self.clock = clock
        self.settings = SettingsStore(self.save_root, lambda: find_save_folder(self.save_root))
        self.notes = NotesStore(self.save_root)
        self.event_log_path = os.path.join(self.save_root, EVENT_LOG_FILE)

    def _prepare(self):
        """Resolve the active save folder and load settings, refreshing a stale id"""
        save_id = find_save_folder(self.save_root)
        settings = self.settings.load()
        if settings.get("numbers") != save_id:
            logger.info("Save folder id changed from %s to %s", settings.get("numbers"), save_id)
            settings["numbers"] = save_id
            self.settings.save(settings)
        backup_root = self.settings.backup_location(settings)
        self._check_backup_location(backup_root, save_id)
        return save_id, backup_root

    def _check_backup_location(self, backup_root, save_id):
        """Refuse a backup folder that is the save root or lies inside the active save"""
        def real(path):
            return os.path.normcase(os.path.realpath(path))

        location = real(backup_root)
        save_dir = real(os.path.join(self.save_root, save_id))
        if location == real(self.save_root):
            raise InvalidBackupLocation(f"Backup location cannot be the save folder itself: {backup_root}")
        try:
            inside = os.path.commonpath([location, save_dir]) == save_dir
        except ValueError:
            inside = False
        if inside:
            raise InvalidBackupLocation(f"Backup location cannot be inside the active save: {backup_root}")

    @staticmethod
    def _validate_name(name):
        name = (name or "").strip()
        if not name:
            raise InvalidBackupName("Backup name cannot be empty or whitespace")
        if any(char in name for char in INVALID_NAME_CHARS) or name in (".", ".."):
            raise InvalidBackupName(f"Backup name cannot contain any of these characters: {INVALID_NAME_CHARS}")
        if name.startswith(SAFETY_PREFIX):
            raise InvalidBackupName(f"Names starting with '{SAFETY_PREFIX}' are reserved")
        if name.isdigit():
            raise InvalidBackupName("Backup name cannot be only digits")
        return name

    @staticmethod
    def _backup_path(backup_root, name):
        name = (name or "").strip()
        if not name or os.path.basename(name) != name or name in (".", ".."):
            raise BackupNotFound(name)
        path = os.path.join(backup_root, name)
        if not os.path.isdir(path):
            raise BackupNotFound(name)
        return path

    @staticmethod
    def _discard(path):
        if os.path.exists(path):
            shutil.rmtree(path, ignore_errors=True)

    # ========== BACKUP/RESTORE METHODS ==========

    def create_backup(self, name, description=""):
        """Copy the active save into the backup folder under name"""
        return self._create(self._validate_name(name), description)

    def quick_backup(self):
        """Create a backup named after the current time"""
        name = f"backup_{self.clock().strftime('%Y%m%d_%H%M%S')}"
        return self.create_backup(name, QUICK_BACKUP_DESCRIPTION)

    def _create(self, name, description):
        save_id, backup_root = self._prepare()
        record = {
            "name": name,
            "description": (description or "").strip() or DEFAULT_DESCRIPTION,
            "backupdate": self.clock().strftime(BACKUP_DATE_FORMAT),
        }

        target = os.path.join(backup_root, name)
        if os.path.exists(target):
            raise BackupAlreadyExists(name)

        copy_path = None
        try:
            os.makedirs(backup_root, exist_ok=True)
            copy_path = tempfile.mkdtemp(prefix=COPY_PREFIX, dir=backup_root)
            shutil.copytree(os.path.join(self.save_root, save_id), copy_path, dirs_exist_ok=True)
            os.rename(copy_path, target)
        except OSError as e:
            logger.error("Backup '%s' failed: %s", name, e)
            if copy_path:
                self._discard(copy_path)
            raise IOFailure(f"Backup failed: {str(e)}") from e

        try:
            notes = self.notes.load()
            NotesStore.remove(notes, name)
            NotesStore.add(notes, record)
            self.notes.save(notes)
        except IOFailure:
            self._discard(target)
            raise

        self.log_backup_event("create", name, record["description"])
        return record

    def restore_backup(self, name):
        """Replace the active save with the named backup"""
        save_id, backup_root = self._prepare()
        source = self._backup_path(backup_root, name)

        safety_name = f"{SAFETY_PREFIX}{self.clock().strftime('%Y%m%d_%H%M%S')}"
        self._create(safety_name, SAFETY_DESCRIPTION)

        save_dir = os.path.join(self.save_root, save_id)
        staging = None
        try:
            staging = tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.save_root)
            shutil.copytree(source, staging, dirs_exist_ok=True)
            shutil.rmtree(save_dir)
            os.rename(staging, save_dir)
        except OSError as e:
            logger.error("Restore of '%s' failed: %s", name, e)
            if staging:
                self._discard(staging)
            raise IOFailure(
                f"Restore failed: {str(e)}. Your previous save is kept as backup '{safety_name}'"
            ) from e

        self.log_backup_event("restore", os.path.basename(source), save_dir)
        try:
            self._remove(backup_root, safety_name)
        except IOFailure as e:
            logger.warning("Restore succeeded but safety backup '%s' was left in place: %s", safety_name, e)

    def delete_backup(self, name):
        """Delete a backup directory and its notes record"""
        _, backup_root = self._prepare()
        path = self._backup_path(backup_root, name)
        self._remove(backup_root, os.path.basename(path))
        self.log_backup_event("delete", os.path.basename(path), path)

    def _remove(self, backup_root, name):
        try:
            shutil.rmtree(os.path.join(backup_root, name))
        except OSError as e:
            logger.error("Deleting '%s' failed: %s", name, e)
            raise IOFailure(f"Deletion failed: {str(e)}") from e

        notes = self.notes.load()
        NotesStore.remove(notes, name)
        self.notes.save(notes)

    def list_backups(self):
        """Get backup records, newest first"""
        _, backup_root = self._prepare()
        return [
            {
                "name": record.get("name", ""),
                "description": record.get("description", ""),
                "backupdate": record.get("backupdate", ""),
                "exists": os.path.isdir(os.path.join(backup_root, record.get("name", ""))),
            }
            for record in self.notes.load()["notes"]
            if record.get("name")
        ]

    def prune_missing(self):
        """Drop records whose backup directory no longer exists"""
        _, backup_root = self._prepare()
        notes = self.notes.load()
        kept, removed = [], []
        for record in notes["notes"]:
            name = record.get("name")
            if name and os.path.isdir(os.path.join(backup_root, name)):
                kept.append(record)
            else:
                removed.append(name or "(unnamed)")

        if removed:
            notes["notes"] = kept
            self.notes.save(notes)
            for name in removed:
                self.log_backup_event("prune", name, "directory missing")
        return removed

    def get_backup_location(self):
        return self._prepare()[1]

    def get_current_save(self):
        return os.path.join(self.save_root, find_save_folder(self.save_root))

    # ========== EVENT LOG ==========

    def log_backup_event(self, action_type, name, detail):
        """Append one line to the event log in the save root"""
        timestamp = self.clock().strftime('%Y-%m-%d %H:%M:%S')
        try:
            with open(self.event_log_path, "a", encoding="utf-8") as log:
                log.write(f"[{timestamp}] {action_type.upper()}: {name} | {detail}\n")
        except OSError as e:
            logger.warning("Failed to log backup event: %s", e)

    def read_event_log(self, limit=50):
        if not os.path.exists(self.event_log_path):
            return []
        try:
            with open(self.event_log_path, "r", encoding="utf-8") as log:
                return [line.rstrip("\n") for line in deque(log, maxlen=limit)]
        except OSError as e:
            raise IOFailure(f"Failed to read event log: {str(e)}") from e
