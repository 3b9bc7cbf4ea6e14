import os
import json
import logging
from datetime import datetime

from core.errors import IOFailure

logger = logging.getLogger(__name__)

SETTINGS_FILE = "ASM-ERSM.json"
NOTES_FILE = "backupnotes.json"
DEFAULT_BACKUP_DIRNAME = "Backup"
BACKUP_DATE_FORMAT = "%m/%d/%Y, %H:%M"


class JsonStore:
    """A single JSON document on disk, created from defaults on first load.

    Nothing is cached between calls: every load() reads the file again and
    every save() overwrites it completely. There is no locking, so only one
    instance of the tool should touch the file at a time.
    """

    def __init__(self, path, default_factory):
        self.path = os.path.abspath(path)
        self._default_factory = default_factory

    def exists(self):
        return os.path.exists(self.path)

    def load(self):
        """Load the document, writing the defaults first if the file is missing"""
        if not self.exists():
            logger.info("Creating %s with defaults", self.path)
            self.save(self._default_factory())

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                doc = json.load(f)
        except json.JSONDecodeError as e:
            raise IOFailure(f"Corrupt file {self.path}: {str(e)}") from e
        except OSError as e:
            raise IOFailure(f"Failed to read {self.path}: {str(e)}") from e

        if not isinstance(doc, dict):
            raise IOFailure(f"Corrupt file {self.path}: expected a JSON object")
        return doc

    def save(self, doc):
        """Overwrite the file with doc"""
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(doc, f, indent=4)
        except OSError as e:
            raise IOFailure(f"Failed to save {self.path}: {str(e)}") from e


class SettingsStore(JsonStore):
    def __init__(self, save_root, save_id_resolver):
        self.save_root = save_root
        super().__init__(os.path.join(save_root, SETTINGS_FILE), self._defaults)
        self._resolve_save_id = save_id_resolver

    def _defaults(self):
        return {
            "backupLocation": os.path.join(self.save_root, DEFAULT_BACKUP_DIRNAME),
            "numbers": self._resolve_save_id(),
        }

    def backup_location(self, settings):
        location = settings.get("backupLocation") or os.path.join(self.save_root, DEFAULT_BACKUP_DIRNAME)
        return os.path.normpath(location)


def parse_backup_date(value):
    try:
        return datetime.strptime(value, BACKUP_DATE_FORMAT)
    except (TypeError, ValueError):
        return datetime.min


class NotesStore(JsonStore):
    def __init__(self, save_root):
        super().__init__(os.path.join(save_root, NOTES_FILE), lambda: {"notes": []})

    def load(self):
        doc = super().load()
        if not isinstance(doc.get("notes"), list):
            doc["notes"] = []
        return doc

    @staticmethod
    def find(doc, name):
        for record in doc["notes"]:
            if record.get("name") == name:
                return record
        return None

    @staticmethod
    def add(doc, record):
        """Insert record and keep the list newest-first"""
        # Newest goes in front so records from the same minute stay newest-first
        notes = [record] + doc["notes"]
        doc["notes"] = sorted(notes, key=lambda r: parse_backup_date(r.get("backupdate")), reverse=True)
        return doc

    @staticmethod
    def remove(doc, name):
        before = len(doc["notes"])
        doc["notes"] = [r for r in doc["notes"] if r.get("name") != name]
        return before - len(doc["notes"])
