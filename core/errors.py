class BackupError(Exception):
    """Base class for every error the backup manager reports to the user"""


class BackupNotFound(BackupError):
    def __init__(self, name):
        super().__init__(f"Backup not found: {name}")
        self.name = name


class BackupAlreadyExists(BackupError):
    def __init__(self, name):
        super().__init__(f"'{name}' already exists. Use a unique name.")
        self.name = name


class InvalidBackupName(BackupError):
    pass


class OperationCancelled(BackupError):
    def __init__(self, message="Operation cancelled."):
        super().__init__(message)


class SaveFolderNotFound(BackupError):
    pass


class AmbiguousSaveFolder(BackupError):
    def __init__(self, save_root, candidates):
        super().__init__(
            f"Found {len(candidates)} save folders in {save_root} "
            f"({', '.join(candidates)}); expected exactly one"
        )
        self.candidates = candidates


class IOFailure(BackupError):
    """Filesystem or metadata file failure; the operation was aborted"""


class InvalidBackupLocation(BackupError):
    pass
