"""File and folder events of the vault."""
from events.base import FileEvent, FolderEvent


class FileOpenedEvent(FileEvent):
    event_code = "file-opened"
    event_title = "Opening a file"


class FileCreatedEvent(FileEvent):
    event_code = "file-created"
    event_title = "Creating a file"


class FileModifiedEvent(FileEvent):
    event_code = "file-modified"
    event_title = "Modifying a file"


class FileDeletedEvent(FileEvent):
    event_code = "file-deleted"
    event_title = "Deleting a file"


class FileRenamedEvent(FileEvent):
    event_code = "file-renamed"
    event_title = "Renaming a file"


class FileMovedEvent(FileEvent):
    event_code = "file-moved"
    event_title = "Moving a file"


class FolderCreatedEvent(FolderEvent):
    event_code = "folder-created"
    event_title = "Creating a folder"


class FolderDeletedEvent(FolderEvent):
    event_code = "folder-deleted"
    event_title = "Deleting a folder"


class FolderRenamedEvent(FolderEvent):
    event_code = "folder-renamed"
    event_title = "Renaming a folder"


class FolderMovedEvent(FolderEvent):
    event_code = "folder-moved"
    event_title = "Moving a folder"
