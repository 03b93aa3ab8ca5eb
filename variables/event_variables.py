"""{{event_*}} variables: only resolvable while a shell command runs because of an event."""
from pathlib import Path

from variables.base import BaseVariable, Parameter, VariableContext, VariableError
from variables.file_variables import (
    PATH_MODE,
    extension_value,
    folder_name_value,
    path_value,
    read_front_matter,
    read_text,
    tags_value,
    yaml_content_value,
    yaml_value,
)

FILE_EVENTS = (
    "file-opened",
    "file-created",
    "file-modified",
    "file-deleted",
    "file-renamed",
    "file-moved",
)
FOLDER_EVENTS = ("folder-created", "folder-deleted", "folder-renamed", "folder-moved")
OLD_FILE_EVENTS = ("file-renamed", "file-moved")
OLD_FOLDER_EVENTS = ("file-moved", "folder-renamed", "folder-moved")


class EventVariable(BaseVariable):
    always_available = False
    supported_event_codes: tuple[str, ...] = ()

    def check_availability(self, context: VariableContext) -> None:
        event = context.event
        if event is None or event.event_code not in self.supported_event_codes:
            raise VariableError(
                "This variable can only be used during events: "
                + ", ".join(self.supported_event_codes)
            )

    def get_availability_text(self) -> str:
        return "Only available in events: " + ", ".join(self.supported_event_codes) + "."


class EventFileVariable(EventVariable):
    supported_event_codes = FILE_EVENTS

    @staticmethod
    def get_event_file(context: VariableContext) -> Path:
        return context.event.file  # type: ignore[union-attr]


class EventTitleVariable(EventFileVariable):
    variable_name = "event_title"

    async def _get_value(self, context, arguments):
        return self.get_event_file(context).stem


class EventFileNameVariable(EventFileVariable):
    variable_name = "event_file_name"

    async def _get_value(self, context, arguments):
        return self.get_event_file(context).name


class EventFileExtensionVariable(EventFileVariable):
    variable_name = "event_file_extension"
    parameters = (Parameter("dot", required=True, options=("with-dot", "no-dot")),)

    async def _get_value(self, context, arguments):
        return extension_value(self.get_event_file(context), arguments["dot"])


class EventFilePathVariable(EventFileVariable):
    variable_name = "event_file_path"
    parameters = (PATH_MODE,)

    async def _get_value(self, context, arguments):
        return path_value(self.get_event_file(context), arguments["mode"], context)


class EventNoteContentVariable(EventFileVariable):
    variable_name = "event_note_content"

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_event_file(context))
        return front_matter.body


class EventTagsVariable(EventFileVariable):
    variable_name = "event_tags"
    parameters = (Parameter("separator", required=True),)

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_event_file(context))
        return tags_value(front_matter, arguments["separator"])


class EventYamlValueVariable(EventFileVariable):
    variable_name = "event_yaml_value"
    parameters = (Parameter("property_name", required=True),)

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_event_file(context))
        return yaml_value(front_matter, arguments["property_name"])


class EventFolderNameVariable(EventVariable):
    variable_name = "event_folder_name"
    supported_event_codes = FILE_EVENTS + FOLDER_EVENTS

    async def _get_value(self, context, arguments):
        return folder_name_value(context.event.folder, context)


class EventFolderPathVariable(EventVariable):
    variable_name = "event_folder_path"
    supported_event_codes = FILE_EVENTS + FOLDER_EVENTS
    parameters = (PATH_MODE,)

    async def _get_value(self, context, arguments):
        return path_value(context.event.folder, arguments["mode"], context)


class EventOldFileNameVariable(EventVariable):
    variable_name = "event_old_file_name"
    supported_event_codes = OLD_FILE_EVENTS

    async def _get_value(self, context, arguments):
        return context.event.old_path.name


class EventOldFilePathVariable(EventVariable):
    variable_name = "event_old_file_path"
    supported_event_codes = OLD_FILE_EVENTS
    parameters = (PATH_MODE,)

    async def _get_value(self, context, arguments):
        return path_value(context.event.old_path, arguments["mode"], context)


class EventOldFolderPathVariable(EventVariable):
    variable_name = "event_old_folder_path"
    supported_event_codes = OLD_FOLDER_EVENTS
    parameters = (PATH_MODE,)

    async def _get_value(self, context, arguments):
        old_path = context.event.old_path
        # For moved files the old folder is the parent of the old file path
        old_folder = old_path.parent if context.event.event_code.startswith("file-") else old_path
        return path_value(old_folder, arguments["mode"], context)


class EventFileUriVariable(EventFileVariable):
    variable_name = "event_file_uri"

    async def _get_value(self, context, arguments):
        return self.get_event_file(context).as_uri()


class EventFileContentVariable(EventFileVariable):
    variable_name = "event_file_content"

    async def _get_value(self, context, arguments):
        return await read_text(context, self.get_event_file(context))


class EventYamlContentVariable(EventFileVariable):
    variable_name = "event_yaml_content"
    parameters = (Parameter("dashes", required=True, options=("with-dashes", "no-dashes")),)

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_event_file(context))
        return yaml_content_value(front_matter, arguments["dashes"])


class EventOldTitleVariable(EventVariable):
    variable_name = "event_old_title"
    supported_event_codes = OLD_FILE_EVENTS

    async def _get_value(self, context, arguments):
        return context.event.old_path.stem


class EventOldFolderNameVariable(EventVariable):
    variable_name = "event_old_folder_name"
    supported_event_codes = OLD_FOLDER_EVENTS

    async def _get_value(self, context, arguments):
        old_path = context.event.old_path
        old_folder = old_path.parent if context.event.event_code.startswith("file-") else old_path
        return folder_name_value(old_folder, context)
