"""Variables describing the active note. Unavailable when no file is open."""
from pathlib import Path

from core.workspace import FrontMatter, split_front_matter
from variables.base import BaseVariable, Parameter, VariableContext, VariableError

PATH_MODE = Parameter("mode", required=True, options=("absolute", "relative"))


# ---------------------------------------------------------------------------
# Value helpers, shared with event variables
# ---------------------------------------------------------------------------

def path_value(path: Path, mode: str, context: VariableContext) -> str:
    if mode == "absolute":
        return context.shell.translate_absolute_path(str(path))
    return context.shell.translate_relative_path(context.app.workspace.relative_path(path))


def folder_name_value(folder: Path, context: VariableContext) -> str:
    # The vault root has no name of its own inside the vault
    if context.app.workspace.relative_path(folder) == "":
        return "."
    return folder.name


def extension_value(path: Path, mode: str) -> str:
    suffix = path.suffix
    if mode == "no-dot":
        return suffix[1:]
    return suffix


def yaml_value(front_matter: FrontMatter, property_path: str) -> str:
    """Walk *property_path* (dot separated, list indexes allowed) through the front matter."""
    if front_matter.data is None:
        raise VariableError("The note does not contain a YAML front matter.")
    node = front_matter.data
    walked: list[str] = []
    for key in property_path.split("."):
        walked.append(key)
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            raise VariableError(f"YAML property '{'.'.join(walked)}' is not found.")
    if isinstance(node, (dict, list)):
        raise VariableError(
            f"YAML property '{property_path}' contains a nested structure; point to a single value."
        )
    if node is None:
        return ""
    if isinstance(node, bool):
        return "true" if node else "false"
    return str(node)


def yaml_content_value(front_matter: FrontMatter, mode: str) -> str:
    if front_matter.raw is None:
        raise VariableError("The note does not contain a YAML front matter.")
    raw = front_matter.raw.rstrip("\r\n")
    if mode == "with-dashes":
        return "---\n" + raw + "\n---"
    return raw


def tags_value(front_matter: FrontMatter, separator: str) -> str:
    tags = (front_matter.data or {}).get("tags") or []
    if isinstance(tags, str):
        tags = [t for t in tags.replace(",", " ").split() if t]
    return separator.join(str(t).lstrip("#") for t in tags)


async def read_text(context: VariableContext, path: Path) -> str:
    try:
        return await context.app.workspace.read_text(path)
    except OSError as exc:
        raise VariableError(f"Could not read {path.name}: {exc.strerror or exc}") from exc


async def read_front_matter(context: VariableContext, path: Path) -> FrontMatter:
    return split_front_matter(await read_text(context, path))


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------

class FileVariable(BaseVariable):
    always_available = False

    def check_availability(self, context: VariableContext) -> None:
        self.get_file(context)

    @staticmethod
    def get_file(context: VariableContext) -> Path:
        active_file = context.app.workspace.active_file
        if active_file is None:
            raise VariableError(
                "No file is active at the moment. Open a file or click a pane that has a file open."
            )
        return active_file

    def get_availability_text(self) -> str:
        return "Only available when the active pane contains a file."


class TitleVariable(FileVariable):
    variable_name = "title"
    help_text = "Gives the current file name without a file extension."

    async def _get_value(self, context, arguments):
        return self.get_file(context).stem


class FileNameVariable(FileVariable):
    variable_name = "file_name"
    help_text = "Gives the current file name with a file extension."

    async def _get_value(self, context, arguments):
        return self.get_file(context).name


class FileExtensionVariable(FileVariable):
    variable_name = "file_extension"
    help_text = "Gives the current file's extension, with or without a preceding dot."
    parameters = (Parameter("dot", required=True, options=("with-dot", "no-dot")),)

    async def _get_value(self, context, arguments):
        return extension_value(self.get_file(context), arguments["dot"])


class FilePathVariable(FileVariable):
    variable_name = "file_path"
    help_text = "Gives path to the current file, absolute or relative to the vault root."
    parameters = (PATH_MODE,)

    async def _get_value(self, context, arguments):
        return path_value(self.get_file(context), arguments["mode"], context)


class FolderNameVariable(FileVariable):
    variable_name = "folder_name"
    help_text = "Gives the name of the current file's parent folder. The vault root gives a dot."

    async def _get_value(self, context, arguments):
        return folder_name_value(self.get_file(context).parent, context)


class FolderPathVariable(FileVariable):
    variable_name = "folder_path"
    help_text = "Gives path to the current file's parent folder."
    parameters = (PATH_MODE,)

    async def _get_value(self, context, arguments):
        return path_value(self.get_file(context).parent, arguments["mode"], context)


class FileUriVariable(FileVariable):
    variable_name = "file_uri"
    help_text = "Gives a file:// URI pointing to the current file."

    async def _get_value(self, context, arguments):
        return self.get_file(context).as_uri()


class FileContentVariable(FileVariable):
    variable_name = "file_content"
    help_text = "Gives the current file's whole content, including YAML front matter."

    async def _get_value(self, context, arguments):
        return await read_text(context, self.get_file(context))


class NoteContentVariable(FileVariable):
    variable_name = "note_content"
    help_text = "Gives the current note's content without YAML front matter."

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_file(context))
        return front_matter.body


class YamlValueVariable(FileVariable):
    variable_name = "yaml_value"
    help_text = "Reads a single value from the current note's YAML front matter, e.g. {{yaml_value:author.name}}."
    parameters = (Parameter("property_name", required=True),)

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_file(context))
        return yaml_value(front_matter, arguments["property_name"])


class YamlContentVariable(FileVariable):
    variable_name = "yaml_content"
    help_text = "Gives the current note's YAML front matter."
    parameters = (Parameter("dashes", required=True, options=("with-dashes", "no-dashes")),)

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_file(context))
        return yaml_content_value(front_matter, arguments["dashes"])


class TagsVariable(FileVariable):
    variable_name = "tags"
    help_text = "Gives the current note's front matter tags joined with a separator."
    parameters = (Parameter("separator", required=True),)

    async def _get_value(self, context, arguments):
        front_matter = await read_front_matter(context, self.get_file(context))
        return tags_value(front_matter, arguments["separator"])


class SelectionVariable(BaseVariable):
    variable_name = "selection"
    help_text = "Gives the currently selected text."
    always_available = False

    def check_availability(self, context):
        if context.app.workspace.selection is None:
            raise VariableError("Nothing is selected. Select some text in an editor first.")

    def get_availability_text(self) -> str:
        return "Only available when an editor has a selection."

    async def _get_value(self, context, arguments):
        return context.app.workspace.selection or ""
