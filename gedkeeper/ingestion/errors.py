"""Import pipeline errors."""


class GedcomImportError(Exception):
    """Base class for errors raised by the import pipeline."""


class InvalidGedcomRecordError(GedcomImportError):
    """The text does not start with a recognizable level 0 record line."""

    def __init__(self, gedcom: str):
        self.gedcom = gedcom
        first_line = gedcom.split("\n", 1)[0][:80]
        super().__init__(f"Invalid GEDCOM format: {first_line!r}")


class ChangeStatusError(GedcomImportError):
    """A change that has already been accepted or rejected cannot be moderated again."""

    def __init__(self, change_id: int, status: str):
        self.change_id = change_id
        self.status = status
        super().__init__(f"Change {change_id} is already {status}")
