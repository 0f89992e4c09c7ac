from pathlib import Path


class NcountError(Exception):
    pass


class DocumentReadError(NcountError):
    """A document could not be read or decoded; other documents are unaffected."""

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read {path}: {cause}")

    def __reduce__(self):
        return (type(self), (self.path, self.cause))
