"""Exceptions raised by the snapshot export/import pipeline."""


class TransferError(Exception):
    """Base class for export/import errors."""
    pass


class FormatError(TransferError):
    """Snapshot decodes but contains no recognized section."""
    pass


class EmptySnapshotError(FormatError):
    """Snapshot decodes to nothing at all."""
    pass


class UnrecognizedSnapshotError(FormatError):
    """Snapshot only contains sections this version does not know."""

    def __init__(self, sections: list[str]):
        self.sections = list(sections)
        super().__init__(
            f"No recognized section in snapshot (found: {', '.join(self.sections)})"
        )


class ParseError(FormatError):
    """Snapshot cannot be decoded into the expected document shape."""
    pass


class ExportError(TransferError):
    """Installation state could not be read during export."""
    pass


class CriticalImportError(TransferError):
    """Main config or certificates could not be applied; import stopped."""

    def __init__(self, identity, message: str):
        self.identity = identity
        super().__init__(f"Import of {identity} failed: {message}")


class AggregateImportError(TransferError):
    """One or more profiles/templates could not be persisted.

    Raised once, after every active unit has been attempted.
    """

    def __init__(self, failed_identities: list[str], report=None):
        self.failed_identities = list(failed_identities)
        self.report = report
        super().__init__(
            "Unable to import: " + ", ".join(self.failed_identities)
        )


class UnknownSectionWarning(UserWarning):
    """Advisory category for snapshot sections that are skipped."""
    pass
