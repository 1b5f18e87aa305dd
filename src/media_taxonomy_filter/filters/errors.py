"""Exceptions raised by the filter handlers."""


class MediaTaxonomyFilterError(Exception):
    """Base class for every error this package raises on purpose."""


class InvalidSpec(MediaTaxonomyFilterError, ValueError):
    """Filter configuration or filter input is malformed."""


class NoTargets(MediaTaxonomyFilterError):
    """No term ids were supplied and the filter requires at least one."""


class StorageUnavailable(MediaTaxonomyFilterError):
    """The backing database failed while a filter query was composed or run."""


class UnresolvedTerm(MediaTaxonomyFilterError, LookupError):
    """A term id has no stored term."""

    def __init__(self, tid: int):
        super().__init__(f"Taxonomy term not found: {tid}")
        self.tid = tid
