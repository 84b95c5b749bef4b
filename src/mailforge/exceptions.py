"""Custom exceptions for mailforge."""


class MailforgeError(Exception):
    """Base exception for mailforge operations."""


class TemplateLoadError(MailforgeError):
    """A template document could not be loaded or parsed."""


class FetchError(MailforgeError):
    """Error while fetching data for a global API variable."""
