"""Exceptions raised for programmer misuse of the navigation API."""
from __future__ import annotations


class NavigationConfigError(ValueError):
    """Base class for configuration mistakes (unknown or duplicate sections)."""


class SectionExistsError(NavigationConfigError):
    def __init__(self, section_id: str) -> None:
        super().__init__(f'Section "{section_id}" has already existed!')
        self.section_id = section_id


class UnknownSectionError(NavigationConfigError):
    def __init__(self, section_id: str) -> None:
        super().__init__(f'Section "{section_id}" doesn\'t exist!')
        self.section_id = section_id


class ConfigFileError(NavigationConfigError):
    """Raised when a navigation config file exists but cannot be used."""
