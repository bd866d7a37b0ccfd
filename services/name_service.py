from __future__ import annotations

import string
from typing import Iterable

from config import Settings

UNKNOWN_PLAYER_NAME = "Unknown Player"


def _label_for(index: int) -> str:
    """
    Spreadsheet-style column label: 0 -> A, 25 -> Z, 26 -> AA.
    """
    letters = string.ascii_uppercase
    label = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, len(letters))
        label = letters[rem] + label
    return label


class NameAnonymizer:
    """
    Stable name -> pseudonym mapping shared for the lifetime of the dashboard process.

    Names containing any of the ``keep`` entries are shown as-is. When disabled,
    every name passes through unchanged.
    """

    def __init__(self, *, enabled: bool = True, keep: Iterable[str] = ()) -> None:
        self.enabled = enabled
        self.keep = tuple(k for k in keep if k)
        self._labels: dict[str, str] = {}

    def display(self, name: str | None) -> str:
        if not name:
            return UNKNOWN_PLAYER_NAME
        if not self.enabled:
            return name
        if any(k in name for k in self.keep):
            return name
        label = self._labels.get(name)
        if label is None:
            label = f"User {_label_for(len(self._labels))}"
            self._labels[name] = label
        return label


def build_anonymizer(settings: Settings) -> NameAnonymizer:
    return NameAnonymizer(
        enabled=settings.anonymize_player_names,
        keep=sorted(settings.anonymize_keep_names),
    )


def display_name(name: str | None, names: NameAnonymizer | None = None) -> str:
    if names is not None:
        return names.display(name)
    return name or UNKNOWN_PLAYER_NAME
