# app/engine/navigator.py

from typing import List, Sequence

from app.core.errors import InvalidTransition
from app.engine.sections import overall_question_index


class SectionNavigator:
    """
    Index into the ordered list of sections.

    Moving between sections never touches answers; they live in the flat
    answer array owned by the attempt.
    """

    def __init__(self, counts: Sequence[int]):
        self.counts: List[int] = list(counts)
        self.index = 0

    @property
    def section_count(self) -> int:
        return len(self.counts)

    @property
    def can_go_back(self) -> bool:
        return self.index > 0

    @property
    def is_last(self) -> bool:
        return self.index >= self.section_count - 1

    @property
    def can_go_forward(self) -> bool:
        return not self.is_last

    @property
    def primary_action(self) -> str:
        """What the forward button does on the current section."""
        return "submit" if self.is_last else "next"

    def next(self) -> int:
        if not self.can_go_forward:
            raise InvalidTransition("Already on the last section.")
        self.index += 1
        return self.index

    def previous(self) -> int:
        if not self.can_go_back:
            raise InvalidTransition("Already on the first section.")
        self.index -= 1
        return self.index

    def overall_index(self, question_index: int) -> int:
        """Flat answer index of a question in the current section."""
        return overall_question_index(self.counts, self.index, question_index)

    def current_range(self) -> range:
        start = sum(self.counts[:self.index])
        return range(start, start + self.counts[self.index]) if self.counts else range(0)
