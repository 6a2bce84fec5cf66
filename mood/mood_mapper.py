"""
Mood Mapper

Translates raw classifier emotion labels into the closed set of mood
categories reported to users.
"""

from typing import Dict, Optional

from mood.models import MoodCategory, DEFAULT_MOOD_TABLE


class MoodMapper:
    """Total, side-effect free lookup from raw label to MoodCategory."""

    def __init__(
        self,
        mood_table: Optional[Dict[str, MoodCategory]] = None,
        default_mood: MoodCategory = MoodCategory.CALM
    ):
        table = mood_table if mood_table is not None else DEFAULT_MOOD_TABLE
        self.mood_table = {label.lower(): MoodCategory(mood) for label, mood in table.items()}
        self.default_mood = MoodCategory(default_mood)

    def map_mood(self, label: str) -> MoodCategory:
        """
        Map a raw emotion label to its mood category.

        Args:
            label: Raw classifier label (case-insensitive)

        Returns:
            Matching MoodCategory, or the default mood for unknown labels
        """
        return self.mood_table.get((label or "").lower(), self.default_mood)


_default_mapper = MoodMapper()


def map_mood(label: str) -> MoodCategory:
    """Map a raw label using the built-in table."""
    return _default_mapper.map_mood(label)
