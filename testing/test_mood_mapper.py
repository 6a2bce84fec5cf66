"""
Unit Tests: Mood Mapper

Run with: pytest testing/test_mood_mapper.py -v
"""

import pytest

from mood.models import MoodCategory, DEFAULT_MOOD_TABLE
from mood.mood_mapper import MoodMapper, map_mood


class TestMapMood:

    @pytest.mark.parametrize("label,expected", [
        ("happy", MoodCategory.HAPPY),
        ("joy", MoodCategory.HAPPY),
        ("neutral", MoodCategory.CALM),
        ("peaceful", MoodCategory.CALM),
        ("sadness", MoodCategory.MELANCHOLIC),
        ("crying", MoodCategory.MELANCHOLIC),
        ("weeping", MoodCategory.MELANCHOLIC),
        ("rage", MoodCategory.ENERGETIC),
        ("wonder", MoodCategory.EXCITED),
        ("afraid", MoodCategory.MELANCHOLIC),
        ("disgusted", MoodCategory.MELANCHOLIC),
        ("affection", MoodCategory.ROMANTIC),
    ])
    def test_known_labels(self, label, expected):
        assert map_mood(label) == expected

    def test_mixed_case_surprise_is_excited(self):
        assert map_mood("Surprise") == MoodCategory.EXCITED

    def test_unknown_label_defaults_to_calm(self):
        assert map_mood("gibberish") == MoodCategory.CALM

    @pytest.mark.parametrize("label", ["", "  ", "HAPPY!", "contentment", "n/a"])
    def test_mapping_is_total(self, label):
        assert map_mood(label) in set(MoodCategory)

    def test_every_table_entry_maps_case_insensitively(self):
        for label, mood in DEFAULT_MOOD_TABLE.items():
            assert map_mood(label.upper()) == mood


class TestCustomMapper:

    def test_custom_default(self):
        mapper = MoodMapper(default_mood=MoodCategory.HAPPY)
        assert mapper.map_mood("unheard-of") == MoodCategory.HAPPY

    def test_custom_table_replaces_builtin(self):
        mapper = MoodMapper({"Contentment": "Calm"}, default_mood="Excited")
        assert mapper.map_mood("contentment") == MoodCategory.CALM
        assert mapper.map_mood("happy") == MoodCategory.EXCITED
