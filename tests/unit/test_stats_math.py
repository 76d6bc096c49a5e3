"""
Unit tests for win streaks and favorite game selection
"""

import pytest

from gamewallet.services.stats import favorite_game, win_streaks


@pytest.mark.parametrize("statuses,expected", [
    ([], (0, 0)),
    (["won"], (1, 1)),
    (["lost", "lost"], (0, 0)),
    (["won", "won", "lost", "won"], (1, 2)),
    (["won", "lost", "won", "won", "won"], (3, 3)),
    (["won", "won", "won", "lost"], (0, 3)),
])
def test_win_streaks(statuses, expected):
    assert win_streaks(statuses) == expected


def test_favorite_game():
    assert favorite_game({}) is None
    assert favorite_game({"casino": 2, "lottery": 5}) == "lottery"
    assert favorite_game({"sports": 3, "casino": 3}) == "casino"
