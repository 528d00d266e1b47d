"""Reward schedule lookup."""

import pytest

from bitbridge.projects.rewards import REWARD_SCHEDULE, Difficulty, Reward, reward_for_difficulty


@pytest.mark.parametrize(
    "difficulty,expected",
    [
        ("Beginner", Reward(300, 200, 3)),
        ("Intermediate", Reward(600, 400, 6)),
        ("Advanced", Reward(1000, 700, 12)),
        ("Expert", Reward(1500, 1200, 20)),
    ],
)
def test_schedule_by_name(difficulty, expected):
    assert reward_for_difficulty(difficulty) == expected


def test_accepts_enum_members():
    assert reward_for_difficulty(Difficulty.EXPERT).xp == 1500


def test_every_difficulty_has_a_reward():
    assert set(REWARD_SCHEDULE) == set(Difficulty)


def test_rewards_grow_with_difficulty():
    rewards = [REWARD_SCHEDULE[d] for d in Difficulty]
    for easier, harder in zip(rewards, rewards[1:]):
        assert easier.xp < harder.xp
        assert easier.bits < harder.bits
        assert easier.bytes < harder.bytes


def test_unknown_difficulty_rejected():
    with pytest.raises(ValueError):
        reward_for_difficulty("Legendary")
