"""Tests for the onboarding draft."""

from __future__ import annotations

import pytest

from korastor.domains.cessation.onboarding.draft import OnboardingDraft, OnboardingError


@pytest.fixture
def draft() -> OnboardingDraft:
    return OnboardingDraft()


class TestAnswers:
    def test_habit_profile(self, draft):
        profile = draft.set_habit_profile(["smoke", "vape", "smoke"], 10, 0.6, "low")
        assert profile.types == ("smoke", "vape")
        assert profile.nicotine_strength == "low"
        assert draft.habit_profile == profile

    @pytest.mark.parametrize(
        "types, units, cost, match",
        [
            ([], 10, 1, "at least one"),
            (["pipe"], 10, 1, "Unknown habit"),
            (["snus"], 0, 1, "greater than zero"),
            (["snus"], 5, -1, "negative"),
        ],
    )
    def test_habit_profile_rejected(self, draft, types, units, cost, match):
        with pytest.raises(OnboardingError, match=match):
            draft.set_habit_profile(types, units, cost)
        assert draft.habit_profile is None

    @pytest.mark.parametrize(
        "units, cost",
        [
            (float("inf"), 1),
            (float("nan"), 1),
            (10, float("inf")),
            (10, float("nan")),
        ],
    )
    def test_habit_profile_rejects_non_finite(self, draft, units, cost):
        with pytest.raises(OnboardingError, match="finite"):
            draft.set_habit_profile(["smoke"], units, cost)
        assert draft.habit_profile is None

    def test_bad_nicotine_strength(self, draft):
        with pytest.raises(OnboardingError):
            draft.set_habit_profile(["vape"], 3, 1, "extreme")

    def test_north_star(self, draft):
        draft.set_north_star("legacy")
        assert draft.north_star == "legacy"
        with pytest.raises(OnboardingError):
            draft.set_north_star("fortune")

    def test_reward_vault(self, draft):
        vault = draft.set_reward_vault("  New bike ", 450)
        assert vault.item_name == "New bike"
        assert vault.image_url is None

    @pytest.mark.parametrize("name, price", [("", 10), ("   ", 10), ("Bike", 0), ("Bike", -5)])
    def test_reward_vault_rejected(self, draft, name, price):
        with pytest.raises(OnboardingError):
            draft.set_reward_vault(name, price)


    @pytest.mark.parametrize("price", [float("inf"), float("nan")])
    def test_reward_vault_rejects_non_finite(self, draft, price):
        with pytest.raises(OnboardingError, match="finite"):
            draft.set_reward_vault("Bike", price)
        assert draft.reward_vault is None


class TestCompletion:
    def test_incomplete_until_all_three(self, draft):
        assert draft.is_complete() is False
        draft.set_habit_profile(["smoke"], 20, 0.5)
        draft.set_north_star("wealth")
        assert draft.is_complete() is False
        assert draft.missing() == ["reward_vault"]
        draft.set_reward_vault("Watch", 300)
        assert draft.is_complete() is True
        assert draft.missing() == []

    def test_build_profile(self, draft, start_ms):
        draft.set_habit_profile(["smoke"], 20, 0.5)
        draft.set_north_star("wealth")
        draft.set_reward_vault("Watch", 300)
        profile = draft.build_profile(start_ms)
        assert profile.start_date == start_ms
        assert profile.reward_vault.target_price == 300

    def test_build_incomplete_raises(self, draft, start_ms):
        with pytest.raises(OnboardingError, match="incomplete"):
            draft.build_profile(start_ms)

    def test_status(self, draft):
        draft.set_north_star("vitality")
        status = draft.status()
        assert status["complete"] is False
        assert status["north_star"] == "vitality"
        assert status["habit_profile"] is None


class TestSteps:
    def test_steps_are_clamped(self, draft):
        assert draft.previous_step() == 0
        for _ in range(10):
            draft.next_step()
        assert draft.current_step == 4
        assert draft.previous_step() == 3

    def test_advance_to_never_goes_back(self, draft):
        draft.advance_to(3)
        assert draft.advance_to(2) == 3
        assert draft.advance_to(9) == 4

    def test_reset(self, draft):
        draft.set_north_star("wealth")
        draft.next_step()
        draft.reset()
        assert draft.north_star is None
        assert draft.current_step == 0

    def test_move(self, draft):
        assert draft.move("next") == 1
        assert draft.move("next") == 2
        assert draft.move("back") == 1

    def test_move_unknown_direction(self, draft):
        with pytest.raises(OnboardingError, match="Unknown direction"):
            draft.move("sideways")
        assert draft.current_step == 0
