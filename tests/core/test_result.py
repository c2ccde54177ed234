"""Tests for the Outcome envelope."""

import dataclasses

import pytest

from yieldarray.core.result import Outcome


class TestOutcome:
    def test_success_defaults_true(self):
        outcome = Outcome(result=[1, 2])
        assert outcome.success is True
        assert outcome.stopped is False

    def test_stopped(self):
        assert Outcome(result=None, success=False).stopped is True

    def test_frozen(self):
        outcome = Outcome(result=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            outcome.success = False

    def test_equality(self):
        assert Outcome(3, True) == Outcome(result=3, success=True)
        assert Outcome(3, True) != Outcome(3, False)

    def test_pattern_matching(self):
        match Outcome(result=-1, success=True):
            case Outcome(result=-1, success=True):
                matched = True
            case _:
                matched = False
        assert matched

    def test_to_dict(self):
        assert Outcome([1], False).to_dict() == {"result": [1], "success": False}
