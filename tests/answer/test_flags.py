"""Tests for checker flags."""

import pytest
from pydantic import ValidationError

from mathcheck.answer.flags import CheckerFlags


class TestCheckerFlags:
    def test_defaults(self):
        flags = CheckerFlags()
        assert flags.showTypeWarnings is True
        assert flags.studentsMustReduceUnions is True
        assert flags.requireParenMatch is True
        assert flags.ordered is False
        assert flags.parallel is False
        assert flags.partialCredit is None

    def test_unknown_flag_is_rejected(self):
        with pytest.raises(ValidationError):
            CheckerFlags(showTypeWarning=False)

    def test_limits_must_increase(self, assert_validation_error):
        assert_validation_error(CheckerFlags, {"limits": (1, 0)}, "limits")
        assert CheckerFlags(limits=[0, 1]).limits == (0.0, 1.0)

    def test_tol_type(self, assert_validation_error):
        assert_validation_error(CheckerFlags, {"tolType": "fuzzy"}, "tolType")

    def test_numeric_flags_accept_ints(self):
        flags = CheckerFlags(ordered=1, showHints=0)
        assert flags.ordered is True
        assert flags.showHints is False


class TestResolution:
    def test_type_defaults_fill_unset_flags(self):
        flags = CheckerFlags(showHints=False).resolved(showHints=True, showLengthHints=True)
        assert flags.showHints is False
        assert flags.showLengthHints is True

    def test_partial_credit_falls_back_to_settings(self):
        assert CheckerFlags().resolved().partialCredit is True
        assert CheckerFlags(partialCredit=False).resolved().partialCredit is False

    def test_tolerance_overrides(self):
        overrides = CheckerFlags(tolerance=0.01).tolerance_overrides()
        assert overrides == {"tolerance": 0.01, "tolType": None, "zeroLevel": None, "zeroLevelTol": None}
