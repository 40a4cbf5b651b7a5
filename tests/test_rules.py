"""Tests for attribute naming, age estimation and the health verdict."""

import pytest

from storage_health.models import HEALTHY, UNKNOWN, WARNING, SmartAttribute
from storage_health.rules import ATTRIBUTE_NAMES, attribute_name, classify, estimate_age


def attr(attr_id, current=100, worst=100, threshold=0, raw=0):
    return SmartAttribute(
        id=attr_id, current_value=current, worst_value=worst, threshold=threshold, raw_value=raw
    )


class TestAgeEstimate:
    def test_whole_years(self):
        assert estimate_age([attr(9, raw=26280)]) == "3 years, 0 days"

    def test_days_only(self):
        assert estimate_age([attr(9, raw=100)]) == "4 days"

    def test_years_and_days(self):
        # 400 days
        assert estimate_age([attr(9, raw=9600)]) == "1 years, 35 days"

    def test_missing_power_on_hours(self):
        assert estimate_age([attr(5)]) == "N/A"
        assert estimate_age([]) == "N/A"

    def test_less_than_a_day(self):
        assert estimate_age([attr(9, raw=23)]) == "0 days"


class TestWarnings:
    def test_reallocated_sectors_count(self):
        result = classify([attr(5, raw=3)], failure_predicted=False)

        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.attribute_name == "Reallocated Sectors Count"
        assert warning.reason == "Count: 3 (should be 0)"
        assert result.health_status == WARNING

    def test_warning_copies_scores(self):
        result = classify([attr(197, current=95, worst=90, threshold=0, raw=8)])

        w = result.warnings[0]
        assert (w.current, w.worst, w.threshold) == (95, 90, 0)

    def test_zero_raw_count_is_clean_even_below_threshold(self):
        result = classify([attr(5, current=5, threshold=10, raw=0)], failure_predicted=False)

        assert result.warnings == ()
        assert result.health_status == HEALTHY

    def test_threshold_rule_when_enabled(self):
        result = classify(
            [attr(5, current=5, threshold=10, raw=0)], failure_predicted=False, check_thresholds=True
        )

        assert [w.reason for w in result.warnings] == ["Value 5 <= Threshold 10"]

    def test_raw_count_wins_over_threshold(self):
        result = classify([attr(5, current=5, threshold=10, raw=2)], check_thresholds=True)

        assert [w.reason for w in result.warnings] == ["Count: 2 (should be 0)"]

    def test_end_to_end_error_reason(self):
        result = classify([attr(184, raw=2)])

        assert result.warnings[0].reason == "Errors: 2"
        assert result.warnings[0].attribute_name == "End-to-End Error"

    def test_non_critical_attributes_never_warn(self):
        attrs = [attr(1, current=1, threshold=50), attr(199, raw=12), attr(9, raw=50000)]

        assert classify(attrs, check_thresholds=True).warnings == ()

    def test_warnings_follow_scan_order(self):
        attrs = [attr(198, raw=1), attr(5, raw=4), attr(188, raw=2)]

        result = classify(attrs)

        assert [w.attribute_id for w in result.warnings] == [198, 5, 188]


class TestVerdict:
    def test_no_source_is_unknown(self):
        result = classify(None, None)

        assert result.health_status == UNKNOWN
        assert result.age_estimate == "N/A"
        assert result.warnings == ()

    def test_failure_predicted_without_attributes(self):
        result = classify(None, True)

        assert result.health_status == WARNING
        assert result.age_estimate == "N/A"

    def test_flag_false_and_no_warnings_is_healthy(self):
        assert classify([attr(9, raw=100)], False).health_status == HEALTHY

    @pytest.mark.parametrize("flag", [None, False, True])
    def test_warnings_force_warning_status(self, flag):
        assert classify([attr(10, raw=1)], flag).health_status == WARNING

    def test_attributes_without_flag_are_healthy(self):
        assert classify([attr(9, raw=100)], None).health_status == HEALTHY

    def test_empty_attributes_without_flag_are_unknown(self):
        result = classify([], None)

        assert result.health_status == UNKNOWN
        assert result.age_estimate == "N/A"
        assert result.warnings == ()

    def test_empty_attributes_with_flag_are_healthy(self):
        assert classify([], False).health_status == HEALTHY

    def test_warnings_are_a_tuple(self):
        result = classify([attr(5, raw=1)])

        assert isinstance(result.warnings, tuple)


def test_attribute_names():
    assert attribute_name(9) == "Power-On Hours"
    assert attribute_name(201) == "Soft Read Error Rate"
    assert attribute_name(250) == "Unknown Attribute (250)"


def test_name_table_is_read_only():
    with pytest.raises(TypeError):
        ATTRIBUTE_NAMES[9] = "Hours"
