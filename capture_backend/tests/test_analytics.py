import unittest
from datetime import datetime, timezone

from capture_backend.analytics import compute_analytics, parse_measurement
from capture_backend.db import CaptureRecord
from capture_backend.enums import CaptureStatus

DAY = 24 * 60 * 60
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc).timestamp()


def make_capture(days_ago=0.0, status=CaptureStatus.DRAFT, **data):
    created = NOW - days_ago * DAY
    return CaptureRecord(
        capture_id=f"c-{len(data)}-{days_ago}",
        user_id="user",
        title="capture",
        description=None,
        data=data,
        status=status,
        created_at=created,
        updated_at=created,
    )


class ParseMeasurementTests(unittest.TestCase):
    def test_parses_numbers(self):
        self.assertEqual(parse_measurement("20"), 20.0)
        self.assertEqual(parse_measurement(" 3.5 "), 3.5)
        self.assertEqual(parse_measurement("-4"), -4.0)

    def test_rejects_empty_and_garbage(self):
        for value in (None, "", "abc", "12cm", "nan", "inf"):
            self.assertIsNone(parse_measurement(value), value)


class ComputeAnalyticsTests(unittest.TestCase):
    def test_invalid_values_are_excluded_from_mean(self):
        captures = [make_capture(temperature="20"), make_capture(1, temperature="bad")]
        result = compute_analytics(captures, 30, NOW)
        self.assertEqual(result.average_temperature, 20.0)
        self.assertEqual(result.sample_counts["temperature"], 1)

    def test_mean_without_values_is_zero(self):
        result = compute_analytics([make_capture(humidity="")], 30, NOW)
        self.assertEqual(result.average_humidity, 0)
        self.assertEqual(result.average_wind_speed, 0)
        self.assertEqual(result.sample_counts["humidity"], 0)

    def test_window_filters_by_age(self):
        captures = [make_capture(1), make_capture(6.5), make_capture(8)]
        self.assertEqual(compute_analytics(captures, 7, NOW).total_captures, 2)
        self.assertEqual(compute_analytics(captures, 30, NOW).total_captures, 3)

    def test_window_boundary_is_inclusive(self):
        self.assertEqual(compute_analytics([make_capture(7)], 7, NOW).total_captures, 1)

    def test_status_counts_sum_to_total(self):
        captures = [
            make_capture(0, CaptureStatus.DRAFT),
            make_capture(1, CaptureStatus.APPROVED),
            make_capture(2, CaptureStatus.APPROVED),
            make_capture(3, CaptureStatus.REJECTED),
            make_capture(40, CaptureStatus.SUBMITTED),
        ]
        result = compute_analytics(captures, 30, NOW)
        self.assertEqual(sum(result.captures_by_status.values()), result.total_captures)
        self.assertEqual(result.captures_by_status, {"draft": 1, "approved": 2, "rejected": 1})

    def test_water_quality_distribution_skips_blank(self):
        captures = [
            make_capture(waterQuality="good"),
            make_capture(1, waterQuality="good"),
            make_capture(2, waterQuality="poor"),
            make_capture(3, waterQuality=""),
            make_capture(4),
        ]
        result = compute_analytics(captures, 30, NOW)
        self.assertEqual(result.water_quality_distribution, {"good": 2, "poor": 1})

    def test_water_quality_distribution_skips_unknown_categories(self):
        captures = [
            make_capture(waterQuality="murky"),
            make_capture(1, waterQuality="very-poor"),
            make_capture(2, waterQuality="GOOD"),
        ]
        result = compute_analytics(captures, 30, NOW)
        self.assertEqual(result.water_quality_distribution, {"very-poor": 1})

    def test_months_are_labelled_and_chronological(self):
        captures = [make_capture(0), make_capture(20), make_capture(60), make_capture(200)]
        result = compute_analytics(captures, 365, NOW)
        self.assertEqual(
            list(result.captures_by_month.items()),
            [("Nov 2023", 1), ("Apr 2024", 1), ("May 2024", 1), ("Jun 2024", 1)],
        )

    def test_top_locations_limited_and_sorted(self):
        locations = ["A"] * 1 + ["B"] * 4 + ["C"] * 2 + ["D"] * 3 + ["E"] + ["F"] + ["G"] * 2
        captures = [make_capture(i / 10, location=loc) for i, loc in enumerate(locations)]
        top = compute_analytics(captures, 30, NOW).top_locations
        self.assertLessEqual(len(top), 5)
        counts = [entry["count"] for entry in top]
        self.assertEqual(counts, sorted(counts, reverse=True))
        self.assertEqual([entry["location"] for entry in top], ["B", "D", "C", "G", "A"])

    def test_empty_input(self):
        result = compute_analytics([], 7, NOW)
        self.assertEqual(result.total_captures, 0)
        self.assertEqual(result.captures_by_status, {})
        self.assertEqual(result.top_locations, [])


if __name__ == "__main__":
    unittest.main()
