import unittest

from bodyshop.core.errors import InvalidTimeFormat, ValidationError
from bodyshop.scheduling.timeutils import add_minutes, normalize_time, parse_date, to_minutes, to_time_string


class TestTimeArithmetic(unittest.TestCase):

    def test_to_minutes(self):
        self.assertEqual(to_minutes("00:00"), 0)
        self.assertEqual(to_minutes("09:00"), 540)
        self.assertEqual(to_minutes("9:30"), 570)
        self.assertEqual(to_minutes("23:59"), 1439)

    def test_to_time_string_is_zero_padded(self):
        self.assertEqual(to_time_string(0), "00:00")
        self.assertEqual(to_time_string(615), "10:15")
        self.assertEqual(to_time_string(1439), "23:59")

    def test_round_trip_over_whole_day(self):
        for minutes in range(0, 24 * 60):
            self.assertEqual(to_minutes(to_time_string(minutes)), minutes)

    def test_malformed_times_are_rejected(self):
        for value in ("", "9", "09:0", "0900", "ab:cd", "09:00:00", "09:00\n", "24:00", "12:60", " 09:00", None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTimeFormat):
                    to_minutes(value)

    def test_out_of_day_offsets_are_rejected(self):
        with self.assertRaises(InvalidTimeFormat):
            to_time_string(-1)
        with self.assertRaises(InvalidTimeFormat):
            to_time_string(1440)

    def test_invalid_time_is_a_validation_error(self):
        self.assertTrue(issubclass(InvalidTimeFormat, ValidationError))
        self.assertEqual(InvalidTimeFormat.status_code, 400)

    def test_add_minutes(self):
        self.assertEqual(add_minutes("09:00", 75), "10:15")

    def test_normalize_time_pads_hour(self):
        self.assertEqual(normalize_time("9:05"), "09:05")
        self.assertEqual(normalize_time("17:00"), "17:00")


class TestParseDate(unittest.TestCase):

    def test_valid_date(self):
        self.assertEqual(parse_date("2024-02-29").isoformat(), "2024-02-29")

    def test_rejects_impossible_dates(self):
        for value in ("2024-13-01", "2023-02-29", "2024-00-10", "2024-04-31"):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    parse_date(value)

    def test_rejects_other_formats(self):
        for value in ("2024/01/01", "01-01-2024", "2024-1-1", "tomorrow", ""):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    parse_date(value)
