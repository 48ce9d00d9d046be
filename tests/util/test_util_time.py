import unittest
from datetime import datetime, timedelta, timezone

from dropboxfs.util.time import ensure_utc, now_utc


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertIsNotNone(dt.tzinfo)
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_ensure_utc_tags_naive_values(self) -> None:
        dt = ensure_utc(datetime(2025, 1, 1, 12, 0, 0))
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc))

    def test_ensure_utc_converts_offsets(self) -> None:
        jst = timezone(timedelta(hours=9))
        dt = ensure_utc(datetime(2025, 1, 1, 12, 34, 56, tzinfo=jst))
        self.assertEqual(dt.tzinfo, timezone.utc)
        # 12:34:56 JST == 03:34:56 UTC
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_ensure_utc_rejects_non_datetime(self) -> None:
        with self.assertRaises(TypeError):
            ensure_utc("2025-01-01")  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
