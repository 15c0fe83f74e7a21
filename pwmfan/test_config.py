import unittest

from pwmfan.config import ControllerConfig, parse_float, validate_config
from pwmfan.errors import ConfigError


class TestValidateConfig(unittest.TestCase):
    def test_two_thresholds(self):
        cfg = validate_config("40000", "80000")
        self.assertEqual(cfg, ControllerConfig(40000.0, 80000.0, 0.0, 10.0))

    def test_with_floor_and_interval(self):
        cfg = validate_config("40000", "80000", "50", "2.5")
        self.assertEqual(cfg.min_fan_speed, 50.0)
        self.assertEqual(cfg.interval, 2.5)

    def test_equal_thresholds_rejected(self):
        with self.assertRaises(ConfigError):
            validate_config("60000", "60000")

    def test_inverted_thresholds_rejected(self):
        with self.assertRaises(ConfigError):
            validate_config("80000", "40000")

    def test_non_numeric_rejected(self):
        with self.assertRaises(ConfigError):
            validate_config("warm", "80000")

    def test_non_finite_rejected(self):
        with self.assertRaises(ConfigError):
            validate_config("40000", "inf")
        with self.assertRaises(ConfigError):
            validate_config("nan", "80000")

    def test_floor_out_of_range(self):
        with self.assertRaises(ConfigError):
            validate_config("40000", "80000", "-1")
        with self.assertRaises(ConfigError):
            validate_config("40000", "80000", "256")

    def test_interval_must_be_positive(self):
        with self.assertRaises(ConfigError):
            validate_config("40000", "80000", None, "0")

    def test_parse_float_names_argument(self):
        with self.assertRaises(ConfigError) as ctx:
            parse_float(None, "max_temp")
        self.assertIn("max_temp", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
