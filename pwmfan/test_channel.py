import os
import tempfile
import unittest
from unittest.mock import MagicMock

from pwmfan.channel import ValueChannel, clamp_fan_speed, format_fan_speed, parse_value
from pwmfan.errors import ChannelIOError, ParseError


class TestFormatting(unittest.TestCase):
    def test_record_is_five_bytes(self):
        self.assertEqual(format_fan_speed(255), b"255\n\x00")
        self.assertEqual(format_fan_speed(0), b"0\n\x00\x00\x00")
        self.assertEqual(format_fan_speed(42.0), b"42\n\x00\x00")

    def test_fraction_is_rounded(self):
        self.assertEqual(format_fan_speed(127.6), b"128\n\x00")

    def test_clamp(self):
        with self.assertLogs("pwmfan.channel", level="WARNING"):
            self.assertEqual(clamp_fan_speed(-10), 0.0)
        with self.assertLogs("pwmfan.channel", level="WARNING"):
            self.assertEqual(clamp_fan_speed(300), 255.0)
        self.assertEqual(clamp_fan_speed(100.5), 100.5)

    def test_clamp_nan_is_full_speed(self):
        with self.assertLogs("pwmfan.channel", level="WARNING"):
            self.assertEqual(clamp_fan_speed(float("nan")), 255.0)

    def test_parse_value(self):
        self.assertEqual(parse_value(b"48250\n"), 48250.0)
        self.assertEqual(parse_value(b"-1500\n"), -1500.0)
        self.assertEqual(parse_value(b"128\n\x00"), 128.0)
        with self.assertRaises(ParseError):
            parse_value(b"N/A\n")

    def test_parse_rejects_non_finite(self):
        for raw in (b"nan\n", b"inf\n", b"-Infinity\n"):
            with self.assertRaises(ParseError):
                parse_value(raw)


class TestValueChannel(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.temp_path = os.path.join(self.tmp.name, "temp1_input")
        self.pwm_path = os.path.join(self.tmp.name, "pwm1")
        with open(self.temp_path, "w") as f:
            f.write("51000\n")
        with open(self.pwm_path, "w") as f:
            f.write("77\n")

    def tearDown(self):
        self.tmp.cleanup()

    def test_repeated_reads_see_new_content(self):
        with ValueChannel(self.temp_path) as sensor:
            self.assertEqual(sensor.read_value(), 51000.0)
            with open(self.temp_path, "w") as f:
                f.write("52500\n")
            self.assertEqual(sensor.read_value(), 52500.0)

    def test_write_then_read_back(self):
        with ValueChannel(self.pwm_path, writable=True) as fan:
            self.assertEqual(fan.read_value(), 77.0)
            for value in (0, 1, 128, 255):
                fan.write_value(value)
                self.assertEqual(fan.read_value(), float(value))

    def test_write_goes_to_disk_immediately(self):
        with ValueChannel(self.pwm_path, writable=True) as fan:
            fan.write_value(200)
            with open(self.pwm_path, "rb") as f:
                self.assertEqual(f.read(), b"200\n\x00")

    def test_write_clamps(self):
        with ValueChannel(self.pwm_path, writable=True) as fan:
            with self.assertLogs("pwmfan.channel", level="WARNING"):
                self.assertEqual(fan.write_value(1000), 255.0)
            self.assertEqual(fan.read_value(), 255.0)

    def test_read_only_channel_rejects_write(self):
        with ValueChannel(self.temp_path) as sensor:
            with self.assertRaises(ChannelIOError):
                sensor.write_value(10)

    def test_non_numeric_content(self):
        with open(self.temp_path, "w") as f:
            f.write("garbage\n")
        with ValueChannel(self.temp_path) as sensor:
            with self.assertRaises(ParseError):
                sensor.read_value()

    def test_empty_register(self):
        open(self.temp_path, "w").close()
        with ValueChannel(self.temp_path) as sensor:
            with self.assertRaises(ParseError):
                sensor.read_value()

    def test_open_missing_file(self):
        channel = ValueChannel(os.path.join(self.tmp.name, "missing"))
        with self.assertRaises(ChannelIOError):
            channel.open()
        self.assertTrue(channel.closed)

    def test_closed_on_error_path(self):
        channel = ValueChannel(self.temp_path)
        with self.assertRaises(RuntimeError):
            with channel:
                self.assertFalse(channel.closed)
                raise RuntimeError("boom")
        self.assertTrue(channel.closed)
        with self.assertRaises(ChannelIOError):
            channel.read_value()

    def test_close_twice(self):
        channel = ValueChannel(self.temp_path)
        channel.open()
        channel.close()
        channel.close()
        self.assertTrue(channel.closed)


class TestValueChannelFailures(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.pwm_path = os.path.join(self.tmp.name, "pwm1")
        with open(self.pwm_path, "w") as f:
            f.write("0\n")
        self.fan = ValueChannel(self.pwm_path, writable=True)
        self.fan.open()
        self.real_handle = self.fan._file
        self.handle = MagicMock()
        self.fan._file = self.handle

    def tearDown(self):
        self.real_handle.close()
        self.tmp.cleanup()

    def test_nan_write_lands_as_full_speed(self):
        self.fan._file = self.real_handle
        with self.assertLogs("pwmfan.channel", level="WARNING"):
            self.assertEqual(self.fan.write_value(float("nan")), 255.0)
        with open(self.pwm_path, "rb") as f:
            self.assertEqual(f.read(), b"255\n\x00")

    def test_short_write(self):
        self.handle.write.return_value = 2
        with self.assertRaises(ChannelIOError):
            self.fan.write_value(100)

    def test_would_block_write(self):
        self.handle.write.return_value = None
        with self.assertRaises(ChannelIOError):
            self.fan.write_value(100)

    def test_write_os_error(self):
        self.handle.write.side_effect = OSError(5, "Input/output error")
        with self.assertRaises(ChannelIOError) as ctx:
            self.fan.write_value(100)
        self.assertEqual(ctx.exception.path, self.pwm_path)

    def test_read_os_error(self):
        self.handle.read.side_effect = OSError(5, "Input/output error")
        with self.assertRaises(ChannelIOError):
            self.fan.read_value()

    def test_close_failure_is_reported(self):
        self.handle.close.side_effect = OSError(5, "Input/output error")
        with self.assertRaises(ChannelIOError):
            self.fan.close()
        self.assertTrue(self.fan.closed)

    def test_close_failure_does_not_mask_body_error(self):
        self.handle.close.side_effect = OSError(5, "Input/output error")
        with self.assertLogs("pwmfan.channel", level="WARNING"):
            with self.assertRaises(RuntimeError):
                with self.fan:
                    raise RuntimeError("boom")

    def test_close_failure_raised_from_clean_exit(self):
        self.handle.close.side_effect = OSError(5, "Input/output error")
        with self.assertRaises(ChannelIOError):
            with self.fan:
                pass


if __name__ == '__main__':
    unittest.main()
