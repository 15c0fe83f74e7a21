# file: pwmfan/safety.py
import math

from pwmfan.errors import SensorRangeError

# Plausible temp1_input range in millidegrees Celsius. Anything outside means
# the wrong device was matched or the sensor is broken.
SENSOR_MIN = -30000.0
SENSOR_MAX = 150000.0


class SensorGuard:
    """
    Rejects temperature readings a real sensor cannot produce.

    A rejected reading is fatal to the control loop: the controller stops
    and leaves the fan at full speed rather than act on garbage.
    """

    def __init__(self, low=SENSOR_MIN, high=SENSOR_MAX):
        """
        Initialize the guard.

        Args:
            low (float, optional): Lowest plausible reading. Defaults to -30000.
            high (float, optional): Highest plausible reading. Defaults to 150000.
        """
        self.low = low
        self.high = high

    def check(self, temp):
        """
        Validate a reading.

        Args:
            temp (float): The reading to check.

        Returns:
            float: The reading, unchanged, if it is plausible.

        Raises:
            SensorRangeError: If the reading is NaN or outside [low, high].
        """
        if math.isnan(temp) or temp < self.low or temp > self.high:
            raise SensorRangeError(
                f"temperature outside expected range: {temp} not in [{self.low}, {self.high}]"
            )
        return temp
