from prometheus_client import Counter, Enum, Gauge

CONTROLLER_STATE = Enum(
    'pwmfan_controller_state',
    'Current control loop state',
    states=['STARTING', 'RUNNING', 'DRAINING', 'STOPPED']
)

TEMPERATURE_RAW = Gauge(
    'pwmfan_temperature_raw',
    'Last temperature reading in sensor units'
)

FAN_SPEED = Gauge(
    'pwmfan_speed',
    'Last duty cycle written to the PWM register'
)

FAN_WRITES_TOTAL = Counter(
    'pwmfan_writes_total',
    'Total number of PWM register writes'
)

ERRORS_TOTAL = Counter(
    'pwmfan_errors_total',
    'Total number of fatal controller errors',
    ['kind']
)
