# Wire constants for the STM32 <-> host UART link

SENSOR_HEADER = 0x08   # STM -> host: first byte of a sensor frame
SENSOR_FOOTER = 0x20   # STM -> host: last byte of a sensor frame
SENSOR_FRAME_LEN = 14  # HEADER + 3 x BE32 (adc right, front, left) + FOOTER
COMMAND_FRAME_LEN = 8  # host -> STM: BE32 linear + BE32 angular

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

# topic names on the control-stack side
RAW_INPUT = "serial_node/input"
LINEAR_VEL = "linear_vel"
ANGULAR_VEL = "angular_vel"
ADC_RIGHT = "adc_value_right"
ADC_FRONT = "adc_value_front"
ADC_LEFT = "adc_value_left"

SENSOR_TOPICS = (ADC_RIGHT, ADC_FRONT, ADC_LEFT)
