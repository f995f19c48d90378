"""
Application Constants
=====================

Topic map and timing constants shared by the MQTT, control and persistence
layers.

Usage:
    from app.constants import Topics, Intervals
"""

from app.enums.device import ActuatorDevice, SensorField

# =============================================================================
# MQTT Topics
# =============================================================================


class Topics:
    """Fixed topic strings used by the ESP32 greenhouse node."""

    TEMPERATURE = "esp32/air/temperature"
    AIR_HUMIDITY = "esp32/air/humidity"
    SOIL_HUMIDITY = "esp32/soil/percent"

    PUMP = "esp32/control/pump"
    VALVE = "esp32/control/solenoid"
    RELAY1 = "esp32/control/custom1"
    RELAY2 = "esp32/control/custom2"

    # Marker that separates command topics from sensor topics
    CONTROL_MARKER = "control"


# Topic -> record field for inbound readings
SENSOR_TOPICS: dict[str, SensorField] = {
    Topics.TEMPERATURE: SensorField.TEMPERATURE,
    Topics.AIR_HUMIDITY: SensorField.AIR_HUMIDITY,
    Topics.SOIL_HUMIDITY: SensorField.SOIL_HUMIDITY,
}

# Actuator -> outbound command topic
ACTUATOR_TOPICS: dict[ActuatorDevice, str] = {
    ActuatorDevice.PUMP: Topics.PUMP,
    ActuatorDevice.VALVE: Topics.VALVE,
    ActuatorDevice.RELAY1: Topics.RELAY1,
    ActuatorDevice.RELAY2: Topics.RELAY2,
}


def subscription_topics() -> list[str]:
    """All known topics that carry readings (anything without 'control')."""
    all_topics = list(SENSOR_TOPICS) + list(ACTUATOR_TOPICS.values())
    return [topic for topic in all_topics if Topics.CONTROL_MARKER not in topic]


# =============================================================================
# Timing Constants (seconds unless otherwise noted)
# =============================================================================


class Timeouts:
    """Timeout values for broker operations."""

    MQTT_KEEPALIVE = 60  # seconds
    MQTT_RECONNECT_MIN_DELAY = 1  # seconds
    MQTT_RECONNECT_MAX_DELAY = 30  # seconds


class Intervals:
    """Scheduling intervals."""

    SNAPSHOT_SAVE_DEFAULT = 30  # seconds
    SCHEDULER_CHECK = 0.5  # seconds


# =============================================================================
# Pagination Constants
# =============================================================================


class Pagination:
    """History listing limits."""

    HISTORY_DEFAULT_LIMIT = 50
    HISTORY_MAX_LIMIT = 500
