"""Shared documentation fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

SENSOR_CONFIGURATION = """
availability:
  description: A list of MQTT topics subscribed to receive availability (online/offline) updates. Must not be used together with `availability_topic`.
  required: false
  type: list
  keys:
    payload_available:
      description: The payload that represents the available state.
      required: false
      type: string
      default: online
    topic:
      description: An MQTT topic subscribed to receive availability (online/offline) updates.
      required: true
      type: string
availability_mode:
  description: When `availability` is configured, this controls the conditions needed to set the entity to `available`.
  required: false
  type: string
  default: latest
availability_template:
  description: Defines a template to extract device's availability from the `availability_topic`.
  required: false
  type: template
availability_topic:
  description: The MQTT topic subscribed to receive availability (online/offline) updates.
  required: false
  type: string
device:
  description: Information about the device this sensor is a part of.
  required: false
  type: map
  keys:
    connections:
      description: A list of connections of the device to the outside world.
      required: false
      type: list
    identifiers:
      description: A list of IDs that uniquely identify the device.
      required: false
      type: [string, list]
    name:
      description: The name of the device.
      required: false
      type: string
device_class:
  description: The [type/class](/integrations/sensor/#device-class) of the sensor to set the icon in the frontend.
  required: false
  type: device_class
  default: None
enabled_by_default:
  description: Flag which defines if the entity should be enabled when first added.
  required: false
  type: boolean
  default: true
entity_category:
  description: The category of the entity.
  required: false
  type: string
expire_after:
  description: If set, it defines the number of seconds after the sensor's state expires.
  required: false
  type: integer
  default: 0
force_update:
  description: Sends update events even if the value hasn't changed.
  required: false
  type: boolean
  default: false
payload_available:
  description: The payload that represents the available state.
  required: false
  type: string
  default: online
payload_not_available:
  description: The payload that represents the unavailable state.
  required: false
  type: string
  default: offline
qos:
  description: The maximum QoS level to be used when receiving messages.
  required: false
  type: integer
  default: 0
state_class:
  description: The state_class of the sensor.
  required: false
  type: string
state_topic:
  description: The MQTT topic subscribed to receive sensor values.
  required: true
  type: string
suggested_display_precision:
  description: The number of decimals which should be used in the sensor's state after rounding.
  required: false
  type: float
unit_of_measurement:
  description: Defines the units of measurement of the sensor, if any.
  required: false
  type: string
"""

SENSOR_DOCUMENT = (
    "---\n"
    'title: "MQTT Sensor"\n'
    "ha_domain: mqtt\n"
    "---\n"
    "\n"
    "This `mqtt` sensor platform uses the MQTT message payload as the sensor value.\n"
    "\n"
    "## Configuration\n"
    "\n"
    "{% configuration %}" + SENSOR_CONFIGURATION + "{% endconfiguration %}\n"
    "\n"
    "## Examples\n"
)

TRIGGER_DOCUMENT = """---
title: "MQTT Device trigger"
---

{% configuration %}
automation_type:
  description: The type of automation, must be 'trigger'.
  required: true
  type: string
topic:
  description: The MQTT topic subscribed to receive trigger events.
  required: true
  type: string
type:
  description: "The type of the trigger, e.g. `button_short_press`."
  required: true
  type: string
{% endconfiguration %}
"""

SENSOR_DEVICE_CLASSES = """---
title: Sensor
---

Sensors are a basic integration in Home Assistant.

## Device class

The following device classes are supported for sensors:

- **None**: Generic sensor. This is the default and doesn't need to be set.
- **apparent_power**: Apparent power in VA.
- **temperature**: Temperature in °C, °F or K

## Long-term statistics

- `measurement`: not a device class
"""


@pytest.fixture
def sensor_document() -> str:
    return SENSOR_DOCUMENT


@pytest.fixture
def integrations_dir(tmp_path: Path) -> Path:
    """A minimal ``source/_integrations`` tree."""

    directory = tmp_path / "docs" / "source" / "_integrations"
    directory.mkdir(parents=True)
    (directory / "sensor.mqtt.markdown").write_text(SENSOR_DOCUMENT, encoding="utf-8")
    (directory / "sensor.markdown").write_text(SENSOR_DEVICE_CLASSES, encoding="utf-8")
    (directory / "device_trigger.mqtt.markdown").write_text(TRIGGER_DOCUMENT, encoding="utf-8")
    (directory / "climate.mqtt.markdown").write_text("no configuration here\n", encoding="utf-8")
    (directory / "light.markdown").write_text("---\ntitle: Light\n---\n\nLights.\n", encoding="utf-8")
    return directory
