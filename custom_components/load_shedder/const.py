"""Constants for the Load Shedder integration."""

DOMAIN = "load_shedder"

# Service constants
SERVICE_FORCE_RESYNC = "force_resync"
SERVICE_SET_SIMULATION = "set_simulation"

# --- Configuration Keys ---
# These constants are used as keys in configuration dictionaries.

# Power measurement keys
CONF_POWER_SENSORS = "power_sensors"
CONF_INVERT_POWER_READINGS = "invert_power_readings"

# Controller tuning keys
CONF_POWER_HEADROOM_W = "power_headroom_w"
CONF_POWER_HYSTERESIS_SPAN_W = "power_hysteresis_span_w"
CONF_INCREASE_THRESHOLD_DURATION = "increase_threshold_duration"
CONF_DECREASE_THRESHOLD_DURATION = "decrease_threshold_duration"
CONF_SYNC_INTERVAL = "sync_interval"
CONF_MAX_PARALLEL_CALLS = "max_parallel_calls"

# Simulation keys
CONF_SIMULATION_ENABLED = "simulation_enabled"
CONF_SIMULATION_POWER = "simulation_power"

# Device configuration keys
CONF_DEVICES = "devices"
CONF_DEVICE_ID = "device_id"
CONF_DEVICE_NAME = "device_name"
CONF_DEVICE_PROTOCOL = "device_protocol"
CONF_DEVICE_EXPECTED_W = "expected_power_w"
CONF_DEVICE_ADDRESS = "device_address"
CONF_DEVICE_CHANNEL = "device_channel"
CONF_DEVICE_RELAY_TYPE = "device_relay_type"
CONF_DEVICE_ON_URL = "on_url"
CONF_DEVICE_OFF_URL = "off_url"
CONF_DEVICE_ENTITY = "device_entity"

# --- Default & Internal Values ---

DEFAULT_POWER_HEADROOM_W = 100
DEFAULT_POWER_HYSTERESIS_SPAN_W = 200
DEFAULT_INCREASE_THRESHOLD_DURATION = 60
DEFAULT_DECREASE_THRESHOLD_DURATION = 60
DEFAULT_SYNC_INTERVAL = 300
DEFAULT_MAX_PARALLEL_CALLS = 4
DEFAULT_SIMULATION_POWER = 0.0
DEFAULT_RELAY_TYPE = "relay"
DEFAULT_RPC_COMPONENT = "Switch"

# Device protocol options
PROTOCOL_SHELLY_GEN1 = "shelly_gen1"
PROTOCOL_SHELLY_RPC = "shelly_rpc"
PROTOCOL_URL = "url"
PROTOCOL_ENTITY = "entity"
DEVICE_PROTOCOLS = [
    PROTOCOL_SHELLY_GEN1,
    PROTOCOL_SHELLY_RPC,
    PROTOCOL_URL,
    PROTOCOL_ENTITY,
]

# Dispatcher signal names
SIGNAL_STATE_UPDATED = "load_shedder_state_updated"

# Bus events
EVENT_DEVICE_COMMAND = "load_shedder_device_command"
EVENT_ALLOCATION_APPLIED = "load_shedder_allocation_applied"

# Configuration flow steps
STEP_USER = "user"
STEP_MAIN_MENU = "main_menu"
STEP_SETTINGS = "settings"
STEP_MANAGE_DEVICES = "manage_devices"
STEP_DEVICE_NAME_TYPE = "device_name_type"
STEP_DEVICE_CONNECTION = "device_connection"
STEP_CONFIRM_REMOVE = "confirm_remove"

# Configuration flow actions
ACTION_ADD = "add"
ACTION_EDIT = "edit"
ACTION_REMOVE = "remove"
ACTION_SETTINGS = "settings"
ACTION_ADD_DEVICE = "add_device"
ACTION_MANAGE_DEVICES = "manage_devices"
ACTION_BACK = "back"

# Configuration field constants
CONF_ACTION = "action"
CONF_CONFIRM = "confirm"

# Sensor naming constants
SENSOR_SURPLUS_SUFFIX = "surplus"
SENSOR_EXPECTED_DRAW_SUFFIX = "expected_draw"
SENSOR_DEVICE_STATE_SUFFIX = "presumed_state"

# Home Assistant domain constants
DOMAIN_LIGHT = "light"
DOMAIN_SWITCH = "switch"
DOMAIN_INPUT_BOOLEAN = "input_boolean"
DOMAIN_AUTOMATION = "automation"
DOMAIN_SCRIPT = "script"
DOMAIN_FAN = "fan"
SUPPORTED_ENTITY_DOMAINS = [
    DOMAIN_SWITCH,
    DOMAIN_LIGHT,
    DOMAIN_INPUT_BOOLEAN,
    DOMAIN_AUTOMATION,
    DOMAIN_SCRIPT,
    DOMAIN_FAN,
]
