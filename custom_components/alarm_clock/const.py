"""Constants for the Alarm Clock integration."""

DOMAIN = "alarm_clock"
DEFAULT_NAME = "Alarm Clock"

PLATFORMS = ["switch"]

# Config entry data / options
CONF_MEDIA_PLAYER = "media_player"
CONF_NOTIFY_SERVICE = "notify_service"
CONF_SNOOZE_MINUTES = "snooze_minutes"
CONF_CONNECT_TIMEOUT = "connect_timeout"
CONF_SHUFFLE_FAILOVER = "shuffle_failover"

DEFAULT_SNOOZE_MINUTES = 5
DEFAULT_CONNECT_TIMEOUT = 8
DEFAULT_SHUFFLE_FAILOVER = False
DEFAULT_VOLUME = 50
DEFAULT_TONE = "classic"
DEFAULT_ALARM_MESSAGE = "Your alarm is ringing!"

RADIO_PREFIX = "radio:"

# Services
SERVICE_ADD_ALARM = "add_alarm"
SERVICE_REMOVE_ALARM = "remove_alarm"
SERVICE_UPDATE_ALARM = "update_alarm"
SERVICE_STOP = "stop"
SERVICE_SNOOZE = "snooze"
SERVICE_SET_VOLUME = "set_volume"

# Service attributes
ATTR_ALARM_ID = "alarm_id"
ATTR_TIME = "time"
ATTR_LABEL = "label"
ATTR_RECURRING = "recurring"
ATTR_REMINDER_DATE = "reminder_date"
ATTR_SOUND = "sound"
ATTR_VOLUME = "volume"
ATTR_SHOW_NOTIFICATION = "show_notification"
ATTR_ENABLED = "enabled"
ATTR_MINUTES = "minutes"

# Dispatcher signals (switch platform adds/removes/updates entities)
SIGNAL_ALARM_ADDED = f"{DOMAIN}_alarm_added"
SIGNAL_ALARM_UPDATED = f"{DOMAIN}_alarm_updated"
SIGNAL_ALARM_REMOVED = f"{DOMAIN}_alarm_removed"

# Bus events
EVENT_ALARM_FIRED = f"{DOMAIN}_alarm_fired"
EVENT_FEEDBACK = f"{DOMAIN}_feedback"

# Feedback severities
SEVERITY_INFO = "info"
SEVERITY_SUCCESS = "success"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"

STATUS_ENTITY_ID = f"{DOMAIN}.status"

SOUNDS_URL_PATH = f"/{DOMAIN}/sounds"

# Mobile notification actions
ACTION_STOP = "ALARM_CLOCK_STOP"
ACTION_SNOOZE = "ALARM_CLOCK_SNOOZE"
