"""Config and options flows for the Alarm Clock integration."""
from __future__ import annotations
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers import selector

from .const import (
    CONF_CONNECT_TIMEOUT,
    CONF_MEDIA_PLAYER,
    CONF_NOTIFY_SERVICE,
    CONF_SHUFFLE_FAILOVER,
    CONF_SNOOZE_MINUTES,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_NAME,
    DEFAULT_SHUFFLE_FAILOVER,
    DEFAULT_SNOOZE_MINUTES,
    DOMAIN,
)


class AlarmClockConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Config flow for Alarm Clock."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Pick the media player alarms ring on. Only one entry is allowed."""
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        if user_input is not None:
            return self.async_create_entry(title=DEFAULT_NAME, data=user_input)

        schema = vol.Schema(
            {
                vol.Required(CONF_MEDIA_PLAYER): selector.EntitySelector(
                    selector.EntitySelectorConfig(domain="media_player")
                )
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry):
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Options flow handler."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        self._config_entry = config_entry

    async def async_step_init(self, user_input=None):
        """Edit notification, snooze and radio failover settings."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        options = self._config_entry.options

        schema = vol.Schema(
            {
                vol.Optional(
                    CONF_NOTIFY_SERVICE,
                    description={"suggested_value": options.get(CONF_NOTIFY_SERVICE)},
                ): cv.string,
                vol.Optional(
                    CONF_SNOOZE_MINUTES,
                    default=options.get(CONF_SNOOZE_MINUTES, DEFAULT_SNOOZE_MINUTES),
                ): vol.All(vol.Coerce(int), vol.Range(min=1, max=60)),
                vol.Optional(
                    CONF_CONNECT_TIMEOUT,
                    default=options.get(CONF_CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT),
                ): vol.All(vol.Coerce(int), vol.Range(min=1, max=60)),
                vol.Optional(
                    CONF_SHUFFLE_FAILOVER,
                    default=options.get(CONF_SHUFFLE_FAILOVER, DEFAULT_SHUFFLE_FAILOVER),
                ): bool,
            }
        )

        return self.async_show_form(step_id="init", data_schema=schema)
