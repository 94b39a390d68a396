"""Tests for the config and options flows."""
from unittest.mock import patch

import pytest
from homeassistant import config_entries
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.alarm_clock.const import (
    CONF_CONNECT_TIMEOUT,
    CONF_MEDIA_PLAYER,
    CONF_SHUFFLE_FAILOVER,
    CONF_SNOOZE_MINUTES,
    DOMAIN,
)


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations in Home Assistant."""
    yield


async def test_user_step_creates_entry(hass):
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result["type"] is FlowResultType.FORM
    assert result["step_id"] == "user"

    with patch(
        "custom_components.alarm_clock.async_setup_entry", return_value=True
    ) as mock_setup:
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], {CONF_MEDIA_PLAYER: "media_player.bedroom"}
        )
        await hass.async_block_till_done()

    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert result["data"] == {CONF_MEDIA_PLAYER: "media_player.bedroom"}
    assert len(mock_setup.mock_calls) == 1


async def test_single_instance(hass):
    MockConfigEntry(
        domain=DOMAIN, unique_id=DOMAIN, data={CONF_MEDIA_PLAYER: "media_player.bedroom"}
    ).add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    assert result["type"] is FlowResultType.ABORT
    assert result["reason"] == "already_configured"


async def test_options_flow(hass):
    entry = MockConfigEntry(
        domain=DOMAIN, unique_id=DOMAIN, data={CONF_MEDIA_PLAYER: "media_player.bedroom"}
    )
    entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result["type"] is FlowResultType.FORM
    assert result["step_id"] == "init"

    result = await hass.config_entries.options.async_configure(
        result["flow_id"],
        {CONF_SNOOZE_MINUTES: 10, CONF_CONNECT_TIMEOUT: 5, CONF_SHUFFLE_FAILOVER: True},
    )

    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert entry.options[CONF_SNOOZE_MINUTES] == 10
    assert entry.options[CONF_CONNECT_TIMEOUT] == 5
    assert entry.options[CONF_SHUFFLE_FAILOVER] is True
