"""Load Shedder config flow."""

from .config import LoadShedderConfigFlow, async_get_options_flow

# Re-export for Home Assistant
__all__ = ["LoadShedderConfigFlow", "async_get_options_flow"]
