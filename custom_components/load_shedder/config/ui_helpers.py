"""UI helpers for Load Shedder: builders for config flow selectors."""

from homeassistant.helpers.selector import selector


class EntitySelectorBuilder:
    """Builds entity selectors limited to a set of domains."""

    def __init__(self, domains, multiple=False, device_class=None):
        """Initialize the EntitySelectorBuilder."""
        self.domains = domains
        self.multiple = multiple
        self.device_class = device_class

    def build(self):
        """Builds the entity selector."""
        entity_filter = {"domain": self.domains}
        if self.device_class:
            entity_filter["device_class"] = self.device_class
        return selector(
            {"entity": {"multiple": self.multiple, "filter": [entity_filter]}}
        )


class NumberSelectorBuilder:
    """Builds number selectors."""

    def __init__(self, min_value, max_value, step, mode="box", unit=None):
        """Initialize the NumberSelectorBuilder."""
        self.min = min_value
        self.max = max_value
        self.step = step
        self.mode = mode
        self.unit = unit

    def build(self):
        """Builds the number selector."""
        d = {"min": self.min, "max": self.max, "step": self.step, "mode": self.mode}
        if self.unit:
            d["unit_of_measurement"] = self.unit
        return selector({"number": d})


class BooleanSelectorBuilder:
    """Builds boolean selectors."""

    def build(self):
        """Builds the boolean selector."""
        return selector({"boolean": {}})


class SelectSelectorBuilder:
    """Builds select selectors."""

    def __init__(self, options, mode="dropdown", translation_key=None):
        """Initialize the SelectSelectorBuilder."""
        self.options = options
        self.mode = mode
        self.translation_key = translation_key

    def build(self):
        """Builds the select selector."""
        select_info = {"options": self.options, "mode": self.mode}
        if self.translation_key:
            select_info["translation_key"] = self.translation_key

        return selector({"select": select_info})
