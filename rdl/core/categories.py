"""Category configuration: which conditions exist and how they group.

Pure data, no timing behaviour.  A ``CategorySet`` is built once from config
and handed to the ledger, recorder and presenter.
"""

import re
from typing import NamedTuple

from rdl.core.errors import UnknownCondition

DEFAULT_CATEGORIES = {
    "Weather": ["Sunny", "Low Sun", "Cloudy", "Rain", "Fog", "Snow"],
    "Road Type": ["City", "Country", "Highway", "Construction Site", "Tunnel"],
    "Lighting": ["Day", "Dawn", "Lit Night", "Dark Night"],
    "Traffic": ["Flow", "Jam"],
    "Speed": ["0-2 mph", "3-18 mph", "19-37 mph", "38-55 mph", "56-80 mph", "81-155 mph"],
}


# Category and condition names become CSV cells in the report
_RESERVED = re.compile(r"[,\r\n]")


class ConditionKey(NamedTuple):
    """One (category, condition) pair.  Compared by value, so names that
    contain dashes (``"0-2 mph"``) can't collide with each other."""
    category: str
    condition: str

    @property
    def label(self):
        return f"{self.category}-{self.condition}"


class CategorySet:
    """Ordered mapping of category name -> mutually exclusive conditions."""

    def __init__(self, mapping):
        self._categories = {}
        for category, conditions in mapping.items():
            if not isinstance(category, str) or not category.strip():
                raise ValueError(f"Category names must be non-empty strings, got {category!r}")
            conditions = list(conditions)
            if _RESERVED.search(category):
                raise ValueError(f"Category name {category!r} can't contain commas or line breaks")
            if not conditions:
                raise ValueError(f"Category '{category}' has no conditions")
            if len(set(conditions)) != len(conditions):
                raise ValueError(f"Category '{category}' lists the same condition twice")
            for condition in conditions:
                if not isinstance(condition, str) or not condition.strip():
                    raise ValueError(f"Category '{category}' has an empty or non-string condition")
                if _RESERVED.search(condition):
                    raise ValueError(f"Condition {condition!r} in '{category}' can't contain commas or line breaks")
            self._categories[category] = tuple(conditions)
        if not self._categories:
            raise ValueError("At least one category is required")

    @classmethod
    def default(cls):
        return cls(DEFAULT_CATEGORIES)

    @property
    def categories(self):
        return list(self._categories)

    def conditions(self, category):
        try:
            return self._categories[category]
        except KeyError:
            raise UnknownCondition(category) from None

    def key(self, category, condition):
        """Validated ConditionKey, raising UnknownCondition for anything unconfigured."""
        if condition not in self.conditions(category):
            raise UnknownCondition(category, condition)
        return ConditionKey(category, condition)

    def keys(self, category=None):
        if category is not None:
            return [ConditionKey(category, c) for c in self.conditions(category)]
        return [ConditionKey(cat, c) for cat, conds in self._categories.items() for c in conds]

    def as_dict(self):
        return {category: list(conditions) for category, conditions in self._categories.items()}

    def __contains__(self, key):
        return (isinstance(key, tuple) and len(key) == 2
                and key[1] in self._categories.get(key[0], ()))

    def __iter__(self):
        return iter(self._categories)

    def __len__(self):
        return len(self._categories)

    def __repr__(self):
        return f"CategorySet({self.as_dict()!r})"
