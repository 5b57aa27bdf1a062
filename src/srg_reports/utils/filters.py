from typing import Any, Iterable, Optional, Set


class RowFilter:
    """
    Centralizes the value rules used to keep or drop report rows.
    Layers:
    1. Emptiness (requirement columns)
    2. Normalization (database ints vs. placeholder strings)
    3. Membership (constraint columns)
    """

    @staticmethod
    def is_empty(value: Any) -> bool:
        """A value is empty when it is NULL or the empty string. 0 is a real value."""
        if value is None:
            return True
        return isinstance(value, str) and value == ""

    @staticmethod
    def normalize(value: Any) -> Optional[str]:
        """
        Layer 2: Values are compared as text.
        The database hands out integers while joins fill placeholders
        declared as strings, so 3 and "3" must be the same key.
        """
        if value is None:
            return None
        return str(value)

    @staticmethod
    def allowed_set(allowed: Any) -> Set[Optional[str]]:
        """Accepts a single scalar or any collection of scalars."""
        if isinstance(allowed, (list, tuple, set, frozenset)):
            return {RowFilter.normalize(v) for v in allowed}
        return {RowFilter.normalize(allowed)}

    @staticmethod
    def matches(value: Any, allowed: Set[Optional[str]]) -> bool:
        """Layer 3: Row retention for a constraint."""
        return RowFilter.normalize(value) in allowed

    @staticmethod
    def distinct_keys(values: Iterable[Any]) -> list:
        """Distinct non-empty values, in first-appearance order."""
        seen = set()
        keys = []
        for value in values:
            if RowFilter.is_empty(value):
                continue
            norm = RowFilter.normalize(value)
            if norm in seen:
                continue
            seen.add(norm)
            keys.append(value)
        return keys
