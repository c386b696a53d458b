"""JSON provider that renders money as numbers."""
from decimal import Decimal
from typing import Any

from flask.json.provider import DefaultJSONProvider


class SalesJSONProvider(DefaultJSONProvider):
    """
    Flask's default provider turns Decimal into a string.
    Amounts here are already quantized to cents, so a float is exact enough
    for the wire and keeps them numeric for clients.
    """

    sort_keys = False

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, Decimal):
            return float(o)
        return DefaultJSONProvider.default(o)
