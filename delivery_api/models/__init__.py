"""Model registry: importing this module registers every table on Base.metadata."""

from delivery_api.database import Base  # noqa: F401

from delivery_api.models.company import Company  # noqa: F401
from delivery_api.models.user import User  # noqa: F401
from delivery_api.models.driver import Driver, Vehicle  # noqa: F401
from delivery_api.models.delivery import (  # noqa: F401
    Client,
    Delivery,
    DeliveryOccurrence,
    DeliveryReceipt,
)
from delivery_api.models.route import Route, RouteDelivery, TrackingPoint  # noqa: F401
from delivery_api.models.alert import OperationalAlert  # noqa: F401
