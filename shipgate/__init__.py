"""ShipGate: shipping-rate aggregation and label-purchase gateway."""

__version__ = "1.0.0"
