"""Weight and dimension unit conversion for parcel payloads."""

OZ_TO_GRAMS = 28.3495
LB_TO_GRAMS = 453.592
INCH_TO_CM = 2.54

_GRAMS_PER_UNIT = {
    "oz": OZ_TO_GRAMS,
    "lb": LB_TO_GRAMS,
    "lbs": LB_TO_GRAMS,
    "g": 1.0,
    "kg": 1000.0,
}

_CM_PER_UNIT = {
    "in": INCH_TO_CM,
    "inch": INCH_TO_CM,
    "inches": INCH_TO_CM,
    "cm": 1.0,
}


def convert_weight(weight: float, from_unit: str, to_unit: str) -> float:
    """
    Convert weight between oz, lb/lbs, g and kg.

    Unknown units are treated as grams.
    """
    grams = weight * _GRAMS_PER_UNIT.get(from_unit.lower(), 1.0)
    return grams / _GRAMS_PER_UNIT.get(to_unit.lower(), 1.0)


def convert_dimension(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a length between in/inch/inches and cm.

    Unknown units are treated as centimetres.
    """
    cm = value * _CM_PER_UNIT.get(from_unit.lower(), 1.0)
    return cm / _CM_PER_UNIT.get(to_unit.lower(), 1.0)
