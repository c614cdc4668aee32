from sqlalchemy.orm import class_mapper

from exceptions import ValidationError
from .actor import ActorContext, SYSTEM_ACTOR


def sqlalchemy_to_dict(obj):
    """Convert a SQLAlchemy object to a JSON-friendly dictionary."""
    if not obj:
        return None
    mapper = class_mapper(obj.__class__)
    result = {}
    for c in mapper.columns:
        value = getattr(obj, c.key)
        # Convert date/datetime objects to ISO format strings
        if hasattr(value, 'isoformat'):
            value = value.isoformat()
        # Keep Decimal precision by storing the string form
        elif hasattr(value, 'normalize') and hasattr(value, 'from_float'):
            value = str(value)
        # Convert enum types to strings
        elif hasattr(value, 'name') and hasattr(value, 'value'):
            value = value.name
        result[c.key] = value
    return result



def reject_null_columns(model_class, update_data: dict):
    """Raise ValidationError when a partial update sets a NOT NULL column to None."""
    columns = class_mapper(model_class).columns
    null_fields = sorted(
        key for key, value in update_data.items()
        if value is None and key in columns and not columns[key].nullable
    )
    if null_fields:
        raise ValidationError(f"Fields cannot be null: {null_fields}")


__all__ = ['ActorContext', 'SYSTEM_ACTOR', 'reject_null_columns', 'sqlalchemy_to_dict']
