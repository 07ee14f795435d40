from enum import Enum
from datetime import datetime, date
from sqlalchemy.inspection import inspect

def camel_case(key):
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)

def to_dict(model_instance, rename=None, exclude=None):
    """
    Serialize the mapped columns of a model instance to a JSON-ready dict.

    Keys are camelCased unless ``rename`` maps the column key explicitly.
    Enums are emitted by name, dates and datetimes as ISO-8601 strings.
    """
    rename = rename or {}
    exclude = set(exclude or ())
    output = {}
    mapper = inspect(model_instance.__class__)

    for column in mapper.columns:
        key = column.key
        if key in exclude:
            continue
        value = getattr(model_instance, key)

        if isinstance(value, Enum):
            value = value.name
        elif isinstance(value, (datetime, date)):
            value = value.isoformat()

        output[rename.get(key, camel_case(key))] = value

    return output
