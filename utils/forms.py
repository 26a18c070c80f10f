"""
Request Parsing Helpers

Parse numeric fields from JSON payloads. Unlike the costing services these
never decide business rules; they only reject values that are not numbers.
"""


class FormError(ValueError):
    """Raised when a request field is missing or not a number."""

    def __init__(self, field, message):
        super().__init__(f'{field}: {message}')
        self.field = field
        self.message = message

    def to_dict(self):
        return {'error': 'FormError', 'field': self.field, 'message': self.message}


def parse_float(data, field, default=None, required=False, min_val=None):
    """
    Read a float from a payload dict.

    Args:
        data: request payload
        field: key to read
        default: value when the key is absent or empty
        required: raise FormError when absent
        min_val: raise FormError below this value
    """
    value = data.get(field)
    if value is None or value == '':
        if required:
            raise FormError(field, 'is required')
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise FormError(field, f'not a number: {value!r}') from None
    if min_val is not None and result < min_val:
        raise FormError(field, f'must be >= {min_val}')
    return result


def parse_int(data, field, default=None, required=False):
    value = parse_float(data, field, default=None, required=required)
    if value is None:
        return default
    if value != int(value):
        raise FormError(field, f'not an integer: {value}')
    return int(value)
