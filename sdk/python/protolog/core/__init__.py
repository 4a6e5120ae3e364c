"""Message traversal, encoder contract and error types."""

from .encoder   import DictEncoder, ListEncoder, ObjectMarshalerFunc, ArrayMarshalerFunc  # noqa: F401
from .errors    import MarshalError, UnsupportedFieldKindError, AnyUnpackError  # noqa: F401
from .marshaler import Options, marshaler_of  # noqa: F401
