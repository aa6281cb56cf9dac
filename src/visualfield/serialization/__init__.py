from .serializer import (
    MalformedDataError as MalformedDataError,
    decode as decode,
    encode as encode,
    format_for_path as format_for_path,
    load as load,
    save as save,
)
