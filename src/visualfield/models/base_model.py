"""
Base Model Module.

Root class of every visualfield value type. Models validate through pydantic
and describe their columnar layout as a pyarrow struct, which the serializer
turns into the export schema.
"""

import pyarrow as pa
import pydantic


class BaseModel(pydantic.BaseModel):
    """
    Frozen pydantic model with an attached Arrow layout.

    Values are created once and never mutated, so a point can be handed to the
    store and to any number of readers without copying. NaN and infinite
    floats fail validation.
    """

    model_config = pydantic.ConfigDict(frozen=True, allow_inf_nan=False)

    # Arrow struct of the model's fields, in declaration order.
    # Models that are exported override it.
    __vf_pyarrow_struct__ = pa.struct([])
