from typing import Iterable

from pydantic import BaseModel

def reject_explicit_nulls(model: BaseModel, fields: Iterable[str]) -> None:
    """
    Raise if the request sent null for a field the record cannot be without.

    Update models leave every field optional so a client can omit it; an
    omitted field is left unchanged, but null is not a value these columns
    can hold.
    """
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null; omit it to leave it unchanged")
