"""Atom relationship input schemas for API requests."""

from pydantic import BaseModel, ConfigDict, Field


class AtomRelationshipCreate(BaseModel):
    """Schema for grouping an atom under an idea.

    The wire format uses camelCase keys; snake_case is accepted as well.

    Attributes:
        parent_atom_id (int): Id of the idea atom.
        child_atom_id (int): Id of the atom to group under it.

    Example:
        >>> body = AtomRelationshipCreate(parentAtomId=10, childAtomId=11)
        >>> body.parent_atom_id
        10
    """

    model_config = ConfigDict(populate_by_name=True)

    parent_atom_id: int = Field(..., alias="parentAtomId")
    child_atom_id: int = Field(..., alias="childAtomId")
