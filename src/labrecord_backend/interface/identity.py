from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Optional

class PrincipalMetadata(BaseModel):
    full_name: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None

    model_config = ConfigDict(extra='ignore')

class PrincipalCreatedEvent(BaseModel):
    """Event emitted by the identity provider once per newly created identity"""

    id: str = Field(min_length=1)
    metadata: PrincipalMetadata = Field(
        default_factory=PrincipalMetadata,
        validation_alias=AliasChoices("metadata", "raw_user_meta_data", "user_metadata"),
    )

    model_config = ConfigDict(extra='ignore')
