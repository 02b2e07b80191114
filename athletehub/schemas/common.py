from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from athletehub.utils.serialize import as_utc

# naive datetimes from clients are taken as UTC
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class Payload(BaseModel):
    """Base for request bodies; unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)
