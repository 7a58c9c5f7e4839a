"""Free-form metadata an issuer can attach when minting or approving.

The form field is raw JSON text.  It must decode to a flat object of
scalars; anything else is rejected with InvalidMetadataError before the
ledger is touched.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from credvault.core.errors import InvalidMetadataError
from credvault.models.credential import MetadataValue

_SCALARS = (str, int, float, bool, type(None))


def parse_additional_metadata(raw: str | None) -> dict[str, MetadataValue]:
    if raw is None or not raw.strip():
        return {}

    try:
        value = json.loads(raw)
    except ValueError as e:
        raise InvalidMetadataError(
            f"Additional metadata must be valid JSON ({e.args[0]})"
        ) from None

    if not isinstance(value, dict):
        raise InvalidMetadataError("Additional metadata must be a JSON object")

    for key, item in value.items():
        if not isinstance(item, _SCALARS):
            raise InvalidMetadataError(
                f"Additional metadata value for {key!r} must be a string, "
                f"number, boolean or null"
            )
    return value


@dataclass(frozen=True, slots=True)
class ApprovalMetadata:
    credential_type: str | None = None
    event_link: str | None = None
    issue_date: str | None = None
    additional_metadata: str | None = None

    def to_metadata(self) -> dict[str, MetadataValue]:
        """Parsed additional metadata plus the named form fields that were set.

        Named fields win over keys of the same name in the JSON blob.
        """
        metadata = parse_additional_metadata(self.additional_metadata)
        if self.event_link:
            metadata["eventLink"] = self.event_link
        if self.issue_date:
            metadata["issueDate"] = self.issue_date
        return metadata
