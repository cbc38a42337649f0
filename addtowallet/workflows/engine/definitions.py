from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class WorkflowItem(BaseModel):
    """
    Standard unit of data passed between nodes.

    Equivalent to n8n's item structure.
    Ensures that binary data (files) are always separated from JSON data.
    """
    model_config = ConfigDict(populate_by_name=True)

    json_data: Dict[str, Any] = Field(default_factory=dict, alias="json")
    binary_data: Dict[str, Any] = Field(default_factory=dict, alias="binary")
    # Lineage: {"item": <index of the input item this one came from>}
    paired_item: Optional[Dict[str, int]] = Field(None, alias="pairedItem")

    @classmethod
    def paired(cls, json: Dict[str, Any], item_index: int) -> "WorkflowItem":
        return cls(json=json, pairedItem={"item": item_index})

    def to_output(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
