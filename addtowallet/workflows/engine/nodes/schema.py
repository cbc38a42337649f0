from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, field_validator

# --- Enums ---
class NodeCategory(str, Enum):
    TRIGGER = "TRIGGER"
    ACTION = "ACTION"
    LOGIC = "LOGIC"
    UTILITY = "UTILITY"

# --- Models ---
class DisplayConfiguration(BaseModel):
    """
    Configuration for hiding/showing fields.
    """
    show: Optional[Dict[str, List[Any]]] = None
    hide: Optional[Dict[str, List[Any]]] = None

    def is_visible(self, values: Dict[str, Any]) -> bool:
        for name, allowed in (self.show or {}).items():
            if values.get(name) not in allowed:
                return False
        for name, hidden in (self.hide or {}).items():
            if values.get(name) in hidden:
                return False
        return True

class TypeOptions(BaseModel):
    """
    Advanced options for specific input types.
    """
    multipleValues: bool = False
    password: bool = False
    rows: Optional[int] = None

class SelectOption(BaseModel):
    label: str
    value: Any
    description: Optional[str] = None
    action: Optional[str] = None

class NodeInput(BaseModel):
    """
    Definition of a single input field in the node.
    """
    name: str
    type: str  # string, number, boolean, color, options, collection, fixedCollection
    label: str
    default: Optional[Any] = None
    description: Optional[str] = None
    required: bool = False
    placeholder: Optional[str] = None
    noDataExpression: bool = False

    # Polymorphic options: Select OR Nested inputs OR field groups
    options: Optional[Union[List[SelectOption], List["NodeInput"], List["FieldGroup"]]] = None

    displayOptions: Optional[DisplayConfiguration] = None
    typeOptions: Optional[TypeOptions] = None

    def option_values(self) -> List[Any]:
        """Allowed values of an `options` input."""
        if self.type != "options" or not self.options:
            return []
        return [o.value for o in self.options if isinstance(o, SelectOption)]

class FieldGroup(BaseModel):
    """
    A named group of values inside a fixedCollection.
    """
    name: str
    label: str
    values: List[NodeInput]


NodeInput.model_rebuild()

class NodeOutput(BaseModel):
    name: str
    type: str
    label: Optional[str] = None
    description: Optional[str] = None

class NodeCredential(BaseModel):
    name: str
    required: bool = False

class NodeManifest(BaseModel):
    """
    Node Manifest Definition.
    Declares the form schema the host renders for the node.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    version: int = 1
    nodeVersion: str = "1.0.0"

    name: Optional[str] = None
    displayName: Optional[str] = None

    description: str
    category: NodeCategory
    service: Optional[str] = "core"

    icon: Optional[str] = None

    inputs: List[NodeInput] = []
    outputs: List[NodeOutput] = []

    credentials: List[NodeCredential] = []
    tags: List[str] = []
    author: str = "Fuse"

    @field_validator("name", mode="before")
    def set_name_fallback(cls, v, values):
        if v is None and "id" in values.data:
            return values.data["id"]
        return v

    @field_validator("displayName", mode="before")
    def set_display_name(cls, v, values):
        if not v and "name" in values.data:
            return values.data["name"]
        return v

    def get_input(self, name: str) -> Optional[NodeInput]:
        return next((i for i in self.inputs if i.name == name), None)

    def input_defaults(self) -> Dict[str, Any]:
        """Default value of every top level input."""
        return {i.name: i.default for i in self.inputs}

    def required_inputs(self, values: Dict[str, Any]) -> List[NodeInput]:
        """Required inputs that are visible for the given parameter values."""
        return [
            i for i in self.inputs
            if i.required and (i.displayOptions is None or i.displayOptions.is_visible(values))
        ]

