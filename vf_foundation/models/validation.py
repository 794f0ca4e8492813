"""Write intents and the violations the validation gate reports against them."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WriteIntentKind(str, Enum):
    ECONOMIC_EVENT = "economic_event"
    COMMITMENT = "commitment"
    INTENT = "intent"
    PROCESS = "process"


class Quantity(BaseModel):
    """A measure; `has_unit` is a unit stable key."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_numerical_value: Optional[float] = None
    has_unit: Optional[str] = None


class WriteIntent(BaseModel):
    """
    A proposed write: an economic event, commitment, intent or process.

    Field names follow ValueFlows; camelCase input is accepted. Processes
    carry a name instead of an action.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: Optional[WriteIntentKind] = None
    action: Optional[str] = None
    name: Optional[str] = None
    provider: Optional[str] = None
    receiver: Optional[str] = None
    in_scope_of: Optional[str] = None
    resource_conforms_to: Optional[str] = None
    resource_inventoried_as: Optional[str] = None
    resource_quantity: Optional[Quantity] = None
    effort_quantity: Optional[Quantity] = None
    available_quantity: Optional[Quantity] = None
    has_beginning: Optional[datetime] = None
    has_end: Optional[datetime] = None
    due: Optional[datetime] = None
    note: Optional[str] = None


class ViolationCode(str, Enum):
    ACTION_REQUIRED = "action_required"
    NAME_REQUIRED = "name_required"
    UNKNOWN_ACTION = "unknown_action"
    UNKNOWN_PROVIDER = "unknown_provider"
    UNKNOWN_RECEIVER = "unknown_receiver"
    UNKNOWN_SCOPE_AGENT = "unknown_scope_agent"
    UNKNOWN_RESOURCE_SPECIFICATION = "unknown_resource_specification"
    UNKNOWN_RESOURCE = "unknown_resource"
    UNKNOWN_UNIT = "unknown_unit"
    BEGIN_NOT_BEFORE_END = "begin_not_before_end"
    DUE_IN_PAST = "due_in_past"
    FOUNDATION_NOT_READY = "foundation_not_ready"


class ValidationViolation(BaseModel):
    """Why a candidate write cannot proceed. Data, never raised."""

    code: ViolationCode
    field: str
    key: Optional[str] = None               # The unresolved stable key, if any
    message: str
